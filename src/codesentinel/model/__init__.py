"""Core data models for CodeSentinel."""

from .entities import (
    CodeUnit,
    ComposedRuleSet,
    FileNode,
    Finding,
    FolderNode,
    NodeRollup,
    Rule,
    ScanResult,
    SeverityBadge,
    TreeNode,
)

__all__ = [
    "CodeUnit",
    "ComposedRuleSet",
    "FileNode",
    "Finding",
    "FolderNode",
    "NodeRollup",
    "Rule",
    "ScanResult",
    "SeverityBadge",
    "TreeNode",
]
