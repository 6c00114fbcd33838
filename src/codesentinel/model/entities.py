"""Frozen records shared by the tree, rule and reporting layers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal, TypeAlias

from codesentinel.constants.rules import DEFAULT_CATEGORY
from codesentinel.severity import badge_variant
from codesentinel.types import BadgeVariant, JsonObject, RolledUpSeverity, RuleCategory, RuleKind, Severity

if TYPE_CHECKING:
    from codesentinel.tree.builder import ScanTree


@dataclass(frozen=True)
class Finding:
    """One reported issue tied to a single file."""

    id: str
    file_path: str
    severity: Severity
    title: str
    description: str = ""
    line: int | None = None
    rule_id: str | None = None

    def to_dict(self) -> JsonObject:
        """Serialize to the camelCase wire shape."""
        return {
            "id": self.id,
            "filePath": self.file_path,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
            "line": self.line,
            "ruleId": self.rule_id,
        }


@dataclass(frozen=True)
class FileNode:
    """Leaf of the scan tree holding the findings of one file."""

    name: str
    path: str
    findings: tuple[Finding, ...] = ()
    kind: Literal["file"] = "file"


@dataclass(frozen=True, eq=False)
class FolderNode:
    """Inner node of the scan tree.

    Equality walks the subtree with an explicit stack and ``repr`` omits the
    children, so neither is bounded by the interpreter's recursion limit.
    """

    name: str
    path: str
    children: tuple[TreeNode, ...] = field(default=(), repr=False)
    kind: Literal["folder"] = "folder"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FolderNode):
            return NotImplemented
        stack: list[tuple[TreeNode, TreeNode]] = [(self, other)]
        while stack:
            left, right = stack.pop()
            if left.kind == "file" or right.kind == "file":
                if left != right:
                    return False
                continue
            if (left.name, left.path) != (right.name, right.path) or len(left.children) != len(right.children):
                return False
            stack.extend(zip(left.children, right.children))
        return True

    __hash__ = None  # type: ignore[assignment]


TreeNode: TypeAlias = FileNode | FolderNode


@dataclass(frozen=True)
class SeverityBadge:
    """Count plus worst-severity variant shown next to a tree node."""

    count: int
    variant: BadgeVariant


@dataclass(frozen=True)
class NodeRollup:
    """Aggregated severity annotation for one tree node."""

    severity: RolledUpSeverity
    finding_count: int
    counts_by_severity: Mapping[str, int]

    @property
    def badge(self) -> SeverityBadge | None:
        """Badge for the node, or ``None`` when the subtree is clean."""
        if self.finding_count == 0:
            return None
        return SeverityBadge(count=self.finding_count, variant=badge_variant(self.severity))


@dataclass(frozen=True)
class Rule:
    """A master or custom scan rule owned by one user."""

    id: str
    owner_id: str
    kind: RuleKind
    title: str
    body: str
    enabled: bool
    order: int
    created_at: datetime
    description: str = ""
    languages: tuple[str, ...] = ()
    category: RuleCategory = DEFAULT_CATEGORY
    updated_at: datetime | None = None

    @property
    def is_master(self) -> bool:
        return self.kind == "master"

    def applies_to(self, language: str | None) -> bool:
        """Whether the rule applies to a code unit in ``language``."""
        if language is None or self.is_master or not self.languages:
            return True
        return language.lower() in self.languages

    def in_category(self, category: str | None) -> bool:
        """Whether the rule belongs to ``category``; the master rule belongs to every category."""
        return category is None or self.is_master or self.category == category

    def to_dict(self) -> JsonObject:
        """Serialize to the persisted row shape."""
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "kind": self.kind,
            "title": self.title,
            "body": self.body,
            "enabled": self.enabled,
            "order": self.order,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat() if self.updated_at is not None else None,
            "description": self.description,
            "languages": list(self.languages),
            "category": self.category,
        }


@dataclass(frozen=True)
class ComposedRuleSet:
    """Deduplicated, ordered, length-bounded rule text sent to the analyzer."""

    text: str
    included_rule_ids: tuple[str, ...]
    truncated: bool
    duplicate_rule_ids: tuple[str, ...] = ()
    omitted_rule_ids: tuple[str, ...] = ()

    def to_dict(self) -> JsonObject:
        return {
            "text": self.text,
            "includedRuleIds": list(self.included_rule_ids),
            "truncated": self.truncated,
            "duplicateRuleIds": list(self.duplicate_rule_ids),
            "omittedRuleIds": list(self.omitted_rule_ids),
        }


@dataclass(frozen=True)
class CodeUnit:
    """A unit of source handed to the analyzer together with the rule text."""

    path: str
    content: str
    language: str | None = None


@dataclass(frozen=True)
class ScanResult:
    """Outcome of one scan run."""

    tree: ScanTree
    rollups: Mapping[str, NodeRollup]
    composed_rules: ComposedRuleSet
    findings: tuple[Finding, ...]
    counts_by_severity: dict[str, int]
    warnings: tuple[str, ...] = ()
    duration_seconds: float = 0.0
    scanned_units: int = 0

    @property
    def root_rollup(self) -> NodeRollup:
        return self.rollups[self.tree.root.path]
