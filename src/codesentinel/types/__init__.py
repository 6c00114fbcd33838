"""Shared type aliases for CodeSentinel."""

from .common import (
    BadgeVariant,
    JsonObject,
    JsonScalar,
    JsonValue,
    RolledUpSeverity,
    RuleCategory,
    RuleKind,
    Severity,
)

__all__ = [
    "BadgeVariant",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "RolledUpSeverity",
    "RuleCategory",
    "RuleKind",
    "Severity",
]
