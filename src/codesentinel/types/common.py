"""Cross-module type aliases."""

from __future__ import annotations

from typing import Literal, TypeAlias

Severity: TypeAlias = Literal["critical", "high", "medium", "low", "info"]
RolledUpSeverity: TypeAlias = Literal["critical", "high", "medium", "low", "info", "none"]
BadgeVariant: TypeAlias = Literal["destructive", "default", "secondary"]
RuleKind: TypeAlias = Literal["master", "custom"]
RuleCategory: TypeAlias = Literal["security", "performance", "code-quality", "best-practices", "architectural"]

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]
