"""Accepted raw finding keys and defaults."""

from __future__ import annotations

PATH_KEYS: tuple[str, ...] = ("filePath", "file_path", "path", "location")
TITLE_KEYS: tuple[str, ...] = ("title", "type")
LINE_KEYS: tuple[str, ...] = ("line", "lineNumber", "line_number")
RULE_ID_KEYS: tuple[str, ...] = ("ruleId", "rule_id")

UNTITLED_FINDING: str = "Untitled finding"
