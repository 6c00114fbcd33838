"""Configuration defaults and filenames."""

from __future__ import annotations

CONFIG_FILENAME: str = "codesentinel.yaml"

ALLOWED_CONFIG_KEYS: frozenset[str] = frozenset({"max_prompt_chars", "root_name", "min_severity", "master_rule"})
ALLOWED_MASTER_RULE_KEYS: frozenset[str] = frozenset({"title", "body", "body_file"})
