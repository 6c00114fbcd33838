"""Config loading and normalization for CodeSentinel."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import yaml

from codesentinel.config.model import CodeSentinelConfig
from codesentinel.constants.config import ALLOWED_CONFIG_KEYS, ALLOWED_MASTER_RULE_KEYS, CONFIG_FILENAME
from codesentinel.constants.rules import DEFAULT_MAX_PROMPT_CHARS, MASTER_RULE_BODY, MASTER_RULE_TITLE
from codesentinel.constants.tree import DEFAULT_ROOT_NAME, PATH_SEPARATOR
from codesentinel.exceptions import ConfigError, ValidationError
from codesentinel.rules.schema import validate_body, validate_title
from codesentinel.severity import parse_severity


def load_config(root: Path, config_path: Path | None = None) -> CodeSentinelConfig:
    """Load and validate config from ``codesentinel.yaml`` or an explicit path."""
    root = root.resolve()
    path = config_path.resolve() if config_path else (root / CONFIG_FILENAME)
    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        return CodeSentinelConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML config file at {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file at {path} must be a YAML mapping")
    _reject_unknown_keys(raw, ALLOWED_CONFIG_KEYS, "")

    max_prompt_chars = raw.get("max_prompt_chars", DEFAULT_MAX_PROMPT_CHARS)
    if isinstance(max_prompt_chars, bool) or not isinstance(max_prompt_chars, int) or max_prompt_chars <= 0:
        raise ConfigError("max_prompt_chars must be a positive integer")

    root_name = raw.get("root_name", DEFAULT_ROOT_NAME)
    if root_name is None:
        root_name = DEFAULT_ROOT_NAME
    if not isinstance(root_name, str) or PATH_SEPARATOR in root_name:
        raise ConfigError(f"root_name must be a string without {PATH_SEPARATOR!r}")

    min_severity = raw.get("min_severity")
    if min_severity is not None:
        try:
            min_severity = parse_severity(min_severity)
        except ValidationError as exc:
            raise ConfigError(f"min_severity: {exc}") from exc

    master_title, master_body = _load_master_rule(raw.get("master_rule"), path.parent)

    return CodeSentinelConfig(
        max_prompt_chars=max_prompt_chars,
        root_name=root_name.strip(),
        min_severity=min_severity,
        master_rule_title=master_title,
        master_rule_body=master_body,
    )


def _load_master_rule(raw: Any, base_dir: Path) -> tuple[str, str]:
    """Resolve the master rule title and body, reading ``body_file`` if set."""
    if raw is None:
        return MASTER_RULE_TITLE, MASTER_RULE_BODY
    if not isinstance(raw, dict):
        raise ConfigError("master_rule must be a mapping")
    _reject_unknown_keys(raw, ALLOWED_MASTER_RULE_KEYS, "master_rule.")
    if "body" in raw and "body_file" in raw:
        raise ConfigError("master_rule.body and master_rule.body_file are mutually exclusive")

    body: Any = raw.get("body", MASTER_RULE_BODY)
    body_file = raw.get("body_file")
    if body_file is not None:
        if not isinstance(body_file, str):
            raise ConfigError("master_rule.body_file must be a string path")
        body_path = (base_dir / body_file).resolve()
        try:
            body = body_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"master_rule.body_file cannot be read: {body_path} ({exc})") from exc

    try:
        title = validate_title(raw.get("title", MASTER_RULE_TITLE))
        body = validate_body(body)
    except ValidationError as exc:
        raise ConfigError(f"master_rule: {exc}") from exc
    return title, body


def _reject_unknown_keys(raw: dict[str, Any], allowed: frozenset[str], prefix: str) -> None:
    for key in sorted(raw, key=str):
        if key not in allowed:
            hint = _suggest_key(str(key), allowed)
            message = f"Unknown config key `{prefix}{key}`"
            raise ConfigError(f"{message} ({hint})" if hint else message)


def _suggest_key(unknown: str, allowed: frozenset[str]) -> str:
    """Return a 'did you mean ...' hint for a close key match, or empty string."""
    matches = difflib.get_close_matches(unknown, sorted(allowed), n=1, cutoff=0.6)
    if matches:
        return f"did you mean `{matches[0]}`?"
    return ""
