"""Load a user's rule set from a YAML rules file.

A rules file looks like::

    master:
      enabled: true
    rules:
      - title: No eval
        body: Flag any use of eval() or new Function().
        languages: [javascript, typescript]
        order: 1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from codesentinel.constants.rules import DEFAULT_CATEGORY
from codesentinel.exceptions import ConfigError, ValidationError
from codesentinel.model import Rule
from codesentinel.rules.registry import RuleRegistry
from codesentinel.rules.schema import (
    normalize_languages,
    validate_body,
    validate_category,
    validate_description,
    validate_order,
    validate_title,
)

logger = logging.getLogger(__name__)

ALLOWED_TOP_KEYS: frozenset[str] = frozenset({"master", "rules"})
ALLOWED_MASTER_KEYS: frozenset[str] = frozenset({"enabled"})
ALLOWED_RULE_KEYS: frozenset[str] = frozenset(
    {"title", "body", "description", "languages", "category", "order", "enabled"}
)


@dataclass(frozen=True)
class CustomRuleSpec:
    """A custom rule as declared in a rules file."""

    title: str
    body: str
    description: str = ""
    languages: tuple[str, ...] = ()
    category: str = DEFAULT_CATEGORY
    order: int | None = None
    enabled: bool = True


@dataclass(frozen=True)
class RulesFile:
    """Parsed contents of a rules file."""

    master_enabled: bool = True
    rules: tuple[CustomRuleSpec, ...] = ()


def load_rules_file(path: Path) -> RulesFile:
    """Parse and validate a rules file with ``yaml.safe_load``."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read rules file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in rules file {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Rules file {path} must contain a mapping")
    _reject_unknown(raw, ALLOWED_TOP_KEYS, f"{path}")

    master_raw = raw.get("master") or {}
    if not isinstance(master_raw, dict):
        raise ConfigError(f"{path}: master must be a mapping")
    _reject_unknown(master_raw, ALLOWED_MASTER_KEYS, f"{path}: master")
    master_enabled = master_raw.get("enabled", True)
    if not isinstance(master_enabled, bool):
        raise ConfigError(f"{path}: master.enabled must be a boolean")

    rules_raw = raw.get("rules") or []
    if not isinstance(rules_raw, list):
        raise ConfigError(f"{path}: rules must be a list")

    specs: list[CustomRuleSpec] = []
    for index, entry in enumerate(rules_raw):
        location = f"{path}: rules[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{location} must be a mapping")
        _reject_unknown(entry, ALLOWED_RULE_KEYS, location)
        try:
            specs.append(_parse_rule_entry(entry))
        except ValidationError as exc:
            raise ConfigError(f"{location}: {exc}") from exc

    logger.debug("Loaded %d custom rules from %s", len(specs), path)
    return RulesFile(master_enabled=master_enabled, rules=tuple(specs))


def apply_rules_file(registry: RuleRegistry, user_id: str, rules_file: RulesFile) -> list[Rule]:
    """Provision the user's master rule and add the file's custom rules.

    Returns the user's active rules after the file is applied.
    """
    master = registry.ensure_master_rule(user_id)
    if master.enabled != rules_file.master_enabled:
        registry.set_enabled(user_id, master.id, rules_file.master_enabled)
    for spec in rules_file.rules:
        registry.create_custom_rule(
            user_id,
            spec.title,
            spec.body,
            description=spec.description,
            languages=spec.languages,
            category=spec.category,
            order=spec.order,
            enabled=spec.enabled,
        )
    return registry.list_active_rules(user_id)


def _parse_rule_entry(entry: dict[str, Any]) -> CustomRuleSpec:
    enabled = entry.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ValidationError("enabled must be a boolean")
    order = entry.get("order")
    return CustomRuleSpec(
        title=validate_title(entry.get("title")),
        body=validate_body(entry.get("body")),
        description=validate_description(entry.get("description")),
        languages=normalize_languages(entry.get("languages")),
        category=validate_category(entry.get("category", DEFAULT_CATEGORY)),
        order=validate_order(order) if order is not None else None,
        enabled=enabled,
    )


def _reject_unknown(raw: dict[str, Any], allowed: frozenset[str], location: str) -> None:
    unknown = set(raw) - allowed
    if unknown:
        raise ConfigError(f"{location} has unknown keys: {sorted(unknown)}")
