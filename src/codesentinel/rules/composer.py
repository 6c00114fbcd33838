"""Compose a user's active rules into one bounded rule text for the analyzer."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from codesentinel.constants.rules import DEFAULT_MAX_PROMPT_CHARS, RULE_SEPARATOR
from codesentinel.exceptions import InvalidOperationError, ValidationError
from codesentinel.model import ComposedRuleSet, Rule
from codesentinel.rules.registry import active_rule_sort_key

logger = logging.getLogger(__name__)


def normalize_body(body: str) -> str:
    """Deduplication key for a rule body: trimmed and case-folded."""
    return body.strip().casefold()


def compose(rules: Iterable[Rule], max_length: int = DEFAULT_MAX_PROMPT_CHARS) -> ComposedRuleSet:
    """Concatenate enabled rule bodies, master first, within ``max_length`` characters.

    Rules are ordered like ``RuleRegistry.list_active_rules`` and bodies that
    repeat an earlier one (ignoring surrounding whitespace and case) are
    dropped. When the text would overflow, composition stops at the last
    whole rule that fits. Only a leading master rule is ever cut mid-body,
    at the last whitespace within the bound.

    Raises:
        ValidationError: ``max_length`` is not a positive integer.
        InvalidOperationError: no enabled rule was given, more than one master
            rule was given, or no rule could anchor the text.
    """
    if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length < 1:
        raise ValidationError(f"max_length must be a positive integer, got {max_length!r}")

    active = sorted((rule for rule in rules if rule.enabled), key=active_rule_sort_key)
    if not active:
        raise InvalidOperationError("Cannot compose an empty active rule set")
    if sum(rule.is_master for rule in active) > 1:
        raise InvalidOperationError("Active rule set contains more than one master rule")

    unique: list[Rule] = []
    duplicate_ids: list[str] = []
    seen: set[str] = set()
    for rule in active:
        key = normalize_body(rule.body)
        if key in seen:
            duplicate_ids.append(rule.id)
            continue
        seen.add(key)
        unique.append(rule)

    blocks: list[str] = []
    included_ids: list[str] = []
    omitted_ids: list[str] = []
    length = 0
    truncated = False
    for index, rule in enumerate(unique):
        body = rule.body.strip()
        added = len(body) if not blocks else len(RULE_SEPARATOR) + len(body)
        if length + added <= max_length:
            blocks.append(body)
            included_ids.append(rule.id)
            length += added
            continue

        truncated = True
        remaining = unique[index:]
        if not blocks and rule.is_master:
            blocks.append(_cut_at_whitespace(body, max_length))
            included_ids.append(rule.id)
            remaining = unique[index + 1 :]
        omitted_ids.extend(item.id for item in remaining)
        break

    if not blocks:
        raise InvalidOperationError(f"No active rule fits within {max_length} characters")

    if truncated:
        logger.info(
            "Composed rule text truncated to %d of %d rules (limit %d chars)",
            len(included_ids),
            len(unique),
            max_length,
        )

    return ComposedRuleSet(
        text=RULE_SEPARATOR.join(blocks),
        included_rule_ids=tuple(included_ids),
        truncated=truncated,
        duplicate_rule_ids=tuple(duplicate_ids),
        omitted_rule_ids=tuple(omitted_ids),
    )


def _cut_at_whitespace(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` chars, preferring a whitespace boundary."""
    if len(text) <= limit:
        return text
    for index in range(limit, 0, -1):
        if text[index].isspace():
            cut = text[:index].rstrip()
            if cut:
                return cut
            break
    return text[:limit]
