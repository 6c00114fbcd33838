"""Field validation for rule rows and rule-file entries.

Limits mirror the persisted rule schema: titles up to 100 characters,
descriptions up to 1000 and bodies up to 10000.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, cast

from codesentinel.constants.rules import (
    DEFAULT_CATEGORY,
    MAX_BODY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    VALID_CATEGORIES,
    VALID_LANGUAGES,
)
from codesentinel.exceptions import ValidationError
from codesentinel.model import Rule
from codesentinel.types import RuleCategory, RuleKind


def validate_title(value: Any) -> str:
    return _bounded_text(value, "title", MAX_TITLE_LENGTH, required=True)


def validate_body(value: Any) -> str:
    return _bounded_text(value, "body", MAX_BODY_LENGTH, required=True)


def validate_description(value: Any) -> str:
    return _bounded_text(value, "description", MAX_DESCRIPTION_LENGTH, required=False)


def validate_category(value: Any) -> RuleCategory:
    if not isinstance(value, str) or value not in VALID_CATEGORIES:
        raise ValidationError(f"category must be one of {sorted(VALID_CATEGORIES)}, got {value!r}")
    return cast(RuleCategory, value)


def validate_order(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"order must be an integer, got {value!r}")
    return value


def normalize_languages(values: Iterable[Any] | None) -> tuple[str, ...]:
    """Lowercase, validate, deduplicate and sort language tags."""
    if values is None:
        return ()
    if isinstance(values, str):
        raise ValidationError("languages must be a list of strings")
    languages: set[str] = set()
    for value in values:
        if not isinstance(value, str):
            raise ValidationError("languages must be a list of strings")
        language = value.strip().lower()
        if language not in VALID_LANGUAGES:
            raise ValidationError(f"Unsupported language {value!r}")
        languages.add(language)
    return tuple(sorted(languages))


def validate_user_id(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("user id must be a non-empty string")
    return value


def rule_from_row(row: Mapping[str, Any]) -> Rule:
    """Build a ``Rule`` from a persisted row.

    Accepts the canonical camelCase shape produced by ``Rule.to_dict`` and the
    legacy row keys (``user``, ``name``, ``ruleDetails``, ``active``,
    ``isMasterRule``/``ruleType``).
    """
    if not isinstance(row, Mapping):
        raise ValidationError(f"rule row must be a mapping, got {type(row).__name__}")

    rule_id = _pick(row, "id", "_id")
    if not isinstance(rule_id, str) or not rule_id.strip():
        raise ValidationError("rule row field 'id' must be a non-empty string")

    owner_id = validate_user_id(_pick(row, "ownerId", "owner_id", "user"))
    kind = _row_kind(row)

    enabled = _pick(row, "enabled", "active")
    if enabled is None:
        enabled = True
    if not isinstance(enabled, bool):
        raise ValidationError(f"rule {rule_id!r}: enabled must be a boolean")

    order = _pick(row, "order")
    created_at = _parse_timestamp(_pick(row, "createdAt", "created_at"), "createdAt")
    updated_raw = _pick(row, "updatedAt", "updated_at")

    return Rule(
        id=rule_id,
        owner_id=owner_id,
        kind=kind,
        title=validate_title(_pick(row, "title", "name")),
        body=validate_body(_pick(row, "body", "ruleDetails")),
        enabled=enabled,
        order=validate_order(order) if order is not None else 0,
        created_at=created_at,
        description=validate_description(row.get("description")),
        languages=normalize_languages(row.get("languages")),
        category=validate_category(row.get("category", DEFAULT_CATEGORY)),
        updated_at=_parse_timestamp(updated_raw, "updatedAt") if updated_raw is not None else None,
    )


def _bounded_text(value: Any, field_name: str, limit: int, *, required: bool) -> str:
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    text = value.strip()
    if required and not text:
        raise ValidationError(f"{field_name} must not be empty")
    if len(text) > limit:
        raise ValidationError(f"{field_name} cannot exceed {limit} characters")
    return text


def _pick(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def _row_kind(row: Mapping[str, Any]) -> RuleKind:
    kind = _pick(row, "kind", "ruleType")
    if kind is None:
        kind = "master" if row.get("isMasterRule") is True else "custom"
    if kind not in ("master", "custom"):
        raise ValidationError(f"rule kind must be 'master' or 'custom', got {kind!r}")
    return cast(RuleKind, kind)


def _parse_timestamp(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError(f"{field_name} is not an ISO-8601 timestamp: {value!r}") from exc
    else:
        raise ValidationError(f"{field_name} must be a timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
