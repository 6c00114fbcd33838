"""Per-user master and custom scan rules.

Each user's rules are held as an immutable tuple that is swapped in whole on
every mutation, under a lock private to that user. Readers never lock and
always see a complete pre- or post-mutation rule list.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from codesentinel.constants.rules import (
    DEFAULT_CATEGORY,
    MASTER_RULE_BODY,
    MASTER_RULE_DESCRIPTION,
    MASTER_RULE_ORDER,
    MASTER_RULE_TITLE,
)
from codesentinel.exceptions import AuthorizationError, InvalidOperationError, NotFoundError, ValidationError
from codesentinel.model import Rule
from codesentinel.rules.schema import (
    normalize_languages,
    rule_from_row,
    validate_body,
    validate_category,
    validate_description,
    validate_order,
    validate_title,
    validate_user_id,
)

if TYPE_CHECKING:
    from codesentinel.config import CodeSentinelConfig

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def active_rule_sort_key(rule: Rule) -> tuple[int, int, datetime, str]:
    """Master first, then ``order``, then creation time, then id."""
    return (0 if rule.is_master else 1, rule.order, rule.created_at, rule.id)


def select_active_rules(
    rules: Iterable[Rule],
    *,
    language: str | None = None,
    category: str | None = None,
) -> list[Rule]:
    """Enabled rules applying to ``language`` and ``category``, in composition order."""
    if category is not None:
        category = validate_category(category)
    active = [
        rule
        for rule in rules
        if rule.enabled and rule.applies_to(language) and rule.in_category(category)
    ]
    return sorted(active, key=active_rule_sort_key)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_rule_id() -> str:
    return uuid.uuid4().hex


class RuleRegistry:
    """In-memory owner of every user's master and custom rules."""

    def __init__(
        self,
        *,
        master_title: str = MASTER_RULE_TITLE,
        master_body: str = MASTER_RULE_BODY,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_rule_id,
    ) -> None:
        self._master_title = validate_title(master_title)
        self._master_body = validate_body(master_body)
        self._clock = clock
        self._id_factory = id_factory
        self._rules: dict[str, tuple[Rule, ...]] = {}
        self._owners: dict[str, str] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config: CodeSentinelConfig, **kwargs: Any) -> RuleRegistry:
        """Build a registry whose master rule text comes from ``config``."""
        return cls(master_title=config.master_rule_title, master_body=config.master_rule_body, **kwargs)

    # Provisioning

    def provision_master_rule(self, user_id: str) -> Rule:
        """Create the user's master rule, failing if one already exists."""
        validate_user_id(user_id)
        with self._lock_for(user_id):
            if self._find_master(user_id) is not None:
                raise InvalidOperationError(f"User {user_id!r} already has a master rule")
            return self._create_master(user_id)

    def ensure_master_rule(self, user_id: str) -> Rule:
        """Return the user's master rule, creating it on first call."""
        validate_user_id(user_id)
        with self._lock_for(user_id):
            existing = self._find_master(user_id)
            if existing is not None:
                return existing
            return self._create_master(user_id)

    def load_rules(self, user_id: str, rows: Iterable[Mapping[str, Any]]) -> list[Rule]:
        """Replace the user's rules with rows read from persistence.

        Rows owned by another user raise AuthorizationError; more than one
        master row, or an id already held by another user, raise
        InvalidOperationError.
        """
        validate_user_id(user_id)
        rules = [rule_from_row(row) for row in rows]
        seen_ids: set[str] = set()
        masters = 0
        for rule in rules:
            if rule.owner_id != user_id:
                raise AuthorizationError(f"Rule {rule.id!r} is not owned by user {user_id!r}")
            if rule.id in seen_ids:
                raise InvalidOperationError(f"Duplicate rule id {rule.id!r} for user {user_id!r}")
            seen_ids.add(rule.id)
            masters += rule.is_master
        if masters > 1:
            raise InvalidOperationError(f"User {user_id!r} has {masters} master rules; expected at most one")

        with self._lock_for(user_id):
            for rule in rules:
                owner = self._owners.get(rule.id)
                if owner is not None and owner != user_id:
                    raise InvalidOperationError(f"Rule id {rule.id!r} already belongs to another user")
            previous = self._rules.get(user_id, ())
            self._publish(user_id, tuple(rules), removed=previous)
        logger.info("Loaded %d rules for user %s", len(rules), user_id)
        return sorted(rules, key=active_rule_sort_key)

    def delete_user(self, user_id: str) -> tuple[str, ...]:
        """Remove every rule owned by ``user_id`` and return their ids.

        The user's lock is kept, so a writer still holding it stays serialized
        with later writers for the same id.
        """
        validate_user_id(user_id)
        with self._lock_for(user_id):
            removed = self._rules.pop(user_id, ())
            for rule in removed:
                self._owners.pop(rule.id, None)
        logger.info("Deleted %d rules for user %s", len(removed), user_id)
        return tuple(rule.id for rule in removed)

    # Queries

    def get_rule(self, user_id: str, rule_id: str) -> Rule:
        return self._resolve(user_id, rule_id)

    def list_rules(self, user_id: str) -> list[Rule]:
        """Every rule of the user, enabled or not, in composition order."""
        return sorted(self._rules.get(user_id, ()), key=active_rule_sort_key)

    def list_active_rules(
        self,
        user_id: str,
        *,
        language: str | None = None,
        category: str | None = None,
    ) -> list[Rule]:
        """Enabled rules in composition order: master first, then custom rules.

        With ``language`` or ``category``, custom rules restricted to other
        languages or filed under another category are skipped. The master
        rule always applies.
        """
        return select_active_rules(self._rules.get(user_id, ()), language=language, category=category)

    # Mutations

    def create_custom_rule(
        self,
        user_id: str,
        title: str,
        body: str,
        *,
        description: str = "",
        languages: Iterable[str] = (),
        category: str = DEFAULT_CATEGORY,
        order: int | None = None,
        enabled: bool = True,
    ) -> Rule:
        """Add a custom rule; it is placed after existing ones unless ``order`` is given."""
        validate_user_id(user_id)
        title = validate_title(title)
        body = validate_body(body)
        description = validate_description(description)
        normalized_languages = normalize_languages(languages)
        valid_category = validate_category(category)
        if order is not None:
            validate_order(order)
        if not isinstance(enabled, bool):
            raise ValidationError("enabled must be a boolean")

        with self._lock_for(user_id):
            snapshot = self._rules.get(user_id, ())
            if order is None:
                order = max((rule.order for rule in snapshot if not rule.is_master), default=MASTER_RULE_ORDER) + 1
            rule = Rule(
                id=self._id_factory(),
                owner_id=user_id,
                kind="custom",
                title=title,
                body=body,
                enabled=enabled,
                order=order,
                created_at=self._clock(),
                description=description,
                languages=normalized_languages,
                category=valid_category,
            )
            if rule.id in self._owners:
                raise InvalidOperationError(f"Rule id {rule.id!r} is already in use")
            self._publish(user_id, (*snapshot, rule))
        logger.debug("Created custom rule %s for user %s", rule.id, user_id)
        return rule

    def set_enabled(self, user_id: str, rule_id: str, enabled: bool) -> Rule:
        """Enable or disable one of the user's rules, master included."""
        if not isinstance(enabled, bool):
            raise ValidationError("enabled must be a boolean")
        return self._mutate(user_id, rule_id, enabled=enabled)

    def update_rule(
        self,
        user_id: str,
        rule_id: str,
        *,
        title: str = _UNSET,
        body: str = _UNSET,
        description: str = _UNSET,
        languages: Iterable[str] = _UNSET,
        category: str = _UNSET,
        order: int = _UNSET,
    ) -> Rule:
        """Change the editable fields of a rule; the kind never changes."""
        changes: dict[str, Any] = {}
        if title is not _UNSET:
            changes["title"] = validate_title(title)
        if body is not _UNSET:
            changes["body"] = validate_body(body)
        if description is not _UNSET:
            changes["description"] = validate_description(description)
        if languages is not _UNSET:
            changes["languages"] = normalize_languages(languages)
        if category is not _UNSET:
            changes["category"] = validate_category(category)
        if order is not _UNSET:
            changes["order"] = validate_order(order)
        return self._mutate(user_id, rule_id, **changes)

    def delete_custom_rule(self, user_id: str, rule_id: str) -> Rule:
        """Delete a custom rule. Master rules can only be disabled."""
        validate_user_id(user_id)
        with self._lock_for(user_id):
            rule = self._resolve(user_id, rule_id)
            if rule.is_master:
                raise InvalidOperationError(f"Rule {rule_id!r} is the master rule and cannot be deleted")
            snapshot = self._rules.get(user_id, ())
            self._publish(user_id, tuple(item for item in snapshot if item.id != rule_id), removed=(rule,))
        logger.debug("Deleted custom rule %s for user %s", rule_id, user_id)
        return rule

    # Internals

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    def _find_master(self, user_id: str) -> Rule | None:
        for rule in self._rules.get(user_id, ()):
            if rule.is_master:
                return rule
        return None

    def _create_master(self, user_id: str) -> Rule:
        rule = Rule(
            id=self._id_factory(),
            owner_id=user_id,
            kind="master",
            title=self._master_title,
            body=self._master_body,
            enabled=True,
            order=MASTER_RULE_ORDER,
            created_at=self._clock(),
            description=MASTER_RULE_DESCRIPTION,
        )
        if rule.id in self._owners:
            raise InvalidOperationError(f"Rule id {rule.id!r} is already in use")
        self._publish(user_id, (*self._rules.get(user_id, ()), rule))
        logger.info("Provisioned master rule %s for user %s", rule.id, user_id)
        return rule

    def _resolve(self, user_id: str, rule_id: str) -> Rule:
        owner = self._owners.get(rule_id)
        if owner is None:
            raise NotFoundError(f"Rule {rule_id!r} not found")
        if owner != user_id:
            raise AuthorizationError(f"User {user_id!r} may not access rule {rule_id!r}")
        for rule in self._rules.get(user_id, ()):
            if rule.id == rule_id:
                return rule
        raise NotFoundError(f"Rule {rule_id!r} not found")

    def _mutate(self, user_id: str, rule_id: str, **changes: Any) -> Rule:
        validate_user_id(user_id)
        with self._lock_for(user_id):
            current = self._resolve(user_id, rule_id)
            if not changes:
                return current
            updated = replace(current, updated_at=self._clock(), **changes)
            snapshot = self._rules.get(user_id, ())
            self._publish(user_id, tuple(updated if rule.id == rule_id else rule for rule in snapshot))
        logger.debug("Updated rule %s for user %s: %s", rule_id, user_id, sorted(changes))
        return updated

    def _publish(self, user_id: str, rules: tuple[Rule, ...], *, removed: Iterable[Rule] = ()) -> None:
        """Swap in a new snapshot. Callers hold the user's lock."""
        for rule in removed:
            self._owners.pop(rule.id, None)
        for rule in rules:
            self._owners[rule.id] = user_id
        self._rules[user_id] = rules
