"""Tests for composing active rules into bounded rule text."""

from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta

import pytest

from codesentinel.constants.rules import RULE_SEPARATOR
from codesentinel.exceptions import InvalidOperationError, ValidationError
from codesentinel.model import Rule
from codesentinel.rules import RuleRegistry, compose

BASE = datetime(2026, 1, 1, tzinfo=UTC)


def _rule(
    rule_id: str,
    body: str,
    *,
    kind: str = "custom",
    order: int = 1,
    enabled: bool = True,
    offset: int = 0,
) -> Rule:
    return Rule(
        id=rule_id,
        owner_id="alice",
        kind=kind,  # type: ignore[arg-type]
        title=rule_id,
        body=body,
        enabled=enabled,
        order=0 if kind == "master" else order,
        created_at=BASE + timedelta(seconds=offset),
    )


def test_identical_bodies_are_included_once(registry: RuleRegistry) -> None:
    registry.ensure_master_rule("alice")
    first = registry.create_custom_rule("alice", "Eval", "no eval()")
    second = registry.create_custom_rule("alice", "Eval again", "no eval()")

    composed = compose(registry.list_active_rules("alice"))

    assert composed.text.count("no eval()") == 1
    assert first.id in composed.included_rule_ids
    assert second.id not in composed.included_rule_ids
    assert composed.duplicate_rule_ids == (second.id,)
    assert composed.truncated is False


def test_dedup_ignores_case_and_surrounding_whitespace() -> None:
    rules = [_rule("m", "master body", kind="master"), _rule("a", "No Eval()"), _rule("b", "  no eval()\n", offset=1)]

    composed = compose(rules)

    assert composed.included_rule_ids == ("m", "a")
    assert composed.duplicate_rule_ids == ("b",)


def test_master_text_comes_first_and_rules_are_separated() -> None:
    rules = [_rule("b", "second", order=2), _rule("a", "first", order=1), _rule("m", "master", kind="master")]

    composed = compose(rules)

    assert composed.text == RULE_SEPARATOR.join(["master", "first", "second"])
    assert composed.included_rule_ids == ("m", "a", "b")


def test_disabled_rules_are_skipped() -> None:
    rules = [_rule("m", "master", kind="master"), _rule("off", "disabled body", enabled=False)]

    composed = compose(rules)

    assert composed.included_rule_ids == ("m",)
    assert "disabled body" not in composed.text


def test_composition_is_independent_of_input_order() -> None:
    rules = [_rule("m", "master", kind="master")] + [
        _rule(f"c{index}", f"body {index}", order=index % 3, offset=index) for index in range(10)
    ]
    expected = compose(rules, max_length=80)

    shuffled = list(rules)
    random.Random(3).shuffle(shuffled)

    assert compose(shuffled, max_length=80) == expected


class TestTruncation:
    """Composition stays within the character bound."""

    def test_rules_that_do_not_fit_are_omitted_whole(self) -> None:
        rules = [_rule("m", "m" * 20, kind="master"), _rule("a", "a" * 10), _rule("b", "b" * 10, order=2)]
        limit = 20 + len(RULE_SEPARATOR) + 10

        composed = compose(rules, max_length=limit)

        assert composed.included_rule_ids == ("m", "a")
        assert composed.omitted_rule_ids == ("b",)
        assert composed.truncated is True
        assert len(composed.text) == limit

    def test_master_longer_than_limit_is_cut_at_whitespace(self) -> None:
        rules = [_rule("m", "alpha beta gamma delta", kind="master"), _rule("a", "custom")]

        composed = compose(rules, max_length=12)

        assert composed.text == "alpha beta"
        assert composed.included_rule_ids == ("m",)
        assert composed.omitted_rule_ids == ("a",)
        assert composed.truncated is True

    def test_master_without_whitespace_is_hard_cut(self) -> None:
        composed = compose([_rule("m", "abcdefghij", kind="master")], max_length=4)

        assert composed.text == "abcd"
        assert composed.truncated is True

    @pytest.mark.parametrize("limit", [1, 7, 40, 300, 1000])
    def test_text_never_exceeds_limit(self, limit: int) -> None:
        rules = [_rule("m", "word " * 50, kind="master")]
        rules += [_rule(f"c{index}", f"rule {index} " * 5, offset=index) for index in range(5)]

        assert len(compose(rules, max_length=limit).text) <= limit

    def test_custom_rule_too_large_without_master_is_rejected(self) -> None:
        rules = [_rule("m", "master", kind="master", enabled=False), _rule("a", "a" * 50)]

        with pytest.raises(InvalidOperationError, match="fits"):
            compose(rules, max_length=10)


def test_empty_active_set_is_rejected() -> None:
    with pytest.raises(InvalidOperationError, match="empty"):
        compose([])
    with pytest.raises(InvalidOperationError, match="empty"):
        compose([_rule("a", "body", enabled=False)])


def test_two_masters_are_rejected() -> None:
    with pytest.raises(InvalidOperationError, match="more than one master"):
        compose([_rule("m1", "one", kind="master"), _rule("m2", "two", kind="master", offset=1)])


@pytest.mark.parametrize("max_length", [0, -5, True, 2.5, "100"])
def test_invalid_max_length_is_rejected(max_length: object) -> None:
    with pytest.raises(ValidationError):
        compose([_rule("m", "master", kind="master")], max_length=max_length)  # type: ignore[arg-type]


def test_to_dict_uses_camel_case_keys() -> None:
    payload = compose([_rule("m", "master", kind="master")]).to_dict()

    assert payload == {
        "text": "master",
        "includedRuleIds": ["m"],
        "truncated": False,
        "duplicateRuleIds": [],
        "omittedRuleIds": [],
    }
