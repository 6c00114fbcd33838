"""Tests for YAML rules files."""

from __future__ import annotations

from pathlib import Path

import pytest

from codesentinel.exceptions import ConfigError
from codesentinel.rules import RuleRegistry, apply_rules_file, load_rules_file
from codesentinel.rules.loader import CustomRuleSpec, RulesFile


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_rules_file_parses_custom_rules(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "master:\n"
        "  enabled: false\n"
        "rules:\n"
        "  - title: No eval\n"
        "    body: Flag any use of eval().\n"
        "    languages: [TypeScript, javascript]\n"
        "    order: 3\n"
        "  - title: Slow loops\n"
        "    body: Flag quadratic loops.\n"
        "    category: performance\n"
        "    enabled: false\n",
    )

    loaded = load_rules_file(path)

    assert loaded.master_enabled is False
    assert loaded.rules == (
        CustomRuleSpec(
            title="No eval",
            body="Flag any use of eval().",
            languages=("javascript", "typescript"),
            order=3,
        ),
        CustomRuleSpec(title="Slow loops", body="Flag quadratic loops.", category="performance", enabled=False),
    )


def test_empty_rules_file_is_master_only(tmp_path: Path) -> None:
    assert load_rules_file(_write(tmp_path, "")) == RulesFile()


@pytest.mark.parametrize(
    ("content", "expected_match"),
    [
        ("extra: 1\n", "unknown keys"),
        ("rules: nope\n", "must be a list"),
        ("rules:\n  - plain\n", r"rules\[0\] must be a mapping"),
        ("rules:\n  - title: t\n", r"rules\[0\]: body"),
        ("rules:\n  - title: t\n    body: b\n    colour: red\n", "unknown keys"),
        ("rules:\n  - title: t\n    body: b\n    enabled: yes please\n", "enabled"),
        ("master:\n  enabled: 1\n", "master.enabled"),
        ("rules: [\n", "Invalid YAML"),
    ],
    ids=[
        "unknown_top_key",
        "rules_not_list",
        "entry_not_mapping",
        "missing_body",
        "unknown_rule_key",
        "non_bool_enabled",
        "non_bool_master",
        "bad_yaml",
    ],
)
def test_load_rules_file_rejects_invalid_content(tmp_path: Path, content: str, expected_match: str) -> None:
    with pytest.raises(ConfigError, match=expected_match):
        load_rules_file(_write(tmp_path, content))


def test_load_rules_file_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read"):
        load_rules_file(tmp_path / "absent.yaml")


def test_apply_rules_file_provisions_master_and_customs(registry: RuleRegistry) -> None:
    rules_file = RulesFile(
        master_enabled=True,
        rules=(
            CustomRuleSpec(title="B", body="second", order=2),
            CustomRuleSpec(title="A", body="first", order=1),
            CustomRuleSpec(title="Off", body="disabled", enabled=False),
        ),
    )

    active = apply_rules_file(registry, "alice", rules_file)

    assert [rule.title for rule in active][1:] == ["A", "B"]
    assert active[0].is_master
    assert len(registry.list_rules("alice")) == 4


def test_apply_rules_file_can_disable_master(registry: RuleRegistry) -> None:
    active = apply_rules_file(
        registry,
        "alice",
        RulesFile(master_enabled=False, rules=(CustomRuleSpec(title="Only", body="custom only"),)),
    )

    assert [rule.title for rule in active] == ["Only"]


def test_load_rules_file_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "rules.yaml"
    path.write_bytes(b"rules:\n  - title: \xff\n")

    with pytest.raises(ConfigError, match="Cannot read"):
        load_rules_file(path)
