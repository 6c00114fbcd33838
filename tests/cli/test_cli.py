"""Tests for CLI parser and main behavior."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from codesentinel.cli.main import build_parser, main
from codesentinel.exceptions import NotFoundError


def _write_findings(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "findings.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _write_rules(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_build_parser_accepts_tree_flags(tmp_path: Path) -> None:
    parser = build_parser()

    args = parser.parse_args(
        ["tree", "-i", str(tmp_path / "f.json"), "-o", str(tmp_path / "out"), "--min-severity", "high", "-v"]
    )

    assert args.command == "tree"
    assert args.input == tmp_path / "f.json"
    assert args.output_dir == tmp_path / "out"
    assert args.min_severity == "high"
    assert args.verbose is True


def test_build_parser_rejects_unknown_severity(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["tree", "-i", "f.json", "--min-severity", "severe"])


def test_tree_prints_annotated_tree(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    findings = _write_findings(
        tmp_path,
        {
            "findings": [{"filePath": "a/b.js", "severity": "critical", "title": "eval", "line": 4}],
            "files": ["a/c.js"],
        },
    )

    code = main(["tree", "-i", str(findings), "-r", str(tmp_path), "--no-color"])

    assert code == 0
    output = capsys.readouterr().out
    assert "  a/  [critical 1]" in output
    assert "    c.js\n" in output
    assert "2 files, 1 findings" in output


def test_tree_writes_reports(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    findings = _write_findings(
        tmp_path,
        [
            {"filePath": "x.py", "severity": "low", "title": "minor"},
            {"filePath": "x.py", "severity": "high", "title": "major", "line": 2},
        ],
    )
    out_dir = tmp_path / "out"

    code = main(
        ["tree", "-i", str(findings), "-r", str(tmp_path), "-o", str(out_dir), "--min-severity", "high", "--no-stdout"]
    )

    assert code == 0
    assert capsys.readouterr().out == ""
    summary = json.loads((out_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["findingCount"] == 2
    assert summary["shownFindingCount"] == 1
    assert summary["outputFilter"] == {"minSeverity": "high", "shown": 1, "total": 2, "filtered": 1}
    tree = json.loads((out_dir / "tree.json").read_text(encoding="utf-8"))
    assert tree["rolledUpSeverity"] == "high"


def test_tree_invalid_finding_exits_with_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    findings = _write_findings(tmp_path, [{"filePath": "x.py", "severity": "severe"}])

    code = main(["tree", "-i", str(findings), "-r", str(tmp_path)])

    assert code == 2
    assert "Validation error" in capsys.readouterr().err


def test_tree_missing_input_exits_with_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["tree", "-i", str(tmp_path / "absent.json"), "-r", str(tmp_path)])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_compose_prints_master_then_custom_rules(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rules = _write_rules(
        tmp_path,
        "rules:\n"
        "  - title: No eval\n"
        "    body: no eval()\n"
        "  - title: No eval again\n"
        "    body: NO EVAL()\n",
    )
    (tmp_path / "codesentinel.yaml").write_text(
        "master_rule:\n  title: Base\n  body: Review for injection flaws.\n", encoding="utf-8"
    )

    code = main(["compose", "-f", str(rules), "-r", str(tmp_path)])

    assert code == 0
    output = capsys.readouterr().out
    assert output.startswith("Review for injection flaws.")
    assert output.count("no eval()") == 1
    assert "NO EVAL()" not in output


def test_compose_json_reports_truncation(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rules = _write_rules(tmp_path, "rules:\n  - title: Extra\n    body: extra rule text\n")

    code = main(["compose", "-f", str(rules), "-r", str(tmp_path), "--max-length", "30", "--json"])

    assert code == 0
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["truncated"] is True
    assert len(payload["text"]) <= 30
    assert len(payload["omittedRuleIds"]) == 1
    assert "truncated" in captured.err


def test_compose_with_everything_disabled_exits_with_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rules = _write_rules(tmp_path, "master:\n  enabled: false\n")

    code = main(["compose", "-f", str(rules), "-r", str(tmp_path)])

    assert code == 1
    assert "empty active rule set" in capsys.readouterr().err


def test_validate_config_reports_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "codesentinel.yaml").write_text("max_prompt_chars: 500\n", encoding="utf-8")

    assert main(["validate-config", "-r", str(tmp_path)]) == 0
    assert "Configuration is valid." in capsys.readouterr().out


def test_validate_config_reports_unknown_key(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "codesentinel.yaml").write_text("root_nme: repo\n", encoding="utf-8")

    assert main(["validate-config", "-r", str(tmp_path)]) == 2
    assert "did you mean `root_name`" in capsys.readouterr().err


def test_main_maps_domain_errors_to_exit_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with patch("codesentinel.cli.main.load_config", side_effect=NotFoundError("gone")):
        code = main(["validate-config", "-r", str(tmp_path)])

    assert code == 1
    assert "Error: gone" in capsys.readouterr().err


def test_tree_non_utf8_input_exits_with_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    findings = tmp_path / "findings.json"
    findings.write_bytes(b'[{"filePath": "x.py", "severity": "\xff"}]')

    code = main(["tree", "-i", str(findings), "-r", str(tmp_path)])

    assert code == 2
    assert "not valid UTF-8" in capsys.readouterr().err


def test_compose_category_keeps_master_and_matching_rules(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rules = _write_rules(
        tmp_path,
        "rules:\n"
        "  - title: No eval\n"
        "    body: no eval()\n"
        "  - title: Batch queries\n"
        "    body: avoid queries inside loops\n"
        "    category: performance\n",
    )
    (tmp_path / "codesentinel.yaml").write_text(
        "master_rule:\n  title: Base\n  body: Review for injection flaws.\n", encoding="utf-8"
    )

    code = main(["compose", "-f", str(rules), "-r", str(tmp_path), "--category", "performance"])

    assert code == 0
    output = capsys.readouterr().out
    assert output.startswith("Review for injection flaws.")
    assert "avoid queries inside loops" in output
    assert "no eval()" not in output


def test_build_parser_rejects_unknown_category(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["compose", "-f", str(tmp_path / "rules.yaml"), "--category", "style"])
