"""CLI entrypoint for CodeSentinel."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from codesentinel import __version__
from codesentinel.config import CodeSentinelConfig, load_config
from codesentinel.constants.branding import CLI_DESCRIPTION
from codesentinel.constants.rules import VALID_CATEGORIES
from codesentinel.constants.severity import SEVERITY_ORDER
from codesentinel.exceptions import CodeSentinelError, ConfigError, ValidationError
from codesentinel.findings import normalize_findings
from codesentinel.io import load_json_file
from codesentinel.reporting.filters import OutputFilters, build_filter_metadata
from codesentinel.reporting.stdout import TreeReporter
from codesentinel.reporting.writer import write_scan_reports
from codesentinel.rules import RuleRegistry, apply_rules_file, compose, load_rules_file
from codesentinel.scanner import build_scan_tree

DEFAULT_CLI_USER = "local"


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="codesentinel",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    tree = subparsers.add_parser("tree", help="Build and aggregate the file/folder tree for a findings file")
    tree.add_argument("-i", "--input", type=Path, required=True, help="JSON file with raw findings")
    _add_config_arguments(tree)
    tree.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Write tree.json and summary.json here (no files written if omitted)",
    )
    tree.add_argument(
        "--min-severity",
        choices=list(SEVERITY_ORDER),
        default=None,
        help="Hide findings below this severity before aggregating",
    )
    tree.add_argument("--no-stdout", action="store_true", help="Silence stdout output")
    tree.add_argument("--no-color", action="store_true", help="Disable colored output")
    tree.add_argument("-v", "--verbose", action="store_true", help="List findings under each file")

    compose_cmd = subparsers.add_parser("compose", help="Compose active scan rules into analyzer rule text")
    compose_cmd.add_argument("-f", "--rules-file", type=Path, required=True, help="YAML rules file")
    _add_config_arguments(compose_cmd)
    compose_cmd.add_argument("-u", "--user", default=DEFAULT_CLI_USER, help="User id that owns the rules")
    compose_cmd.add_argument("--max-length", type=int, default=None, help="Character bound for the rule text")
    compose_cmd.add_argument("-l", "--language", default=None, help="Only include rules for this language")
    compose_cmd.add_argument(
        "--category", choices=sorted(VALID_CATEGORIES), default=None, help="Only include rules in this category"
    )
    compose_cmd.add_argument("--json", action="store_true", help="Emit the composed rule set as JSON")

    validate = subparsers.add_parser("validate-config", help="Validate configuration without running anything")
    _add_config_arguments(validate)

    return parser


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-r", "--root", type=Path, default=Path("."), help="Directory holding codesentinel.yaml")
    parser.add_argument("-c", "--config", type=Path, default=None, help="Explicit config file")


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")

    try:
        config = load_config(args.root, args.config)
        if args.command == "validate-config":
            print("Configuration is valid.")
            return 0
        if args.command == "tree":
            return _handle_tree(args, config)
        if args.command == "compose":
            return _handle_compose(args, config)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 2
    except CodeSentinelError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    parser.error(f"Unsupported command: {args.command}")
    return 2


def _handle_tree(args: argparse.Namespace, config: CodeSentinelConfig) -> int:
    """Normalize a findings file, build the tree and report it."""
    raw_findings, clean_paths = _read_findings_payload(load_json_file(args.input))
    findings = normalize_findings(raw_findings)

    min_severity = args.min_severity if args.min_severity is not None else config.min_severity
    tree, rollups = build_scan_tree(
        findings,
        paths=clean_paths,
        root_name=config.root_name,
        min_severity=min_severity,
    )

    if args.output_dir is not None:
        shown = sum(rollups[tree.root.path].counts_by_severity.values())
        write_scan_reports(
            args.output_dir,
            tree,
            rollups,
            all_findings=findings,
            output_filter=build_filter_metadata(
                total=len(findings),
                shown=shown,
                filters=OutputFilters(min_severity=min_severity),
            ),
        )

    if not args.no_stdout:
        use_color = not args.no_color and sys.stdout.isatty()
        print(TreeReporter(tree, rollups, color=use_color, verbose=args.verbose).render())
    return 0


def _handle_compose(args: argparse.Namespace, config: CodeSentinelConfig) -> int:
    """Load a rules file for one user and print the composed rule text."""
    rules_file = load_rules_file(args.rules_file)
    registry = RuleRegistry.from_config(config)
    apply_rules_file(registry, args.user, rules_file)

    max_length = args.max_length if args.max_length is not None else config.max_prompt_chars
    active = registry.list_active_rules(args.user, language=args.language, category=args.category)
    composed = compose(active, max_length)

    if args.json:
        print(json.dumps(composed.to_dict(), indent=2, sort_keys=True))
    else:
        print(composed.text)
    if composed.truncated:
        print(
            f"note: rule text truncated to {len(composed.included_rule_ids)} rules ({max_length} chars)",
            file=sys.stderr,
        )
    return 0


def _read_findings_payload(payload: Any) -> tuple[list[Any], list[str]]:
    """Accept a bare list of findings or ``{"findings": [...], "files": [...]}``."""
    if isinstance(payload, list):
        return payload, []
    if isinstance(payload, dict):
        findings = payload.get("findings", [])
        files = payload.get("files", [])
        if not isinstance(findings, list):
            raise ConfigError("findings must be a list")
        if not isinstance(files, list) or not all(isinstance(item, str) for item in files):
            raise ConfigError("files must be a list of strings")
        return findings, files
    raise ConfigError("findings file must contain a JSON list or object")


if __name__ == "__main__":
    raise SystemExit(main())
