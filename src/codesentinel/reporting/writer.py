"""Output writers for the tree, summary and composed-rule JSON artifacts."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

from codesentinel.constants.reporting import (
    COMPOSED_RULES_FILENAME,
    SCHEMA_VERSION,
    SUMMARY_FILENAME,
    TOP_FILES_DEFAULT_LIMIT,
    TREE_FILENAME,
)
from codesentinel.constants.severity import SEVERITY_RANK
from codesentinel.io import write_json_atomic
from codesentinel.model import ComposedRuleSet, Finding, NodeRollup
from codesentinel.reporting.tree_view import tree_view_payload
from codesentinel.severity import severity_counts
from codesentinel.tree.builder import ScanTree
from codesentinel.types import JsonObject


def build_summary(
    tree: ScanTree,
    rollups: Mapping[str, NodeRollup],
    *,
    all_findings: Sequence[Finding] | None = None,
    composed_rules: ComposedRuleSet | None = None,
    output_filter: JsonObject | None = None,
    warnings: Sequence[str] = (),
) -> JsonObject:
    """Build a deterministic summary of an aggregated tree."""
    root_rollup = rollups[tree.root.path]
    shown_findings = [finding for node in tree.iter_files() for finding in node.findings]
    source_findings = list(all_findings) if all_findings is not None else shown_findings

    worst_files = sorted(
        (node for node in tree.iter_files() if node.findings),
        key=lambda node: (
            -SEVERITY_RANK[rollups[node.path].severity],
            -rollups[node.path].finding_count,
            node.path,
        ),
    )[:TOP_FILES_DEFAULT_LIMIT]

    summary: JsonObject = {
        "schemaVersion": SCHEMA_VERSION,
        "root": tree.root.name,
        "fileCount": tree.file_count,
        "findingCount": len(source_findings),
        "shownFindingCount": len(shown_findings),
        "rolledUpSeverity": root_rollup.severity,
        "countsBySeverity": severity_counts(source_findings),
        "worstFiles": [
            {
                "path": node.path,
                "rolledUpSeverity": rollups[node.path].severity,
                "findingCount": rollups[node.path].finding_count,
            }
            for node in worst_files
        ],
        "outputFilter": output_filter,
        "warnings": list(warnings),
    }
    if composed_rules is not None:
        rules_payload = composed_rules.to_dict()
        rules_payload.pop("text")
        summary["rules"] = rules_payload
    return summary


def write_scan_reports(
    out_root: Path,
    tree: ScanTree,
    rollups: Mapping[str, NodeRollup],
    *,
    all_findings: Sequence[Finding] | None = None,
    composed_rules: ComposedRuleSet | None = None,
    output_filter: JsonObject | None = None,
    warnings: Sequence[str] = (),
) -> JsonObject:
    """Write tree, summary and (when given) composed-rule JSON; return the summary."""
    out_root.mkdir(parents=True, exist_ok=True)
    write_json_atomic(out_root / TREE_FILENAME, tree_view_payload(tree, rollups))

    summary = build_summary(
        tree,
        rollups,
        all_findings=all_findings,
        composed_rules=composed_rules,
        output_filter=output_filter,
        warnings=warnings,
    )
    write_json_atomic(out_root / SUMMARY_FILENAME, summary)

    if composed_rules is not None:
        write_json_atomic(out_root / COMPOSED_RULES_FILENAME, composed_rules.to_dict())
    return summary
