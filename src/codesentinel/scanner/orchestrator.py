"""End-to-end scan orchestration.

``run_scan`` composes the user's rules once per language from a single
registry snapshot, hands each code unit to the analyzer, normalizes what
comes back and assembles the annotated tree.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence

from codesentinel.config import CodeSentinelConfig
from codesentinel.constants.tree import DEFAULT_ROOT_NAME, PATH_SEPARATOR
from codesentinel.exceptions import ValidationError
from codesentinel.findings import normalize_finding
from codesentinel.model import CodeUnit, ComposedRuleSet, Finding, NodeRollup, Rule, ScanResult
from codesentinel.reporting.filters import OutputFilters, filter_findings
from codesentinel.rules.composer import compose
from codesentinel.rules.registry import RuleRegistry, select_active_rules
from codesentinel.scanner.analyzer import Analyzer
from codesentinel.severity import severity_counts, sort_findings
from codesentinel.tree import ScanTree, aggregate_tree, build_tree_from_findings, split_path
from codesentinel.types import Severity

logger = logging.getLogger(__name__)


def build_scan_tree(
    findings: Sequence[Finding],
    *,
    paths: Iterable[str] = (),
    root_name: str = DEFAULT_ROOT_NAME,
    min_severity: Severity | None = None,
) -> tuple[ScanTree, Mapping[str, NodeRollup]]:
    """Filter findings, build the tree and aggregate it."""
    shown = filter_findings(findings, OutputFilters(min_severity=min_severity))
    tree = build_tree_from_findings(shown, paths=paths, root_name=root_name)
    return tree, aggregate_tree(tree)


def run_scan(
    *,
    registry: RuleRegistry,
    user_id: str,
    units: Sequence[CodeUnit],
    analyzer: Analyzer,
    config: CodeSentinelConfig | None = None,
    min_severity: Severity | None = None,
    strict: bool = False,
) -> ScanResult:
    """Scan code units for a user and return the annotated result.

    Malformed analyzer findings, including those whose path clashes with
    a file or folder already in the tree, are recorded as warnings and
    skipped unless ``strict`` is set, in which case the ValidationError
    propagates.
    """
    config = config or CodeSentinelConfig()
    started_at = time.perf_counter()

    files: set[str] = set()
    folders: set[str] = set()
    for unit in units:
        conflict = _path_conflict(unit.path, files, folders)
        if conflict is not None:
            raise ValidationError(f"code unit {conflict}")
        _register_path(unit.path, files, folders)

    # One snapshot for the whole scan, so a concurrent edit never splits it.
    snapshot = registry.list_rules(user_id)
    composed_by_language: dict[str | None, ComposedRuleSet] = {}

    def composed_for(language: str | None) -> ComposedRuleSet:
        key = language.lower() if language else None
        if key not in composed_by_language:
            composed_by_language[key] = _compose_for(snapshot, key, config.max_prompt_chars)
        return composed_by_language[key]

    baseline = composed_for(None)
    if baseline.truncated:
        logger.warning(
            "Rule text for user %s truncated; omitted rules: %s",
            user_id,
            ", ".join(baseline.omitted_rule_ids) or "(master body cut)",
        )

    warnings: list[str] = []
    findings: list[Finding] = []
    for unit in units:
        composed = composed_for(unit.language)
        raw_findings = analyzer.analyze(rule_text=composed.text, unit=unit)
        for index, raw in enumerate(raw_findings):
            try:
                finding = normalize_finding(raw)
                conflict = _path_conflict(finding.file_path, files, folders)
                if conflict is not None:
                    raise ValidationError(f"finding {conflict}")
            except ValidationError as exc:
                if strict:
                    raise
                warning = f"Skipped malformed finding #{index} for {unit.path}: {exc}"
                warnings.append(warning)
                logger.warning(warning)
                continue
            _register_path(finding.file_path, files, folders)
            findings.append(finding)

    effective_min = min_severity if min_severity is not None else config.min_severity
    tree, rollups = build_scan_tree(
        findings,
        paths=[unit.path for unit in units],
        root_name=config.root_name,
        min_severity=effective_min,
    )

    duration_seconds = time.perf_counter() - started_at
    logger.info(
        "Scanned %d units for user %s: %d findings, worst severity %s",
        len(units),
        user_id,
        len(findings),
        rollups[tree.root.path].severity,
    )

    return ScanResult(
        tree=tree,
        rollups=rollups,
        composed_rules=baseline,
        findings=tuple(sort_findings(findings)),
        counts_by_severity=severity_counts(findings),
        warnings=tuple(warnings),
        duration_seconds=duration_seconds,
        scanned_units=len(units),
    )


def _compose_for(rules: Sequence[Rule], language: str | None, max_length: int) -> ComposedRuleSet:
    return compose(select_active_rules(rules, language=language), max_length)


def _path_conflict(path: str, files: set[str], folders: set[str]) -> str | None:
    """Describe why ``path`` cannot join the tree as a file, or return None."""
    if path in folders:
        return f"path {path!r} is already used as a folder"
    segments = split_path(path)
    for depth in range(1, len(segments)):
        prefix = PATH_SEPARATOR.join(segments[:depth])
        if prefix in files:
            return f"path {path!r} is nested under file {prefix!r}"
    return None


def _register_path(path: str, files: set[str], folders: set[str]) -> None:
    segments = split_path(path)
    files.add(path)
    folders.update(PATH_SEPARATOR.join(segments[:depth]) for depth in range(1, len(segments)))
