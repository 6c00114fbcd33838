"""Severity scale, comparison and badge selection.

The scale is ``critical > high > medium > low > info``. Rolled-up values add
the sentinel ``none`` below ``info`` for nodes without any findings.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING, cast

from codesentinel.constants.severity import (
    BADGE_VARIANTS,
    EMPTY_MAX_SEVERITY,
    NO_SEVERITY,
    SEVERITY_ORDER,
    SEVERITY_RANK,
)
from codesentinel.exceptions import ValidationError
from codesentinel.types import BadgeVariant, RolledUpSeverity, Severity

if TYPE_CHECKING:
    from codesentinel.model import Finding


def _rank(severity: str) -> int:
    try:
        return SEVERITY_RANK[severity]
    except KeyError:
        raise ValidationError(f"Unknown severity {severity!r}; expected one of {list(SEVERITY_ORDER)}") from None


def parse_severity(value: object) -> Severity:
    """Parse a raw severity case-insensitively into its canonical form."""
    if not isinstance(value, str):
        raise ValidationError(f"severity must be a string, got {type(value).__name__}")
    normalized = value.strip().lower()
    if normalized not in SEVERITY_RANK:
        raise ValidationError(f"Unknown severity {value!r}; expected one of {list(SEVERITY_ORDER)}")
    return cast(Severity, normalized)


def compare(a: Severity, b: Severity) -> int:
    """Return 1 if ``a`` is more severe than ``b``, -1 if less, 0 if equal."""
    rank_a = _rank(a)
    rank_b = _rank(b)
    return (rank_a > rank_b) - (rank_a < rank_b)


def max_severity(severities: Iterable[Severity]) -> Severity:
    """Return the highest severity, or ``info`` for an empty input.

    Callers that must tell "no findings" apart from "only info findings"
    should use ``rollup_severity`` instead.
    """
    best: Severity | None = None
    for severity in severities:
        if best is None or _rank(severity) > _rank(best):
            best = severity
    return best if best is not None else EMPTY_MAX_SEVERITY


def rollup_severity(severities: Iterable[RolledUpSeverity]) -> RolledUpSeverity:
    """Return the highest severity, or ``none`` when nothing was reported."""
    best: RolledUpSeverity = NO_SEVERITY
    best_rank = -1
    for severity in severities:
        if severity == NO_SEVERITY:
            continue
        rank = _rank(severity)
        if rank > best_rank:
            best, best_rank = severity, rank
    return best


def badge_variant(severity: RolledUpSeverity) -> BadgeVariant:
    """Map a severity to its badge variant.

    ``critical`` and ``high`` share the ``destructive`` variant.
    """
    try:
        return BADGE_VARIANTS[severity]
    except KeyError:
        raise ValidationError(f"Unknown severity {severity!r}") from None


def severity_counts(findings: Iterable[Finding]) -> dict[str, int]:
    """Count findings by severity with stable keys."""
    counts = Counter(finding.severity for finding in findings)
    return {severity: int(counts.get(severity, 0)) for severity in SEVERITY_ORDER}


def sort_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Return findings worst first, then by path, line and id."""
    return sorted(
        findings,
        key=lambda finding: (-SEVERITY_RANK[finding.severity], finding.file_path, finding.line or 0, finding.id),
    )
