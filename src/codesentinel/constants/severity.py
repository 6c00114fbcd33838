"""Constants for the severity scale, ranking and badge variants."""

from __future__ import annotations

from codesentinel.types import BadgeVariant, Severity

# Highest first.
SEVERITY_ORDER: tuple[Severity, ...] = ("critical", "high", "medium", "low", "info")

SEVERITY_RANK: dict[str, int] = {"info": 0, "low": 1, "medium": 2, "high": 3, "critical": 4}

NO_SEVERITY = "none"
EMPTY_MAX_SEVERITY: Severity = "info"

BADGE_VARIANTS: dict[str, BadgeVariant] = {
    "critical": "destructive",
    "high": "destructive",
    "medium": "default",
    "low": "secondary",
    "info": "secondary",
    NO_SEVERITY: "secondary",
}
