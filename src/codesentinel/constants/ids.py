"""Constants for derived identifiers."""

from __future__ import annotations

FINDING_ID_HEX_LENGTH: int = 16
FINDING_ID_PREFIX: str = "f-"
