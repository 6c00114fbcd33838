"""Constants for the scan-result tree."""

from __future__ import annotations

PATH_SEPARATOR: str = "/"
ROOT_PATH: str = ""
DEFAULT_ROOT_NAME: str = ""

# Segments that would let a path re-enter an ancestor.
FORBIDDEN_SEGMENTS: frozenset[str] = frozenset({".", ".."})
