"""Constants for report file names, atomic writing, and stdout formatting."""

from __future__ import annotations

TREE_FILENAME: str = "tree.json"
SUMMARY_FILENAME: str = "summary.json"
COMPOSED_RULES_FILENAME: str = "rules.json"
REPORT_TEMP_PREFIX: str = ".tmp-"
REPORT_TEMP_SUFFIX: str = ".json"

SCHEMA_VERSION: str = "1.0.0"
TOP_FILES_DEFAULT_LIMIT: int = 5

TREE_INDENT: str = "  "
FOLDER_MARKER: str = "/"

# ANSI escape codes for terminal colouring.
ANSI_RESET: str = "\033[0m"
ANSI_BOLD: str = "\033[1m"
ANSI_RED: str = "\033[31;1m"
ANSI_MAGENTA: str = "\033[35;1m"
ANSI_YELLOW: str = "\033[33;1m"
ANSI_GREEN: str = "\033[32;1m"
ANSI_DIM: str = "\033[2m"

SEVERITY_COLORS: dict[str, str] = {
    "critical": ANSI_MAGENTA,
    "high": ANSI_RED,
    "medium": ANSI_YELLOW,
    "low": ANSI_GREEN,
    "info": ANSI_DIM,
}
