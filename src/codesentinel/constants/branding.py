"""CLI text."""

from __future__ import annotations

CLI_DESCRIPTION: str = (
    "CodeSentinel core tools.\n\n"
    "  tree             Build and aggregate the file/folder tree for a findings file\n"
    "  compose          Compose a user's active scan rules into analyzer rule text\n"
    "  validate-config  Validate a codesentinel.yaml file"
)
