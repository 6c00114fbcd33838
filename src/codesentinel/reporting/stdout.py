"""Plain-text stdout rendering of an annotated scan tree."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from codesentinel.constants.reporting import (
    ANSI_BOLD,
    ANSI_DIM,
    ANSI_RESET,
    FOLDER_MARKER,
    SEVERITY_COLORS,
    TREE_INDENT,
)
from codesentinel.constants.severity import SEVERITY_ORDER
from codesentinel.model import NodeRollup
from codesentinel.reporting.tree_view import annotated_nodes
from codesentinel.tree.builder import ScanTree

ROOT_LABEL = "."


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_RESET}"


class TreeReporter:
    """Formats an aggregated scan tree as indented, human-readable text."""

    def __init__(
        self,
        tree: ScanTree,
        rollups: Mapping[str, NodeRollup],
        *,
        color: bool = True,
        verbose: bool = False,
        warnings: Sequence[str] = (),
    ) -> None:
        self._tree = tree
        self._rollups = rollups
        self._color = color
        self._verbose = verbose
        self._warnings = tuple(warnings)

    def render(self) -> str:
        lines: list[str] = []
        for path, item in annotated_nodes(self._tree, self._rollups).items():
            indent = TREE_INDENT * item.depth
            node = item.node
            if path == self._tree.root.path:
                label = node.name or ROOT_LABEL
            else:
                label = f"{node.name}{FOLDER_MARKER}" if node.kind == "folder" else node.name
            if node.kind == "folder" and self._color:
                label = _colorize(label, ANSI_BOLD)
            lines.append(f"{indent}{label}{self._badge(item.rollup)}")
            if self._verbose and node.kind == "file":
                for finding in node.findings:
                    location = f":{finding.line}" if finding.line is not None else ""
                    lines.append(
                        f"{indent}{TREE_INDENT}- {self._severity(finding.severity)} {finding.title}{location}"
                    )

        lines.append("")
        lines.append(self._totals())
        for warning in self._warnings:
            lines.append(f"warning: {warning}")
        return "\n".join(lines)

    def _badge(self, rollup: NodeRollup) -> str:
        badge = rollup.badge
        if badge is None:
            return ""
        return f"  [{self._severity(rollup.severity)} {badge.count}]"

    def _severity(self, severity: str) -> str:
        if not self._color:
            return severity
        color = SEVERITY_COLORS.get(severity, "")
        return _colorize(severity, color) if color else severity

    def _totals(self) -> str:
        root = self._rollups[self._tree.root.path]
        parts = ", ".join(f"{severity} {root.counts_by_severity.get(severity, 0)}" for severity in SEVERITY_ORDER)
        text = f"{self._tree.file_count} files, {root.finding_count} findings ({parts})"
        return _colorize(text, ANSI_DIM) if self._color else text
