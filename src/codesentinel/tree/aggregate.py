"""Roll severities up the scan tree in a single post-order pass."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from codesentinel.constants.severity import SEVERITY_ORDER
from codesentinel.model import Finding, NodeRollup, TreeNode
from codesentinel.severity import rollup_severity, severity_counts
from codesentinel.tree.builder import ScanTree


def aggregate_tree(tree: ScanTree) -> Mapping[str, NodeRollup]:
    """Compute the rolled-up severity of every node, keyed by node path.

    A file rolls up the worst of its own findings; a folder rolls up the
    worst of its descendants. Clean subtrees roll up to ``none``. The tree
    is left untouched, so it can be re-aggregated (e.g. after filtering).
    """
    rollups: dict[str, NodeRollup] = {}
    # Each node is pushed once unexpanded and once expanded.
    stack: list[tuple[TreeNode, bool]] = [(tree.root, False)]
    while stack:
        node, expanded = stack.pop()
        if node.kind == "file":
            rollups[node.path] = _file_rollup(node.findings)
            continue
        if not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in node.children)
            continue
        child_rollups = [rollups[child.path] for child in node.children]
        rollups[node.path] = _merge_rollups(child_rollups)
    return MappingProxyType(rollups)


def _file_rollup(findings: tuple[Finding, ...]) -> NodeRollup:
    return NodeRollup(
        severity=rollup_severity(finding.severity for finding in findings),
        finding_count=len(findings),
        counts_by_severity=MappingProxyType(severity_counts(findings)),
    )


def _merge_rollups(children: list[NodeRollup]) -> NodeRollup:
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    for child in children:
        for severity, count in child.counts_by_severity.items():
            counts[severity] += count
    return NodeRollup(
        severity=rollup_severity(child.severity for child in children),
        finding_count=sum(child.finding_count for child in children),
        counts_by_severity=MappingProxyType(counts),
    )
