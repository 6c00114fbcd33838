"""Data contract consumed by hierarchical tree views.

Every node is paired with its rolled-up severity and badge. Payloads are
built with explicit stacks, so arbitrarily deep trees are safe.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from codesentinel.model import NodeRollup, TreeNode
from codesentinel.tree.builder import ScanTree
from codesentinel.types import JsonObject


@dataclass(frozen=True)
class AnnotatedNode:
    """A tree node together with its aggregated severity annotation."""

    node: TreeNode
    rollup: NodeRollup
    depth: int

    @property
    def rolled_up_severity(self) -> str:
        return self.rollup.severity


def annotated_nodes(tree: ScanTree, rollups: Mapping[str, NodeRollup]) -> dict[str, AnnotatedNode]:
    """Pair every node with its rollup, keyed by path in display order."""
    annotated: dict[str, AnnotatedNode] = {}
    stack: list[tuple[TreeNode, int]] = [(tree.root, 0)]
    while stack:
        node, depth = stack.pop()
        annotated[node.path] = AnnotatedNode(node=node, rollup=rollups[node.path], depth=depth)
        if node.kind == "folder":
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return annotated


def tree_view_payload(tree: ScanTree, rollups: Mapping[str, NodeRollup]) -> JsonObject:
    """Render the annotated tree as nested JSON for presentation layers."""
    root_payload = _node_payload(tree.root, rollups[tree.root.path])
    stack: list[tuple[TreeNode, JsonObject]] = [(tree.root, root_payload)]
    while stack:
        node, payload = stack.pop()
        if node.kind != "folder":
            continue
        children: list[JsonObject] = payload["children"]  # type: ignore[assignment]
        for child in node.children:
            child_payload = _node_payload(child, rollups[child.path])
            children.append(child_payload)
            stack.append((child, child_payload))
    return root_payload


def _node_payload(node: TreeNode, rollup: NodeRollup) -> JsonObject:
    badge = rollup.badge
    payload: JsonObject = {
        "name": node.name,
        "path": node.path,
        "kind": node.kind,
        "rolledUpSeverity": rollup.severity,
        "findingCount": rollup.finding_count,
        "countsBySeverity": dict(rollup.counts_by_severity),
        "badge": {"count": badge.count, "variant": badge.variant} if badge is not None else None,
    }
    if node.kind == "file":
        payload["findings"] = [finding.to_dict() for finding in node.findings]
    else:
        payload["children"] = []
    return payload
