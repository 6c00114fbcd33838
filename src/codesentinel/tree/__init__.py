"""Scan-result tree construction and severity aggregation."""

from .aggregate import aggregate_tree
from .builder import ScanTree, build_tree, build_tree_from_findings, flatten_tree, join_path, split_path

__all__ = [
    "ScanTree",
    "aggregate_tree",
    "build_tree",
    "build_tree_from_findings",
    "flatten_tree",
    "join_path",
    "split_path",
]
