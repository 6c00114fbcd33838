"""Presentation payloads, summaries and writers for scan results."""

from .filters import OutputFilters, filter_findings
from .tree_view import AnnotatedNode, annotated_nodes, tree_view_payload

__all__ = ["AnnotatedNode", "OutputFilters", "annotated_nodes", "filter_findings", "tree_view_payload"]
