"""Build the file/folder tree for a scan from flat ``(path, findings)`` pairs.

Nodes are collected in an arena keyed by path and assembled bottom-up, so
neither construction nor traversal recurses. The result is immutable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeAlias

from codesentinel.constants.tree import DEFAULT_ROOT_NAME, FORBIDDEN_SEGMENTS, PATH_SEPARATOR, ROOT_PATH
from codesentinel.exceptions import NotFoundError, ValidationError
from codesentinel.model import FileNode, Finding, FolderNode, TreeNode

logger = logging.getLogger(__name__)

TreeEntries: TypeAlias = Mapping[str, Iterable[Finding]] | Iterable[tuple[str, Iterable[Finding]]]


@dataclass(frozen=True)
class ScanTree:
    """Immutable scan tree with a path index over every node."""

    root: FolderNode
    nodes: Mapping[str, TreeNode]

    def node(self, path: str) -> TreeNode:
        """Return the node at ``path``; the root lives at the empty path."""
        try:
            return self.nodes[path]
        except KeyError:
            raise NotFoundError(f"No tree node at path {path!r}") from None

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    @property
    def file_count(self) -> int:
        return sum(1 for node in self.nodes.values() if node.kind == "file")

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Yield every node in pre-order, children in display order."""
        stack: list[TreeNode] = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if node.kind == "folder":
                stack.extend(reversed(node.children))

    def iter_files(self) -> Iterator[FileNode]:
        for node in self.iter_nodes():
            if node.kind == "file":
                yield node


def split_path(path: str) -> list[str]:
    """Split a canonical ``/``-separated path into segments.

    Raises ValidationError for empty paths, empty segments (leading,
    trailing or doubled separators) and ``.``/``..`` segments.
    """
    if not isinstance(path, str):
        raise ValidationError(f"path must be a string, got {type(path).__name__}")
    if not path:
        raise ValidationError("path has no segments")
    segments = path.split(PATH_SEPARATOR)
    for segment in segments:
        if not segment:
            raise ValidationError(f"path {path!r} contains an empty segment")
        if segment in FORBIDDEN_SEGMENTS:
            raise ValidationError(f"path {path!r} contains forbidden segment {segment!r}")
    return segments


def join_path(parent: str, name: str) -> str:
    """Join a child name onto a parent path; root children are bare names."""
    if parent == ROOT_PATH:
        return name
    return f"{parent}{PATH_SEPARATOR}{name}"


def build_tree(entries: TreeEntries, *, root_name: str = DEFAULT_ROOT_NAME) -> ScanTree:
    """Assemble a single-rooted tree from ``(path, findings)`` pairs.

    Duplicate paths are merged by concatenating their findings. Children are
    ordered folders first, then by case-sensitive name.
    """
    pairs: Iterable[tuple[str, Iterable[Finding]]] = entries.items() if isinstance(entries, Mapping) else entries

    file_findings: dict[str, list[Finding]] = {}
    folder_children: dict[str, list[str]] = {ROOT_PATH: []}

    for path, findings in pairs:
        segments = split_path(path)
        findings = tuple(findings)
        for finding in findings:
            if finding.file_path != path:
                raise ValidationError(f"finding {finding.id!r} belongs to {finding.file_path!r}, not {path!r}")

        parent = ROOT_PATH
        for segment in segments[:-1]:
            folder_path = join_path(parent, segment)
            if folder_path in file_findings:
                raise ValidationError(f"path {folder_path!r} is used as both a file and a folder")
            if folder_path not in folder_children:
                folder_children[folder_path] = []
                folder_children[parent].append(folder_path)
            parent = folder_path

        if path in folder_children:
            raise ValidationError(f"path {path!r} is used as both a file and a folder")
        if path not in file_findings:
            file_findings[path] = []
            folder_children[parent].append(path)
        else:
            logger.debug("Merging duplicate tree entry for %s", path)
        file_findings[path].extend(findings)

    arena: dict[str, TreeNode] = {
        path: FileNode(name=_leaf_name(path), path=path, findings=tuple(findings))
        for path, findings in file_findings.items()
    }

    # Deepest folders first so every child exists before its parent is sealed.
    for folder_path in sorted(folder_children, key=_depth, reverse=True):
        children = sorted((arena[child] for child in folder_children[folder_path]), key=_child_sort_key)
        name = root_name if folder_path == ROOT_PATH else _leaf_name(folder_path)
        arena[folder_path] = FolderNode(name=name, path=folder_path, children=tuple(children))

    root = arena[ROOT_PATH]
    assert isinstance(root, FolderNode)
    return ScanTree(root=root, nodes=MappingProxyType(arena))


def flatten_tree(tree: ScanTree) -> list[tuple[str, tuple[Finding, ...]]]:
    """Return the ``(path, findings)`` pairs the tree was built from."""
    return [(node.path, node.findings) for node in tree.iter_files()]


def build_tree_from_findings(
    findings: Sequence[Finding],
    *,
    paths: Iterable[str] = (),
    root_name: str = DEFAULT_ROOT_NAME,
) -> ScanTree:
    """Build a tree from normalized findings plus any clean file ``paths``."""
    grouped: dict[str, list[Finding]] = {path: [] for path in paths}
    for finding in findings:
        grouped.setdefault(finding.file_path, []).append(finding)
    return build_tree(grouped, root_name=root_name)


def _leaf_name(path: str) -> str:
    return path.rsplit(PATH_SEPARATOR, 1)[-1]


def _depth(path: str) -> int:
    if path == ROOT_PATH:
        return 0
    return path.count(PATH_SEPARATOR) + 1


def _child_sort_key(node: TreeNode) -> tuple[int, str]:
    return (0 if node.kind == "folder" else 1, node.name)
