"""Read-only traversal helpers over ``Node`` forests.

Every helper walks children in stored order, so results follow the order a
tree view displays them in.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .types import Node


def iter_nodes(nodes: Iterable[Node]) -> Iterator[Node]:
    """Yield every node depth-first, parents before children."""
    stack = list(reversed(tuple(nodes)))
    while stack:
        node = stack.pop()
        yield node
        if node.is_dir and node.children:
            stack.extend(reversed(node.children))


def iter_leaves(nodes: Iterable[Node]) -> Iterator[Node]:
    """Yield file nodes in display traversal order."""
    for node in iter_nodes(nodes):
        if not node.is_dir:
            yield node


def leaf_paths(node: Node) -> list[str]:
    """Return all leaf paths under ``node``; a file yields itself."""
    if not node.is_dir:
        return [node.path]
    return [leaf.path for leaf in iter_leaves(node.children)]


def all_leaf_paths(nodes: Iterable[Node]) -> list[str]:
    """Return every leaf path in a forest, in traversal order."""
    return [leaf.path for leaf in iter_leaves(nodes)]


def count_files(nodes: Iterable[Node]) -> int:
    """Count leaves in a forest."""
    return sum(1 for _leaf in iter_leaves(nodes))


def find_node(nodes: Iterable[Node], path: str) -> Node | None:
    """Return the node whose path equals ``path``, or ``None``."""
    for node in iter_nodes(nodes):
        if node.path == path:
            return node
    return None


def directory_paths(nodes: Iterable[Node]) -> list[str]:
    """Return every directory path in a forest."""
    return [node.path for node in iter_nodes(nodes) if node.is_dir]


__all__ = [
    "iter_nodes",
    "iter_leaves",
    "leaf_paths",
    "all_leaf_paths",
    "count_files",
    "find_node",
    "directory_paths",
]
