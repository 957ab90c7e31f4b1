"""Filtered tree projections for name queries and extension sets.

Filtering never mutates its input: kept directories are rebuilt with their
surviving children while untouched subtrees are shared by reference.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .types import Node, Tree


def file_extension(name: str) -> str:
    """Return the lowercase extension of ``name`` including its dot.

    Names without a dot have no extension. Dotfiles such as ``.env`` use
    their whole name, matching how extension filters list them.
    """
    _stem, dot, suffix = name.rpartition(".")
    if not dot or not suffix:
        return ""
    return f".{suffix.lower()}"


def normalize_extension(value: str) -> str:
    """Normalize user input like ``PY`` or ``.Py`` to ``.py``."""
    stripped = value.strip().lower()
    if not stripped:
        return ""
    return stripped if stripped.startswith(".") else f".{stripped}"


def normalize_extensions(values: Iterable[str]) -> frozenset[str]:
    """Normalize an extension collection, dropping blanks."""
    return frozenset(ext for ext in (normalize_extension(value) for value in values) if ext)


def leaf_matches(node: Node, query: str, extensions: frozenset[str]) -> bool:
    """Return whether a file passes both the extension and name criteria.

    ``query`` must already be lowercased.
    """
    if extensions and file_extension(node.name) not in extensions:
        return False
    if query and query not in node.name.lower():
        return False
    return True


def _filter_nodes(nodes: Iterable[Node], query: str, extensions: frozenset[str]) -> Tree:
    """Recursive worker for ``filter_tree``."""
    kept: list[Node] = []
    for node in nodes:
        if not node.is_dir:
            if leaf_matches(node, query, extensions):
                kept.append(node)
            continue

        if query and query in node.name.lower():
            # A directory matching by name keeps its whole subtree unfiltered.
            kept.append(node)
            continue

        children = _filter_nodes(node.children, query, extensions)
        if not children:
            continue
        if children == node.children:
            kept.append(node)
        else:
            kept.append(replace(node, children=children))
    return tuple(kept)


def filter_tree(tree: Tree, query: str, extensions: Iterable[str]) -> Tree:
    """Derive the displayed tree for a name query and extension set.

    Returns ``tree`` itself when both criteria are empty so callers can rely
    on identity to detect the unfiltered view.
    """
    normalized_query = query.lower()
    normalized_extensions = normalize_extensions(extensions)
    if not normalized_query and not normalized_extensions:
        return tree
    return _filter_nodes(tree, normalized_query, normalized_extensions)


__all__ = [
    "file_extension",
    "normalize_extension",
    "normalize_extensions",
    "leaf_matches",
    "filter_tree",
]
