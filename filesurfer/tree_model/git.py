"""Prune a scanned tree down to git-tracked files."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from .types import Node, Tree


def prune_to_tracked(tree: Tree, tracked_files: Iterable[str]) -> Tree:
    """Keep only tracked leaves and directories that still contain one."""
    tracked = frozenset(tracked_files)

    def prune(nodes: Iterable[Node]) -> Tree:
        kept: list[Node] = []
        for node in nodes:
            if not node.is_dir:
                if node.path in tracked:
                    kept.append(node)
                continue
            children = prune(node.children)
            if children:
                kept.append(replace(node, children=children))
        return tuple(kept)

    return prune(tree)


__all__ = ["prune_to_tracked"]
