"""Tri-state selection algebra over file leaves.

The selection only ever holds leaf paths. Directory state is derived on
demand from the leaves beneath it, so re-filtering or re-expanding the tree
can never desynchronize a directory checkbox from its files.
"""

from __future__ import annotations

from collections.abc import Iterable

from .tree_model import Node, Tree, all_leaf_paths, iter_leaves, leaf_paths

TRI_NONE = "none"
TRI_PARTIAL = "partial"
TRI_FULL = "full"


class SelectionStore:
    """Ordered set of selected leaf paths.

    Insertion order is kept so paths missing from the current tree still
    have a stable position when the selection is serialized.
    """

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: dict[str, None] = dict.fromkeys(paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self):
        return iter(self._paths)

    def __bool__(self) -> bool:
        return bool(self._paths)

    def paths(self) -> list[str]:
        """Return selected paths in insertion order."""
        return list(self._paths)

    def replace(self, paths: Iterable[str]) -> None:
        """Replace the whole selection."""
        self._paths = dict.fromkeys(paths)

    def clear(self) -> None:
        self._paths.clear()

    def toggle(self, node: Node) -> bool:
        """Toggle every leaf under ``node``; return whether leaves were added.

        When all leaves are selected they are all removed. Otherwise every
        missing leaf is added, so a partial directory always completes.
        """
        targets = leaf_paths(node)
        if targets and all(path in self._paths for path in targets):
            for path in targets:
                self._paths.pop(path, None)
            return False
        for path in targets:
            self._paths.setdefault(path, None)
        return bool(targets)

    def select_all(self, displayed_tree: Tree) -> None:
        """Select exactly the leaves of the tree currently shown."""
        self.replace(all_leaf_paths(displayed_tree))

    def deselect_all(self) -> None:
        self.clear()

    def merge(self, paths: Iterable[str]) -> list[str]:
        """Add paths not already selected and return the ones added."""
        added: list[str] = []
        for path in paths:
            if path in self._paths:
                continue
            self._paths[path] = None
            added.append(path)
        return added

    def selected_count(self, node: Node) -> int:
        """Count selected leaves beneath ``node``."""
        return sum(1 for path in leaf_paths(node) if path in self._paths)

    def status(self, node: Node) -> str:
        """Return ``TRI_NONE``, ``TRI_PARTIAL`` or ``TRI_FULL`` for ``node``."""
        leaves = leaf_paths(node)
        total = len(leaves)
        selected = sum(1 for path in leaves if path in self._paths)
        if total > 0 and selected == total:
            return TRI_FULL
        if selected > 0:
            return TRI_PARTIAL
        return TRI_NONE

    def is_fully_selected(self, node: Node) -> bool:
        return self.status(node) == TRI_FULL

    def is_partially_selected(self, node: Node) -> bool:
        return self.status(node) == TRI_PARTIAL

    def ordered(self, tree: Tree) -> list[str]:
        """Return selected paths in ``tree`` traversal order.

        Selected paths absent from ``tree`` (hidden by a filter, or left over
        from a restored workspace) follow in insertion order.
        """
        ordered: list[str] = []
        seen: set[str] = set()
        for leaf in iter_leaves(tree):
            if leaf.path in self._paths and leaf.path not in seen:
                ordered.append(leaf.path)
                seen.add(leaf.path)
        ordered.extend(path for path in self._paths if path not in seen)
        return ordered


__all__ = [
    "TRI_NONE",
    "TRI_PARTIAL",
    "TRI_FULL",
    "SelectionStore",
]
