"""Session state bundle and the transitions that mutate it.

``SessionState`` is the single owner of tree, filter, selection, expansion
and preview-related settings. Transitions below are plain functions that
change the bundle in place and perform no I/O, so they can be tested
without a backend or any rendering layer.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .config import Config
from .expansion import ExpansionStore
from .inverse import InverseResult, inverse_select
from .selection import SelectionStore
from .tree_model import Node, Tree, filter_tree, normalize_extension, normalize_extensions
from .workspace import WorkspaceSnapshot

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"
STATUS_INFO = "info"


@dataclass(frozen=True)
class Status:
    """Transient user-facing status line."""

    kind: str = ""
    message: str = ""


@dataclass
class SessionState:
    root: str = ""
    tree: Tree = ()
    displayed_tree: Tree = ()
    query: str = ""
    applied_query: str = ""
    extensions: frozenset[str] = frozenset()
    selection: SelectionStore = field(default_factory=SelectionStore)
    expansion: ExpansionStore = field(default_factory=ExpansionStore)
    config: Config = field(default_factory=Config)
    output_format: str = "markdown"
    inverse_patterns: tuple[str, ...] = ()
    status: Status = field(default_factory=Status)
    scanning: bool = False

    @property
    def filter_active(self) -> bool:
        return bool(self.applied_query) or bool(self.extensions)


def apply_filter(state: SessionState) -> Tree:
    """Recompute the displayed tree from the applied filter criteria."""
    state.displayed_tree = filter_tree(state.tree, state.applied_query, state.extensions)
    return state.displayed_tree


def set_tree(state: SessionState, tree: Tree) -> None:
    """Replace the scanned tree wholesale and refresh the displayed view."""
    state.tree = tuple(tree)
    apply_filter(state)


def clear_tree(state: SessionState) -> None:
    """Drop the tree after a failed scan; the selection is kept as-is."""
    set_tree(state, ())


def set_query(state: SessionState, query: str) -> bool:
    """Record raw query input; return whether it differs from the applied one."""
    state.query = query
    return state.query != state.applied_query


def commit_query(state: SessionState) -> bool:
    """Apply the pending query; return whether the displayed tree changed."""
    if state.applied_query == state.query:
        return False
    state.applied_query = state.query
    apply_filter(state)
    return True


def set_extensions(state: SessionState, extensions: Iterable[str]) -> bool:
    """Replace the extension filter and re-filter immediately."""
    normalized = normalize_extensions(extensions)
    if normalized == state.extensions:
        return False
    state.extensions = normalized
    apply_filter(state)
    return True


def toggle_extension(state: SessionState, extension: str) -> bool:
    """Add or remove one extension from the filter."""
    normalized = normalize_extension(extension)
    if not normalized:
        return False
    updated = set(state.extensions)
    if normalized in updated:
        updated.remove(normalized)
    else:
        updated.add(normalized)
    return set_extensions(state, updated)


def toggle_selection(state: SessionState, node: Node) -> bool:
    """Toggle every leaf under ``node``; return whether leaves were added."""
    return state.selection.toggle(node)


def select_all(state: SessionState) -> int:
    """Select every leaf of the displayed tree and return the count."""
    state.selection.select_all(state.displayed_tree)
    return len(state.selection)


def deselect_all(state: SessionState) -> None:
    state.selection.deselect_all()


def apply_inverse_selection(state: SessionState, patterns: Iterable[str]) -> InverseResult:
    """Select displayed leaves that no pattern excludes."""
    state.inverse_patterns = tuple(patterns)
    result = inverse_select(state.displayed_tree, state.root, state.inverse_patterns)
    state.selection.replace(result.selected)
    return result


def merge_selection(state: SessionState, paths: Iterable[str]) -> list[str]:
    """Add ``paths`` to the selection, returning the newly added ones."""
    return state.selection.merge(paths)


def toggle_expanded(state: SessionState, path: str) -> bool:
    return state.expansion.toggle(path)


def ordered_selection(state: SessionState) -> list[str]:
    """Selected paths in tree traversal order."""
    return state.selection.ordered(state.tree)


def build_workspace_snapshot(state: SessionState) -> WorkspaceSnapshot:
    """Capture the persisted subset of the session."""
    return WorkspaceSnapshot(
        path=state.root,
        expanded_nodes=tuple(state.expansion.paths()),
        selected_files=tuple(state.selection.paths()),
        search_query=state.query,
        selected_extensions=tuple(sorted(state.extensions)),
    )


def apply_workspace_snapshot(state: SessionState, snapshot: WorkspaceSnapshot) -> list[str]:
    """Restore non-empty snapshot fields; return the names restored.

    Empty stored fields never overwrite live state.
    """
    restored: list[str] = []
    if snapshot.selected_files:
        state.selection.replace(snapshot.selected_files)
        restored.append("selected_files")
    if snapshot.search_query:
        state.query = snapshot.search_query
        state.applied_query = snapshot.search_query
        restored.append("search_query")
    if snapshot.selected_extensions:
        state.extensions = normalize_extensions(snapshot.selected_extensions)
        restored.append("selected_extensions")
    if snapshot.expanded_nodes:
        state.expansion.replace(snapshot.expanded_nodes)
        restored.append("expanded_nodes")
    if restored:
        apply_filter(state)
    return restored


__all__ = [
    "STATUS_SUCCESS",
    "STATUS_ERROR",
    "STATUS_INFO",
    "Status",
    "SessionState",
    "apply_filter",
    "set_tree",
    "clear_tree",
    "set_query",
    "commit_query",
    "set_extensions",
    "toggle_extension",
    "toggle_selection",
    "select_all",
    "deselect_all",
    "apply_inverse_selection",
    "merge_selection",
    "toggle_expanded",
    "ordered_selection",
    "build_workspace_snapshot",
    "apply_workspace_snapshot",
]
