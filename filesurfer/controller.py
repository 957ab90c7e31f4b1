"""Session controller: the single logical task that owns all UI state.

User actions arrive as method calls. Synchronous actions mutate
``SessionState`` immediately and spawn background work (aggregation,
workspace saves) on the running event loop; coroutine actions await the
backend directly. ``poll`` is the periodic tick that fires debounced work.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Callable, Coroutine, Iterable
from dataclasses import replace

from .config import OUTPUT_FORMATS, Config, repair_config_dict
from .debounce import SEARCH_DEBOUNCE_SECONDS, WORKSPACE_SAVE_DEBOUNCE_SECONDS, TrailingDebounce
from .backend.analysis import CodeAnalysis, FunctionInfo, ProjectType, TodoItem
from .errors import (
    AnalysisError,
    ClipboardError,
    ConfigLoadError,
    ExportError,
    GitFallbackError,
    ImportResolutionError,
    PersistenceError,
    ScanError,
)
from .inverse import InverseResult, parse_patterns
from .preview import FAILED, AggregationRequest, PreviewAssembler
from .selection import TRI_NONE
from .state import (
    STATUS_ERROR,
    STATUS_INFO,
    STATUS_SUCCESS,
    SessionState,
    Status,
    apply_inverse_selection,
    apply_workspace_snapshot,
    build_workspace_snapshot,
    clear_tree,
    commit_query,
    deselect_all,
    merge_selection,
    ordered_selection,
    select_all,
    set_extensions,
    set_query,
    set_tree,
    toggle_expanded,
    toggle_extension,
    toggle_selection,
)
from .tree_model import Node, count_files, find_node, prune_to_tracked
from .workspace import WorkspacePersistor, WorkspaceSnapshot

logger = logging.getLogger(__name__)


class SessionController:
    """Drive one project session against a ``Backend``."""

    def __init__(
        self,
        backend,
        *,
        monotonic: Callable[[], float] = time.monotonic,
        search_delay_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        save_delay_seconds: float = WORKSPACE_SAVE_DEBOUNCE_SECONDS,
    ) -> None:
        self.backend = backend
        self.state = SessionState()
        self.preview = PreviewAssembler(backend)
        self.persistor = WorkspacePersistor(
            backend,
            delay_seconds=save_delay_seconds,
            monotonic=monotonic,
        )
        self._search_debounce = TrailingDebounce(search_delay_seconds, monotonic)
        self._tasks: set[asyncio.Task] = set()

    # -- task bookkeeping -------------------------------------------------

    def _spawn(self, coro: Coroutine[object, object, object]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every spawned background task has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _set_status(self, kind: str, message: str) -> None:
        self.state.status = Status(kind, message)

    def _mark_workspace_dirty(self) -> None:
        if self.state.root:
            self.persistor.mark_dirty()

    # -- preview ----------------------------------------------------------

    def refresh_preview(self) -> AggregationRequest | None:
        """Issue an aggregation for the current selection, or clear."""
        config = self.state.config
        request = self.preview.issue(
            ordered_selection(self.state),
            self.state.root,
            self.state.output_format,
            config.max_file_size_mb,
            config.include_comments,
        )
        if request is not None:
            self._spawn(self._run_preview(request))
        return request

    async def _run_preview(self, request: AggregationRequest) -> None:
        outcome = await self.preview.run(request)
        if outcome == FAILED:
            self._set_status(STATUS_ERROR, f"Error: {self.preview.last_error}")

    @property
    def preview_content(self) -> str:
        return self.preview.content

    def set_output_format(self, output_format: str) -> None:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"unknown output format: {output_format!r}")
        self.state.output_format = output_format
        self.refresh_preview()

    # -- config -----------------------------------------------------------

    async def load_config(self) -> Config:
        """Load config, repairing and re-persisting it when incomplete."""
        try:
            config = await self.backend.load_config()
        except ConfigLoadError as exc:
            logger.warning("config unreadable, restoring defaults: %s", exc)
            config = repair_config_dict(exc.document)
            try:
                await self.backend.save_config(config)
            except PersistenceError as save_exc:
                logger.warning("failed to persist repaired config: %s", save_exc)
        self.state.config = config
        self.state.output_format = config.output_format if config.output_format in OUTPUT_FORMATS else "markdown"
        return config

    async def save_config(self, config: Config) -> bool:
        try:
            await self.backend.save_config(config)
        except PersistenceError as exc:
            logger.warning("failed to save config: %s", exc)
            return False
        self.state.config = config
        return True

    async def clear_recent_paths(self) -> bool:
        return await self.save_config(replace(self.state.config, recent_paths=()))

    # -- project lifecycle ------------------------------------------------

    async def open_project(self, path: str) -> bool:
        """Open ``path``: record it, restore its workspace, and scan it."""
        await self._flush_workspace()
        self._search_debounce.cancel()
        set_query(self.state, self.state.applied_query)
        root = os.path.abspath(os.path.expanduser(path))
        self.state.root = root

        try:
            await self.backend.add_recent_path(root)
        except (ConfigLoadError, PersistenceError) as exc:
            logger.warning("failed to record recent path %s: %s", root, exc)
        await self.load_config()

        snapshot = await self.persistor.restore(root)
        if snapshot is None:
            self.state.selection.clear()
        else:
            restored = apply_workspace_snapshot(self.state, snapshot)
            logger.debug("restored %s for %s", ", ".join(restored) or "nothing", root)

        self.preview.clear()
        scanned = await self.rescan()
        self._mark_workspace_dirty()
        if scanned and self.state.selection:
            self.refresh_preview()
        return scanned

    async def rescan(self) -> bool:
        """Replace the tree with a fresh scan of the open root."""
        root = self.state.root
        if not root:
            return False
        config = self.state.config
        self.state.scanning = True
        self._set_status("", "")
        try:
            tree = await self.backend.scan(root, list(config.custom_ignore_patterns))
        except ScanError as exc:
            logger.warning("scan of %s failed: %s", root, exc)
            clear_tree(self.state)
            self._set_status(STATUS_ERROR, f"Error: {exc}")
            return False
        finally:
            self.state.scanning = False

        if config.git_only_mode:
            try:
                tracked = await self.backend.git_tracked_files(root)
            except GitFallbackError as exc:
                logger.warning("git-only mode unavailable for %s, using full scan: %s", root, exc)
            else:
                tree = prune_to_tracked(tuple(tree), tracked)

        set_tree(self.state, tuple(tree))
        self._set_status(STATUS_SUCCESS, f"Scanned {count_files(self.state.tree)} files")
        return True

    async def close(self) -> None:
        """Write any pending workspace save and wait for background work."""
        await self._flush_workspace()
        await self.drain()

    # -- filtering --------------------------------------------------------

    def set_query(self, query: str) -> None:
        """Record query input; the tree re-filters after the quiet period."""
        if set_query(self.state, query):
            self._search_debounce.arm()
        else:
            self._search_debounce.cancel()
        self._mark_workspace_dirty()

    def commit_query_now(self) -> bool:
        """Apply pending query input without waiting for the debounce."""
        self._search_debounce.cancel()
        return commit_query(self.state)

    def set_extensions(self, extensions: Iterable[str]) -> bool:
        changed = set_extensions(self.state, extensions)
        if changed:
            self._mark_workspace_dirty()
        return changed

    def toggle_extension(self, extension: str) -> bool:
        changed = toggle_extension(self.state, extension)
        if changed:
            self._mark_workspace_dirty()
        return changed

    # -- selection --------------------------------------------------------

    def toggle_selection(self, node: Node | str) -> bool:
        """Toggle a node (or the node at a path) and refresh the preview."""
        if isinstance(node, str):
            found = find_node(self.state.tree, node)
            if found is None:
                return False
            node = found
        added = toggle_selection(self.state, node)
        self.refresh_preview()
        self._mark_workspace_dirty()
        return added

    def select_all(self) -> int:
        count = select_all(self.state)
        self.refresh_preview()
        self._mark_workspace_dirty()
        return count

    def deselect_all(self) -> None:
        deselect_all(self.state)
        self.preview.clear()
        self._mark_workspace_dirty()

    def apply_inverse_selection(self, patterns: str | Iterable[str]) -> InverseResult:
        """Select displayed files not matching any exclude pattern."""
        pattern_list = parse_patterns(patterns) if isinstance(patterns, str) else [
            pattern.strip() for pattern in patterns if pattern.strip()
        ]
        result = apply_inverse_selection(self.state, pattern_list)
        self.refresh_preview()
        self._mark_workspace_dirty()
        self._set_status(
            STATUS_SUCCESS,
            f"Inverse selection: {result.kept} files selected (excluded {result.excluded_count})",
        )
        return result

    def selection_status(self, node: Node | str) -> str:
        """Tri-state of a node, or of the node at a path."""
        if isinstance(node, str):
            found = find_node(self.state.tree, node)
            if found is None:
                return TRI_NONE
            node = found
        return self.state.selection.status(node)

    async def detect_imports(self) -> list[str]:
        """Add local files imported by the selection; return those added."""
        files = ordered_selection(self.state)
        if not files:
            return []
        self._set_status(STATUS_INFO, "Detecting imports...")
        found: list[str] = []
        for file_path in files:
            try:
                found.extend(await self.backend.resolve_imports(file_path))
            except ImportResolutionError as exc:
                logger.warning("failed to resolve imports for %s: %s", file_path, exc)
        added = merge_selection(self.state, found)
        if not added:
            self._set_status(STATUS_INFO, "No new imports found")
            return []
        self.refresh_preview()
        self._mark_workspace_dirty()
        self._set_status(STATUS_SUCCESS, f"Added {len(added)} imported files")
        return added

    # -- expansion --------------------------------------------------------

    def toggle_expanded(self, path: str) -> bool:
        expanded = toggle_expanded(self.state, path)
        self._mark_workspace_dirty()
        return expanded

    # -- clipboard --------------------------------------------------------

    async def copy_to_clipboard(self) -> bool:
        content = self.preview.content
        if not content:
            return False
        file_count = len(self.state.selection)
        try:
            await self.backend.copy_to_clipboard(content)
        except ClipboardError as exc:
            self._set_status(STATUS_ERROR, f"Error: {exc}")
            return False
        try:
            await self.backend.record_clipboard_history(content, file_count, self.state.output_format)
        except PersistenceError as exc:
            logger.warning("failed to record clipboard history: %s", exc)
        self._set_status(STATUS_SUCCESS, f"Copied {file_count} files!")
        return True

    # -- analysis and export ----------------------------------------------

    async def detect_project_type(self) -> ProjectType | None:
        """Guess the open project's kind; ``None`` when it cannot be read."""
        if not self.state.root:
            return None
        try:
            return await self.backend.detect_project_type(self.state.root)
        except AnalysisError as exc:
            logger.warning("project type detection failed for %s: %s", self.state.root, exc)
            return None

    async def analyze_selection(self) -> CodeAnalysis:
        """Collect function definitions and TODO comments from selected files."""
        functions: list[FunctionInfo] = []
        todos: list[TodoItem] = []
        for file_path in ordered_selection(self.state):
            try:
                functions.extend(await self.backend.extract_functions(file_path))
                todos.extend(await self.backend.extract_todos(file_path))
            except AnalysisError as exc:
                logger.warning("failed to analyze %s: %s", file_path, exc)
        return CodeAnalysis(tuple(functions), tuple(todos))

    async def export_preview(self, path: str) -> bool:
        """Write the assembled document to ``path``; no-op when it is empty."""
        content = self.preview.content
        if not content:
            return False
        try:
            await self.backend.export_to_file(path, content)
        except ExportError as exc:
            self._set_status(STATUS_ERROR, f"Error: {exc}")
            return False
        self._set_status(STATUS_SUCCESS, f"Exported to {path}")
        return True

    # -- ticking ----------------------------------------------------------

    def next_deadline(self) -> float | None:
        """Seconds until the next debounced action, or ``None`` when idle."""
        waits = [
            remaining
            for remaining in (self._search_debounce.remaining(), self.persistor.remaining())
            if remaining is not None
        ]
        return min(waits) if waits else None

    async def poll(self) -> None:
        """Fire debounced query commits and workspace saves that are due."""
        if self._search_debounce.fire_if_due():
            commit_query(self.state)
        if self.persistor.save_due() and self.state.root:
            self._spawn(self.persistor.save(build_workspace_snapshot(self.state)))

    async def _flush_workspace(self) -> None:
        if not self.state.root:
            self.persistor.cancel()
            return
        await self.persistor.flush(build_workspace_snapshot(self.state))

    def workspace_snapshot(self) -> WorkspaceSnapshot:
        return build_workspace_snapshot(self.state)


__all__ = ["SessionController"]
