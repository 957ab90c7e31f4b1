"""Filesystem-backed implementation of the ``Backend`` protocol.

Blocking work runs through ``asyncio.to_thread`` so the session's event loop
keeps handling input while scans and aggregation are in flight.
"""

from __future__ import annotations

import asyncio
import logging

import pyperclip

from ..config import Config
from ..errors import AggregationError, ClipboardError, ExportError
from ..preview import AggregationRequest
from ..tree_model import Node
from ..workspace import WorkspaceSnapshot
from . import storage
from .analysis import (
    FunctionInfo,
    ProjectType,
    TodoItem,
    detect_project_type,
    extract_functions,
    extract_todos,
)
from .formatting import export_document, render_aggregate
from .git import git_tracked_files
from .imports import resolve_imports
from .scan import scan_directory

logger = logging.getLogger(__name__)


class LocalBackend:
    """Serve scan, aggregation, storage and clipboard requests locally."""

    async def scan(self, root: str, ignore_patterns: list[str] | tuple[str, ...] = ()) -> list[Node]:
        return await asyncio.to_thread(scan_directory, root, list(ignore_patterns))

    async def git_tracked_files(self, root: str) -> list[str]:
        return await asyncio.to_thread(git_tracked_files, root)

    async def read_aggregate(self, request: AggregationRequest) -> str:
        logger.debug("assembling %d files as %s (request %d)", len(request.files), request.format, request.sequence)
        try:
            return await asyncio.to_thread(
                render_aggregate,
                request.files,
                request.base_path,
                request.format,
                request.max_file_size_mb,
                request.include_comments,
            )
        except (OSError, ValueError) as exc:
            raise AggregationError(f"Failed to assemble files: {exc}") from exc

    async def resolve_imports(self, file_path: str) -> list[str]:
        return await asyncio.to_thread(resolve_imports, file_path)

    async def detect_project_type(self, root: str) -> ProjectType:
        return await asyncio.to_thread(detect_project_type, root)

    async def extract_functions(self, file_path: str) -> list[FunctionInfo]:
        return await asyncio.to_thread(extract_functions, file_path)

    async def extract_todos(self, file_path: str) -> list[TodoItem]:
        return await asyncio.to_thread(extract_todos, file_path)

    async def export_to_file(self, path: str, content: str) -> None:
        try:
            await asyncio.to_thread(export_document, path, content)
        except OSError as exc:
            raise ExportError(f"Failed to export file: {exc}") from exc

    async def load_config(self) -> Config:
        return await asyncio.to_thread(storage.load_config)

    async def save_config(self, config: Config) -> None:
        await asyncio.to_thread(storage.save_config, config)

    async def add_recent_path(self, path: str) -> None:
        await asyncio.to_thread(storage.add_recent_path, path)

    async def load_workspace(self, path: str) -> WorkspaceSnapshot | None:
        return await asyncio.to_thread(storage.load_workspace, path)

    async def save_workspace(self, snapshot: WorkspaceSnapshot) -> None:
        await asyncio.to_thread(storage.save_workspace, snapshot)

    async def copy_to_clipboard(self, content: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, content)
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Failed to copy to clipboard: {exc}") from exc

    async def record_clipboard_history(self, content: str, file_count: int, output_format: str) -> None:
        await asyncio.to_thread(storage.add_clipboard_history_item, content, file_count, output_format)

    async def clipboard_history(self) -> list[storage.ClipboardHistoryItem]:
        return await asyncio.to_thread(storage.load_clipboard_history)

    async def clear_clipboard_history(self) -> None:
        await asyncio.to_thread(storage.clear_clipboard_history)


__all__ = ["LocalBackend"]
