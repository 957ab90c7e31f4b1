"""Request/response boundary between the session and its collaborators.

``Backend`` documents the coroutine surface the controller relies on;
``LocalBackend`` serves it from the local filesystem, git and clipboard.
"""

from __future__ import annotations

from typing import Protocol

from ..config import Config
from ..preview import AggregationRequest
from ..tree_model import Node
from ..workspace import WorkspaceSnapshot
from .analysis import FunctionInfo, ProjectType, TodoItem
from .local import LocalBackend
from .storage import ClipboardHistoryItem


class Backend(Protocol):
    async def scan(self, root: str, ignore_patterns: list[str] | tuple[str, ...] = ()) -> list[Node]:
        """Return the node forest under ``root``; raises ``ScanError``."""

    async def git_tracked_files(self, root: str) -> list[str]:
        """Return tracked file paths; raises ``GitFallbackError``."""

    async def read_aggregate(self, request: AggregationRequest) -> str:
        """Assemble requested files; raises ``AggregationError``."""

    async def resolve_imports(self, file_path: str) -> list[str]:
        """Return local files imported by ``file_path``; raises ``ImportResolutionError``."""

    async def detect_project_type(self, root: str) -> ProjectType:
        """Guess the project kind from marker files; raises ``AnalysisError``."""

    async def extract_functions(self, file_path: str) -> list[FunctionInfo]:
        """Return function definitions in one file; raises ``AnalysisError``."""

    async def extract_todos(self, file_path: str) -> list[TodoItem]:
        """Return TODO-style comments in one file; raises ``AnalysisError``."""

    async def export_to_file(self, path: str, content: str) -> None:
        """Write ``content`` to ``path``; raises ``ExportError``."""

    async def load_config(self) -> Config:
        """Return stored config; raises ``ConfigLoadError``."""

    async def save_config(self, config: Config) -> None:
        """Persist config; raises ``PersistenceError``."""

    async def add_recent_path(self, path: str) -> None:
        """Move ``path`` to the front of the recent list."""

    async def load_workspace(self, path: str) -> WorkspaceSnapshot | None:
        """Return the stored snapshot for ``path`` or ``None``."""

    async def save_workspace(self, snapshot: WorkspaceSnapshot) -> None:
        """Persist one snapshot; raises ``PersistenceError``."""

    async def copy_to_clipboard(self, content: str) -> None:
        """Write ``content`` to the system clipboard; raises ``ClipboardError``."""

    async def record_clipboard_history(self, content: str, file_count: int, output_format: str) -> None:
        """Append one clipboard history entry."""

    async def clipboard_history(self) -> list[ClipboardHistoryItem]:
        """Return stored history, newest first."""

    async def clear_clipboard_history(self) -> None:
        """Drop every stored history entry."""


__all__ = ["Backend", "LocalBackend"]
