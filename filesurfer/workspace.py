"""Per-project workspace snapshots and their debounced persistence.

A snapshot mirrors the UI context of one project root: expanded
directories, selected files, search query and extension filters. Saves are
issued on a trailing quiet period so a burst of edits writes once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from .debounce import WORKSPACE_SAVE_DEBOUNCE_SECONDS, TrailingDebounce

logger = logging.getLogger(__name__)


def _str_list(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Persisted UI context for one project root."""

    path: str
    expanded_nodes: tuple[str, ...] = ()
    selected_files: tuple[str, ...] = ()
    search_query: str = ""
    selected_extensions: tuple[str, ...] = ()
    scroll_position: float = 0.0
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "expanded_nodes": list(self.expanded_nodes),
            "selected_files": list(self.selected_files),
            "scroll_position": self.scroll_position,
            "search_query": self.search_query,
            "selected_extensions": list(self.selected_extensions),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: object) -> "WorkspaceSnapshot | None":
        """Decode a stored snapshot; malformed fields decode as empty.

        Returns ``None`` when ``data`` is not an object with a string path.
        """
        if not isinstance(data, dict):
            return None
        path = data.get("path")
        if not isinstance(path, str):
            return None
        query = data.get("search_query")
        scroll = data.get("scroll_position")
        timestamp = data.get("timestamp")
        return cls(
            path=path,
            expanded_nodes=_str_list(data.get("expanded_nodes")),
            selected_files=_str_list(data.get("selected_files")),
            search_query=query if isinstance(query, str) else "",
            selected_extensions=_str_list(data.get("selected_extensions")),
            scroll_position=float(scroll) if isinstance(scroll, (int, float)) and not isinstance(scroll, bool) else 0.0,
            timestamp=timestamp if isinstance(timestamp, int) and not isinstance(timestamp, bool) else 0,
        )


class WorkspacePersistor:
    """Debounced save and guarded restore of workspace snapshots.

    The persistor does not own any UI state. The controller calls
    ``mark_dirty`` on every relevant change and, from its tick, asks
    ``save_due`` whether the quiet period elapsed before building and
    passing the current snapshot to ``save``.
    """

    def __init__(
        self,
        backend,
        *,
        delay_seconds: float = WORKSPACE_SAVE_DEBOUNCE_SECONDS,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._debounce = TrailingDebounce(delay_seconds, monotonic)
        self.saves_issued = 0

    @property
    def pending(self) -> bool:
        return self._debounce.pending

    def mark_dirty(self) -> None:
        """Schedule a save after the quiet period, restarting any pending one."""
        self._debounce.arm()

    def cancel(self) -> None:
        self._debounce.cancel()

    def remaining(self) -> float | None:
        return self._debounce.remaining()

    def save_due(self) -> bool:
        """Consume the pending save once its quiet period has elapsed."""
        return self._debounce.fire_if_due()

    def take_pending(self) -> bool:
        """Consume a pending save immediately, regardless of its deadline."""
        if not self._debounce.pending:
            return False
        self._debounce.cancel()
        return True

    async def save(self, snapshot: WorkspaceSnapshot) -> bool:
        """Write ``snapshot``; failures are logged and reported as ``False``."""
        self.saves_issued += 1
        try:
            await self._backend.save_workspace(snapshot)
        except Exception as exc:
            logger.warning("failed to save workspace for %s: %s", snapshot.path, exc)
            return False
        return True

    async def flush(self, snapshot: WorkspaceSnapshot) -> bool:
        """Write ``snapshot`` now if a save is pending; ``False`` otherwise."""
        if not self.take_pending():
            return False
        return await self.save(snapshot)

    async def restore(self, path: str) -> WorkspaceSnapshot | None:
        """Load the snapshot for ``path`` when one exists and belongs to it."""
        try:
            snapshot = await self._backend.load_workspace(path)
        except Exception as exc:
            logger.warning("failed to load workspace for %s: %s", path, exc)
            return None
        if snapshot is None:
            return None
        if snapshot.path != path:
            logger.debug("ignoring workspace stored for %s while opening %s", snapshot.path, path)
            return None
        return snapshot


__all__ = ["WorkspaceSnapshot", "WorkspacePersistor"]
