"""JSON persistence for config, workspace snapshots and clipboard history.

Everything lives under one per-user config directory resolved through
``platformdirs``. Reads of missing files return ``None``; unreadable or
malformed files and failed writes raise typed errors for the caller to log.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from ..config import Config, config_from_dict
from ..errors import ConfigLoadError, PersistenceError
from ..workspace import WorkspaceSnapshot

APP_NAME = "filesurfer"
CONFIG_FILENAME = "config.json"
CLIPBOARD_HISTORY_FILENAME = "clipboard_history.json"
CLIPBOARD_HISTORY_MAX_ITEMS = 10
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))

_UNSAFE_FILENAME_CHARS = '/\\:*?"<>|'


def _config_dir() -> Path:
    return CONFIG_DIR


def config_path() -> Path:
    return _config_dir() / CONFIG_FILENAME


def workspace_path(project_path: str) -> Path:
    """Snapshot file for ``project_path`` with unsafe characters replaced."""
    safe_name = "".join("_" if char in _UNSAFE_FILENAME_CHARS else char for char in project_path)
    return _config_dir() / f"workspace_{safe_name}.json"


def clipboard_history_path() -> Path:
    return _config_dir() / CLIPBOARD_HISTORY_FILENAME


def _write_json(path: Path, data: object, what: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Failed to write {what}: {exc}") from exc


def _read_json(path: Path) -> object:
    """Return decoded JSON; raises ``OSError`` or ``ValueError`` on failure."""
    return json.loads(path.read_text(encoding="utf-8"))


def load_config() -> Config:
    """Load config; a missing file yields defaults.

    Raises ``ConfigLoadError`` for unreadable, malformed or incomplete files.
    """
    path = config_path()
    if not path.exists():
        return Config()
    try:
        data = _read_json(path)
    except (OSError, ValueError) as exc:
        raise ConfigLoadError(f"Failed to parse config: {exc}") from exc
    return config_from_dict(data)


def save_config(config: Config) -> None:
    _write_json(config_path(), config.to_dict(), "config")


def add_recent_path(path: str) -> Config:
    """Move ``path`` to the front of the stored recent list and persist."""
    config = load_config().with_recent_path(path)
    save_config(config)
    return config


def load_workspace(project_path: str) -> WorkspaceSnapshot | None:
    path = workspace_path(project_path)
    if not path.exists():
        return None
    try:
        data = _read_json(path)
    except (OSError, ValueError) as exc:
        raise PersistenceError(f"Failed to read workspace: {exc}") from exc
    return WorkspaceSnapshot.from_dict(data)


def save_workspace(snapshot: WorkspaceSnapshot) -> None:
    _write_json(workspace_path(snapshot.path), snapshot.to_dict(), "workspace")


@dataclass(frozen=True)
class ClipboardHistoryItem:
    content: str
    timestamp: int
    file_count: int
    format: str


def load_clipboard_history() -> list[ClipboardHistoryItem]:
    """Return stored history newest first; malformed entries are dropped."""
    path = clipboard_history_path()
    if not path.exists():
        return []
    try:
        data = _read_json(path)
    except (OSError, ValueError) as exc:
        raise PersistenceError(f"Failed to read clipboard history: {exc}") from exc
    raw_items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(raw_items, list):
        return []
    items: list[ClipboardHistoryItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        content = raw.get("content")
        timestamp = raw.get("timestamp")
        file_count = raw.get("file_count")
        fmt = raw.get("format")
        if not isinstance(content, str) or not isinstance(fmt, str):
            continue
        if not isinstance(timestamp, int) or not isinstance(file_count, int):
            continue
        items.append(ClipboardHistoryItem(content, timestamp, file_count, fmt))
    return items


def save_clipboard_history(items: list[ClipboardHistoryItem]) -> None:
    payload = {
        "items": [
            {
                "content": item.content,
                "timestamp": item.timestamp,
                "file_count": item.file_count,
                "format": item.format,
            }
            for item in items
        ],
        "max_items": CLIPBOARD_HISTORY_MAX_ITEMS,
    }
    _write_json(clipboard_history_path(), payload, "clipboard history")


def add_clipboard_history_item(content: str, file_count: int, output_format: str) -> list[ClipboardHistoryItem]:
    """Prepend one entry, keep the newest ten, and persist."""
    item = ClipboardHistoryItem(content, int(time.time()), file_count, output_format)
    items = [item, *load_clipboard_history()][:CLIPBOARD_HISTORY_MAX_ITEMS]
    save_clipboard_history(items)
    return items


def clear_clipboard_history() -> None:
    save_clipboard_history([])


__all__ = [
    "APP_NAME",
    "CONFIG_DIR",
    "CLIPBOARD_HISTORY_MAX_ITEMS",
    "ClipboardHistoryItem",
    "config_path",
    "workspace_path",
    "clipboard_history_path",
    "load_config",
    "save_config",
    "add_recent_path",
    "load_workspace",
    "save_workspace",
    "load_clipboard_history",
    "save_clipboard_history",
    "add_clipboard_history_item",
    "clear_clipboard_history",
]
