"""Which directories are open in the tree view.

Expansion is presentational only and never influences selection.
"""

from __future__ import annotations

from collections.abc import Iterable


class ExpansionStore:
    """Ordered set of expanded directory paths."""

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: dict[str, None] = dict.fromkeys(paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self):
        return iter(self._paths)

    def paths(self) -> list[str]:
        return list(self._paths)

    def is_expanded(self, path: str) -> bool:
        return path in self._paths

    def expand(self, path: str) -> None:
        self._paths.setdefault(path, None)

    def collapse(self, path: str) -> None:
        self._paths.pop(path, None)

    def toggle(self, path: str) -> bool:
        """Flip ``path`` and return whether it is now expanded."""
        if path in self._paths:
            del self._paths[path]
            return False
        self._paths[path] = None
        return True

    def replace(self, paths: Iterable[str]) -> None:
        self._paths = dict.fromkeys(paths)

    def clear(self) -> None:
        self._paths.clear()


__all__ = ["ExpansionStore"]
