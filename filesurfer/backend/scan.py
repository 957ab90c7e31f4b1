"""Filesystem scanning into ``Node`` trees with ignore patterns."""

from __future__ import annotations

import os
from collections.abc import Iterable

import pathspec

from ..errors import ScanError
from ..globbing import compile_glob, expand_braces
from ..tree_model import Node

DEFAULT_IGNORE_PATTERNS = (
    "node_modules",
    ".git",
    "dist",
    "build",
    "target",
    ".next",
    "out",
    "coverage",
    ".cache",
    ".vscode",
    ".idea",
    "__pycache__",
    "*.pyc",
    ".DS_Store",
    "Thumbs.db",
)


class IgnoreMatcher:
    """Decide whether a scanned entry is hidden from the tree.

    Patterns use gitignore rules against the root-relative path: a bare name
    hides any entry of that name, and a trailing ``/`` only hides
    directories. Malformed patterns are dropped.
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        lines: list[str] = []
        for raw_pattern in patterns:
            pattern = raw_pattern.strip()
            if pattern and compile_glob(pattern).spec is not None:
                lines.extend(expand_braces(pattern))
        self.spec = pathspec.GitIgnoreSpec.from_lines(lines)

    def is_ignored(self, relative_path: str, is_dir: bool = False) -> bool:
        normalized = relative_path.replace("\\", "/")
        if is_dir:
            normalized += "/"
        return self.spec.match_file(normalized)


def _list_children(directory: str, root: str, matcher: IgnoreMatcher) -> list[Node]:
    """Scan one directory level recursively; unreadable directories are empty."""
    nodes: list[Node] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                child_path = os.path.join(directory, child.name)
                try:
                    is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                if matcher.is_ignored(os.path.relpath(child_path, root), is_dir):
                    continue

                if is_dir:
                    nodes.append(
                        Node.directory(
                            child_path,
                            child.name,
                            _list_children(child_path, root, matcher),
                        )
                    )
                    continue

                try:
                    size = int(child.stat(follow_symlinks=False).st_size)
                except OSError:
                    size = 0
                nodes.append(Node.file(child_path, child.name, size))
    except OSError:
        return []

    nodes.sort(key=lambda item: (not item.is_dir, item.name.lower()))
    return nodes


def scan_directory(root: str, custom_patterns: Iterable[str] = ()) -> list[Node]:
    """Return the sorted node forest beneath ``root``.

    Directories come before files, each group ordered by lowercase name.
    Raises ``ScanError`` when ``root`` is missing or cannot be listed.
    """
    if not os.path.exists(root):
        raise ScanError("Directory does not exist")
    if not os.path.isdir(root):
        raise ScanError(f"Not a directory: {root}")
    try:
        with os.scandir(root):
            pass
    except OSError as exc:
        raise ScanError(f"Cannot read directory {root}: {exc}") from exc

    matcher = IgnoreMatcher([*DEFAULT_IGNORE_PATTERNS, *custom_patterns])
    return _list_children(root, root, matcher)


__all__ = ["DEFAULT_IGNORE_PATTERNS", "IgnoreMatcher", "scan_directory"]
