"""Inverse selection: select every displayed file except glob-matched ones."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .globbing import compile_glob
from .tree_model import Tree, iter_leaves

DEFAULT_INVERSE_PATTERNS = "*test*\n*spec*\n*.test.js\n*.spec.js"

INVERSE_PRESETS: dict[str, str] = {
    "Tests": "*test*\n*spec*\n*.test.*\n*.spec.*\n__tests__/",
    "Documentation": "*.md\n*.txt\nDOCS/\ndocs/",
    "Config Files": "*.config.*\n*.json\n*.yaml\n*.yml\n.env*",
    "Build Output": "dist/\nbuild/\nout/\n*.min.*",
}


@dataclass(frozen=True)
class InverseResult:
    """Outcome of one inverse-selection pass."""

    selected: tuple[str, ...]
    excluded_paths: tuple[str, ...]

    @property
    def kept(self) -> int:
        return len(self.selected)

    @property
    def excluded_count(self) -> int:
        return len(self.excluded_paths)

    @property
    def total(self) -> int:
        return len(self.selected) + len(self.excluded_paths)


def parse_patterns(block: str) -> list[str]:
    """Split a multi-line pattern block into trimmed, non-empty patterns."""
    return [line.strip() for line in block.splitlines() if line.strip()]


def relative_to_root(path: str, root: str) -> str:
    """Strip ``root`` and any leading separators from ``path``.

    Paths outside ``root`` are returned with only leading separators removed.
    """
    relative = path[len(root):] if root and path.startswith(root) else path
    return relative.lstrip("/\\")


def is_excluded(path: str, root: str, patterns: Iterable[str]) -> bool:
    """Return whether any pattern matches the relative or absolute form.

    Only path-shaped patterns are tried against the absolute form, so a
    directory above ``root`` never matches.
    """
    relative = relative_to_root(path, root)
    for pattern in patterns:
        compiled = compile_glob(pattern)
        if compiled.matches(relative):
            return True
        if compiled.anchored and compiled.matches(path):
            return True
    return False


def inverse_select(displayed_tree: Tree, root: str, patterns: Iterable[str]) -> InverseResult:
    """Select all leaves of ``displayed_tree`` not matched by ``patterns``."""
    pattern_list = [pattern for pattern in patterns if pattern]
    selected: list[str] = []
    excluded: list[str] = []
    for leaf in iter_leaves(displayed_tree):
        if is_excluded(leaf.path, root, pattern_list):
            excluded.append(leaf.path)
        else:
            selected.append(leaf.path)
    return InverseResult(selected=tuple(selected), excluded_paths=tuple(excluded))


__all__ = [
    "DEFAULT_INVERSE_PATTERNS",
    "INVERSE_PRESETS",
    "InverseResult",
    "parse_patterns",
    "relative_to_root",
    "is_excluded",
    "inverse_select",
]
