"""Glob matching for inverse selection and scan ignores, backed by pathspec.

Patterns follow gitignore wildmatch rules: ``*`` and ``?`` stay within one
path segment, ``**`` spans segments, dotfiles match like any other name, and
``[...]``/``[!...]`` are character classes. A pattern without an inner ``/``
matches a name at any depth, together with everything below it. A trailing
``/`` restricts the pattern to directories. ``{a,b}`` alternatives expand
before compiling.

Malformed patterns compile to a matcher that never matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

import pathspec

logger = logging.getLogger(__name__)

MAX_BRACE_EXPANSIONS = 256


def _first_brace_group(pattern: str) -> tuple[int, int, list[str]] | None:
    """Locate the first ``{...}`` group holding at least two alternatives."""
    idx = 0
    while idx < len(pattern):
        char = pattern[idx]
        if char == "\\":
            idx += 2
            continue
        if char == "{":
            depth = 0
            options: list[str] = []
            piece_start = idx + 1
            scan = idx
            while scan < len(pattern):
                current = pattern[scan]
                if current == "\\":
                    scan += 2
                    continue
                if current == "{":
                    depth += 1
                elif current == "}":
                    depth -= 1
                    if depth == 0:
                        options.append(pattern[piece_start:scan])
                        if len(options) > 1:
                            return idx, scan, options
                        break
                elif current == "," and depth == 1:
                    options.append(pattern[piece_start:scan])
                    piece_start = scan + 1
                scan += 1
        idx += 1
    return None


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, nested ones included.

    Unbalanced braces and single-item groups stay literal. Raises
    ``ValueError`` past ``MAX_BRACE_EXPANSIONS`` results.
    """
    group = _first_brace_group(pattern)
    if group is None:
        return [pattern]
    start, end, options = group
    prefix, suffix = pattern[:start], pattern[end + 1:]
    expanded: list[str] = []
    for option in options:
        expanded.extend(expand_braces(prefix + option + suffix))
        if len(expanded) > MAX_BRACE_EXPANSIONS:
            raise ValueError(f"too many brace expansions in {pattern!r}")
    return expanded


@dataclass(frozen=True)
class GlobPattern:
    """Compiled glob; ``spec`` is ``None`` for malformed patterns."""

    pattern: str
    spec: pathspec.GitIgnoreSpec | None

    @property
    def anchored(self) -> bool:
        """Whether the pattern spells out a path instead of a bare name."""
        return "/" in self.pattern.rstrip("/")

    def matches(self, path: str, is_dir: bool = False) -> bool:
        """Return whether ``path`` (any separator style) matches."""
        if self.spec is None:
            return False
        normalized = path.replace("\\", "/")
        if is_dir and not normalized.endswith("/"):
            normalized += "/"
        return self.spec.match_file(normalized)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> GlobPattern:
    """Compile ``pattern``; failures produce a never-matching ``GlobPattern``."""
    try:
        spec = pathspec.GitIgnoreSpec.from_lines(expand_braces(pattern))
    except ValueError as exc:
        logger.debug("ignoring malformed glob %r: %s", pattern, exc)
        return GlobPattern(pattern, None)
    return GlobPattern(pattern, spec)


def glob_match(path: str, pattern: str) -> bool:
    """Return whether ``path`` matches the glob ``pattern``."""
    return compile_glob(pattern).matches(path)


__all__ = ["GlobPattern", "compile_glob", "expand_braces", "glob_match"]
