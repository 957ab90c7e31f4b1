"""Lightweight code analysis of project markers and source files.

Everything here is regex and line based. Function bodies end at the
matching closing brace for brace languages and at the first dedent for
Python.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import AnalysisError
from .formatting import read_text

PROJECT_INDICATORS = (
    ("package.json", "Node.js"),
    ("next.config.js", "Next.js"),
    ("next.config.ts", "Next.js"),
    ("Cargo.toml", "Rust"),
    ("requirements.txt", "Python"),
    ("pyproject.toml", "Python"),
    ("Pipfile", "Python"),
    ("go.mod", "Go"),
    ("pom.xml", "Java/Maven"),
    ("build.gradle", "Java/Gradle"),
    ("Gemfile", "Ruby"),
    ("composer.json", "PHP"),
    ("*.csproj", "C#/.NET"),
)

MAX_FUNCTION_LINES = 1000

_JS_FUNCTION_RE = re.compile(r"(?:function|const|let|var)\s+(\w+)\s*=?\s*(?:async\s*)?\([^)]*\)\s*(?:=>)?\s*\{")
_PY_FUNCTION_RE = re.compile(r"^(?:async\s+)?def\s+(\w+)\s*\(")
_RUST_FUNCTION_RE = re.compile(r"\bfn\s+(\w+)\s*(?:<[^>]*>)?\s*\(")
_TODO_RE = re.compile(r"(?://|#|/\*)\s*(TODO|FIXME|NOTE|HACK|XXX):?\s*(.*)")


@dataclass(frozen=True)
class ProjectType:
    detected_type: str
    confidence: float
    indicators: tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionInfo:
    """One function definition; line numbers are 1-based and inclusive."""

    file: str
    name: str
    signature: str
    line_start: int
    line_end: int
    content: str


@dataclass(frozen=True)
class TodoItem:
    file: str
    todo_type: str
    message: str
    line_number: int
    context: str


@dataclass(frozen=True)
class CodeAnalysis:
    """Functions and TODO comments gathered across several files."""

    functions: tuple[FunctionInfo, ...] = ()
    todos: tuple[TodoItem, ...] = ()


def detect_project_type(dir_path: str) -> ProjectType:
    """Guess the project kind from marker files at the top of ``dir_path``.

    Confidence is the winning score over the number of known indicators.
    Ties go to the indicator listed first.
    """
    if not os.path.isdir(dir_path):
        raise AnalysisError(f"Not a directory: {dir_path}")
    root = Path(dir_path)
    found: list[str] = []
    scores: dict[str, float] = {}
    for marker, project_type in PROJECT_INDICATORS:
        if "*" in marker:
            matches = sorted(path.name for path in root.glob(marker) if path.is_file())
        else:
            matches = [marker] if (root / marker).exists() else []
        if matches:
            found.extend(matches)
            scores[project_type] = scores.get(project_type, 0.0) + 1.0

    if "package.json" in found and ("next.config.js" in found or "next.config.ts" in found):
        scores["Next.js"] = scores.get("Next.js", 0.0) + 2.0

    if not scores:
        return ProjectType("Unknown", 0.0, tuple(found))
    detected = max(scores, key=lambda name: scores[name])
    return ProjectType(detected, scores[detected] / len(PROJECT_INDICATORS), tuple(found))


def _read_lines(file_path: str) -> list[str]:
    try:
        return read_text(Path(file_path)).splitlines()
    except OSError as exc:
        raise AnalysisError(f"Failed to read file: {exc}") from exc


def _brace_block_end(lines: list[str], start: int) -> int:
    depth = 0
    opened = False
    for idx in range(start, min(len(lines), start + MAX_FUNCTION_LINES)):
        line = lines[idx]
        if "{" in line:
            opened = True
        depth += line.count("{") - line.count("}")
        if opened and depth <= 0:
            return idx
        if not opened and line.rstrip().endswith(";"):
            return idx
    return start


def _indent_block_end(lines: list[str], start: int) -> int:
    base_indent = len(lines[start]) - len(lines[start].lstrip())
    end = start
    for idx in range(start + 1, len(lines)):
        line = lines[idx]
        if not line.strip():
            continue
        if len(line) - len(line.lstrip()) <= base_indent:
            break
        end = idx
    return end


def _function(file_path: str, lines: list[str], name: str, start: int, end: int) -> FunctionInfo:
    return FunctionInfo(
        file=file_path,
        name=name,
        signature=lines[start].strip(),
        line_start=start + 1,
        line_end=end + 1,
        content="\n".join(lines[start:end + 1]),
    )


def extract_functions(file_path: str) -> list[FunctionInfo]:
    """Return functions defined in a JS/TS, Python or Rust file.

    Other file types yield an empty list.
    """
    extension = Path(file_path).suffix.lower().lstrip(".")
    if extension in ("js", "jsx", "ts", "tsx", "mjs"):
        regex, python = _JS_FUNCTION_RE, False
    elif extension == "py":
        regex, python = _PY_FUNCTION_RE, True
    elif extension == "rs":
        regex, python = _RUST_FUNCTION_RE, False
    else:
        return []

    lines = _read_lines(file_path)
    functions: list[FunctionInfo] = []
    for idx, line in enumerate(lines):
        match = regex.search(line.strip() if python else line)
        if match is None:
            continue
        end = _indent_block_end(lines, idx) if python else _brace_block_end(lines, idx)
        functions.append(_function(file_path, lines, match.group(1), idx, end))
    return functions


def extract_todos(file_path: str) -> list[TodoItem]:
    """Return TODO, FIXME, NOTE, HACK and XXX comments in ``file_path``."""
    todos: list[TodoItem] = []
    for idx, line in enumerate(_read_lines(file_path)):
        match = _TODO_RE.search(line)
        if match is None:
            continue
        message = match.group(2).strip()
        if message.endswith("*/"):
            message = message[:-2].rstrip()
        todos.append(TodoItem(file_path, match.group(1), message, idx + 1, line.strip()))
    return todos


__all__ = [
    "PROJECT_INDICATORS",
    "ProjectType",
    "FunctionInfo",
    "TodoItem",
    "CodeAnalysis",
    "detect_project_type",
    "extract_functions",
    "extract_todos",
]
