"""Render selected files as one markdown, JSON or XML document.

Oversized files are elided with a marker, binary files are skipped
(markdown) or reported (JSON/XML), and unreadable files carry the error
text in place of their content.
"""

from __future__ import annotations

import json
import os
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

BINARY_SNIFF_BYTES = 8000
BYTES_PER_MB = 1024 * 1024

_C_STYLE_EXTENSIONS = frozenset({"js", "jsx", "ts", "tsx", "mjs", "rs", "go", "java", "c", "cpp", "h", "hpp", "cs"})
_HASH_EXTENSIONS = frozenset({"py", "sh", "bash", "rb", "yaml", "yml", "toml"})
_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order."""
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def is_binary_file(path: Path) -> bool:
    """Return whether the first bytes of ``path`` contain a NUL byte."""
    try:
        with path.open("rb") as handle:
            return b"\x00" in handle.read(BINARY_SNIFF_BYTES)
    except OSError:
        return False


def relative_display_path(path: Path, base_path: Path) -> str:
    """Path relative to ``base_path``, or just the file name when outside it."""
    try:
        return path.relative_to(base_path).as_posix()
    except ValueError:
        return path.name


def fence_language(path: Path) -> str:
    """Markdown fence language tag derived from the Pygments lexer."""
    try:
        lexer = get_lexer_for_filename(path.name)
    except ClassNotFound:
        return ""
    return lexer.aliases[0] if lexer.aliases else ""


def strip_comments(content: str, extension: str) -> str:
    """Remove comments for known languages; other content passes through."""
    extension = extension.lower().lstrip(".")
    if extension in _C_STYLE_EXTENSIONS:
        without_blocks = _BLOCK_COMMENT_RE.sub("", content)
        without_lines = _LINE_COMMENT_RE.sub("", without_blocks)
        return "\n".join(line for line in without_lines.splitlines() if line.strip())
    if extension in _HASH_EXTENSIONS:
        return "\n".join(line for line in content.splitlines() if not line.strip().startswith("#"))
    return content


@dataclass(frozen=True)
class FileRecord:
    """One file as seen by the formatters."""

    path: Path
    relative: str
    size: int
    content: str | None = None
    error: str | None = None
    binary: bool = False
    too_large: bool = False


def collect_records(
    files: Iterable[str],
    base_path: str,
    max_file_size_mb: int,
    include_comments: bool = True,
) -> Iterator[FileRecord]:
    """Yield a record per existing regular file, in request order."""
    base = Path(base_path)
    max_size = max_file_size_mb * BYTES_PER_MB
    for raw_path in files:
        path = Path(raw_path)
        if not path.is_file():
            continue
        relative = relative_display_path(path, base)
        try:
            size = int(path.stat().st_size)
        except OSError:
            size = 0

        if is_binary_file(path):
            yield FileRecord(path, relative, size, binary=True, error="Binary file skipped")
            continue
        if size > max_size:
            yield FileRecord(path, relative, size, too_large=True, error=f"File too large: {size} bytes")
            continue
        try:
            content = read_text(path)
        except OSError as exc:
            yield FileRecord(path, relative, size, error=str(exc))
            continue
        if not include_comments:
            content = strip_comments(content, os.path.splitext(path.name)[1])
        yield FileRecord(path, relative, size, content=content)


def format_markdown(records: Iterable[FileRecord], max_file_size_mb: int) -> str:
    max_size = max_file_size_mb * BYTES_PER_MB
    out: list[str] = []
    for record in records:
        if record.binary:
            continue
        if record.too_large:
            out.append(f"{record.relative} : [File too large: {record.size} bytes, max: {max_size} bytes]\n\n")
            continue
        if record.content is None:
            out.append(f"{record.relative} : [Error reading file: {record.error}]\n\n")
            continue
        escaped = record.content.replace("```", "\\`\\`\\`")
        language = fence_language(record.path)
        out.append(f"{record.relative} :\n```{language}\n{escaped}\n```\n\n")
    return "".join(out)


def format_json(records: Iterable[FileRecord]) -> str:
    payload = [
        {
            "path": record.relative,
            "content": record.content,
            "error": record.error,
            "size": record.size,
        }
        for record in records
    ]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def format_xml(records: Iterable[FileRecord]) -> str:
    root = ET.Element("files")
    for record in records:
        element = ET.SubElement(root, "file", {"path": record.relative, "size": str(record.size)})
        if record.content is not None:
            ET.SubElement(element, "content").text = record.content
        else:
            ET.SubElement(element, "error").text = record.error or ""
    return ET.tostring(root, encoding="unicode")


def render_aggregate(
    files: Iterable[str],
    base_path: str,
    output_format: str,
    max_file_size_mb: int,
    include_comments: bool = True,
) -> str:
    """Render ``files`` in ``output_format``; unknown formats use markdown."""
    records = list(collect_records(files, base_path, max_file_size_mb, include_comments))
    if output_format == "json":
        return format_json(records)
    if output_format == "xml":
        return format_xml(records)
    return format_markdown(records, max_file_size_mb)


def export_document(path: str, content: str) -> None:
    """Write an assembled document to ``path``, creating parent directories."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")


__all__ = [
    "FileRecord",
    "read_text",
    "is_binary_file",
    "relative_display_path",
    "fence_language",
    "strip_comments",
    "collect_records",
    "format_markdown",
    "format_json",
    "format_xml",
    "render_aggregate",
    "export_document",
]
