"""Regex-based detection and resolution of local imports.

Only relative specifiers (``./x``, ``../x``, ``.module``) resolve to files;
package and standard-library imports are ignored.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import ImportResolutionError
from .formatting import read_text

_JS_IMPORT_RE = re.compile(r"""import\s+(?:.*?\s+from\s+)?['"]([^'"]+)['"]""")
_JS_REQUIRE_RE = re.compile(r"""require\(\s*['"]([^'"]+)['"]\s*\)""")
_PY_IMPORT_RE = re.compile(r"^import\s+(.+)$")
_PY_FROM_IMPORT_RE = re.compile(r"^from\s+(\S+)\s+import\s+(.+)$")
_RUST_USE_RE = re.compile(r"^use\s+([^;]+);")
_RUST_MOD_RE = re.compile(r"^(?:pub\s+)?mod\s+(\w+)\s*;")
_GO_IMPORT_RE = re.compile(r'import\s+"([^"]+)"')

JS_EXTENSIONS = ("js", "jsx", "ts", "tsx", "mjs", "css", "scss", "json")


@dataclass(frozen=True)
class Dependency:
    """One import statement found in a source file."""

    file: str
    dependency: str
    import_type: str
    line_number: int


def detect_dependencies(file_path: str) -> list[Dependency]:
    """Scan ``file_path`` for import statements by file extension."""
    path = Path(file_path)
    try:
        content = read_text(path)
    except OSError as exc:
        raise ImportResolutionError(f"Failed to read file: {exc}") from exc

    extension = path.suffix.lower().lstrip(".")
    deps: list[Dependency] = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        trimmed = line.strip()
        if extension in ("js", "jsx", "ts", "tsx", "mjs"):
            for regex, kind in ((_JS_IMPORT_RE, "import"), (_JS_REQUIRE_RE, "require")):
                match = regex.search(line)
                if match:
                    deps.append(Dependency(file_path, match.group(1), kind, line_number))
        elif extension == "py":
            match = _PY_FROM_IMPORT_RE.match(trimmed)
            if match:
                module, names = match.groups()
                deps.append(Dependency(file_path, module, "from", line_number))
                if set(module) == {"."}:
                    # ``from . import a, b`` names sibling modules.
                    for name in names.strip("()").split(","):
                        name = name.strip().split(" as ")[0].strip()
                        if name and name != "*":
                            deps.append(Dependency(file_path, module + name, "from", line_number))
                continue
            match = _PY_IMPORT_RE.match(trimmed)
            if match:
                deps.append(Dependency(file_path, match.group(1), "import", line_number))
        elif extension == "rs":
            match = _RUST_MOD_RE.match(trimmed)
            if match:
                deps.append(Dependency(file_path, match.group(1), "mod", line_number))
                continue
            match = _RUST_USE_RE.match(trimmed)
            if match:
                deps.append(Dependency(file_path, match.group(1), "use", line_number))
        elif extension == "go":
            match = _GO_IMPORT_RE.search(line)
            if match:
                deps.append(Dependency(file_path, match.group(1), "import", line_number))
    return deps


def _existing_file(path: Path) -> Path | None:
    return path if path.is_file() else None


def _resolve_js(base_dir: Path, specifier: str) -> Path | None:
    if not specifier.startswith((".", "/")):
        return None
    candidate = (base_dir / specifier) if not specifier.startswith("/") else Path(specifier)
    found = _existing_file(candidate)
    if found is not None or not candidate.name:
        return found
    for extension in JS_EXTENSIONS:
        found = _existing_file(candidate.with_name(f"{candidate.name}.{extension}"))
        if found is not None:
            return found
        found = _existing_file(candidate / f"index.{extension}")
        if found is not None:
            return found
    return None


def _resolve_python(base_dir: Path, module: str) -> Path | None:
    if not module.startswith("."):
        return None
    level = len(module) - len(module.lstrip("."))
    package_dir = base_dir
    for _ in range(level - 1):
        package_dir = package_dir.parent
    remainder = module[level:]
    if not remainder:
        return _existing_file(package_dir / "__init__.py")
    target = package_dir.joinpath(*remainder.split("."))
    return _existing_file(target.with_name(f"{target.name}.py")) or _existing_file(target / "__init__.py")


def _resolve_rust(base_dir: Path, dependency: Dependency) -> Path | None:
    if dependency.import_type == "mod":
        name = dependency.dependency
        return _existing_file(base_dir / f"{name}.rs") or _existing_file(base_dir / name / "mod.rs")
    head = dependency.dependency.split("::", 2)
    if len(head) < 2 or head[0] not in ("self", "super"):
        return None
    module_dir = base_dir if head[0] == "self" else base_dir.parent
    name = head[1].strip("{} ")
    return _existing_file(module_dir / f"{name}.rs") or _existing_file(module_dir / name / "mod.rs")


def resolve_imports(file_path: str) -> list[str]:
    """Return sorted, de-duplicated local files imported by ``file_path``.

    Raises ``ImportResolutionError`` when the file cannot be read.
    """
    base_dir = Path(file_path).parent
    resolved: set[str] = set()
    for dependency in detect_dependencies(file_path):
        extension = Path(file_path).suffix.lower()
        if extension == ".py":
            found = _resolve_python(base_dir, dependency.dependency)
        elif extension == ".rs":
            found = _resolve_rust(base_dir, dependency)
        else:
            found = _resolve_js(base_dir, dependency.dependency)
        if found is not None:
            resolved.add(os.path.normpath(str(found)))
    return sorted(resolved)


__all__ = ["Dependency", "detect_dependencies", "resolve_imports"]
