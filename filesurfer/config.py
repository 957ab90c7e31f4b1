"""Application config model, strict decoding, and self-repair.

Decoding is strict: a stored document missing any documented field, or
holding a value of the wrong type, is rejected with ``ConfigLoadError``.
``repair_config_dict`` then rebuilds a complete config, keeping every valid
stored value and falling back to defaults for the rest.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace

from .errors import ConfigLoadError

OUTPUT_FORMATS = ("markdown", "json", "xml")
DEFAULT_OUTPUT_FORMAT = "markdown"
DEFAULT_MAX_FILE_SIZE_MB = 10
MAX_RECENT_PATHS = 10


@dataclass(frozen=True)
class Config:
    """Persisted user preferences."""

    theme: str = "dark"
    recent_paths: tuple[str, ...] = ()
    custom_ignore_patterns: tuple[str, ...] = ()
    max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB
    output_format: str = DEFAULT_OUTPUT_FORMAT
    git_only_mode: bool = False
    include_comments: bool = True
    show_token_count: bool = True

    def with_recent_path(self, path: str) -> "Config":
        """Move ``path`` to the front of the recent list, keeping ten entries."""
        recent = [path, *(item for item in self.recent_paths if item != path)]
        return replace(self, recent_paths=tuple(recent[:MAX_RECENT_PATHS]))

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["recent_paths"] = list(self.recent_paths)
        data["custom_ignore_patterns"] = list(self.custom_ignore_patterns)
        return data


CONFIG_FIELDS = tuple(Config.__dataclass_fields__)


def _is_str_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_nonnegative_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


_VALIDATORS = {
    "theme": lambda value: isinstance(value, str),
    "recent_paths": _is_str_list,
    "custom_ignore_patterns": _is_str_list,
    "max_file_size_mb": _is_nonnegative_int,
    "output_format": lambda value: isinstance(value, str),
    "git_only_mode": lambda value: isinstance(value, bool),
    "include_comments": lambda value: isinstance(value, bool),
    "show_token_count": lambda value: isinstance(value, bool),
}


def _coerce(name: str, value: object) -> object:
    if name in ("recent_paths", "custom_ignore_patterns"):
        return tuple(value)  # type: ignore[arg-type]
    return value


def config_from_dict(data: object) -> Config:
    """Decode a stored config document, rejecting incomplete documents."""
    if not isinstance(data, dict):
        raise ConfigLoadError("config document is not a JSON object", document=None)
    missing = [name for name in CONFIG_FIELDS if name not in data]
    if missing:
        raise ConfigLoadError(f"missing field(s): {', '.join(missing)}", document=data)
    invalid = [name for name in CONFIG_FIELDS if not _VALIDATORS[name](data[name])]
    if invalid:
        raise ConfigLoadError(f"invalid field(s): {', '.join(invalid)}", document=data)
    return Config(**{name: _coerce(name, data[name]) for name in CONFIG_FIELDS})


def repair_config_dict(data: object) -> Config:
    """Build a complete config from whatever valid fields ``data`` holds."""
    if not isinstance(data, dict):
        return Config()
    values = {
        name: _coerce(name, data[name])
        for name in CONFIG_FIELDS
        if name in data and _VALIDATORS[name](data[name])
    }
    return Config(**values)


__all__ = [
    "OUTPUT_FORMATS",
    "DEFAULT_OUTPUT_FORMAT",
    "DEFAULT_MAX_FILE_SIZE_MB",
    "MAX_RECENT_PATHS",
    "Config",
    "CONFIG_FIELDS",
    "config_from_dict",
    "repair_config_dict",
]
