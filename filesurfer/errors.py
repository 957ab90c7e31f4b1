"""Error taxonomy shared by the backend boundary and the session controller.

Backends raise these; the controller catches each one at a fixed seam and
turns it into a status message, a log line, or a silent fallback.
"""

from __future__ import annotations


class FileSurferError(Exception):
    """Base class for recoverable filesurfer failures."""


class ScanError(FileSurferError):
    """Directory scan failed (missing root, I/O or permission error)."""


class GitFallbackError(FileSurferError):
    """Listing git-tracked files failed; callers fall back to a full scan."""


class AggregationError(FileSurferError):
    """Assembling selected file contents into one document failed."""


class ImportResolutionError(FileSurferError):
    """Resolving imports for a single file failed."""


class ConfigLoadError(FileSurferError):
    """Stored config is unreadable or misses a documented field.

    ``document`` carries the decoded JSON object when there was one, so the
    caller can keep its valid fields while repairing the rest.
    """

    def __init__(self, message: str, document: object = None) -> None:
        super().__init__(message)
        self.document = document


class PersistenceError(FileSurferError):
    """Writing config, workspace, or clipboard history to disk failed."""


class ClipboardError(FileSurferError):
    """System clipboard could not be written."""


class AnalysisError(FileSurferError):
    """Reading a file or directory for code analysis failed."""


class ExportError(FileSurferError):
    """Writing the assembled document to a file failed."""


__all__ = [
    "FileSurferError",
    "ScanError",
    "GitFallbackError",
    "AggregationError",
    "ImportResolutionError",
    "ConfigLoadError",
    "PersistenceError",
    "ClipboardError",
    "AnalysisError",
    "ExportError",
]
