"""Assembled-preview state with last-issued-wins request sequencing.

Every aggregation request gets a sequence number when it is issued. A
response is applied only when it answers the newest issued request, so a
slow response to an older selection can never overwrite a newer preview.
Nothing is cancelled: superseded responses simply arrive and are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .config import DEFAULT_MAX_FILE_SIZE_MB, DEFAULT_OUTPUT_FORMAT

logger = logging.getLogger(__name__)

APPLIED = "applied"
STALE = "stale"
FAILED = "failed"


@dataclass(frozen=True)
class AggregationRequest:
    """One request to assemble file contents into a single document."""

    sequence: int
    files: tuple[str, ...]
    base_path: str
    format: str = DEFAULT_OUTPUT_FORMAT
    max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB
    include_comments: bool = True


class PreviewAssembler:
    """Owns preview text and decides which aggregation responses apply."""

    def __init__(self, backend) -> None:
        self._backend = backend
        self.content = ""
        self.loading = False
        self.last_error: str | None = None
        self._issued_sequence = 0
        self._applied_sequence = 0
        self.requests_issued = 0

    @property
    def issued_sequence(self) -> int:
        return self._issued_sequence

    @property
    def applied_sequence(self) -> int:
        return self._applied_sequence

    def clear(self) -> None:
        """Empty the preview synchronously and invalidate in-flight requests."""
        self._issued_sequence += 1
        self.content = ""
        self.loading = False

    def issue(
        self,
        files: list[str] | tuple[str, ...],
        base_path: str,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB,
        include_comments: bool = True,
    ) -> AggregationRequest | None:
        """Tag a new request for ``files``; an empty list clears instead.

        Returns ``None`` when no backend call is needed.
        """
        if not files:
            self.clear()
            return None
        self._issued_sequence += 1
        self.requests_issued += 1
        self.loading = True
        return AggregationRequest(
            sequence=self._issued_sequence,
            files=tuple(files),
            base_path=base_path,
            format=output_format,
            max_file_size_mb=max_file_size_mb,
            include_comments=include_comments,
        )

    def is_current(self, request: AggregationRequest) -> bool:
        return request.sequence == self._issued_sequence

    def accept(self, request: AggregationRequest, content: str) -> str:
        """Apply ``content`` when ``request`` is the newest issued one."""
        if not self.is_current(request):
            logger.debug(
                "discarding stale aggregation response %d (latest %d)",
                request.sequence,
                self._issued_sequence,
            )
            return STALE
        self.content = content
        self.loading = False
        self.last_error = None
        self._applied_sequence = request.sequence
        return APPLIED

    def reject(self, request: AggregationRequest, error: Exception) -> str:
        """Record a failure; the previous preview text is left untouched."""
        if not self.is_current(request):
            logger.debug("ignoring failure of stale aggregation request %d", request.sequence)
            return STALE
        self.loading = False
        self.last_error = str(error)
        return FAILED

    async def run(self, request: AggregationRequest) -> str:
        """Send ``request`` to the backend and apply or drop the response."""
        try:
            content = await self._backend.read_aggregate(request)
        except Exception as exc:
            logger.warning("aggregation request %d failed: %s", request.sequence, exc)
            return self.reject(request, exc)
        return self.accept(request, content)


__all__ = [
    "APPLIED",
    "STALE",
    "FAILED",
    "AggregationRequest",
    "PreviewAssembler",
]
