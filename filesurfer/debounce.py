"""Deadline-based trailing debounce polled from the session tick.

Each ``arm`` pushes the deadline out by ``delay_seconds``; ``fire_if_due``
reports readiness exactly once per quiet period. Time comes from an injected
``monotonic`` callable so tests can drive it deterministically.
"""

from __future__ import annotations

import time
from collections.abc import Callable

SEARCH_DEBOUNCE_SECONDS = 0.3
WORKSPACE_SAVE_DEBOUNCE_SECONDS = 1.0


class TrailingDebounce:
    """Trailing-edge debounce without timers or threads."""

    def __init__(
        self,
        delay_seconds: float,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.delay_seconds = delay_seconds
        self._monotonic = monotonic
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def arm(self) -> None:
        """Start or restart the quiet period."""
        self._deadline = self._monotonic() + self.delay_seconds

    def cancel(self) -> None:
        self._deadline = None

    def remaining(self) -> float | None:
        """Seconds until the deadline, clamped at zero; ``None`` when idle."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._monotonic())

    def fire_if_due(self) -> bool:
        """Return ``True`` once when the quiet period has elapsed."""
        if self._deadline is None:
            return False
        if self._monotonic() < self._deadline:
            return False
        self._deadline = None
        return True


__all__ = [
    "SEARCH_DEBOUNCE_SECONDS",
    "WORKSPACE_SAVE_DEBOUNCE_SECONDS",
    "TrailingDebounce",
]
