"""Cooperative cancellation signal for long-running bucket operations."""

from __future__ import annotations

import threading
import time


class Cancellation:
    """Cancellation flag with an optional deadline.

    Operations poll :meth:`cancelled` at their suspension points (before each
    page fetch, before each part upload). A call already in flight is allowed
    to finish.
    """

    def __init__(self, *, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def cancel(self) -> None:
        self._event.set()

    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def reason(self) -> str:
        if self._event.is_set():
            return "cancelled"
        return "deadline exceeded"
