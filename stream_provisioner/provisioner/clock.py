"""Monotonic clock and cancellation primitives for polling waits."""

from __future__ import annotations

import threading
import time
from typing import Optional, Protocol


class CancellationToken:
    """Signals an in-progress wait to stop.

    Thread-safe; typically cancelled from a signal handler or another thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """Block up to ``seconds``; return True if cancelled meanwhile."""
        return self._event.wait(timeout=max(0.0, seconds))


class Clock(Protocol):
    """Time source used by the orchestrator."""

    def monotonic(self) -> float:
        ...

    def sleep(self, seconds: float, cancellation: Optional[CancellationToken] = None) -> bool:
        """Wait for ``seconds``. Return False if the wait was cancelled."""
        ...


class MonotonicClock:
    """Wall-clock implementation backed by time.monotonic."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancellation: Optional[CancellationToken] = None) -> bool:
        if cancellation is None:
            time.sleep(max(0.0, seconds))
            return True
        return not cancellation.wait(seconds)
