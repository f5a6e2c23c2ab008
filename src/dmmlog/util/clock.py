"""Clocks for the sampling scheduler.

`SystemClock` is the real thing. `VirtualClock` only moves when told to, which
makes scheduling, stalls and cancellation reproducible in tests: the mock
instrument advances it by its simulated latency, and `sleep_until` jumps
straight to the deadline (firing any callbacks scheduled on the way).
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from dmmlog.meas.cancel import CancelToken


class SystemClock:
    """Wall clock from `datetime.now()`, instants from `time.monotonic()`."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now()

    def sleep_until(self, deadline: float, cancel: CancelToken) -> bool:
        remaining = deadline - time.monotonic()
        while remaining > 0:
            # Event.wait() blocks and wakes up immediately when cancelled
            if cancel.wait(min(remaining, threading.TIMEOUT_MAX)):
                return False
            remaining = deadline - time.monotonic()
        return not cancel.is_set()


class VirtualClock:
    """Deterministic clock that advances only through `advance()` and sleeps.

    Parameters
    ----------
    start : datetime, optional
        Wall clock time at monotonic instant 0.
    """

    def __init__(self, start: datetime | None = None):
        self._t = 0.0
        self._start = start or datetime(2024, 1, 1, 12, 0, 0)
        self._pending: list[tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def monotonic(self) -> float:
        return self._t

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._t)

    def call_at(self, when: float, callback: Callable[[], None]) -> None:
        """Run `callback` once the clock reaches `when`."""
        heapq.heappush(self._pending, (when, next(self._counter), callback))

    def advance(self, seconds: float) -> None:
        """Move time forward, firing due callbacks in order."""
        self._run_until(self._t + seconds)

    def sleep_until(self, deadline: float, cancel: CancelToken) -> bool:
        if cancel.is_set():
            return False
        while self._pending and self._pending[0][0] <= deadline:
            when, _, callback = heapq.heappop(self._pending)
            self._t = max(self._t, when)
            callback()
            if cancel.is_set():
                return False
        self._t = max(self._t, deadline)
        return True

    def _run_until(self, target: float) -> None:
        while self._pending and self._pending[0][0] <= target:
            when, _, callback = heapq.heappop(self._pending)
            self._t = max(self._t, when)
            callback()
        self._t = max(self._t, target)
