"""Cooperative cancellation of a sampling run.

A `CancelToken` is set once (typically from a signal handler) and observed by
the scheduler at its suspension points: the sleep between ticks, and the return
of each blocking instrument exchange. Nothing is ever torn down forcibly, so
the instrument connection and the output file are always closed cleanly.
"""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager
from typing import Iterator, Optional


class CancelToken:
    """Settable-once cancellation flag, backed by a `threading.Event`."""

    def __init__(self):
        self._event = threading.Event()
        self.reason = ""

    def set(self, reason: str = "") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until set or `timeout` seconds passed. Returns `is_set()`."""
        return self._event.wait(timeout)


@contextmanager
def cancel_on_signals(
    token: CancelToken, signals=(signal.SIGINT, signal.SIGTERM)
) -> Iterator[CancelToken]:
    """Set `token` when one of `signals` arrives, for the duration of the block.

    Previous handlers are restored on exit. Must be entered from the main
    thread.
    """

    def handler(signum, frame):
        # no logging here, loguru's queue is not reentrant
        token.set(f"received {signal.Signals(signum).name}")

    previous = {}
    for sig in signals:
        previous[sig] = signal.signal(sig, handler)
    try:
        yield token
    finally:
        for sig, prev in previous.items():
            signal.signal(sig, prev)
