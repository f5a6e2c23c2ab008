"""Protocols for the collaborators of the sampling scheduler.

The scheduler and the sample pipeline only depend on these method signatures,
not on concrete classes:

1. `TransportProtocol` - performs one request/response exchange per call
   (`dmmlog.device.ScpiInstrument`, `dmmlog.device.MockDMM`).
2. `SinkProtocol` - consumes completed sample records
   (`dmmlog.util.save.CsvSink`, `dmmlog.util.progress.ProgressSink`).
3. `ClockProtocol` - source of time and interruptible sleep
   (`dmmlog.util.clock.SystemClock`, `dmmlog.util.clock.VirtualClock`).

All are `@runtime_checkable`, so `isinstance()` can be used for validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dmmlog.meas.cancel import CancelToken
    from dmmlog.types.records import SampleRecord


@runtime_checkable
class TransportProtocol(Protocol):
    def measure(self) -> float:
        """Take one reading. Blocks for the whole exchange.

        Raises
        ------
        TransportError
            If the exchange fails.
        """
        ...

    def close(self) -> None: ...


@runtime_checkable
class SinkProtocol(Protocol):
    def emit(self, record: SampleRecord) -> None:
        """Persist one record.

        Raises
        ------
        SinkError
            If the record cannot be written.
        """
        ...

    def close(self) -> None: ...


@runtime_checkable
class ClockProtocol(Protocol):
    def monotonic(self) -> float:
        """Monotonic instant in seconds, used for scheduling and latency."""
        ...

    def now(self) -> datetime:
        """Local wall clock time, used to timestamp records."""
        ...

    def sleep_until(self, deadline: float, cancel: CancelToken) -> bool:
        """Block until `monotonic() >= deadline`.

        Returns False as soon as `cancel` is set, True otherwise.
        """
        ...
