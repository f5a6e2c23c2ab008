"""Per-tick request and per-sample record types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SampleRequest:
    """One scheduled opportunity to take a sample.

    Attributes
    ----------
    sequence : int
        0-based tick number, never reused within a run.
    scheduled_at : float
        Ideal monotonic instant (seconds) of the tick.
    anchor : float, optional
        Monotonic instant at which the first accepted sample of the run
        completed, None until a sample has been accepted.
    """

    sequence: int
    scheduled_at: float
    anchor: Optional[float] = None


@dataclass(frozen=True)
class SampleRecord:
    """A completed, timing-annotated sample.

    Attributes
    ----------
    sequence : int
        Tick number the sample was taken for.
    wall_clock : datetime
        Local time at which the reading became known. For display only, it
        may jump when the system clock is adjusted.
    moment : float
        Monotonic seconds since the first accepted sample (0 for that sample).
    delay : float
        Seconds the exchange started after its scheduled instant, >= 0.
    latency : float
        Seconds spent inside the request/response exchange.
    reading : float
        Value reported by the instrument.
    finished_at : float
        Monotonic instant at which the exchange completed.
    """

    sequence: int
    wall_clock: datetime
    moment: float
    delay: float
    latency: float
    reading: float
    finished_at: float = 0.0
