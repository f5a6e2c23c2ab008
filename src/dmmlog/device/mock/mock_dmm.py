from __future__ import annotations

import itertools
import time
from typing import Callable, Iterable, Optional, Union

from dmmlog.device.device import Device
from dmmlog.device.scpi import Identification
from dmmlog.types.errors import TransportError


class MockDMM(Device):
    """Stand-in multimeter for tests and dry runs.

    Parameters
    ----------
    readings : iterable of float, optional
        Values returned by successive `measure()` calls (cycled). Defaults to
        0.0, 1.0, 2.0, ...
    latency : float or iterable of float
        Simulated exchange duration per call, in seconds. An iterable gives
        one value per call, repeating the last one when exhausted.
    sleep : callable, optional
        Used to spend the latency, `time.sleep` by default. Pass
        `VirtualClock.advance` for deterministic tests.
    fail_on : int, optional
        1-based call number that raises a `TransportError`.
    """

    def __init__(
        self,
        readings: Optional[Iterable[float]] = None,
        latency: Union[float, Iterable[float]] = 0.0,
        sleep: Optional[Callable[[float], None]] = None,
        fail_on: Optional[int] = None,
    ):
        super().__init__()
        if readings is None:
            self._readings = (float(i) for i in itertools.count())
        else:
            self._readings = itertools.cycle(list(readings))
        if isinstance(latency, (int, float)):
            self._latencies = [float(latency)]
        else:
            self._latencies = [float(x) for x in latency]
        self._sleep = sleep or time.sleep
        self.fail_on = fail_on
        self.calls = 0
        self.commands: list[str] = []
        self._connected = False

    def open(self) -> None:
        self._connected = True

    def close(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def configure(self, commands, reset: bool = False) -> None:
        self.commands.append("*RST" if reset else "*CLS")
        self.commands.extend(commands)

    def identification(self) -> Identification:
        return Identification.parse("dmmlog,MockDMM,0,0.1")

    def beep(self) -> None:
        self.commands.append("SYST:BEEP")

    def measure(self) -> float:
        self.calls += 1
        idx = min(self.calls, len(self._latencies)) - 1
        self._sleep(self._latencies[idx])
        if self.fail_on is not None and self.calls == self.fail_on:
            raise TransportError(f"Simulated failure on call {self.calls}")
        return next(self._readings)
