"""Configuration types for sampling runs and instrument measurements.

Both are plain dataclasses with mashumaro's `DataClassDictMixin`, so they can be
dumped with `to_dict()` (e.g. into the log) and rebuilt with `from_dict()`.
Validation happens in `__post_init__`, so an invalid configuration can never be
constructed.
"""

import math
from dataclasses import dataclass
from typing import Literal, Optional

from mashumaro import DataClassDictMixin

from dmmlog.types.errors import ConfigError
from dmmlog.util.defaults import DEFAULT_DROP_THRESHOLD

MeasurementFunction = Literal["voltage", "current", "resistance"]


@dataclass(kw_only=True)
class SamplingConfig(DataClassDictMixin):
    """Cadence, count limit and drop policy of a sampling run.

    Exactly one of `interval` (seconds) or `rate` (hertz) must be given.

    Attributes
    ----------
    interval : float, optional
        Time between two samples in seconds.
    rate : float, optional
        Sampling rate in hertz, converted to `interval = 1 / rate`.
    max_samples : int, optional
        Number of ticks to run for. None runs until cancelled.
    drop_slow_samples : bool
        Skip ticks the scheduler has fallen behind on instead of taking them late.
    drop_threshold : float
        How far behind (in intervals) a tick may be before it is dropped.
    """

    interval: Optional[float] = None
    rate: Optional[float] = None
    max_samples: Optional[int] = None
    drop_slow_samples: bool = False
    drop_threshold: float = DEFAULT_DROP_THRESHOLD

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if (self.interval is None) == (self.rate is None):
            raise ConfigError("Exactly one of interval or rate must be given")
        if self.interval is not None and not 0 < self.interval < math.inf:
            raise ConfigError(
                "Sampling interval must be positive and finite "
                f"(got {self.interval} seconds)"
            )
        if self.rate is not None and not 0 < self.rate < math.inf:
            raise ConfigError(
                f"Sampling rate must be positive and finite (got {self.rate} hertz)"
            )
        if self.max_samples is not None and self.max_samples < 0:
            raise ConfigError(
                f"Number of samples cannot be negative (got {self.max_samples})"
            )
        if not self.drop_threshold > 0:
            raise ConfigError(
                f"Drop threshold must be positive (got {self.drop_threshold})"
            )

    @property
    def period(self) -> float:
        """Sampling interval in seconds, whichever way it was given."""
        if self.rate is not None:
            return 1.0 / self.rate
        return self.interval


@dataclass(kw_only=True)
class MeasurementConfig(DataClassDictMixin):
    """Measurement function the instrument is configured for before sampling.

    With `function=None` nothing is configured and the instrument keeps its
    current (front panel) setup.

    Attributes
    ----------
    function : {"voltage", "current", "resistance"}, optional
        Quantity to measure.
    meas_range : str
        Range argument of the CONFigure command, e.g. "10", "AUTO" or "DEF".
    ac : bool
        AC instead of DC mode (voltage and current only).
    four_wire : bool
        4-wire instead of 2-wire measurement (resistance only).
    resolution : str, optional
        Resolution in units of the measurement function.
    nplc : str, optional
        Integration time in power line cycles.
    """

    function: Optional[MeasurementFunction] = None
    meas_range: str = "AUTO"
    ac: bool = False
    four_wire: bool = False
    resolution: Optional[str] = None
    nplc: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.function not in (None, "voltage", "current", "resistance"):
            raise ConfigError(f"Unknown measurement function: {self.function}")
        if self.ac and self.function not in ("voltage", "current"):
            raise ConfigError("AC mode requires a voltage or current measurement")
        if self.four_wire and self.function != "resistance":
            raise ConfigError("4-wire mode requires a resistance measurement")
        if self.resolution is not None and self.nplc is not None:
            raise ConfigError("Resolution and NPLC cannot be set together")
        if self.function is None and (
            self.resolution is not None or self.nplc is not None
        ):
            raise ConfigError("Resolution and NPLC require a measurement function")
