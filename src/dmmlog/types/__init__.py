"""Types shared across dmmlog: configuration, records, protocols and errors."""

from .config import MeasurementConfig, SamplingConfig
from .errors import (
    ConfigError,
    DmmlogError,
    InstrumentError,
    SinkError,
    TransportError,
)
from .protocols import ClockProtocol, SinkProtocol, TransportProtocol
from .records import SampleRecord, SampleRequest

__all__ = [
    "ClockProtocol",
    "ConfigError",
    "DmmlogError",
    "InstrumentError",
    "MeasurementConfig",
    "SampleRecord",
    "SampleRequest",
    "SamplingConfig",
    "SinkError",
    "SinkProtocol",
    "TransportError",
    "TransportProtocol",
]
