"""Translation of a `MeasurementConfig` into SCPI setup commands.

The commands follow the SCPI instrument model used by the Keysight 3446x and
compatible multimeters, e.g. ``CONF:VOLT:DC 10`` followed by
``VOLT:DC:NPLC 10``.
"""

from typing import List

from dmmlog.types.config import MeasurementConfig


def function_prefix(config: MeasurementConfig) -> str:
    """SCPI subsystem of the configured function, e.g. "VOLT:AC" or "FRES"."""
    mode = "AC" if config.ac else "DC"
    if config.function == "voltage":
        return f"VOLT:{mode}"
    if config.function == "current":
        return f"CURR:{mode}"
    if config.function == "resistance":
        return "FRES" if config.four_wire else "RES"
    raise ValueError("No measurement function configured")


def build_scpi_commands(config: MeasurementConfig) -> List[str]:
    """One-time setup commands to send before sampling starts.

    Returns an empty list when no measurement function is configured.
    """
    if config.function is None:
        return []

    prefix = function_prefix(config)
    commands = [f"CONF:{prefix} {config.meas_range}"]
    if config.resolution is not None:
        commands.append(f"{prefix}:RES {config.resolution}")
    if config.nplc is not None:
        commands.append(f"{prefix}:NPLC {config.nplc}")
    return commands
