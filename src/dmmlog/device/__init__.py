# -*- coding: utf-8 -*-
"""
Instrument access for dmmlog.

- `ScpiInstrument`: SCPI over a raw TCP socket (pyvisa), the real transport
- `MockDMM`: simulated multimeter for tests and dry runs
- `build_scpi_commands`: measurement configuration to SCPI setup commands

Examples
--------
```python
from dmmlog.device import ScpiInstrument
with ScpiInstrument("192.168.1.50") as dmm:
    print(dmm.identification())
    print(dmm.measure())
```
"""

from .commands import build_scpi_commands
from .device import Device
from .mock import MockDMM
from .scpi import Identification, ScpiInstrument

__all__ = [
    "Device",
    "Identification",
    "MockDMM",
    "ScpiInstrument",
    "build_scpi_commands",
]
