# -*- coding: utf-8 -*-
"""
Utility functions and constants for dmmlog.

- Logging configuration (`dmmlog.util.logging`)
- Default values (`dmmlog.util.defaults`)
- CSV output of sample records (`dmmlog.util.save`)
- Progress display (`dmmlog.util.progress`)
- Real and virtual clocks (`dmmlog.util.clock`)
"""

from .defaults import (
    DEFAULT_INTERVAL,
    DEFAULT_LOGLEVEL,
    DEFAULT_SCPI_PORT,
    DEFAULT_TIMEOUT,
    TEST_LOGLEVEL,
)
from .logging import (
    clear_log,
    format_error_response,
    log_default_path,
    shutdown_log,
    start_log,
)

__all__ = [
    "DEFAULT_INTERVAL",
    "DEFAULT_LOGLEVEL",
    "DEFAULT_SCPI_PORT",
    "DEFAULT_TIMEOUT",
    "TEST_LOGLEVEL",
    "clear_log",
    "format_error_response",
    "log_default_path",
    "shutdown_log",
    "start_log",
]
