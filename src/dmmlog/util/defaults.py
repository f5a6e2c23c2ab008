# -*- coding: utf-8 -*-

import pathlib

DEFAULT_SCPI_PORT = 5025  # raw socket SCPI port of LXI instruments
DEFAULT_TIMEOUT = 5.0  # seconds, per VISA operation
DEFAULT_INTERVAL = 1.0  # seconds between samples
DEFAULT_DROP_THRESHOLD = 1.0  # in sampling intervals
DEFAULT_LOGLEVEL = "WARNING"
TEST_LOGLEVEL = "TRACE"
DEFAULT_VISA_BACKEND = "@py"
LOG_DIR = pathlib.Path.home() / ".dmmlog"

CSV_COLUMNS = ("sequence", "date", "time", "moment", "delay", "latency", "reading")
