# -*- coding: utf-8 -*-
"""CSV output of sample records.

File layout
-----------
```
# Identification: Keysight Technologies,34461A,MY12345678,A.02.14-02.40-02.14-00.49-01-01
# Custom message, one comment line per message line
sequence,date,time,moment,delay,latency,reading
0,2024-01-01,12:00:00.050,0.0,0.0,0.0501,1.0
1,2024-01-01,12:00:01.050,1.0,0.0002,0.0498,2.0
```

`moment`, `delay` and `latency` are in seconds. Every line is flushed as soon as
it is written, so an interrupted run leaves a valid file behind.
"""

from __future__ import annotations

import csv
import pathlib
import sys
from typing import IO, Optional

from loguru import logger

from dmmlog.types.errors import SinkError
from dmmlog.types.records import SampleRecord
from dmmlog.util.defaults import CSV_COLUMNS


def format_record(record: SampleRecord) -> list[str]:
    """CSV fields of a record, in `CSV_COLUMNS` order."""
    return [
        str(record.sequence),
        record.wall_clock.strftime("%Y-%m-%d"),
        record.wall_clock.strftime("%H:%M:%S.%f")[:-3],  # milliseconds
        repr(record.moment),
        repr(record.delay),
        repr(record.latency),
        repr(record.reading),
    ]


class CsvSink:
    """Writes sample records as CSV lines to a text stream.

    Parameters
    ----------
    stream : IO[str]
        Destination, e.g. an open file or `sys.stdout`.
    close_stream : bool
        Close `stream` in `close()`. False for stdout.
    """

    def __init__(self, stream: IO[str], close_stream: bool = False):
        self.stream = stream
        self.close_stream = close_stream
        self._writer = csv.writer(stream, lineterminator="\n")
        self.count = 0

    def write_header(self, identification: str, message: Optional[str] = None) -> None:
        """Comment lines with instrument and user message, then the column names."""
        try:
            self.stream.write(f"# Identification: {identification}\n")
            if message:
                for line in message.splitlines():
                    self.stream.write(f"# {line}".rstrip() + "\n")
            self._writer.writerow(CSV_COLUMNS)
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"Writing CSV header failed: {e}") from e

    def emit(self, record: SampleRecord) -> None:
        try:
            self._writer.writerow(format_record(record))
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"Writing sample #{record.sequence} failed: {e}") from e
        self.count += 1

    def close(self) -> None:
        if self.close_stream:
            try:
                self.stream.close()
            except OSError as e:
                raise SinkError(f"Closing CSV output failed: {e}") from e


def open_csv_sink(path: Optional[str] = None) -> CsvSink:
    """CSV sink writing to `path`, or to stdout when `path` is None or "-"."""
    if path is None or path == "-":
        return CsvSink(sys.stdout, close_stream=False)
    try:
        stream = open(path, "w", encoding="utf-8", newline="")
    except OSError as e:
        raise SinkError(f"Opening output file {path} failed: {e}") from e
    logger.info(f"Writing samples to {pathlib.Path(path).absolute()}")
    return CsvSink(stream, close_stream=True)


def read_message_file(path: str) -> str:
    """Content of a `--message-from` file, trailing newlines removed."""
    try:
        return pathlib.Path(path).read_text(encoding="utf-8").rstrip("\n")
    except OSError as e:
        raise SinkError(f"Reading message file {path} failed: {e}") from e
