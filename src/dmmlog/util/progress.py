"""Progress bar for sampling runs."""

from __future__ import annotations

from typing import Optional

from tqdm import tqdm

from dmmlog.types.protocols import SinkProtocol
from dmmlog.types.records import SampleRecord


class ProgressSink:
    """Forwards records to `inner` and advances a tqdm bar on stderr.

    Parameters
    ----------
    inner : SinkProtocol
        Sink receiving the records.
    total : int, optional
        Expected number of samples, None for an unlimited run.
    """

    def __init__(self, inner: SinkProtocol, total: Optional[int] = None, **tqdm_kwargs):
        self.inner = inner
        self.bar = tqdm(total=total, unit="sample", dynamic_ncols=True, **tqdm_kwargs)

    def emit(self, record: SampleRecord) -> None:
        self.inner.emit(record)
        self.bar.update(1)
        self.bar.set_postfix_str(f"{record.reading}", refresh=False)

    def close(self) -> None:
        try:
            self.bar.close()
        finally:
            self.inner.close()
