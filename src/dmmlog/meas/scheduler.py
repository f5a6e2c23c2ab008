"""The sampling scheduler.

Drives a run tick by tick: tick *k* is due at `run_start + k * interval`. The
scheduler sleeps until a tick is due, asks the `SamplePipeline` for one sample
and hands the record to the sink. It stops when

1. the configured number of ticks has been reached (`COMPLETED`),
2. the cancel token is set (`CANCELLED`), or
3. the instrument exchange or the sink fails (`FAILED`).

Falling behind
--------------
If an exchange takes longer than the interval, the following ticks start late
and their `delay` grows. With `drop_slow_samples` enabled, ticks that are more
than `drop_threshold` intervals overdue before any work started are skipped
(never emitted, never retried) until the schedule is caught up again.
"""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from dmmlog.meas.cancel import CancelToken
from dmmlog.meas.pipeline import SamplePipeline
from dmmlog.types.config import SamplingConfig
from dmmlog.types.errors import DmmlogError, SinkError, TransportError
from dmmlog.types.protocols import ClockProtocol, SinkProtocol
from dmmlog.types.records import SampleRequest
from dmmlog.util.clock import SystemClock


class RunStatus(str, enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RunResult:
    """Outcome of `Scheduler.run()`.

    Attributes
    ----------
    status : RunStatus
        How the run ended.
    error : DmmlogError, optional
        The fatal error, for FAILED runs only.
    emitted : int
        Number of records handed to the sink.
    skipped : int
        Number of ticks dropped by the drop policy.
    """

    status: RunStatus
    error: Optional[DmmlogError] = None
    emitted: int = 0
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    @property
    def failed(self) -> bool:
        return self.status is RunStatus.FAILED


class Scheduler:
    """Decides when each sample is taken.

    Parameters
    ----------
    config : SamplingConfig
        Interval (or rate), tick limit and drop policy.
    clock : ClockProtocol, optional
        Time source, `SystemClock()` by default.
    """

    def __init__(self, config: SamplingConfig, clock: Optional[ClockProtocol] = None):
        self.config = config
        self.clock = clock if clock is not None else SystemClock()
        self.interval = config.period

    def run(
        self,
        pipeline: SamplePipeline,
        sink: SinkProtocol,
        cancel: Optional[CancelToken] = None,
    ) -> RunResult:
        """Sample until the tick limit, cancellation or a fatal error.

        Neither the pipeline's transport nor the sink are closed here; that is
        left to the caller.
        """
        if cancel is None:
            cancel = CancelToken()

        max_samples = self.config.max_samples
        drop_after = self.config.drop_threshold * self.interval
        emitted = 0
        skipped = 0
        anchor = None

        logger.info(
            f"Sampling every {self.interval}s, "
            + (f"{max_samples} samples" if max_samples is not None else "unlimited")
            + (", dropping slow samples" if self.config.drop_slow_samples else "")
        )
        run_start = self.clock.monotonic()

        for sequence in itertools.count():
            scheduled_at = run_start + sequence * self.interval

            if cancel.is_set():
                logger.info(f"Run cancelled before sample #{sequence}")
                return RunResult(RunStatus.CANCELLED, emitted=emitted, skipped=skipped)

            if max_samples is not None and sequence >= max_samples:
                logger.info(f"Run completed after {emitted} samples")
                return RunResult(RunStatus.COMPLETED, emitted=emitted, skipped=skipped)

            if (
                self.config.drop_slow_samples
                and self.clock.monotonic() > scheduled_at + drop_after
            ):
                logger.debug(f"Dropping sample #{sequence}, scheduler is behind")
                skipped += 1
                continue

            if not self.clock.sleep_until(scheduled_at, cancel):
                logger.info(f"Run cancelled while waiting for sample #{sequence}")
                return RunResult(RunStatus.CANCELLED, emitted=emitted, skipped=skipped)

            request = SampleRequest(
                sequence=sequence, scheduled_at=scheduled_at, anchor=anchor
            )
            try:
                record = pipeline.take(request)
            except TransportError as e:
                logger.error(str(e))
                return RunResult(
                    RunStatus.FAILED, error=e, emitted=emitted, skipped=skipped
                )

            if anchor is None:
                anchor = record.finished_at

            try:
                sink.emit(record)
            except SinkError as e:
                logger.error(str(e))
                return RunResult(
                    RunStatus.FAILED, error=e, emitted=emitted, skipped=skipped
                )
            emitted += 1
