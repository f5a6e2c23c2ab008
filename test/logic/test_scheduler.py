"""Tests for the sampling scheduler.

All timing tests run on a `VirtualClock`: the mock instrument advances it by
its simulated latency and the scheduler's sleeps jump straight to the
deadline, so every instant below is exact and reproducible.
"""

import threading
import time
from datetime import timedelta

import pytest

from dmmlog.device import MockDMM
from dmmlog.meas import RunStatus, SamplePipeline, Scheduler
from dmmlog.types import SamplingConfig, SinkError, TransportError
from dmmlog.util.clock import SystemClock, VirtualClock


class SteppingClock(VirtualClock):
    """Virtual clock whose wall time jumps by `step` once `step_at` is passed."""

    def __init__(self, step_at, step):
        super().__init__()
        self.step_at = step_at
        self.step = step

    def now(self):
        if self.monotonic() > self.step_at:
            return super().now() + self.step
        return super().now()


def run(config, dmm, clock, sink, cancel=None):
    scheduler = Scheduler(config, clock)
    return scheduler.run(SamplePipeline(dmm, clock), sink, cancel)


class TestCadence:
    def test_end_to_end(self, clock, sink):
        dmm = MockDMM([1.0, 2.0, 3.0], latency=0.05, sleep=clock.advance)
        result = run(SamplingConfig(interval=1.0, max_samples=3), dmm, clock, sink)

        assert result.status is RunStatus.COMPLETED
        assert result.emitted == 3
        assert sink.sequences == [0, 1, 2]
        assert [r.reading for r in sink.records] == [1.0, 2.0, 3.0]
        assert [r.moment for r in sink.records] == pytest.approx([0.0, 1.0, 2.0])
        assert [r.latency for r in sink.records] == pytest.approx([0.05] * 3)
        assert [r.delay for r in sink.records] == pytest.approx([0.0] * 3)

    def test_sequence_is_gap_free_without_drop(self, clock, sink):
        dmm = MockDMM(latency=0.1, sleep=clock.advance)
        run(SamplingConfig(interval=0.5, max_samples=10), dmm, clock, sink)
        assert sink.sequences == list(range(10))

    def test_anchor_is_first_sample(self, clock, sink):
        clock.advance(7.5)  # process start is not the anchor
        dmm = MockDMM(latency=[0.2, 0.01, 0.3, 0.05], sleep=clock.advance)
        run(SamplingConfig(interval=1.0, max_samples=4), dmm, clock, sink)

        first = sink.records[0]
        assert first.moment == 0.0
        assert first.finished_at == pytest.approx(7.7)
        for record in sink.records:
            expected = record.finished_at - first.finished_at
            assert record.moment == pytest.approx(expected)
        moments = [r.moment for r in sink.records]
        assert moments == sorted(moments)

    def test_moment_ignores_wall_clock_steps(self, sink):
        clock = SteppingClock(step_at=1.5, step=timedelta(hours=-1))
        dmm = MockDMM(latency=0.05, sleep=clock.advance)
        run(SamplingConfig(interval=1.0, max_samples=3), dmm, clock, sink)

        moments = [r.moment for r in sink.records]
        assert moments == pytest.approx([0.0, 1.0, 2.0])
        assert moments == sorted(moments)
        assert sink.records[2].wall_clock < sink.records[0].wall_clock

    def test_rate_is_converted_to_interval(self, clock, sink):
        dmm = MockDMM(latency=0.01, sleep=clock.advance)
        run(SamplingConfig(rate=4.0, max_samples=3), dmm, clock, sink)
        assert [r.moment for r in sink.records] == pytest.approx([0.0, 0.25, 0.5])

    def test_wall_clock_is_taken_after_exchange(self, clock, sink):
        dmm = MockDMM(latency=0.4, sleep=clock.advance)
        run(SamplingConfig(interval=1.0, max_samples=1), dmm, clock, sink)
        elapsed = sink.records[0].wall_clock - clock.now()
        assert elapsed.total_seconds() == pytest.approx(0.0)

    def test_default_clock(self):
        scheduler = Scheduler(SamplingConfig(interval=1.0))
        assert isinstance(scheduler.clock, SystemClock)
        assert scheduler.interval == 1.0


class TestCountLimit:
    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_exactly_n_records(self, clock, sink, n):
        dmm = MockDMM(latency=0.05, sleep=clock.advance)
        result = run(SamplingConfig(interval=1.0, max_samples=n), dmm, clock, sink)
        assert result.ok
        assert len(sink.records) == n
        assert dmm.calls == n

    def test_zero_samples(self, clock, sink):
        dmm = MockDMM(sleep=clock.advance)
        result = run(SamplingConfig(interval=1.0, max_samples=0), dmm, clock, sink)
        assert result.status is RunStatus.COMPLETED
        assert result.error is None
        assert sink.records == []
        assert dmm.calls == 0


class TestDropPolicy:
    # second exchange stalls for three intervals (plus the usual 50 ms)
    STALL = [0.05, 3.05, 0.05]

    def test_stall_skips_overdue_ticks(self, clock, sink):
        dmm = MockDMM(latency=self.STALL, sleep=clock.advance)
        config = SamplingConfig(interval=1.0, max_samples=8, drop_slow_samples=True)
        result = run(config, dmm, clock, sink)

        assert result.ok
        assert sink.sequences == [0, 1, 4, 5, 6, 7]
        assert result.skipped == 2
        after_stall = sink.records[2]
        assert after_stall.sequence == 4
        assert after_stall.delay < 1.0
        assert after_stall.delay == pytest.approx(0.05)

    def test_no_drop_by_default(self, clock, sink):
        dmm = MockDMM(latency=self.STALL, sleep=clock.advance)
        result = run(SamplingConfig(interval=1.0, max_samples=8), dmm, clock, sink)

        assert result.ok
        assert result.skipped == 0
        assert sink.sequences == list(range(8))
        assert sink.records[2].delay == pytest.approx(2.05)

    def test_delay_grows_when_always_slow(self, clock, sink):
        dmm = MockDMM(latency=3.05, sleep=clock.advance)
        run(SamplingConfig(interval=1.0, max_samples=4), dmm, clock, sink)

        delays = [r.delay for r in sink.records]
        assert sink.sequences == [0, 1, 2, 3]
        assert all(b > a for a, b in zip(delays, delays[1:]))
        assert delays[-1] == pytest.approx(6.15)

    def test_always_slow_with_drop_keeps_cadence(self, clock, sink):
        dmm = MockDMM(latency=3.05, sleep=clock.advance)
        config = SamplingConfig(interval=1.0, max_samples=10, drop_slow_samples=True)
        result = run(config, dmm, clock, sink)

        assert sink.sequences == [0, 3, 6, 9]
        assert result.skipped == 6
        assert all(r.delay < 1.0 for r in sink.records)
        moments = [r.moment for r in sink.records]
        assert moments == sorted(moments)

    def test_threshold_is_configurable(self, clock, sink):
        dmm = MockDMM(latency=self.STALL, sleep=clock.advance)
        config = SamplingConfig(
            interval=1.0, max_samples=5, drop_slow_samples=True, drop_threshold=2.0
        )
        run(config, dmm, clock, sink)

        assert sink.sequences == [0, 1, 3, 4]
        assert sink.records[2].delay == pytest.approx(1.05)


class TestCancellation:
    def test_cancel_during_sleep(self, clock, sink, cancel):
        dmm = MockDMM(latency=0.05, sleep=clock.advance)
        clock.call_at(2.5, cancel.set)
        result = run(SamplingConfig(interval=1.0), dmm, clock, sink, cancel)

        assert result.status is RunStatus.CANCELLED
        assert result.error is None
        assert sink.sequences == [0, 1, 2]
        assert clock.monotonic() == pytest.approx(2.5)
        assert dmm.calls == 3

    def test_cancel_before_start(self, clock, sink, cancel):
        cancel.set()
        dmm = MockDMM(sleep=clock.advance)
        result = run(SamplingConfig(interval=1.0), dmm, clock, sink, cancel)
        assert result.cancelled
        assert dmm.calls == 0

    def test_cancel_during_exchange_keeps_reading(self, clock, sink, cancel):
        def slow_exchange(seconds):
            clock.advance(seconds)
            cancel.set("interrupted")

        dmm = MockDMM([42.0], latency=0.3, sleep=slow_exchange)
        result = run(SamplingConfig(interval=1.0), dmm, clock, sink, cancel)

        assert result.cancelled
        assert [r.reading for r in sink.records] == [42.0]
        assert dmm.calls == 1

    @pytest.mark.slow
    def test_cancel_is_prompt_with_system_clock(self, sink, cancel):
        clock = SystemClock()
        dmm = MockDMM(latency=0.0)
        timer = threading.Timer(0.2, cancel.set)

        start = time.monotonic()
        timer.start()
        try:
            result = run(SamplingConfig(interval=10.0), dmm, clock, sink, cancel)
        finally:
            timer.cancel()
        elapsed = time.monotonic() - start

        assert result.cancelled
        assert elapsed < 2.0
        assert sink.sequences == [0]


class TestFailures:
    def test_transport_failure_is_fatal(self, clock, sink):
        dmm = MockDMM(latency=0.05, sleep=clock.advance, fail_on=3)
        result = run(SamplingConfig(interval=1.0, max_samples=10), dmm, clock, sink)

        assert result.status is RunStatus.FAILED
        assert isinstance(result.error, TransportError)
        assert sink.sequences == [0, 1]
        assert result.emitted == 2
        assert dmm.calls == 3

    def test_sink_failure_is_fatal(self, clock, make_sink):
        sink = make_sink(fail_on=2)
        dmm = MockDMM(latency=0.05, sleep=clock.advance)
        result = run(SamplingConfig(interval=1.0, max_samples=10), dmm, clock, sink)

        assert result.failed
        assert isinstance(result.error, SinkError)
        assert sink.sequences == [0]
        assert dmm.calls == 2

    def test_os_error_becomes_transport_error(self, clock, sink):
        class BrokenDMM:
            def measure(self):
                raise ConnectionResetError("connection reset by peer")

            def close(self):
                pass

        result = run(SamplingConfig(interval=1.0), BrokenDMM(), clock, sink)
        assert result.failed
        assert isinstance(result.error, TransportError)
        assert "#0" in str(result.error)
        assert sink.records == []
