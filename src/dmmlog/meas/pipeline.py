"""A single timed exchange with the instrument, turned into a sample record."""

from __future__ import annotations

from loguru import logger

from dmmlog.types.errors import TransportError
from dmmlog.types.protocols import ClockProtocol, TransportProtocol
from dmmlog.types.records import SampleRecord, SampleRequest


class SamplePipeline:
    """Takes exactly one reading per `take()` call and timestamps it.

    The pipeline owns the transport for the duration of a run: it is the only
    place a request is issued from, so requests are strictly sequential.

    Parameters
    ----------
    transport : TransportProtocol
        Instrument (or stub) providing `measure()`.
    clock : ClockProtocol
        Source of monotonic instants and wall clock time.
    """

    def __init__(self, transport: TransportProtocol, clock: ClockProtocol):
        self.transport = transport
        self.clock = clock

    def take(self, request: SampleRequest) -> SampleRecord:
        """Perform one exchange and build the record for `request`.

        Raises
        ------
        TransportError
            If the exchange failed. Never retried here.
        """
        start = self.clock.monotonic()
        try:
            reading = self.transport.measure()
        except TransportError:
            raise
        except (OSError, ValueError) as e:
            raise TransportError(
                f"Reading measurement #{request.sequence} from instrument failed: {e}"
            ) from e
        finished_at = self.clock.monotonic()
        wall_clock = self.clock.now()

        if request.anchor is None:
            moment = 0.0
        else:
            moment = finished_at - request.anchor

        record = SampleRecord(
            sequence=request.sequence,
            wall_clock=wall_clock,
            moment=moment,
            delay=max(0.0, start - request.scheduled_at),
            latency=finished_at - start,
            reading=reading,
            finished_at=finished_at,
        )
        logger.trace(f"Sample {record}")
        return record
