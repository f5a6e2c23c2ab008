import pytest

from dmmlog.meas import CancelToken
from dmmlog.types.errors import SinkError
from dmmlog.util.clock import VirtualClock


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks test as slow running test")
    config.addinivalue_line(
        "markers", "hardware: marks test that require physical hardware"
    )


class ListSink:
    """Sink collecting records in memory, optionally failing on the n-th emit."""

    def __init__(self, fail_on=None):
        self.records = []
        self.fail_on = fail_on
        self.closed = False

    def emit(self, record):
        if self.fail_on is not None and len(self.records) + 1 == self.fail_on:
            raise SinkError("disk full")
        self.records.append(record)

    def close(self):
        self.closed = True

    @property
    def sequences(self):
        return [r.sequence for r in self.records]


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def cancel():
    return CancelToken()


@pytest.fixture
def sink():
    return ListSink()


@pytest.fixture
def make_sink():
    return ListSink
