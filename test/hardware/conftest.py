import os

import pytest

from dmmlog.util import TEST_LOGLEVEL, shutdown_log, start_log


@pytest.fixture(scope="session")
def dmm_host():
    """Address of a real multimeter, taken from the DMMLOG_HOST environment variable."""
    host = os.environ.get("DMMLOG_HOST")
    if not host:
        pytest.skip("DMMLOG_HOST not set, no instrument available")
    return host


@pytest.fixture()
def test_log():
    start_log(log_to_file=True, log_level=TEST_LOGLEVEL)
    yield
    shutdown_log()
