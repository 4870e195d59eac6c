"""
Pytest configuration and fixtures for cloud-client-core tests.
"""

import pytest
import responses as responses_lib

from cloud_client.core.config import CloudConfig, WaitSpec
from cloud_client.core.logging.config import LoggingConfig
from cloud_client.core.session import Session

COMPUTE_URL = "https://nova.example.com/v2.1"
IMAGE_URL = "https://glance.example.com"
NETWORK_URL = "https://neutron.example.com"


class FakeClock:
    """
    Manual monotonic clock. sleep() advances time instead of blocking.

    Example:
        clock = FakeClock()
        waiter = Waiter(poll, ready, sleep=clock.sleep, clock=clock)
    """

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Fake clock for Waiter tests."""
    return FakeClock()


@pytest.fixture
def endpoints():
    return {
        "compute": COMPUTE_URL,
        "image": IMAGE_URL,
        "network": NETWORK_URL,
    }


@pytest.fixture
def config(endpoints):
    """CloudConfig against the fake catalog."""
    return CloudConfig.create(
        endpoints=endpoints,
        token="gAAAAB-test-token",
        timeout=10,
        poll_interval=1,
        wait_timeout=60,
    )


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def session(config):
    """Session instance for testing."""
    session = Session(config)
    yield session
    session.close()


@pytest.fixture
def fast_wait():
    """WaitSpec for resource waits driven by FakeClock."""
    return WaitSpec(poll_interval=1, timeout=30, max_transient_retries=2)


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
