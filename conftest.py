"""Global pytest configuration.

Provides a per-test timeout (SIGALRM based, configured through the
``harness_timeout`` ini option) so a scaling loop that fails to terminate
fails the test instead of hanging the session, plus a controllable time
source for driving the harness deterministically.
"""

import signal

import pytest

from microharness.clock import Clock
from microharness.defaults import get_defaults, set_defaults


# -----------------------------------------------------------------------------
# Simple built-in timeout support
# -----------------------------------------------------------------------------
def _parse_timeout(config) -> float:
    try:
        return float(config.getini("harness_timeout"))
    except ValueError:
        return 0.0


def pytest_configure(config):
    config._global_timeout = _parse_timeout(config)


def pytest_addoption(parser):
    parser.addini("harness_timeout", "Global per-test timeout (seconds)", default="0")


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_call(item):
    timeout = getattr(item.config, "_global_timeout", 0)
    if not timeout or timeout <= 0 or not hasattr(signal, "SIGALRM"):
        yield
        return

    def _handler(signum, frame):
        raise TimeoutError(f"Test exceeded global timeout of {timeout} seconds")

    previous = signal.signal(signal.SIGALRM, _handler)
    signal.alarm(int(timeout))
    try:
        yield
    finally:
        signal.alarm(0)
        signal.signal(signal.SIGALRM, previous)


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
class FakeTimeSource:
    """Manually advanced nanosecond counter usable as a Clock source."""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ns: int) -> None:
        self.now += ns


@pytest.fixture
def fake_time():
    return FakeTimeSource()


@pytest.fixture
def fake_clock(fake_time):
    return Clock(fake_time)


@pytest.fixture
def restore_defaults():
    original = get_defaults()
    yield
    set_defaults(original)
