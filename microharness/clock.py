"""Monotonic elapsed-time source with reset/lap semantics."""

from __future__ import annotations

import time
from typing import Callable, Optional

from microharness.exceptions import ClockUnavailableError


TimeSource = Callable[[], int]

_DEFAULT_CLOCK_NAME = "perf_counter"


class Clock:
    """Nanosecond stopwatch.

    ``lap()`` returns the nanoseconds elapsed since the last ``reset()`` or
    ``lap()`` and moves the reference point to now. The time source is any
    zero-argument callable returning integer nanoseconds; the default is
    ``time.perf_counter_ns``.
    """

    def __init__(self, source: Optional[TimeSource] = None):
        self._source: TimeSource = source if source is not None else time.perf_counter_ns
        self._started = self._source()

    @classmethod
    def start(cls, source: Optional[TimeSource] = None) -> Clock:
        """Acquire a clock and begin measuring.

        Raises:
            ClockUnavailableError: the platform clock is not monotonic.
        """
        if source is None:
            ensure_monotonic(_DEFAULT_CLOCK_NAME)
        return cls(source)

    def reset(self) -> None:
        self._started = self._source()

    def lap(self) -> int:
        now = self._source()
        elapsed = now - self._started
        self._started = now
        return elapsed


def ensure_monotonic(clock_name: str = _DEFAULT_CLOCK_NAME) -> None:
    """Fail unless ``clock_name`` is a monotonic clock on this platform."""
    try:
        info = time.get_clock_info(clock_name)
    except ValueError as exc:
        raise ClockUnavailableError(
            f"Clock '{clock_name}' is not available: {exc}", clock_name=clock_name
        ) from exc
    if not info.monotonic:
        raise ClockUnavailableError(
            f"Clock '{clock_name}' ({info.implementation}) is not monotonic",
            clock_name=clock_name,
        )
