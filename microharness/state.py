"""Mutable per-run state handed to a benchmarked function."""

from __future__ import annotations

from typing import Callable, Optional

from microharness.allocator import AllocationCounters, Allocator, HeapAllocator, TrackingAllocator
from microharness.clock import Clock
from microharness.exceptions import ConfigurationError


BenchmarkFunction = Callable[["BenchmarkState"], None]


class BenchmarkState:
    """Iteration count, measured time and allocation counters for one run.

    The benchmarked function reads ``n`` and performs that many operations.
    It may call ``reset_timer()`` after expensive setup, bracket
    non-representative work with ``stop_timer()``/``start_timer()``, and
    route allocations through ``allocator()`` to have them counted.

    Exactly one of ``target_iterations`` (fixed-count mode) and
    ``target_duration_ns`` (duration-target mode) must be positive.
    """

    def __init__(
        self,
        function: BenchmarkFunction,
        target_iterations: int = 0,
        target_duration_ns: int = 0,
        allocator: Optional[Allocator] = None,
        clock: Optional[Clock] = None,
    ):
        if (target_iterations > 0) == (target_duration_ns > 0):
            raise ConfigurationError(
                "Exactly one of target_iterations and target_duration_ns must be positive",
                config_key="target_iterations/target_duration_ns",
                config_value=(target_iterations, target_duration_ns),
                reason="modes are mutually exclusive",
            )
        self.function = function
        self.target_iterations = target_iterations
        self.target_duration_ns = target_duration_ns
        self.n = 1
        self.measured_ns = 0
        self.timer_on = False
        self.clock = clock if clock is not None else Clock.start()
        self._counters = AllocationCounters()
        self._allocator = TrackingAllocator(
            allocator if allocator is not None else HeapAllocator(), self._counters
        )

    @property
    def fixed_count(self) -> bool:
        return self.target_iterations > 0

    @property
    def alloc_count(self) -> int:
        return self._counters.allocs

    @property
    def alloc_bytes(self) -> int:
        return self._counters.alloc_bytes

    @property
    def live_bytes(self) -> int:
        return self._counters.live_bytes

    def allocator(self) -> TrackingAllocator:
        """The run's instrumented allocator."""
        return self._allocator

    def reset_timer(self) -> None:
        """Zero measured time and allocation counters and restart the clock.

        ``n`` is left alone, so setup done before this call costs nothing.
        The timer is running afterwards, even if it was stopped.
        """
        self.timer_on = True
        self.clock.reset()
        self.measured_ns = 0
        self._counters.clear()

    def start_timer(self) -> None:
        """Resume timing after ``stop_timer()``. No-op while already running."""
        if not self.timer_on:
            self.clock.reset()
            self.timer_on = True

    def stop_timer(self) -> None:
        """Pause timing, adding the elapsed lap to ``measured_ns``."""
        if self.timer_on:
            self.measured_ns += self.clock.lap()
            self.timer_on = False

    def run_once(self, n: int) -> None:
        """Invoke the function once with iteration count ``n``.

        Exceptions from the function propagate unchanged.
        """
        self.n = n
        self.reset_timer()
        self.function(self)
        self.stop_timer()
