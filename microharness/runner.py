"""Drives a benchmarked function to a fixed iteration count or a duration target.

Duration-target mode starts at ``n = 1`` and re-runs the function with a
larger ``n`` until the measured time of a single invocation reaches the
target. Only the last invocation's counters make it into the result.
Adapted from https://golang.org/src/testing/benchmark.go (B.launch).
"""

from __future__ import annotations

from typing import Optional

from microharness.allocator import Allocator
from microharness.clock import Clock
from microharness.defaults import BenchmarkDefaults, get_defaults
from microharness.exceptions import ConfigurationError
from microharness.logger import (
    get_logger,
    log_benchmark_complete,
    log_benchmark_error,
    log_benchmark_start,
)
from microharness.models import BenchmarkResult
from microharness.state import BenchmarkFunction, BenchmarkState

logger = get_logger(__name__)


def next_iteration_count(
    target_ns: int,
    prev_n: int,
    prev_ns: int,
    defaults: Optional[BenchmarkDefaults] = None,
) -> int:
    """Extrapolate the iteration count expected to reach ``target_ns``.

    The estimate gets extra headroom, grows at most ``max_growth_factor``
    times per step, always advances by at least one and never exceeds
    ``max_iterations``.
    """
    defaults = defaults or get_defaults()
    if prev_ns <= 0:
        prev_ns = 1
    n = target_ns * prev_n // prev_ns
    n += n // defaults.headroom_divisor
    n = min(n, defaults.max_growth_factor * prev_n)
    n = max(n, prev_n + 1)
    n = min(n, defaults.max_iterations)
    return n


def _benchmark_name(function: BenchmarkFunction) -> str:
    return getattr(function, "__qualname__", None) or repr(function)


def run(state: BenchmarkState, defaults: Optional[BenchmarkDefaults] = None) -> BenchmarkResult:
    """Run ``state.function`` in the mode ``state`` was configured for."""
    defaults = defaults or get_defaults()
    name = _benchmark_name(state.function)
    if state.fixed_count:
        log_benchmark_start(logger, name, f"n={state.target_iterations}")
    else:
        log_benchmark_start(logger, name, f"target={state.target_duration_ns}ns")

    try:
        if state.fixed_count:
            state.run_once(state.target_iterations)
        else:
            n = state.n = defaults.initial_iterations
            state.measured_ns = 0
            while state.measured_ns < state.target_duration_ns and state.n < defaults.max_iterations:
                state.run_once(n)
                n = next_iteration_count(state.target_duration_ns, state.n, state.measured_ns, defaults)
                logger.debug(
                    "%s: n=%d took %dns, next n=%d", name, state.n, state.measured_ns, n
                )
    except Exception as exc:
        log_benchmark_error(logger, name, exc)
        raise

    if not state.fixed_count and state.measured_ns < state.target_duration_ns:
        logger.debug(
            "%s: iteration ceiling %d reached after %dns", name, state.n, state.measured_ns
        )
    result = BenchmarkResult.from_state(state)
    log_benchmark_complete(logger, name, result.n, result.ns_per_op)
    return result


def run_n(
    function: BenchmarkFunction,
    n: int,
    allocator: Optional[Allocator] = None,
    clock: Optional[Clock] = None,
) -> BenchmarkResult:
    """Invoke ``function`` once with ``state.n == n``.

    Args:
        function: Benchmark taking a ``BenchmarkState``; loops ``state.n`` times.
        n: Iteration count, at least 1.
        allocator: Underlying allocator for ``state.allocator()`` (default: a
            fresh ``HeapAllocator``).
        clock: Clock to time with (default: monotonic ``perf_counter_ns``).

    Raises:
        ConfigurationError: ``n < 1``.
        ClockUnavailableError: no monotonic clock on this platform.
        Exception: whatever ``function`` raises, unchanged.
    """
    if n < 1:
        raise ConfigurationError(
            f"Iteration count must be >= 1, got {n}",
            config_key="n",
            config_value=n,
            reason="iteration count must be positive",
        )
    state = BenchmarkState(function, target_iterations=n, allocator=allocator, clock=clock)
    return run(state)


def run_ns(
    function: BenchmarkFunction,
    target_duration_ns: int,
    allocator: Optional[Allocator] = None,
    clock: Optional[Clock] = None,
) -> BenchmarkResult:
    """Scale ``n`` until one invocation of ``function`` takes ``target_duration_ns``.

    Stops early at the iteration ceiling if the function is too cheap to
    ever reach the target. Arguments and errors are as for ``run_n``.
    """
    if target_duration_ns <= 0:
        raise ConfigurationError(
            f"Target duration must be > 0 ns, got {target_duration_ns}",
            config_key="target_duration_ns",
            config_value=target_duration_ns,
            reason="duration target must be positive",
        )
    state = BenchmarkState(
        function, target_duration_ns=target_duration_ns, allocator=allocator, clock=clock
    )
    return run(state)
