"""Micro-benchmark harness with adaptive iteration scaling and allocation tracking."""

from microharness.allocator import AllocationCounters, Allocator, Block, HeapAllocator, TrackingAllocator
from microharness.clock import Clock
from microharness.defaults import BenchmarkDefaults, get_defaults, set_defaults
from microharness.exceptions import (
    AllocationError,
    BenchmarkError,
    ClockUnavailableError,
    ConfigurationError,
    InvalidBlockError,
    OutOfMemoryError,
    ResizeError,
)
from microharness.models import BenchmarkResult
from microharness.runner import next_iteration_count, run_n, run_ns
from microharness.state import BenchmarkFunction, BenchmarkState

__all__ = [
    "AllocationCounters",
    "AllocationError",
    "Allocator",
    "BenchmarkDefaults",
    "BenchmarkError",
    "BenchmarkFunction",
    "BenchmarkResult",
    "BenchmarkState",
    "Block",
    "Clock",
    "ClockUnavailableError",
    "ConfigurationError",
    "HeapAllocator",
    "InvalidBlockError",
    "OutOfMemoryError",
    "ResizeError",
    "TrackingAllocator",
    "get_defaults",
    "next_iteration_count",
    "run_n",
    "run_ns",
    "set_defaults",
]
