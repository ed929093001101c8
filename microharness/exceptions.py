"""Exception hierarchy for the benchmark harness.

Errors raised by a benchmarked function are never wrapped; they reach the
caller of ``run_n``/``run_ns`` unchanged. The types below cover
failures the harness itself (or an allocator it hands out) can produce.
"""

from __future__ import annotations

from typing import Any


class BenchmarkError(Exception):
    """Base exception for all harness errors."""
    pass


class ClockUnavailableError(BenchmarkError):
    """Raised when no monotonic time source can be acquired.
    
    Attributes:
        clock_name: Name of the clock that was probed (e.g. 'perf_counter')
    """
    
    def __init__(self, message: str, clock_name: str):
        super().__init__(message)
        self.clock_name = clock_name


class ConfigurationError(BenchmarkError):
    """Raised when run configuration is invalid.
    
    Attributes:
        config_key: Configuration key that is invalid
        config_value: Invalid value
        reason: Reason for invalidity
    """
    
    def __init__(
        self,
        message: str,
        config_key: str,
        config_value: Any,
        reason: str,
    ):
        super().__init__(message)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason


class AllocationError(BenchmarkError):
    """Base class for failures reported by an underlying allocator.
    
    Attributes:
        requested_bytes: Size of the request that failed (0 when not applicable)
    """
    
    def __init__(self, message: str, requested_bytes: int = 0):
        super().__init__(message)
        self.requested_bytes = requested_bytes


class OutOfMemoryError(AllocationError):
    """Raised when an allocator cannot satisfy an allocation request."""
    pass


class ResizeError(AllocationError):
    """Raised when a block cannot be grown in place."""
    pass


class InvalidBlockError(AllocationError):
    """Raised when a block is freed or resized by an allocator that does not own it."""
    pass
