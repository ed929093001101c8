"""Human-readable rendering of a ``BenchmarkResult``."""

from __future__ import annotations

from typing import List, Optional

from microharness.models import BenchmarkResult


def format_result(result: BenchmarkResult, name: Optional[str] = None) -> List[str]:
    prefix = f"{name}: " if name else ""
    lines = [
        f"{prefix}{result.n} ops / {result.ns} ns = {result.ns_per_op:.3f} ns/op",
        f"{prefix}{result.allocs_per_op:.3f} allocs/op, {result.alloc_bytes_per_op:.3f} bytes/op",
    ]
    if result.leaked:
        lines.append(f"{prefix}LEAKED {result.live_bytes} BYTES!")
    return lines
