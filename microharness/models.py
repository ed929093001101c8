"""Pydantic model for the outcome of a benchmark run.

Raw counters are copied from the run state when the run terminates; the
per-operation metrics are derived on access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from microharness.state import BenchmarkState


class BenchmarkResult(BaseModel):
    """Final counters of a run plus derived per-operation ratios."""
    
    n: int = Field(..., ge=1, description="Iterations performed by the final invocation")
    ns: int = Field(..., ge=0, description="Measured nanoseconds of the final invocation")
    allocs: int = Field(0, ge=0, description="Allocations (including growing resizes)")
    alloc_bytes: int = Field(0, ge=0, description="Bytes allocated, counting resize growth")
    live_bytes: int = Field(0, description="Allocated minus freed bytes at termination")
    
    schemaVersion: str = Field("1.0", description="Schema version for forward compatibility")
    
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "n": 10,
                "ns": 1520,
                "allocs": 10,
                "alloc_bytes": 80,
                "live_bytes": 40,
                "schemaVersion": "1.0"
            }
        }
    )
    
    @classmethod
    def from_state(cls, state: BenchmarkState) -> BenchmarkResult:
        return cls(
            n=state.n,
            ns=state.measured_ns,
            allocs=state.alloc_count,
            alloc_bytes=state.alloc_bytes,
            live_bytes=state.live_bytes,
        )
    
    @property
    def ns_per_op(self) -> float:
        return self.ns / self.n
    
    @property
    def allocs_per_op(self) -> float:
        return self.allocs / self.n
    
    @property
    def alloc_bytes_per_op(self) -> float:
        return self.alloc_bytes / self.n
    
    @property
    def live_bytes_per_op(self) -> float:
        return self.live_bytes / self.n
    
    @property
    def leaked(self) -> bool:
        """True when memory allocated in the measured region was not freed."""
        return self.live_bytes > 0
    
    def to_dict(self) -> Dict[str, Any]:
        """Raw counters plus derived metrics."""
        result = self.model_dump()
        result.update({
            "ns_per_op": self.ns_per_op,
            "allocs_per_op": self.allocs_per_op,
            "alloc_bytes_per_op": self.alloc_bytes_per_op,
            "live_bytes_per_op": self.live_bytes_per_op,
        })
        return result
