"""Allocation interface and the instrumented allocator handed to benchmarks.

A benchmark that wants its memory traffic measured routes every request
through ``state.allocator()``. That object is a ``TrackingAllocator``: it
forwards to the real allocator and, only once the real allocator has
succeeded, updates the run's counters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

from microharness.exceptions import InvalidBlockError, OutOfMemoryError, ResizeError


@dataclass(eq=False)
class Block:
    """Handle to a region of memory obtained from an ``Allocator``."""

    memory: bytearray
    alignment: int = 1

    @property
    def size(self) -> int:
        return len(self.memory)


@dataclass
class AllocationCounters:
    """Counters fed by ``TrackingAllocator``.

    ``live_bytes`` is allocated-minus-freed; a positive value at the end of a
    run means memory was not released during the measured region.
    """

    allocs: int = 0
    alloc_bytes: int = 0
    live_bytes: int = 0

    def clear(self) -> None:
        self.allocs = 0
        self.alloc_bytes = 0
        self.live_bytes = 0


class Allocator(ABC):
    """Allocation capability: allocate, resize and free blocks."""

    @abstractmethod
    def allocate(self, size: int, alignment: int = 1) -> Block:
        """Return a new block of exactly ``size`` bytes."""

    @abstractmethod
    def resize(self, block: Block, new_size: int) -> Block:
        """Grow or shrink ``block`` in place and return it."""

    @abstractmethod
    def free(self, block: Block) -> None:
        """Release ``block``."""

    def create(self, size: int = 8) -> Block:
        """Allocate a single value of ``size`` bytes, aligned to its size."""
        return self.allocate(size, alignment=_natural_alignment(size))

    def destroy(self, block: Block) -> None:
        self.free(block)


def _natural_alignment(size: int) -> int:
    alignment = 1
    while alignment < size and alignment < 16:
        alignment <<= 1
    return alignment


def _check_request(size: int, alignment: int) -> None:
    if size < 0:
        raise ValueError(f"size must be >= 0, got {size}")
    if alignment < 1 or alignment & (alignment - 1):
        raise ValueError(f"alignment must be a positive power of two, got {alignment}")


class HeapAllocator(Allocator):
    """General-purpose allocator backed by ``bytearray``.

    Args:
        capacity: Optional limit on bytes outstanding at once. Requests that
            would exceed it fail with ``OutOfMemoryError`` (allocate) or
            ``ResizeError`` (resize growth).
    """

    def __init__(self, capacity: Optional[int] = None):
        if capacity is not None and capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self.capacity = capacity
        self._blocks: Dict[int, Block] = {}
        self._in_use = 0

    @property
    def in_use(self) -> int:
        """Bytes currently held by live blocks."""
        return self._in_use

    def owns(self, block: Block) -> bool:
        return self._blocks.get(id(block)) is block

    def _fits(self, extra: int) -> bool:
        return self.capacity is None or self._in_use + extra <= self.capacity

    def _require_owned(self, block: Block, operation: str) -> None:
        if not self.owns(block):
            raise InvalidBlockError(
                f"Cannot {operation} a block this allocator does not own "
                f"(size={block.size}); double free or foreign block"
            )

    def allocate(self, size: int, alignment: int = 1) -> Block:
        _check_request(size, alignment)
        if not self._fits(size):
            raise OutOfMemoryError(
                f"Out of memory: requested {size} bytes with {self._in_use}/{self.capacity} in use",
                requested_bytes=size,
            )
        block = Block(bytearray(size), alignment)
        self._blocks[id(block)] = block
        self._in_use += size
        return block

    def resize(self, block: Block, new_size: int) -> Block:
        self._require_owned(block, "resize")
        _check_request(new_size, block.alignment)
        delta = new_size - block.size
        if delta > 0:
            if not self._fits(delta):
                raise ResizeError(
                    f"Cannot grow block from {block.size} to {new_size} bytes in place",
                    requested_bytes=new_size,
                )
            block.memory.extend(bytes(delta))
        elif delta < 0:
            del block.memory[new_size:]
        self._in_use += delta
        return block

    def free(self, block: Block) -> None:
        self._require_owned(block, "free")
        del self._blocks[id(block)]
        self._in_use -= block.size


@dataclass
class TrackingAllocator(Allocator):
    """Decorates ``delegate`` and attributes its traffic to ``counters``.

    Counters change only after the delegate call returns, so a failed request
    leaves them untouched and the delegate's exception propagates as-is.
    Shrinking a block lowers ``live_bytes`` but is not counted as allocation
    work.
    """

    delegate: Allocator
    counters: AllocationCounters = field(default_factory=AllocationCounters)

    def allocate(self, size: int, alignment: int = 1) -> Block:
        block = self.delegate.allocate(size, alignment)
        self.counters.allocs += 1
        self.counters.alloc_bytes += block.size
        self.counters.live_bytes += block.size
        return block

    def resize(self, block: Block, new_size: int) -> Block:
        old_size = block.size
        resized = self.delegate.resize(block, new_size)
        delta = resized.size - old_size
        if delta > 0:
            self.counters.allocs += 1
            self.counters.alloc_bytes += delta
        self.counters.live_bytes += delta
        return resized

    def free(self, block: Block) -> None:
        size = block.size
        self.delegate.free(block)
        self.counters.live_bytes -= size
