"""Tests for the instrumented allocator and the default heap allocator."""

import pytest

from microharness.allocator import (
    AllocationCounters,
    Allocator,
    Block,
    HeapAllocator,
    TrackingAllocator,
)
from microharness.exceptions import InvalidBlockError, OutOfMemoryError, ResizeError


@pytest.fixture
def tracker():
    return TrackingAllocator(HeapAllocator(), AllocationCounters())


class RecordingAllocator(Allocator):
    """Delegate that records every call it receives."""

    def __init__(self):
        self.inner = HeapAllocator()
        self.calls = []

    def allocate(self, size, alignment=1):
        self.calls.append(("allocate", size, alignment))
        return self.inner.allocate(size, alignment)

    def resize(self, block, new_size):
        self.calls.append(("resize", block.size, new_size))
        return self.inner.resize(block, new_size)

    def free(self, block):
        self.calls.append(("free", block.size))
        self.inner.free(block)


class TestHeapAllocator:
    """Behaviour of the default underlying allocator."""

    def test_allocate_returns_zeroed_block(self):
        heap = HeapAllocator()
        block = heap.allocate(16, alignment=8)
        assert block.size == 16
        assert block.alignment == 8
        assert bytes(block.memory) == bytes(16)
        assert heap.in_use == 16

    def test_resize_grows_and_shrinks_in_place(self):
        heap = HeapAllocator()
        block = heap.allocate(4)
        block.memory[:] = b"abcd"
        assert heap.resize(block, 8) is block
        assert bytes(block.memory) == b"abcd" + bytes(4)
        heap.resize(block, 2)
        assert bytes(block.memory) == b"ab"
        assert heap.in_use == 2

    def test_capacity_limits_allocation(self):
        heap = HeapAllocator(capacity=16)
        heap.allocate(10)
        with pytest.raises(OutOfMemoryError) as excinfo:
            heap.allocate(7)
        assert excinfo.value.requested_bytes == 7
        assert heap.in_use == 10

    def test_capacity_limits_growth(self):
        heap = HeapAllocator(capacity=16)
        block = heap.allocate(10)
        with pytest.raises(ResizeError):
            heap.resize(block, 20)
        assert block.size == 10

    def test_double_free_rejected(self):
        heap = HeapAllocator()
        block = heap.allocate(8)
        heap.free(block)
        with pytest.raises(InvalidBlockError):
            heap.free(block)

    def test_foreign_block_rejected(self):
        with pytest.raises(InvalidBlockError):
            HeapAllocator().resize(Block(bytearray(4)), 8)

    @pytest.mark.parametrize("size,alignment", [(-1, 1), (8, 0), (8, 3), (8, 12)])
    def test_invalid_requests(self, size, alignment):
        with pytest.raises(ValueError):
            HeapAllocator().allocate(size, alignment)

    def test_create_uses_natural_alignment(self):
        heap = HeapAllocator()
        assert heap.create(8).alignment == 8
        assert heap.create(3).alignment == 4
        assert heap.create(64).alignment == 16


class TestTrackingAllocator:
    """Counters are updated only for successful delegate calls."""

    def test_allocate_counts_size(self, tracker):
        tracker.allocate(24)
        tracker.allocate(8)
        assert tracker.counters == AllocationCounters(allocs=2, alloc_bytes=32, live_bytes=32)

    def test_free_reduces_live_bytes(self, tracker):
        block = tracker.allocate(24)
        tracker.free(block)
        assert tracker.counters == AllocationCounters(allocs=1, alloc_bytes=24, live_bytes=0)

    def test_growing_resize_counts_growth_as_allocation(self, tracker):
        block = tracker.allocate(8)
        tracker.resize(block, 20)
        assert tracker.counters == AllocationCounters(allocs=2, alloc_bytes=20, live_bytes=20)

    def test_shrinking_resize_only_reduces_live_bytes(self, tracker):
        block = tracker.allocate(20)
        tracker.resize(block, 5)
        assert tracker.counters == AllocationCounters(allocs=1, alloc_bytes=20, live_bytes=5)

    def test_same_size_resize_changes_nothing(self, tracker):
        block = tracker.allocate(8)
        tracker.resize(block, 8)
        assert tracker.counters == AllocationCounters(allocs=1, alloc_bytes=8, live_bytes=8)

    def test_forwards_every_call_to_delegate(self):
        delegate = RecordingAllocator()
        tracker = TrackingAllocator(delegate)
        block = tracker.allocate(8, alignment=8)
        tracker.resize(block, 16)
        tracker.free(block)
        assert delegate.calls == [("allocate", 8, 8), ("resize", 8, 16), ("free", 16)]
        assert tracker.counters.live_bytes == 0

    def test_create_and_destroy_are_tracked(self, tracker):
        block = tracker.create(8)
        tracker.destroy(block)
        assert tracker.counters == AllocationCounters(allocs=1, alloc_bytes=8, live_bytes=0)

    def test_failed_allocate_leaves_counters(self):
        tracker = TrackingAllocator(HeapAllocator(capacity=8))
        tracker.allocate(8)
        with pytest.raises(OutOfMemoryError):
            tracker.allocate(1)
        assert tracker.counters == AllocationCounters(allocs=1, alloc_bytes=8, live_bytes=8)

    def test_failed_resize_leaves_counters(self):
        tracker = TrackingAllocator(HeapAllocator(capacity=8))
        block = tracker.allocate(4)
        with pytest.raises(ResizeError):
            tracker.resize(block, 9)
        assert tracker.counters == AllocationCounters(allocs=1, alloc_bytes=4, live_bytes=4)

    def test_failed_free_leaves_counters(self, tracker):
        block = tracker.allocate(4)
        tracker.free(block)
        with pytest.raises(InvalidBlockError):
            tracker.free(block)
        assert tracker.counters.live_bytes == 0

    def test_balanced_traffic_leaves_no_live_bytes(self, tracker):
        blocks = [tracker.allocate(size) for size in (1, 8, 33, 100)]
        for block in blocks:
            tracker.free(block)
        assert tracker.counters.live_bytes == 0
        assert tracker.counters.allocs == 4

    def test_unfreed_blocks_remain_live(self, tracker):
        sizes = [3, 8, 16, 40, 5]
        blocks = [tracker.allocate(size) for size in sizes]
        for block in blocks[:2]:
            tracker.free(block)
        assert tracker.counters.live_bytes == sum(sizes[2:])
