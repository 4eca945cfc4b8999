"""
Contiguous memory allocator simulator.

A fixed-size address space split into holes and process segments, with
first/best/worst-fit placement, hole coalescing and compaction.
"""

from .allocators import BestFitAllocator, FirstFitAllocator, WorstFitAllocator, resolve_allocator
from .memory_manager import MAX_SPACE_SIZE, AddressSpace
from .memory_space import HOLE_NAME, InvariantViolation, Segment, SegmentRole, SegmentTable
from .results import AllocatorEvent, CompactionReport, FailureReason, RequestResult, SegmentInfo

__all__ = [
    "AddressSpace",
    "MAX_SPACE_SIZE",
    "HOLE_NAME",
    "Segment",
    "SegmentRole",
    "SegmentTable",
    "InvariantViolation",
    "FirstFitAllocator",
    "BestFitAllocator",
    "WorstFitAllocator",
    "resolve_allocator",
    "AllocatorEvent",
    "RequestResult",
    "FailureReason",
    "CompactionReport",
    "SegmentInfo",
]
