from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from .memory_space import Segment, SegmentTable


class Allocator(ABC):
    """Abstract placement strategy: pick a hole for a request of `size` bytes."""

    tag = "?"

    @abstractmethod
    def find_hole(self, table: SegmentTable, size: int) -> Optional[Segment]:
        ...

    @staticmethod
    def _eligible(segment: Segment, size: int) -> bool:
        return segment.is_free and segment.length >= size


class FirstFitAllocator(Allocator):
    """
    First-fit: walk the table in address order and take the first hole that
    fits. Stops early, so it is the cheapest strategy on a lightly used space.
    """

    tag = "f"

    def find_hole(self, table: SegmentTable, size: int) -> Optional[Segment]:
        if size <= 0:
            return None
        for segment in table:
            if self._eligible(segment, size):
                return segment
        return None


class BestFitAllocator(Allocator):
    """
    Best-fit: choose the smallest hole that can hold the request. Equal-sized
    candidates resolve to the lowest address.
    """

    tag = "b"

    def find_hole(self, table: SegmentTable, size: int) -> Optional[Segment]:
        if size <= 0:
            return None
        best: Optional[Segment] = None
        for segment in table:
            if self._eligible(segment, size) and (best is None or segment.length < best.length):
                best = segment
        return best


class WorstFitAllocator(Allocator):
    """
    Worst-fit: choose the largest hole, leaving the biggest possible remainder.
    Equal-sized candidates resolve to the lowest address.
    """

    tag = "w"

    def find_hole(self, table: SegmentTable, size: int) -> Optional[Segment]:
        if size <= 0:
            return None
        worst: Optional[Segment] = None
        for segment in table:
            if self._eligible(segment, size) and (worst is None or segment.length > worst.length):
                worst = segment
        return worst


_ALLOCATORS: Dict[str, Allocator] = {
    allocator.tag: allocator
    for allocator in (FirstFitAllocator(), BestFitAllocator(), WorstFitAllocator())
}

Strategy = Union[str, Allocator, None]


def resolve_allocator(strategy: Strategy) -> Optional[Allocator]:
    """
    Map a strategy tag to its allocator.

    Only the first character counts and case is ignored, so "Best", "b" and
    "BF" all pick best-fit. An empty tag means first-fit; anything that does
    not start with f/b/w resolves to None.
    """
    if isinstance(strategy, Allocator):
        return strategy
    if not strategy:
        return _ALLOCATORS["f"]
    return _ALLOCATORS.get(strategy[0].lower())
