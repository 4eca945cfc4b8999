from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

HOLE_NAME = "hole"


class SegmentRole(Enum):
    FREE = "free"
    OCCUPIED = "occupied"


class InvariantViolation(RuntimeError):
    """Raised by SegmentTable.check_invariants when the table is inconsistent."""


@dataclass(slots=True, eq=False)
class Segment:
    """
    One contiguous address range of the simulated space.

    Segments compare by identity: the table hands them out as handles, and two
    holes with the same extent at different points in time are different
    segments.
    """

    role: SegmentRole
    base: int
    length: int
    owner_name: str = HOLE_NAME
    owner_id: int = 0

    @property
    def end(self) -> int:
        return self.base + self.length

    @property
    def is_free(self) -> bool:
        return self.role is SegmentRole.FREE

    def mark_as_hole(self) -> None:
        self.role = SegmentRole.FREE
        self.owner_id = 0
        self.owner_name = HOLE_NAME

    def split(self, length: int) -> Optional["Segment"]:
        """Truncate this segment to `length` bytes and return the remainder as a hole."""
        remainder_length = self.length - length
        self.length = length
        if remainder_length <= 0:
            return None
        return Segment(SegmentRole.FREE, self.base + length, remainder_length)

    @classmethod
    def hole(cls, base: int, length: int) -> "Segment":
        return cls(SegmentRole.FREE, base, length)

    @classmethod
    def process(cls, base: int, length: int, name: str, owner_id: int) -> "Segment":
        return cls(SegmentRole.OCCUPIED, base, length, name, owner_id)


class SegmentTable:
    """
    Ordered, gap-free list of segments covering ``[0, capacity)``.

    Segments are kept sorted by base address. Adjacent holes are coalesced on
    every insertion of a hole and on every explicit merge, so the table never
    holds two neighbouring free segments.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._segments: List[Segment] = [Segment.hole(0, capacity)]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __getitem__(self, index: int) -> Segment:
        return self._segments[index]

    def segments(self) -> List[Segment]:
        """Return a copy of the current segment list for inspection."""
        return list(self._segments)

    def free_segments(self) -> List[Segment]:
        return [segment for segment in self._segments if segment.is_free]

    def occupied_segments(self) -> List[Segment]:
        return [segment for segment in self._segments if not segment.is_free]

    def reset(self, capacity: int) -> None:
        self.capacity = capacity
        self._segments = [Segment.hole(0, capacity)]

    def replace(self, segments: List[Segment]) -> None:
        """Swap in a rebuilt segment list (used by compaction)."""
        self._segments = segments

    def index_of(self, segment: Segment) -> Optional[int]:
        index = bisect_left(self._segments, segment.base, key=lambda s: s.base)
        if index < len(self._segments) and self._segments[index] is segment:
            return index
        return None

    def contains(self, segment: Optional[Segment]) -> bool:
        return segment is not None and self.index_of(segment) is not None

    def insert(self, segment: Segment) -> Segment:
        """
        Insert a segment in base order. Holes are merged with their neighbours
        immediately; the surviving segment is returned.
        """
        index = bisect_left(self._segments, segment.base, key=lambda s: s.base)
        self._segments.insert(index, segment)
        if segment.is_free:
            return self._merge_at(index)
        return segment

    def occupy(self, hole: Segment, length: int, name: str, owner_id: int) -> Segment:
        """
        Carve a process of `length` bytes from the front of `hole`.

        The process is always a new segment object and the hole object leaves
        the table, so a handle kept from an earlier owner of this range can
        never resolve to the new one.
        """
        index = self.index_of(hole)
        if index is None or not hole.is_free or hole.length < length:
            raise ValueError(f"Segment at {hole.base} is not a hole of at least {length} bytes")
        remainder = hole.split(length)
        segment = Segment.process(hole.base, length, name, owner_id)
        self._segments[index] = segment
        if remainder is not None:
            self.insert(remainder)
        return segment

    def merge(self, segment: Segment) -> Segment:
        """
        Coalesce a hole with its free neighbours. Returns the segment that now
        covers its range, which is the left neighbour if it absorbed this one.
        """
        index = self.index_of(segment)
        if index is None:
            return segment
        return self._merge_at(index)

    def _merge_at(self, index: int) -> Segment:
        current = self._segments[index]
        if index > 0:
            prev = self._segments[index - 1]
            if prev.is_free and current.is_free and prev.end == current.base:
                prev.length += current.length
                del self._segments[index]
                index -= 1
                current = prev
        if index + 1 < len(self._segments):
            following = self._segments[index + 1]
            if following.is_free and current.is_free and current.end == following.base:
                current.length += following.length
                del self._segments[index + 1]
        return current

    def find_by_name(self, name: str) -> Optional[Segment]:
        if not name or name == HOLE_NAME:
            return None
        for segment in self._segments:
            if not segment.is_free and segment.owner_name == name:
                return segment
        return None

    def check_invariants(self) -> None:
        """Raise InvariantViolation on the first broken table invariant."""
        if not self._segments:
            raise InvariantViolation("segment table is empty")
        cursor = 0
        previous: Optional[Segment] = None
        seen_names = set()
        for segment in self._segments:
            if segment.length <= 0:
                raise InvariantViolation(f"segment at {segment.base} has length {segment.length}")
            if segment.base != cursor:
                raise InvariantViolation(f"gap or overlap at {cursor}: next segment starts at {segment.base}")
            if segment.is_free:
                if previous is not None and previous.is_free:
                    raise InvariantViolation(f"adjacent holes at {previous.base} and {segment.base}")
                if segment.owner_id != 0 or segment.owner_name != HOLE_NAME:
                    raise InvariantViolation(f"hole at {segment.base} carries an owner")
            else:
                if segment.owner_id <= 0 or not segment.owner_name or segment.owner_name == HOLE_NAME:
                    raise InvariantViolation(f"process at {segment.base} has no valid owner")
                if segment.owner_name in seen_names:
                    raise InvariantViolation(f"duplicate process name {segment.owner_name!r}")
                seen_names.add(segment.owner_name)
            cursor = segment.end
            previous = segment
        if cursor != self.capacity:
            raise InvariantViolation(f"segments cover [0, {cursor}) instead of [0, {self.capacity})")
