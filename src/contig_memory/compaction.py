from __future__ import annotations

from typing import List

from .backing_store import BackingStore
from .memory_space import Segment, SegmentTable
from .results import CompactionReport


def compact(table: SegmentTable, store: BackingStore) -> CompactionReport:
    """
    Slide every process down to the low end of the space.

    Processes keep their relative order and their segment objects, so handles
    held by callers stay valid. All free space ends up in a single trailing
    hole, or none when the space is full.
    """
    rebuilt: List[Segment] = []
    cursor = 0
    relocated = 0
    bytes_moved = 0
    for segment in table:
        if segment.is_free:
            continue
        if segment.base != cursor:
            store.move(segment.base, cursor, segment.length)
            segment.base = cursor
            relocated += 1
            bytes_moved += segment.length
        rebuilt.append(segment)
        cursor += segment.length

    free_tail = table.capacity - cursor
    if free_tail > 0:
        rebuilt.append(Segment.hole(cursor, free_tail))
        store.clear(cursor, free_tail)
    table.replace(rebuilt)
    return CompactionReport(relocated=relocated, bytes_moved=bytes_moved, free_tail=free_tail)
