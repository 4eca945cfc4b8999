from __future__ import annotations


class BackingStore:
    """
    Raw byte buffer behind the simulated address space.

    Allocation stamps a marker byte over a process range, release and
    compaction zero ranges, and compaction moves process bytes. None of this
    feeds back into the segment table; it only makes the layout observable.
    """

    def __init__(self, size: int, *, marking: bool = True) -> None:
        self.marking = marking
        self._buffer = bytearray(size)

    def __len__(self) -> int:
        return len(self._buffer)

    def reset(self, size: int) -> None:
        self._buffer = bytearray(size)

    def mark(self, base: int, length: int, owner_id: int) -> None:
        if not self.marking:
            return
        self._buffer[base : base + length] = bytes([owner_id % 256]) * length

    def clear(self, base: int, length: int) -> None:
        self._buffer[base : base + length] = bytes(length)

    def move(self, source: int, destination: int, length: int) -> None:
        # Slice assignment copies the source first, so overlapping ranges are safe.
        self._buffer[destination : destination + length] = self._buffer[source : source + length]

    def read(self, base: int, length: int) -> bytes:
        return bytes(self._buffer[base : base + length])
