from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, TypeVar

from .allocators import Strategy, resolve_allocator
from .backing_store import BackingStore
from .compaction import compact
from .locks import ReadWriteLock
from .memory_space import HOLE_NAME, Segment, SegmentRole, SegmentTable
from .results import AllocatorEvent, CompactionReport, FailureReason, RequestResult, SegmentInfo

if TYPE_CHECKING:
    from experiments.instrumentation import MemoryProfiler

MAX_SPACE_SIZE = 1 << 24

T = TypeVar("T")


class AddressSpace:
    """
    Simulated contiguous address space with first/best/worst-fit placement.

    The space owns a segment table, a backing byte buffer and the owner-id
    counter. Each instance is independent; nothing is shared between spaces.
    Request failures come back as RequestResult values rather than exceptions.
    """

    def __init__(
        self,
        size: int,
        *,
        max_size: int = MAX_SPACE_SIZE,
        default_strategy: Strategy = "f",
        mark_bytes: bool = True,
        thread_safe: bool = False,
        profiler: Optional["MemoryProfiler"] = None,
    ) -> None:
        self.max_size = max_size
        self.default_strategy = default_strategy
        self.profiler = profiler
        self._lock = ReadWriteLock() if thread_safe else None

        self.capacity = self._clamp(size)
        self.table = SegmentTable(self.capacity)
        self.store = BackingStore(self.capacity, marking=mark_bytes)
        self.process_count = 0
        self.last_owner_id = 0

    # -- Locking -------------------------------------------------------------------
    def _write(self, op: Callable[[], T]) -> T:
        if self._lock:
            with self._lock.write_lock():
                return op()
        return op()

    def _read(self, op: Callable[[], T]) -> T:
        if self._lock:
            with self._lock.read_lock():
                return op()
        return op()

    # -- Lifecycle -----------------------------------------------------------------
    def _clamp(self, size: int) -> int:
        if size < 0:
            raise ValueError(f"Address space size must be non-negative, got {size}")
        return max(1, min(size, self.max_size))

    def initialize(self, size: int) -> int:
        """
        Discard every segment and byte and start over with a fresh space.
        Returns the effective capacity after clamping.
        """
        capacity = self._clamp(size)

        def write_op() -> int:
            self.capacity = capacity
            self.table.reset(capacity)
            self.store.reset(capacity)
            self.process_count = 0
            self.last_owner_id = 0
            if self.profiler:
                self.profiler.record_event(AllocatorEvent.INITIALIZE, {"capacity": capacity})
            return capacity

        return self._write(write_op)

    def _next_owner_id(self) -> int:
        self.last_owner_id += 1
        return self.last_owner_id

    # -- Allocation ----------------------------------------------------------------
    def request(self, name: str, size: int, strategy: Strategy = None) -> RequestResult:
        """Allocate `size` bytes for process `name` using the given placement strategy."""
        if size < 0:
            raise ValueError(f"Request size must be non-negative, got {size}")
        if strategy is None:
            strategy = self.default_strategy

        def write_op() -> RequestResult:
            reason = self._precheck(name, size)
            hole = None
            if reason is None:
                allocator = resolve_allocator(strategy)
                hole = allocator.find_hole(self.table, size) if allocator else None
                if hole is None:
                    reason = FailureReason.INSUFFICIENT_SPACE
            if reason is not None:
                if self.profiler:
                    self.profiler.record_event(
                        AllocatorEvent.REQUEST_FAILED,
                        {"name": name, "size": size, "reason": reason.value, "strategy": str(strategy)},
                    )
                return RequestResult.failure(reason)
            segment = self._occupy(hole, name, size)
            if self.profiler:
                self.profiler.record_event(
                    AllocatorEvent.REQUEST,
                    {
                        "name": name,
                        "size": size,
                        "owner_id": segment.owner_id,
                        "base": segment.base,
                        "strategy": str(strategy),
                        "heap_used": self._heap_used(),
                        "heap_free": self._heap_free(),
                    },
                )
            return RequestResult.success(segment)

        return self._write(write_op)

    def _precheck(self, name: str, size: int) -> Optional[FailureReason]:
        if size == 0:
            return FailureReason.ZERO_SIZE
        if not name or name == HOLE_NAME:
            return FailureReason.INVALID_NAME
        if self.table.find_by_name(name) is not None:
            return FailureReason.DUPLICATE_NAME
        return None

    def _occupy(self, hole: Segment, name: str, size: int) -> Segment:
        owner_id = self._next_owner_id()
        segment = self.table.occupy(hole, size, name, owner_id)
        self.store.mark(segment.base, segment.length, owner_id)
        self.process_count += 1
        return segment

    def release(self, segment: Optional[Segment]) -> bool:
        """
        Return a process segment to the free pool and coalesce it with any
        neighbouring holes. Releasing None, a hole, or a segment that belongs
        to another table does nothing and returns False.

        A released handle stays dead: placement always creates a fresh segment
        object for the next owner of the range, so releasing an old handle
        twice never frees somebody else.
        """
        return self._write(lambda: self._release(segment))

    def release_by_name(self, name: str) -> Optional[int]:
        """Release the process called `name`; returns its length, or None if unknown."""

        def write_op() -> Optional[int]:
            segment = self.table.find_by_name(name)
            if segment is None:
                return None
            length = segment.length
            self._release(segment)
            return length

        return self._write(write_op)

    def _release(self, segment: Optional[Segment]) -> bool:
        if segment is None or segment.is_free or not self.table.contains(segment):
            return False
        name, owner_id = segment.owner_name, segment.owner_id
        base, length = segment.base, segment.length
        self.store.clear(base, length)
        segment.mark_as_hole()
        self.process_count -= 1
        self.table.merge(segment)
        if self.profiler:
            self.profiler.record_event(
                AllocatorEvent.RELEASE,
                {
                    "name": name,
                    "owner_id": owner_id,
                    "base": base,
                    "length": length,
                    "heap_free": self._heap_free(),
                },
            )
        return True

    def find_by_name(self, name: str) -> Optional[Segment]:
        return self._read(lambda: self.table.find_by_name(name))

    # -- Compaction ----------------------------------------------------------------
    def compact(self) -> CompactionReport:
        def write_op() -> CompactionReport:
            report = compact(self.table, self.store)
            if self.profiler:
                self.profiler.record_event(
                    AllocatorEvent.COMPACT,
                    {
                        "relocated": report.relocated,
                        "bytes_moved": report.bytes_moved,
                        "free_tail": report.free_tail,
                    },
                )
            return report

        return self._write(write_op)

    # -- Introspection -------------------------------------------------------------
    def _heap_used(self) -> int:
        return sum(segment.length for segment in self.table if not segment.is_free)

    def _heap_free(self) -> int:
        return sum(segment.length for segment in self.table if segment.is_free)

    def snapshot(self) -> List[SegmentInfo]:
        """Ordered view of every segment, for reporting."""

        def read_op() -> List[SegmentInfo]:
            return [
                SegmentInfo(
                    id=segment.owner_id,
                    name=segment.owner_name,
                    role=segment.role.value,
                    base=segment.base,
                    end=segment.end,
                    length=segment.length,
                )
                for segment in self.table
            ]

        return self._read(read_op)

    @staticmethod
    def _fragmentation(holes: List[Segment]) -> float:
        available = sum(hole.length for hole in holes)
        if not holes or available == 0:
            return 0.0
        return 1.0 - (max(hole.length for hole in holes) / available)

    def fragmentation(self) -> float:
        """1 - largest hole / total free space; 0.0 when nothing or one hole is free."""
        return self._read(lambda: self._fragmentation(self.table.free_segments()))

    def stats(self) -> Dict[str, Any]:
        def read_op() -> Dict[str, Any]:
            holes = self.table.free_segments()
            return {
                "capacity": self.capacity,
                "heap_used": self._heap_used(),
                "heap_free": sum(hole.length for hole in holes),
                "processes": self.process_count,
                "holes": len(holes),
                "largest_hole": max((hole.length for hole in holes), default=0),
                "fragmentation": self._fragmentation(holes),
                "last_owner_id": self.last_owner_id,
            }

        return self._read(read_op)

    def read(self, base: int, length: int) -> bytes:
        return self._read(lambda: self.store.read(base, length))

    def segments(self, role: Optional[SegmentRole] = None) -> List[Segment]:
        return self._read(
            lambda: [segment for segment in self.table if role is None or segment.role is role]
        )
