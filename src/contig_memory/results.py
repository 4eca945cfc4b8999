from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .memory_space import Segment


class FailureReason(Enum):
    ZERO_SIZE = "zero_size"
    INVALID_NAME = "invalid_name"
    DUPLICATE_NAME = "duplicate_name"
    INSUFFICIENT_SPACE = "insufficient_space"


@dataclass(frozen=True)
class RequestResult:
    """Outcome of AddressSpace.request; truthy when the allocation succeeded."""

    ok: bool
    reason: Optional[FailureReason] = None
    segment: Optional[Segment] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, segment: Segment) -> "RequestResult":
        return cls(ok=True, segment=segment)

    @classmethod
    def failure(cls, reason: FailureReason) -> "RequestResult":
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class CompactionReport:
    relocated: int
    bytes_moved: int
    free_tail: int


@dataclass(frozen=True)
class SegmentInfo:
    """Read-only view of one segment, as returned by AddressSpace.snapshot."""

    id: int
    name: str
    role: str
    base: int
    end: int
    length: int

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "base": self.base,
            "end": self.end,
            "length": self.length,
        }


class AllocatorEvent(str, Enum):
    """Event types an AddressSpace reports to its profiler."""

    INITIALIZE = "initialize"
    REQUEST = "request"
    REQUEST_FAILED = "request_failed"
    RELEASE = "release"
    COMPACT = "compact"
