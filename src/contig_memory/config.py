from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .memory_manager import MAX_SPACE_SIZE, AddressSpace

if TYPE_CHECKING:
    from experiments.instrumentation import MemoryProfiler


@dataclass
class AllocatorConfig:
    """
    Settings for building an AddressSpace.

    initial_size: bytes managed at start-up (clamped to max_size).
    default_strategy: placement tag used when a request names none.
    mark_bytes: stamp each process range with its owner-id marker byte.
    profile_dir: where a MemoryProfiler flushes its JSONL/CSV output, if any.
    """

    initial_size: int = 1 << 20
    max_size: int = MAX_SPACE_SIZE
    default_strategy: str = "f"
    mark_bytes: bool = True
    thread_safe: bool = False
    profile_dir: Optional[str] = None
    run_id: str = "allocator"

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "AllocatorConfig":
        config = cls()
        if getattr(args, "size", None) is not None:
            config.initial_size = args.size
        if getattr(args, "strategy", None):
            config.default_strategy = args.strategy
        if getattr(args, "no_marking", False):
            config.mark_bytes = False
        if getattr(args, "thread_safe", False):
            config.thread_safe = True
        if getattr(args, "profile_dir", None):
            config.profile_dir = args.profile_dir
        if getattr(args, "run_id", None):
            config.run_id = args.run_id
        return config

    def build(self, profiler: Optional["MemoryProfiler"] = None) -> AddressSpace:
        return AddressSpace(
            self.initial_size,
            max_size=self.max_size,
            default_strategy=self.default_strategy,
            mark_bytes=self.mark_bytes,
            thread_safe=self.thread_safe,
            profiler=profiler,
        )
