from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .results import SegmentInfo


def format_segment(info: SegmentInfo) -> str:
    return f"[{info.id}] {info.name} - [{info.base}: {info.end}) - {info.length}"


def format_snapshot(snapshot: Iterable[SegmentInfo]) -> List[str]:
    return [format_segment(info) for info in snapshot]


def format_stats(stats: Dict[str, Any]) -> str:
    return (
        f"capacity={stats['capacity']} used={stats['heap_used']} free={stats['heap_free']} "
        f"processes={stats['processes']} holes={stats['holes']} "
        f"largest_hole={stats['largest_hole']} fragmentation={stats['fragmentation']:.3f}"
    )
