from __future__ import annotations

import csv
import itertools
import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from contig_memory.results import AllocatorEvent

Record = Dict[str, object]

LEADING_COLUMNS = ["seq", "timestamp", "run_id", "event"]


@dataclass
class MemoryProfiler:
    """
    Event recorder attached to an AddressSpace.

    Each allocator event becomes one flat record tagged with a sequence
    number. Per-type tallies are kept as records arrive, so summaries do not
    rescan the log. flush() writes the log as JSONL plus a CSV whose columns
    are the union of all record keys.
    """

    run_id: str
    output_dir: Optional[str] = None
    write_immediately: bool = False
    events: List[Record] = field(default_factory=list)
    _seq: Iterator[int] = field(default_factory=itertools.count, repr=False)
    _tally: Counter = field(default_factory=Counter, repr=False)

    def record_event(self, event: Union[AllocatorEvent, str], payload: Dict[str, object]) -> Record:
        kind = AllocatorEvent(event)
        record: Record = {
            "seq": next(self._seq),
            "timestamp": time.time(),
            "run_id": self.run_id,
            "event": kind.value,
            **payload,
        }
        self.events.append(record)
        self._tally[kind] += 1
        if self.write_immediately and self.output_dir:
            with self._jsonl_path().open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(record) + "\n")
        return record

    def events_of(self, event: Union[AllocatorEvent, str]) -> List[Record]:
        kind = AllocatorEvent(event).value
        return [record for record in self.events if record["event"] == kind]

    def counts(self) -> Dict[str, int]:
        return {kind.value: total for kind, total in self._tally.items()}

    def failure_reasons(self) -> Dict[str, int]:
        """How many requests failed, keyed by FailureReason value."""
        return dict(Counter(record["reason"] for record in self.events_of(AllocatorEvent.REQUEST_FAILED)))

    def compaction_totals(self) -> Tuple[int, int]:
        """(compactions run, bytes moved across all of them)."""
        compactions = self.events_of(AllocatorEvent.COMPACT)
        return len(compactions), sum(int(record["bytes_moved"]) for record in compactions)

    def _output_path(self) -> Path:
        output_path = Path(self.output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        return output_path

    def _jsonl_path(self) -> Path:
        return self._output_path() / f"{self.run_id}.jsonl"

    def flush(self) -> None:
        if not self.output_dir or not self.events:
            return
        with self._jsonl_path().open("w", encoding="utf-8") as handle:
            for record in self.events:
                handle.write(json.dumps(record) + "\n")
        extra = sorted({key for record in self.events for key in record} - set(LEADING_COLUMNS))
        csv_path = self._output_path() / f"{self.run_id}.csv"
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.DictWriter(handle, fieldnames=LEADING_COLUMNS + extra, restval="")
            writer.writeheader()
            writer.writerows(self.events)
