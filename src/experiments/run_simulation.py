from __future__ import annotations

import argparse

from contig_memory import AddressSpace
from contig_memory.report import format_snapshot, format_stats
from experiments.workload import SimulatedWorkload


def run_simulation(steps: int, capacity: int, strategy: str, compact_threshold: float) -> None:
    workload = SimulatedWorkload(seed=42, max_size=max(16, capacity // 8), strategy=strategy)
    space = AddressSpace(capacity, default_strategy=strategy)

    for step, operation in enumerate(workload.operations(steps), start=1):
        if operation.kind == "release":
            space.release_by_name(operation.name)
            continue
        result = space.request(operation.name, operation.size)
        workload.confirm(operation, bool(result))
        if not result:
            print(f"[step {step}] {operation.name} ({operation.size} bytes) failed: {result.reason.value}")
            if space.fragmentation() > compact_threshold:
                report = space.compact()
                print(f"[step {step}] compacted: moved {report.bytes_moved} bytes, free tail {report.free_tail}")

    print("Final stats:", format_stats(space.stats()))
    print("Segment map:")
    for line in format_snapshot(space.snapshot()):
        print("  " + line)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a contiguous allocation simulation.")
    parser.add_argument("--steps", type=int, default=40, help="Number of operations to generate.")
    parser.add_argument("--capacity", type=int, default=16384, help="Address space size in bytes.")
    parser.add_argument("--strategy", type=str, default="f", help="Placement strategy: f, b or w.")
    parser.add_argument("--compact-threshold", type=float, default=0.4, help="Compact after a failure above this fragmentation.")
    args = parser.parse_args()
    run_simulation(args.steps, args.capacity, args.strategy, args.compact_threshold)
