from __future__ import annotations

import argparse
import csv
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List

from contig_memory import AddressSpace
from experiments.instrumentation import MemoryProfiler
from experiments.workload import SimulatedWorkload


@dataclass
class ExperimentConfig:
    label: str
    capacity: int
    strategy: str
    steps: int = 500
    min_size: int = 16
    max_size: int = 4096
    release_probability: float = 0.4
    fragmentation_threshold: float = 0.5
    check_invariants: bool = False


def run_single(config: ExperimentConfig, seed: int) -> Dict[str, float]:
    workload = SimulatedWorkload(
        seed=seed,
        min_size=config.min_size,
        max_size=config.max_size,
        release_probability=config.release_probability,
        strategy=config.strategy,
    )
    profiler = MemoryProfiler(run_id=f"{config.label}_seed{seed}")
    space = AddressSpace(config.capacity, default_strategy=config.strategy, profiler=profiler)

    requests = 0
    failures = 0
    fragmentation_sum = 0.0
    observations = 0

    for operation in workload.operations(config.steps):
        if operation.kind == "release":
            space.release_by_name(operation.name)
        else:
            requests += 1
            result = space.request(operation.name, operation.size, operation.strategy)
            if not result:
                failures += 1
                # Retry once after defragmenting if free space is scattered.
                if space.fragmentation() > config.fragmentation_threshold:
                    space.compact()
                    result = space.request(operation.name, operation.size, operation.strategy)
            workload.confirm(operation, bool(result))

        if config.check_invariants:
            space.table.check_invariants()
        fragmentation_sum += space.fragmentation()
        observations += 1

    final_stats = space.stats()
    compactions, bytes_compacted = profiler.compaction_totals()
    return {
        "config": config.label,
        "seed": seed,
        "strategy": config.strategy,
        "steps": config.steps,
        "requests": requests,
        "failures": failures,
        "failure_rate": failures / requests if requests else 0.0,
        "avg_fragmentation": fragmentation_sum / observations if observations else 0.0,
        "compactions": compactions,
        "bytes_compacted": bytes_compacted,
        "final_processes": final_stats["processes"],
        "final_heap_used": final_stats["heap_used"],
        "final_fragmentation": final_stats["fragmentation"],
    }


def build_default_configs(args: argparse.Namespace) -> List[ExperimentConfig]:
    configs = [
        ExperimentConfig(label="first_fit", capacity=args.capacity, strategy="f"),
        ExperimentConfig(label="best_fit", capacity=args.capacity, strategy="b"),
        ExperimentConfig(label="worst_fit", capacity=args.capacity, strategy="w"),
    ]
    for config in configs:
        config.steps = args.steps
        config.max_size = args.max_request
        config.release_probability = args.release_probability
        config.fragmentation_threshold = args.fragmentation_threshold
        config.check_invariants = args.check
    return configs


def write_summary(path: str, records: Iterable[Dict[str, float]]) -> None:
    records = list(records)
    if not records:
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(records[0].keys()))
        writer.writeheader()
        writer.writerows(records)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare first/best/worst-fit placement under synthetic workloads.")
    parser.add_argument("--steps", type=int, default=500, help="Operations per run.")
    parser.add_argument("--seeds", type=int, default=5, help="Number of random seeds to evaluate.")
    parser.add_argument("--seed-offset", type=int, default=0, help="Offset applied to generated seeds.")
    parser.add_argument("--capacity", type=int, default=65536, help="Address space size in bytes.")
    parser.add_argument("--max-request", type=int, default=4096, help="Largest request size in bytes.")
    parser.add_argument("--release-probability", type=float, default=0.4, help="Chance that a step releases a process.")
    parser.add_argument("--fragmentation-threshold", type=float, default=0.5, help="Compact on failure above this ratio.")
    parser.add_argument("--check", action="store_true", help="Verify segment table invariants after every step.")
    parser.add_argument("--output", type=str, default="results/strategy_summary.csv", help="Path to CSV summary output.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    records = []
    for config in build_default_configs(args):
        for index in range(args.seeds):
            summary = run_single(config, seed=args.seed_offset + index)
            records.append(summary)
            print(
                f"{config.label} seed={summary['seed']} failure_rate={summary['failure_rate']:.3f} "
                f"avg_fragmentation={summary['avg_fragmentation']:.3f} compactions={summary['compactions']}"
            )
    write_summary(args.output, records)
    print(f"Wrote {len(records)} rows to {args.output}")


if __name__ == "__main__":
    main()
