import unittest

from experiments.strategy_benchmark import ExperimentConfig, run_single
from experiments.workload import SimulatedWorkload


class BenchmarkHarnessTests(unittest.TestCase):
    def test_summary_contains_core_metrics(self) -> None:
        for strategy in ("f", "b", "w"):
            config = ExperimentConfig(
                label=f"test_{strategy}",
                capacity=4096,
                strategy=strategy,
                steps=120,
                max_size=1024,
                check_invariants=True,
            )
            summary = run_single(config, seed=123)
            self.assertIn("failure_rate", summary)
            self.assertIn("avg_fragmentation", summary)
            self.assertGreaterEqual(summary["requests"], 1)
            self.assertGreaterEqual(summary["compactions"], 0)
            self.assertLessEqual(summary["final_heap_used"], 4096)

    def test_same_seed_is_reproducible(self) -> None:
        config = ExperimentConfig(label="repeat", capacity=2048, strategy="b", steps=80)
        self.assertEqual(run_single(config, seed=5), run_single(config, seed=5))


class WorkloadTests(unittest.TestCase):
    def test_releases_only_confirmed_names(self) -> None:
        workload = SimulatedWorkload(seed=1, release_probability=0.9)
        first = workload.next_operation()
        self.assertEqual(first.kind, "request")
        workload.confirm(first, succeeded=False)
        second = workload.next_operation()
        self.assertEqual(second.kind, "request")
        workload.confirm(second, succeeded=True)
        released = [op for op in workload.operations(20) if op.kind == "release"]
        self.assertLessEqual(len(released), 1)
        if released:
            self.assertEqual(released[0].name, second.name)

    def test_sizes_within_bounds(self) -> None:
        workload = SimulatedWorkload(seed=3, min_size=8, max_size=64, release_probability=0.0)
        for operation in workload.operations(100):
            self.assertTrue(8 <= operation.size <= 64)


if __name__ == "__main__":
    unittest.main()
