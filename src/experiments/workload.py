from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, List, Optional


@dataclass
class Operation:
    kind: str
    name: str
    size: int = 0
    strategy: Optional[str] = None


class SimulatedWorkload:
    """
    Generate a stream of request/release operations against one address space.

    Request sizes are drawn log-uniformly so the stream mixes many small
    processes with a few large ones, which is what makes placement policy
    matter. Releases always target a process the workload believes is live.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        min_size: int = 16,
        max_size: int = 4096,
        release_probability: float = 0.4,
        strategy: Optional[str] = None,
    ) -> None:
        self.random = random.Random(seed)
        self.min_size = min_size
        self.max_size = max_size
        self.release_probability = release_probability
        self.strategy = strategy
        self._live: List[str] = []
        self._counter = 0

    def _sample_size(self) -> int:
        low, high = self.min_size.bit_length(), self.max_size.bit_length()
        exponent = self.random.uniform(low - 1, high)
        return max(self.min_size, min(self.max_size, int(2 ** exponent)))

    def next_operation(self) -> Operation:
        if self._live and self.random.random() < self.release_probability:
            name = self._live.pop(self.random.randrange(len(self._live)))
            return Operation(kind="release", name=name)
        self._counter += 1
        name = f"P{self._counter}"
        return Operation(kind="request", name=name, size=self._sample_size(), strategy=self.strategy)

    def confirm(self, operation: Operation, succeeded: bool) -> None:
        """Tell the workload whether a request was placed so it can release it later."""
        if operation.kind == "request" and succeeded:
            self._live.append(operation.name)

    def operations(self, steps: int) -> Iterator[Operation]:
        for _ in range(steps):
            yield self.next_operation()
