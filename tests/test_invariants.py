import random

import pytest

from contig_memory import AddressSpace


@pytest.mark.parametrize("strategy", ["f", "b", "w"])
def test_random_operations_preserve_table_invariants(strategy):
    rng = random.Random(7)
    space = AddressSpace(2048)
    live = []
    last_id = 0
    for step in range(400):
        roll = rng.random()
        if roll < 0.5 or not live:
            name = f"P{step}"
            result = space.request(name, rng.randint(1, 200), strategy)
            if result:
                assert result.segment.owner_id > last_id
                last_id = result.segment.owner_id
                live.append(name)
        elif roll < 0.9:
            name = live.pop(rng.randrange(len(live)))
            assert space.release_by_name(name) is not None
        else:
            space.compact()
        space.table.check_invariants()
        assert space.process_count == len(live)


def test_compact_twice_matches_compact_once():
    space = AddressSpace(500)
    for index in range(10):
        space.request(f"P{index}", 20 + index)
    for index in range(0, 10, 3):
        space.release_by_name(f"P{index}")
    space.compact()
    first = [info.as_dict() for info in space.snapshot()]
    bytes_once = space.read(0, 500)
    space.compact()
    assert [info.as_dict() for info in space.snapshot()] == first
    assert space.read(0, 500) == bytes_once
