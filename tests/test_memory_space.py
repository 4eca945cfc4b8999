import unittest

from contig_memory.memory_space import (
    HOLE_NAME,
    InvariantViolation,
    Segment,
    SegmentRole,
    SegmentTable,
)


def process(base: int, length: int, name: str, owner_id: int) -> Segment:
    return Segment(SegmentRole.OCCUPIED, base, length, name, owner_id)


class SegmentTests(unittest.TestCase):
    def test_split_returns_remainder_hole(self) -> None:
        segment = Segment.hole(10, 50)
        remainder = segment.split(20)
        self.assertEqual((segment.base, segment.length), (10, 20))
        self.assertIsNotNone(remainder)
        self.assertEqual((remainder.base, remainder.length), (30, 30))
        self.assertTrue(remainder.is_free)

    def test_exact_split_has_no_remainder(self) -> None:
        segment = Segment.hole(0, 8)
        self.assertIsNone(segment.split(8))

    def test_mark_as_hole_clears_owner(self) -> None:
        segment = process(0, 4, "P1", 3)
        segment.mark_as_hole()
        self.assertTrue(segment.is_free)
        self.assertEqual(segment.owner_id, 0)
        self.assertEqual(segment.owner_name, HOLE_NAME)


class SegmentTableTests(unittest.TestCase):
    def test_new_table_is_single_hole(self) -> None:
        table = SegmentTable(100)
        self.assertEqual(len(table), 1)
        self.assertTrue(table[0].is_free)
        self.assertEqual((table[0].base, table[0].length), (0, 100))
        table.check_invariants()

    def test_insert_keeps_base_order(self) -> None:
        table = SegmentTable(30)
        table.replace([process(0, 10, "A", 1), process(20, 10, "C", 3)])
        table.insert(process(10, 10, "B", 2))
        self.assertEqual([s.owner_name for s in table], ["A", "B", "C"])
        table.check_invariants()

    def test_inserted_hole_coalesces_with_both_neighbours(self) -> None:
        table = SegmentTable(30)
        table.replace([Segment.hole(0, 10), Segment.hole(20, 10)])
        merged = table.insert(Segment.hole(10, 10))
        self.assertEqual(len(table), 1)
        self.assertIs(table[0], merged)
        self.assertEqual((merged.base, merged.length), (0, 30))

    def test_merge_absorbs_into_left_neighbour(self) -> None:
        left = Segment.hole(0, 10)
        middle = process(10, 5, "P", 1)
        right = process(15, 15, "Q", 2)
        table = SegmentTable(30)
        table.replace([left, middle, right])
        middle.mark_as_hole()
        survivor = table.merge(middle)
        self.assertIs(survivor, left)
        self.assertEqual(left.length, 15)
        self.assertEqual(len(table), 2)
        table.check_invariants()

    def test_find_by_name_ignores_holes(self) -> None:
        table = SegmentTable(20)
        table.replace([process(0, 10, "P1", 1), Segment.hole(10, 10)])
        self.assertIs(table.find_by_name("P1"), table[0])
        self.assertIsNone(table.find_by_name(HOLE_NAME))
        self.assertIsNone(table.find_by_name(""))
        self.assertIsNone(table.find_by_name("P2"))

    def test_occupy_splits_hole_into_new_process(self) -> None:
        table = SegmentTable(50)
        hole = table[0]
        segment = table.occupy(hole, 20, "P1", 1)
        self.assertIsNot(segment, hole)
        self.assertFalse(table.contains(hole))
        self.assertEqual([(s.owner_name, s.base, s.length) for s in table], [("P1", 0, 20), (HOLE_NAME, 20, 30)])
        table.check_invariants()

    def test_occupy_rejects_non_hole(self) -> None:
        table = SegmentTable(50)
        segment = table.occupy(table[0], 50, "P1", 1)
        with self.assertRaises(ValueError):
            table.occupy(segment, 10, "P2", 2)

    def test_contains_uses_identity(self) -> None:
        table = SegmentTable(10)
        self.assertTrue(table.contains(table[0]))
        self.assertFalse(table.contains(Segment.hole(0, 10)))
        self.assertFalse(table.contains(None))

    def test_check_invariants_reports_gap(self) -> None:
        table = SegmentTable(30)
        table.replace([process(0, 10, "A", 1), process(15, 15, "B", 2)])
        with self.assertRaises(InvariantViolation):
            table.check_invariants()

    def test_check_invariants_reports_adjacent_holes(self) -> None:
        table = SegmentTable(20)
        table.replace([Segment.hole(0, 10), Segment.hole(10, 10)])
        with self.assertRaises(InvariantViolation):
            table.check_invariants()


if __name__ == "__main__":
    unittest.main()
