import unittest

from contig_memory import MAX_SPACE_SIZE
from contig_memory.sizes import parse_size


class ParseSizeTests(unittest.TestCase):
    def test_plain_and_suffixed(self) -> None:
        self.assertEqual(parse_size("512"), 512)
        self.assertEqual(parse_size("64K"), 64 * 1024)
        self.assertEqual(parse_size("64k"), 64 * 1024)
        self.assertEqual(parse_size("2M"), 2 * 1024 * 1024)
        self.assertEqual(parse_size("0"), 0)

    def test_malformed(self) -> None:
        for token in ["", "K", "1.5M", "-4", "12G", "abc", "1KK", "٣"]:
            self.assertIsNone(parse_size(token), token)

    def test_upper_bound(self) -> None:
        self.assertEqual(parse_size("16M"), MAX_SPACE_SIZE)
        self.assertIsNone(parse_size("17M"))
        self.assertIsNone(parse_size("2K", limit=1024))


if __name__ == "__main__":
    unittest.main()
