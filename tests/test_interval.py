"""
Unit tests for Interval.

Definition used here:
- contains(dt) is strict: dt == start or dt == end is NOT contained
- overlaps is symmetric
- back-to-back intervals (shared boundary) do NOT overlap
"""

import unittest
from datetime import datetime, timedelta, timezone
from itertools import product
from zoneinfo import ZoneInfo

from yomtovcheck.interval import Interval, shift

NY = ZoneInfo("America/New_York")


def ny(*args: int) -> datetime:
    return datetime(*args, tzinfo=NY)


class TestContains(unittest.TestCase):
    def setUp(self) -> None:
        self.iv = Interval(ny(2024, 1, 5, 18, 0), ny(2024, 1, 6, 19, 0))

    def test_boundaries_are_not_contained(self) -> None:
        self.assertFalse(self.iv.contains(self.iv.start))
        self.assertFalse(self.iv.contains(self.iv.end))

    def test_strictly_inside_is_contained(self) -> None:
        self.assertTrue(self.iv.contains(ny(2024, 1, 5, 18, 1)))
        self.assertTrue(self.iv.contains(ny(2024, 1, 6, 18, 59)))

    def test_other_zone_compares_by_instant(self) -> None:
        # 2024-01-05 23:30 UTC == 18:30 New York
        self.assertTrue(self.iv.contains(datetime(2024, 1, 5, 23, 30, tzinfo=timezone.utc)))
        self.assertFalse(self.iv.contains(datetime(2024, 1, 5, 23, 0, tzinfo=timezone.utc)))


class TestOverlaps(unittest.TestCase):
    def test_back_to_back_do_not_overlap(self) -> None:
        a = Interval(ny(2024, 1, 5, 17, 0), ny(2024, 1, 5, 18, 0))
        b = Interval(ny(2024, 1, 5, 18, 0), ny(2024, 1, 5, 19, 0))
        self.assertFalse(a.overlaps(b))
        self.assertFalse(b.overlaps(a))

    def test_partial_and_nested_overlap(self) -> None:
        outer = Interval(ny(2024, 1, 5, 18, 0), ny(2024, 1, 6, 19, 0))
        partial = Interval(ny(2024, 1, 6, 18, 30), ny(2024, 1, 6, 20, 0))
        nested = Interval(ny(2024, 1, 6, 10, 0), ny(2024, 1, 6, 11, 0))
        self.assertTrue(outer.overlaps(partial))
        self.assertTrue(outer.overlaps(nested))
        self.assertTrue(nested.overlaps(outer))

    def test_identical_intervals_do_not_overlap(self) -> None:
        """
        Documents the strict rule: no endpoint of one lies strictly inside the other.
        """
        a = Interval(ny(2024, 1, 5, 10, 0), ny(2024, 1, 5, 11, 0))
        self.assertFalse(a.overlaps(Interval(a.start, a.end)))

    def test_symmetry(self) -> None:
        points = [ny(2024, 1, 5, h, 0) for h in (8, 9, 10, 11, 12)]
        intervals = [Interval(s, e) for s, e in product(points, points) if s <= e]
        for a, b in product(intervals, intervals):
            self.assertEqual(a.overlaps(b), b.overlaps(a), msg=f"{a} / {b}")


class TestIntervalMisc(unittest.TestCase):
    def test_start_after_end_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Interval(ny(2024, 1, 5, 11, 0), ny(2024, 1, 5, 10, 0))

    def test_naive_datetime_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Interval(datetime(2024, 1, 5, 10, 0), ny(2024, 1, 5, 11, 0))

    def test_canonical_keeps_instants(self) -> None:
        utc = Interval(
            datetime(2024, 1, 5, 23, 0, tzinfo=timezone.utc),
            datetime(2024, 1, 6, 0, 0, tzinfo=timezone.utc),
        )
        c = utc.canonical(NY)
        self.assertIs(c.start.tzinfo, NY)
        self.assertEqual(c.start, utc.start)
        self.assertEqual(c.end, utc.end)
        self.assertEqual((c.start.hour, c.end.hour), (18, 19))

    def test_duration_across_dst_change(self) -> None:
        # clocks jump forward on 2024-03-10
        iv = Interval(ny(2024, 3, 9, 12, 0), ny(2024, 3, 10, 12, 0))
        self.assertEqual(iv.duration(), timedelta(hours=23))

    def test_shift_uses_absolute_time(self) -> None:
        start = ny(2024, 3, 8, 18, 0)
        end = shift(start, timedelta(hours=73))
        self.assertEqual(end.astimezone(timezone.utc) - start.astimezone(timezone.utc), timedelta(hours=73))
        self.assertEqual((end.month, end.day, end.hour), (3, 11, 20))
        self.assertIs(end.tzinfo, NY)


if __name__ == "__main__":
    unittest.main()
