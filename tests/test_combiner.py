import unittest
from datetime import datetime
from decimal import Decimal

from activities import ActivityRecord, ActivityTotals
from combiner import SourceFailure, SourceResult, breakdown_by_source, combine
from timeframes import Interval

WEEK = Interval(datetime(2025, 6, 9), datetime(2025, 6, 15, 23, 59, 59, 999999))


def make_activity(distance_m: int, category: str = "Run") -> ActivityRecord:
    return ActivityRecord(
        category=category,
        distance_meters=Decimal(distance_m),
        moving_time_seconds=Decimal("1800"),
        elapsed_time_seconds=Decimal("1900"),
        elevation_gain_meters=Decimal("10"),
        start_timestamp=datetime(2025, 6, 10, 7),
    )


class CombineTests(unittest.TestCase):
    def test_one_failed_source_does_not_hide_the_others(self):
        alice = [make_activity(5000), make_activity(6000)]
        carol = [make_activity(7000)]
        pool = combine([
            SourceResult("alice", alice),
            SourceResult("bob", None, "UNAUTHORIZED"),
            SourceResult("carol", carol),
        ])
        self.assertEqual(pool.activities, alice + carol)
        self.assertEqual(pool.failures, [SourceFailure("bob", "UNAUTHORIZED")])

    def test_error_wins_over_partial_pool(self):
        pool = combine([SourceResult("bob", [make_activity(1000)], "RATE_LIMITED")])
        self.assertEqual(pool.activities, [])
        self.assertEqual(len(pool.failures), 1)

    def test_missing_pool_without_error_is_a_failure(self):
        pool = combine([SourceResult("dave", None)])
        self.assertEqual(pool.activities, [])
        self.assertEqual(pool.failures[0].source_id, "dave")

    def test_duplicates_across_sources_are_kept(self):
        shared = make_activity(5000)
        pool = combine([SourceResult("a", [shared]), SourceResult("b", [shared])])
        self.assertEqual(len(pool.activities), 2)

    def test_empty_source_list(self):
        pool = combine([])
        self.assertEqual(pool.activities, [])
        self.assertEqual(pool.failures, [])

    def test_empty_successful_pool_is_not_a_failure(self):
        pool = combine([SourceResult("erin", [])])
        self.assertEqual(pool.failures, [])


class BreakdownTests(unittest.TestCase):
    def test_single_category_string(self):
        breakdown = breakdown_by_source([SourceResult("alice", [make_activity(5000)])], WEEK, "Run")
        self.assertEqual(breakdown["alice"].count, 1)

    def test_breakdown_skips_failed_sources(self):
        breakdown = breakdown_by_source([
            SourceResult("alice", [make_activity(5000), make_activity(2000, "Ride")]),
            SourceResult("bob", None, "Timed out"),
            SourceResult("carol", []),
        ], WEEK, ["Run"])
        self.assertEqual(set(breakdown), {"alice", "carol"})
        self.assertEqual(breakdown["alice"].count, 1)
        self.assertEqual(breakdown["alice"].distance_meters, Decimal("5000"))
        self.assertEqual(breakdown["carol"], ActivityTotals.zero())


if __name__ == "__main__":
    unittest.main()
