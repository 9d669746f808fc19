import unittest
from datetime import date, datetime

import pytz

from circaevum.timescale import HeightScale, days_in_month, fixed_clock, wall_clock


class TestHeightScale(unittest.TestCase):
    def setUp(self) -> None:
        self.scale = HeightScale()

    def test_year_starts_are_multiples_of_100(self) -> None:
        self.assertEqual(self.scale.height_for_year(2000), 0.0)
        self.assertEqual(self.scale.height_for_year(2024), 2400.0)
        self.assertAlmostEqual(self.scale.date_to_height(2024, 0, 1), 2400.0)

    def test_months_are_uniform_regardless_of_length(self) -> None:
        feb = self.scale.date_to_height(2024, 1, 1)
        mar = self.scale.date_to_height(2024, 2, 1)
        apr = self.scale.date_to_height(2024, 3, 1)
        self.assertAlmostEqual(mar - feb, 100 / 12)
        self.assertAlmostEqual(apr - mar, 100 / 12)

    def test_days_subdivide_their_month(self) -> None:
        height = self.scale.date_to_height(2024, 2, 15, 12)
        expected = 2400 + (2 + 14 / 31 + 12 / (24 * 31)) / 12 * 100
        self.assertAlmostEqual(height, expected)

    def test_height_of_date_and_datetime(self) -> None:
        self.assertAlmostEqual(self.scale.height_of(date(2024, 3, 1)), 2400 + 200 / 12)
        self.assertAlmostEqual(
            self.scale.height_of(datetime(2024, 3, 15, 12)),
            self.scale.date_to_height(2024, 2, 15, 12),
        )

    def test_custom_century_start(self) -> None:
        self.assertEqual(HeightScale(century_start=1900).height_for_year(2000), 10000.0)

    def test_monotonic_over_year_end(self) -> None:
        self.assertLess(
            self.scale.height_of(datetime(2024, 12, 31, 23)),
            self.scale.height_of(date(2025, 1, 1)),
        )

    def test_days_in_month_handles_leap_years(self) -> None:
        self.assertEqual(days_in_month(2024, 1), 29)
        self.assertEqual(days_in_month(2023, 1), 28)
        self.assertEqual(days_in_month(2024, 11), 31)


class TestClocks(unittest.TestCase):
    def test_wall_clock_returns_naive_local_time(self) -> None:
        now = wall_clock("Asia/Seoul")()
        self.assertIsNone(now.tzinfo)

    def test_unknown_timezone_raises(self) -> None:
        with self.assertRaises(pytz.UnknownTimeZoneError):
            wall_clock("Not/AZone")

    def test_fixed_clock(self) -> None:
        moment = datetime(2024, 3, 15, 10, 30)
        clock = fixed_clock(moment)
        self.assertEqual(clock(), moment)
        self.assertEqual(clock(), moment)


if __name__ == "__main__":
    unittest.main(verbosity=2)
