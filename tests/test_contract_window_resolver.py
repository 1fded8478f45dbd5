from __future__ import annotations

import datetime as dt
import unittest
from unittest.mock import patch

from bubbles.errors import InvariantViolation
from bubbles.window import days_before, last_occurrence_of_weekday, rolling_week

REF = dt.date(2024, 1, 7)  # Sunday


class TestWindowResolverContract(unittest.TestCase):
    def test_rolling_week_shape(self) -> None:
        for ref in (REF, dt.date(2024, 3, 1), dt.date(2023, 12, 31), dt.date(2024, 2, 29)):
            days = rolling_week(ref)
            self.assertEqual(len(days), 7)
            self.assertEqual(days[-1], ref)
            for a, b in zip(days, days[1:]):
                self.assertEqual(b - a, dt.timedelta(days=1))

    def test_rolling_week_exact(self) -> None:
        self.assertEqual(rolling_week(REF), [dt.date(2024, 1, d) for d in range(1, 8)])

    def test_rolling_week_offset(self) -> None:
        days = rolling_week(REF, 3)
        self.assertEqual(days[0], dt.date(2023, 12, 29))
        self.assertEqual(days[-1], dt.date(2024, 1, 4))

    def test_rolling_week_rejects_negative_offset(self) -> None:
        with self.assertRaises(ValueError):
            rolling_week(REF, -1)

    def test_out_of_range_offset_is_a_value_error(self) -> None:
        for off in (800000, 10**12):
            with self.assertRaises(ValueError, msg=off):
                rolling_week(REF, off)
            with self.assertRaises(ValueError, msg=off):
                days_before(REF, off)
        with self.assertRaises(ValueError):
            rolling_week(dt.date(1, 1, 3))
        self.assertEqual(days_before(REF, 6), dt.date(2024, 1, 1))

    def test_weekday_resolution_in_range_and_unique(self) -> None:
        for delta in range(14):
            ref = REF + dt.timedelta(days=delta)
            seen = set()
            for wd in range(7):
                d = last_occurrence_of_weekday(ref, wd)
                self.assertEqual(d.weekday(), wd)
                self.assertTrue(ref - dt.timedelta(days=6) <= d <= ref)
                seen.add(d)
            self.assertEqual(seen, set(rolling_week(ref)))

    def test_weekday_resolution_concrete(self) -> None:
        self.assertEqual(last_occurrence_of_weekday(REF, 2), dt.date(2024, 1, 3))  # Wednesday
        self.assertEqual(last_occurrence_of_weekday(REF, 6), REF)  # today counts
        self.assertEqual(last_occurrence_of_weekday(REF, 0), dt.date(2024, 1, 1))

    def test_weekday_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            last_occurrence_of_weekday(REF, 7)

    def test_broken_window_raises_invariant_violation(self) -> None:
        short = [REF - dt.timedelta(days=i) for i in range(5, -1, -1)]  # Monday missing
        long = [REF - dt.timedelta(days=i) for i in range(7, -1, -1)]  # Sunday twice
        with patch("bubbles.window.rolling_week", return_value=short):
            with self.assertRaises(InvariantViolation):
                last_occurrence_of_weekday(REF, 0)
        with patch("bubbles.window.rolling_week", return_value=long):
            with self.assertRaises(InvariantViolation):
                last_occurrence_of_weekday(REF, 6)


if __name__ == "__main__":
    unittest.main(verbosity=2)
