from __future__ import annotations

from datetime import date
from types import SimpleNamespace
import unittest
from unittest.mock import patch

from rostercal.errors import InvalidMonthError, MalformedDateError
from rostercal.models import IntervalRecord, ShiftType
from rostercal.services.aggregation import (
    aggregate_month,
    next_upcoming,
    shift_hours,
    shift_minutes,
    summarize_leaves,
)


def _shift(record_id, day: date, shift_type: str | None, start: str | None, end: str | None, **kwargs) -> IntervalRecord:
    return IntervalRecord.shift(
        record_id,
        "u1",
        day,
        shift_type=shift_type,
        start_time=start,
        end_time=end,
        **kwargs,
    )


class ShiftHoursTests(unittest.TestCase):
    def test_day_shift(self) -> None:
        self.assertEqual(shift_hours("09:00", "17:00", 60), 7.0)

    def test_night_shift_crosses_midnight(self) -> None:
        minutes, crosses_midnight = shift_minutes("22:00", "06:00", 30)
        self.assertEqual(minutes, 450)
        self.assertTrue(crosses_midnight)

    def test_equal_start_and_end_is_zero(self) -> None:
        self.assertEqual(shift_hours("08:00", "08:00"), 0.0)

    def test_break_longer_than_shift_clamps_to_zero(self) -> None:
        self.assertEqual(shift_hours("09:00", "09:30", 60), 0.0)

    def test_malformed_time(self) -> None:
        for value in ("25:00", "9", "ab:cd", ""):
            with self.subTest(value=value):
                with self.assertRaises(MalformedDateError):
                    shift_hours(value, "17:00")


class AggregateMonthTests(unittest.TestCase):
    def test_night_shift_hours_use_midnight_crossing(self) -> None:
        record = _shift("S1", date(2025, 10, 6), "night", "22:00", "06:00", break_minutes=30)

        stats = aggregate_month([record], 2025, 9)

        self.assertEqual(stats.total_count, 1)
        self.assertEqual(stats.total_minutes, 450)
        self.assertAlmostEqual(stats.total_hours, 7.5)
        self.assertEqual(stats.overnight_record_ids, ["S1"])
        self.assertEqual(stats.count_by_shift_type, {"night": 1})

    def test_shift_type_counts_sum_to_total(self) -> None:
        records = [
            _shift(1, date(2025, 10, 1), "morning", "06:00", "14:00", break_minutes=30),
            _shift(2, date(2025, 10, 2), "morning", "06:00", "14:00", break_minutes=30),
            _shift(3, date(2025, 10, 3), "afternoon", "14:00", "22:00", break_minutes=30),
            _shift(4, date(2025, 10, 4), "night", "22:00", "06:00", break_minutes=30),
            _shift(5, date(2025, 10, 5), "custom", "10:00", "16:00", break_minutes=0),
            _shift(6, date(2025, 10, 6), None, None, None),
        ]

        stats = aggregate_month(records, 2025, 9)

        self.assertEqual(stats.total_count, 6)
        self.assertEqual(sum(stats.count_by_shift_type.values()), stats.total_count)
        self.assertEqual(stats.count_by_shift_type[ShiftType.OTHER.value], 1)
        self.assertEqual(stats.count_by_shift_type["morning"], 2)
        self.assertEqual(stats.total_minutes, 450 * 4 + 360)
        self.assertEqual(stats.count_by_status, {"scheduled": 6})

    def test_cancelled_and_out_of_month_records_are_skipped(self) -> None:
        records = [
            _shift(1, date(2025, 10, 1), "morning", "06:00", "14:00", status="cancelled"),
            _shift(2, date(2025, 11, 1), "morning", "06:00", "14:00"),
            _shift(3, date(2025, 9, 30), "morning", "06:00", "14:00"),
            _shift(4, date(2025, 10, 31), "night", "22:00", "06:00", status="completed"),
        ]

        stats = aggregate_month(records, 2025, 9)

        self.assertEqual(stats.total_count, 1)
        self.assertEqual(stats.count_by_status, {"completed": 1})

    def test_multi_day_leave_counts_days_inside_the_month(self) -> None:
        leave = IntervalRecord.leave("L1", "u1", date(2025, 9, 29), date(2025, 10, 3), status="approved")

        october = aggregate_month([leave], 2025, 9)
        september = aggregate_month([leave], 2025, 8)

        self.assertEqual(october.total_count, 3)
        self.assertEqual(september.total_count, 2)
        self.assertEqual(october.count_by_status, {"approved": 3})
        self.assertEqual(october.count_by_shift_type, {"other": 3})
        self.assertEqual(october.total_minutes, 0)

    def test_missing_break_uses_configured_default(self) -> None:
        record = _shift(1, date(2025, 10, 1), "morning", "06:00", "14:00")
        with patch(
            "rostercal.services.aggregation.get_settings",
            return_value=SimpleNamespace(default_break_minutes=30),
        ):
            stats = aggregate_month([record], 2025, 9)
        self.assertAlmostEqual(stats.total_hours, 7.5)

        self.assertAlmostEqual(aggregate_month([record], 2025, 9).total_hours, 8.0)

    def test_malformed_shift_time_is_reported_and_still_counted(self) -> None:
        record = _shift(1, date(2025, 10, 1), "custom", "25:00", "06:00")
        with self.assertLogs("rostercal.aggregation", level="WARNING"):
            stats = aggregate_month([record], 2025, 9)

        self.assertEqual(stats.total_count, 1)
        self.assertEqual(stats.total_minutes, 0)
        self.assertEqual(len(stats.issues), 1)
        self.assertEqual(stats.issues[0].code, "MALFORMED_DATE")

    def test_invalid_month(self) -> None:
        with self.assertRaises(InvalidMonthError):
            aggregate_month([], 2025, 12)


class LeaveSummaryTests(unittest.TestCase):
    def test_summary_counts_and_days_used(self) -> None:
        records = [
            IntervalRecord.leave(1, "u1", date(2025, 10, 5), date(2025, 10, 7), status="approved"),
            IntervalRecord.leave(2, "u1", date(2025, 10, 9), date(2025, 10, 9), status="approved", is_half_day=True),
            IntervalRecord.leave(3, "u1", date(2025, 10, 12), date(2025, 10, 14), status="pending"),
            IntervalRecord.leave(4, "u1", date(2025, 10, 15), date(2025, 10, 16), status="rejected"),
            IntervalRecord.leave(5, "u1", date(2025, 10, 20), date(2025, 10, 20), status="cancelled"),
        ]

        summary = summarize_leaves(records)

        self.assertEqual(summary.total_requests, 5)
        self.assertEqual(summary.approved, 2)
        self.assertEqual(summary.pending, 1)
        self.assertEqual(summary.rejected, 1)
        self.assertEqual(summary.cancelled, 1)
        self.assertEqual(summary.total_days_used, 3.5)
        self.assertEqual(summary.issues, [])

    def test_next_upcoming_skips_non_occupying_and_past(self) -> None:
        records = [
            _shift("past", date(2025, 10, 1), "morning", "06:00", "14:00"),
            _shift("cancelled", date(2025, 10, 10), "morning", "06:00", "14:00", status="cancelled"),
            IntervalRecord.leave("rejected", "u1", date(2025, 10, 11), date(2025, 10, 13), status="rejected"),
            _shift("later", date(2025, 10, 20), "night", "22:00", "06:00"),
            _shift("next", date(2025, 10, 12), "afternoon", "14:00", "22:00"),
        ]

        upcoming = next_upcoming(records, date(2025, 10, 5))

        self.assertIsNotNone(upcoming)
        assert upcoming is not None
        self.assertEqual(upcoming.id, "next")
        self.assertIsNone(next_upcoming(records, date(2025, 10, 21)))


if __name__ == "__main__":
    unittest.main()
