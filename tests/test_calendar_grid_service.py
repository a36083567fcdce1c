from __future__ import annotations

from collections import Counter
from datetime import date
import unittest
from unittest.mock import patch

from rostercal.errors import InvalidMonthError
from rostercal.models import IntervalRecord
from rostercal.services.calendar_grid import (
    annotate_grid,
    build_month_calendar,
    generate_month_grid,
    records_for_date,
    shift_month,
)


class CalendarGridServiceTests(unittest.TestCase):
    def test_october_2025_grid(self) -> None:
        grid = generate_month_grid(2025, 9)

        self.assertEqual(len(grid), 42)
        self.assertEqual(grid[0], date(2025, 9, 28))
        self.assertIn(date(2025, 10, 31), grid)
        self.assertEqual(grid[-1], date(2025, 11, 8))

    def test_grid_invariants_hold_for_every_month(self) -> None:
        for year in (2000, 2023, 2024, 2025, 2026):
            for month in range(12):
                with self.subTest(year=year, month=month):
                    grid = generate_month_grid(year, month)
                    self.assertEqual(len(grid), 42)
                    self.assertEqual(grid[0].weekday(), 6)
                    counts = Counter(day for day in grid if day.year == year and day.month == month + 1)
                    first_next = shift_month(year, month, 1)
                    days_in_month = (date(first_next[0], first_next[1] + 1, 1) - date(year, month + 1, 1)).days
                    self.assertEqual(len(counts), days_in_month)
                    self.assertTrue(all(count == 1 for count in counts.values()))
                    self.assertEqual(len(set(grid)), 42)

    def test_month_starting_on_sunday_starts_grid_on_the_first(self) -> None:
        grid = generate_month_grid(2026, 1)
        self.assertEqual(grid[0], date(2026, 2, 1))

    def test_31_day_month_starting_saturday_fits(self) -> None:
        grid = generate_month_grid(2026, 7)
        self.assertEqual(grid[0], date(2026, 7, 26))
        self.assertEqual(grid[36], date(2026, 8, 31))
        self.assertEqual(grid[-1], date(2026, 9, 5))

    def test_invalid_month_index(self) -> None:
        for month in (-1, 12, 13):
            with self.subTest(month=month):
                with self.assertRaises(InvalidMonthError):
                    generate_month_grid(2025, month)

    def test_grid_outside_supported_dates(self) -> None:
        with self.assertRaises(InvalidMonthError):
            generate_month_grid(1, 0)
        with self.assertRaises(InvalidMonthError):
            generate_month_grid(9999, 11)

    def test_annotate_grid_flags(self) -> None:
        grid = generate_month_grid(2025, 9)
        cells = annotate_grid(grid, 2025, 9, today=date(2025, 10, 15))

        self.assertEqual(sum(1 for cell in cells if cell.is_current_month), 31)
        today_cells = [cell for cell in cells if cell.is_today]
        self.assertEqual(len(today_cells), 1)
        self.assertEqual(today_cells[0].day, date(2025, 10, 15))
        self.assertFalse(cells[0].is_current_month)

    def test_annotate_grid_defaults_today_from_calendar_clock(self) -> None:
        with patch("rostercal.services.calendar_grid.calendar_today", return_value=date(2025, 9, 30)):
            cells = build_month_calendar(2025, 9)
        flagged = [cell.day for cell in cells if cell.is_today]
        self.assertEqual(flagged, [date(2025, 9, 30)])

    def test_records_are_matched_to_cells(self) -> None:
        leave = IntervalRecord.leave("L1", "u1", date(2025, 10, 5), date(2025, 10, 7), status="approved")
        shift = IntervalRecord.shift("S1", "u1", date(2025, 10, 6), shift_type="night")
        cells = build_month_calendar(2025, 9, today=date(2025, 10, 1), records=[leave, shift])

        by_day = {cell.day: [record.id for record in cell.records] for cell in cells}
        self.assertEqual(by_day[date(2025, 10, 5)], ["L1"])
        self.assertEqual(by_day[date(2025, 10, 6)], ["L1", "S1"])
        self.assertEqual(by_day[date(2025, 10, 8)], [])
        self.assertEqual(records_for_date([leave, shift], date(2025, 10, 7)), [leave])

    def test_shift_month(self) -> None:
        self.assertEqual(shift_month(2025, 0, -1), (2024, 11))
        self.assertEqual(shift_month(2025, 11, 1), (2026, 0))
        self.assertEqual(shift_month(2025, 9, 0), (2025, 9))
        self.assertEqual(shift_month(2025, 9, 15), (2027, 0))


if __name__ == "__main__":
    unittest.main()
