from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from rostercal.dates import month_bounds, validate_month_index
from rostercal.errors import InvalidMonthError
from rostercal.models import IntervalRecord
from rostercal.settings import get_calendar_timezone


GRID_WEEKS = 6
GRID_SIZE = GRID_WEEKS * 7


@dataclass(frozen=True)
class CalendarCell:
    day: date
    is_current_month: bool
    is_today: bool
    records: list[IntervalRecord] = field(default_factory=list)


def calendar_today() -> date:
    return datetime.now(get_calendar_timezone()).date()


def generate_month_grid(year: int, month: int) -> list[date]:
    """42 consecutive dates covering the 0-indexed ``month``, starting on a Sunday.

    Six full weeks cover every month layout, including a 31-day month whose
    first day is a Saturday.
    """
    first_day, _ = month_bounds(year, month)
    # date.weekday() is Monday=0 .. Sunday=6
    days_since_sunday = (first_day.weekday() + 1) % 7
    try:
        grid_start = first_day - timedelta(days=days_since_sunday)
        return [grid_start + timedelta(days=offset) for offset in range(GRID_SIZE)]
    except OverflowError:
        raise InvalidMonthError(
            f"Calendar grid for {year}-{month + 1:02d} falls outside the supported date range"
        ) from None


def records_for_date(records: Iterable[IntervalRecord], day: date) -> list[IntervalRecord]:
    return [record for record in records if record.covers(day)]


def annotate_grid(
    grid: Sequence[date],
    year: int,
    month: int,
    *,
    today: date | None = None,
    records: Iterable[IntervalRecord] = (),
) -> list[CalendarCell]:
    validate_month_index(month)
    if today is None:
        today = calendar_today()
    record_list = list(records)
    return [
        CalendarCell(
            day=day,
            is_current_month=day.year == year and day.month == month + 1,
            is_today=day == today,
            records=records_for_date(record_list, day),
        )
        for day in grid
    ]


def build_month_calendar(
    year: int,
    month: int,
    *,
    today: date | None = None,
    records: Iterable[IntervalRecord] = (),
) -> list[CalendarCell]:
    return annotate_grid(generate_month_grid(year, month), year, month, today=today, records=records)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move a (year, 0-indexed month) pair by ``delta`` months."""
    validate_month_index(month)
    new_year, new_month = divmod(year * 12 + month + delta, 12)
    return new_year, new_month
