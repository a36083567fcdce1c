from __future__ import annotations

from calendar import monthrange
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta
from typing import Any

from rostercal.errors import InvalidMonthError, MalformedDateError


def parse_calendar_date(value: Any) -> date:
    """Coerce ``value`` to a calendar date or raise ``MalformedDateError``.

    Accepts ``date``, ``datetime`` (time of day dropped) and ISO strings, either
    a plain ``YYYY-MM-DD`` or a full timestamp such as the
    ``2025-10-05T00:00:00.000Z`` values the portal API returns. Only the
    calendar date written in the string is kept; no timezone conversion is done.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise MalformedDateError(f"Unsupported date value: {value!r}")

    raw = value.strip()
    if not raw:
        raise MalformedDateError("Date value is empty")
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        raise MalformedDateError(f"Unparseable date: {raw!r}") from None


def parse_hhmm(value: Any) -> time:
    if not isinstance(value, str) or ":" not in value:
        raise MalformedDateError(f"Invalid time format: {value!r}")
    hour_str, _, minute_str = value.strip().partition(":")
    try:
        hour = int(hour_str)
        minute = int(minute_str)
    except ValueError:
        raise MalformedDateError(f"Invalid time format: {value!r}") from None
    if hour < 0 or hour > 23 or minute < 0 or minute > 59:
        raise MalformedDateError(f"Invalid time format: {value!r}")
    return time(hour=hour, minute=minute)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        if current == date.max:
            return
        current += timedelta(days=1)


def inclusive_day_count(start: date, end: date) -> int:
    return (end - start).days + 1


def validate_month_index(month: int) -> None:
    if not isinstance(month, int) or isinstance(month, bool) or month < 0 or month > 11:
        raise InvalidMonthError(f"Month index must be between 0 and 11, got {month!r}")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last date of a 0-indexed ``month``."""
    validate_month_index(month)
    if year < date.min.year or year > date.max.year:
        raise InvalidMonthError(f"Year out of range: {year!r}")
    days_in_month = monthrange(year, month + 1)[1]
    return date(year, month + 1, 1), date(year, month + 1, days_in_month)
