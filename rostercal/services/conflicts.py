from __future__ import annotations

import logging
from collections.abc import Iterable, Set
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from rostercal.dates import inclusive_day_count, parse_calendar_date
from rostercal.errors import CalendarError, InvalidRangeError, MalformedDateError
from rostercal.models import IntervalRecord, RecordId
from rostercal.services.occupancy import build_occupancy_report


logger = logging.getLogger("rostercal.conflicts")


@dataclass(frozen=True)
class DateCheck:
    blocked: bool
    error: CalendarError | None = None


@dataclass(frozen=True)
class RangeValidation:
    conflict: bool
    conflicting_dates: list[date] = field(default_factory=list)
    error: CalendarError | None = None
    issues: list[CalendarError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.conflict and self.error is None


def is_date_blocked(occupancy: Set[date], candidate: date | str) -> bool:
    """Membership test; anything that is not a readable date counts as blocked."""
    try:
        day = parse_calendar_date(candidate)
    except MalformedDateError:
        logger.debug("blocked_malformed_candidate", extra={"candidate": candidate})
        return True
    return day in occupancy


def check_date(
    records: Iterable[IntervalRecord],
    exclude_id: RecordId | None,
    candidate: date | str,
    *,
    owner_id: Any = None,
) -> DateCheck:
    try:
        day = parse_calendar_date(candidate)
    except MalformedDateError as exc:
        return DateCheck(blocked=True, error=exc)
    report = build_occupancy_report(records, exclude_id, owner_id=owner_id, window=(day, day))
    return DateCheck(blocked=day in report.dates)


def validate_range(
    records: Iterable[IntervalRecord],
    exclude_id: RecordId | None,
    candidate_start: date | str,
    candidate_end: date | str,
    *,
    owner_id: Any = None,
) -> RangeValidation:
    """Check ``[candidate_start, candidate_end]`` against the occupied dates.

    Problems with the candidate come back as ``error`` with ``conflict=True``
    so a form never accepts a range it could not read. The validator does not
    clamp the end date; callers apply ``clamp_range_end`` when the start date
    changes.
    """
    try:
        start_date = parse_calendar_date(candidate_start)
        end_date = parse_calendar_date(candidate_end)
    except MalformedDateError as exc:
        return RangeValidation(conflict=True, error=exc)

    if end_date < start_date:
        return RangeValidation(
            conflict=True,
            error=InvalidRangeError(
                f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
            ),
        )

    report = build_occupancy_report(records, exclude_id, owner_id=owner_id, window=(start_date, end_date))
    conflicting_dates = report.sorted_dates()
    return RangeValidation(
        conflict=bool(conflicting_dates),
        conflicting_dates=conflicting_dates,
        issues=list(report.issues),
    )


def clamp_range_end(start_date: date, end_date: date) -> date:
    """End date to show after the user picks ``start_date``.

    Both leave forms snap the end date forward to the new start date when the
    start moves past it.
    """
    return max(end_date, start_date)


def requested_days(start_date: date, end_date: date, *, half_day: bool = False) -> float:
    if end_date < start_date:
        raise InvalidRangeError(
            f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
        )
    if half_day:
        return 0.5
    return float(inclusive_day_count(start_date, end_date))
