from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from rostercal.dates import inclusive_day_count, month_bounds, parse_hhmm
from rostercal.errors import CalendarError, InvalidRangeError, MalformedDateError
from rostercal.models import IntervalRecord, RecordId, RecordStatus, ShiftType
from rostercal.services.conflicts import requested_days
from rostercal.services.overlap import overlaps
from rostercal.settings import get_settings


logger = logging.getLogger("rostercal.aggregation")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class MonthStats:
    year: int
    month: int
    total_count: int
    count_by_shift_type: dict[str, int]
    count_by_status: dict[str, int]
    total_minutes: int
    overnight_record_ids: list[RecordId] = field(default_factory=list)
    issues: list[CalendarError] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60


@dataclass(frozen=True)
class LeaveSummary:
    total_requests: int
    approved: int
    pending: int
    rejected: int
    cancelled: int
    total_days_used: float
    issues: list[CalendarError] = field(default_factory=list)


def shift_minutes(start_time: str, end_time: str, break_minutes: int = 0) -> tuple[int, bool]:
    """Net worked minutes of one shift and whether it crosses midnight.

    An end time earlier than the start time is read as the next day. A
    mistyped end time on a day shift looks identical; the crossing flag lets
    callers surface those shifts for review.
    """
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    start_minutes = start.hour * 60 + start.minute
    end_minutes = end.hour * 60 + end.minute
    crosses_midnight = end_minutes < start_minutes
    if crosses_midnight:
        end_minutes += MINUTES_PER_DAY
    net_minutes = max(0, end_minutes - start_minutes - max(0, break_minutes))
    return net_minutes, crosses_midnight


def shift_hours(start_time: str, end_time: str, break_minutes: int = 0) -> float:
    net_minutes, _ = shift_minutes(start_time, end_time, break_minutes)
    return net_minutes / 60


def _break_minutes_for(record: IntervalRecord, default_break_minutes: int) -> int:
    raw_value = record.metadata.get("break_minutes")
    if raw_value is None:
        return default_break_minutes
    try:
        return max(0, int(raw_value))
    except (TypeError, ValueError):
        logger.warning(
            "invalid_break_minutes",
            extra={"record_id": record.id, "break_minutes": raw_value},
        )
        return default_break_minutes


def aggregate_month(records: Iterable[IntervalRecord], year: int, month: int) -> MonthStats:
    """Dashboard counters for a 0-indexed ``month``.

    Every day a record covers inside the month counts as one unit, so a
    single-day shift adds one and a five-day leave inside the month adds five.
    Cancelled records are left out.
    """
    month_start, month_end = month_bounds(year, month)
    default_break_minutes = max(0, get_settings().default_break_minutes)

    total_count = 0
    total_minutes = 0
    by_shift_type: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    overnight_record_ids: list[RecordId] = []
    issues: list[CalendarError] = []

    for record in records:
        if record.status == RecordStatus.CANCELLED.value:
            continue
        if record.end_date < record.start_date:
            issues.append(InvalidRangeError(f"Record {record.id} ends before it starts"))
            continue
        if not overlaps(record.start_date, record.end_date, month_start, month_end):
            continue

        units = inclusive_day_count(
            max(record.start_date, month_start),
            min(record.end_date, month_end),
        )
        total_count += units
        by_shift_type[record.shift_type or ShiftType.OTHER.value] += units
        by_status[record.status] += units

        start_time = record.metadata.get("start_time")
        end_time = record.metadata.get("end_time")
        if not start_time or not end_time:
            continue
        try:
            net_minutes, crosses_midnight = shift_minutes(
                start_time,
                end_time,
                _break_minutes_for(record, default_break_minutes),
            )
        except MalformedDateError as exc:
            issues.append(exc)
            logger.warning(
                "malformed_shift_time",
                extra={"record_id": record.id, "start_time": start_time, "end_time": end_time},
            )
            continue

        total_minutes += net_minutes * units
        if crosses_midnight:
            overnight_record_ids.append(record.id)

    return MonthStats(
        year=year,
        month=month,
        total_count=total_count,
        count_by_shift_type=dict(by_shift_type),
        count_by_status=dict(by_status),
        total_minutes=total_minutes,
        overnight_record_ids=overnight_record_ids,
        issues=issues,
    )


def summarize_leaves(records: Iterable[IntervalRecord]) -> LeaveSummary:
    statuses: Counter[str] = Counter()
    total_days_used = 0.0
    issues: list[CalendarError] = []
    total_requests = 0

    for record in records:
        total_requests += 1
        statuses[record.status] += 1
        if record.status != RecordStatus.APPROVED.value:
            continue
        try:
            total_days_used += requested_days(
                record.start_date,
                record.end_date,
                half_day=bool(record.metadata.get("is_half_day", False)),
            )
        except InvalidRangeError as exc:
            issues.append(exc)

    return LeaveSummary(
        total_requests=total_requests,
        approved=statuses[RecordStatus.APPROVED.value],
        pending=statuses[RecordStatus.PENDING.value],
        rejected=statuses[RecordStatus.REJECTED.value],
        cancelled=statuses[RecordStatus.CANCELLED.value],
        total_days_used=total_days_used,
        issues=issues,
    )


def next_upcoming(records: Iterable[IntervalRecord], today: date) -> IntervalRecord | None:
    candidates = [
        record
        for record in records
        if record.is_occupying and record.start_date >= today
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda item: (item.start_date, str(item.id)))

