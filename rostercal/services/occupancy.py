from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from rostercal.dates import iter_days
from rostercal.errors import CalendarError, InvalidRangeError
from rostercal.models import IntervalRecord, RecordId
from rostercal.services.overlap import overlaps


logger = logging.getLogger("rostercal.occupancy")


@dataclass(frozen=True)
class OccupancyReport:
    dates: frozenset[date]
    record_ids_by_date: dict[date, list[RecordId]] = field(default_factory=dict)
    issues: list[CalendarError] = field(default_factory=list)

    def sorted_dates(self) -> list[date]:
        return sorted(self.dates)


def _is_excluded(record: IntervalRecord, exclude_id: RecordId | None) -> bool:
    if exclude_id is None:
        return False
    return str(record.id) == str(exclude_id)


def select_occupying_records(
    records: Iterable[IntervalRecord],
    exclude_id: RecordId | None = None,
    *,
    owner_id: Any = None,
) -> list[IntervalRecord]:
    selected: list[IntervalRecord] = []
    for record in records:
        if not record.is_occupying:
            continue
        if _is_excluded(record, exclude_id):
            continue
        if owner_id is not None and str(record.owner_id) != str(owner_id):
            continue
        selected.append(record)
    return selected


def build_occupancy_report(
    records: Iterable[IntervalRecord],
    exclude_id: RecordId | None = None,
    *,
    owner_id: Any = None,
    window: tuple[date, date] | None = None,
) -> OccupancyReport:
    """Occupied dates with the ids of the records covering each one.

    With ``window`` only dates inside that inclusive range are enumerated, so
    the cost follows the window rather than the span of the stored records.
    Issues are reported for every selected record either way.
    """
    record_ids_by_date: dict[date, list[RecordId]] = defaultdict(list)
    issues: list[CalendarError] = []

    for record in select_occupying_records(records, exclude_id, owner_id=owner_id):
        start_date, end_date = record.start_date, record.end_date
        if end_date < start_date:
            issues.append(
                InvalidRangeError(
                    f"Record {record.id} ends on {end_date.isoformat()} before it starts on {start_date.isoformat()}"
                )
            )
            logger.warning(
                "invalid_stored_range",
                extra={"record_id": record.id, "start_date": start_date, "end_date": end_date},
            )
            # Block the whole span between the two dates.
            start_date, end_date = end_date, start_date

        if window is not None:
            if not overlaps(start_date, end_date, *window):
                continue
            start_date, end_date = max(start_date, window[0]), min(end_date, window[1])

        for day in iter_days(start_date, end_date):
            contributors = record_ids_by_date[day]
            if record.id not in contributors:
                contributors.append(record.id)

    return OccupancyReport(
        dates=frozenset(record_ids_by_date),
        record_ids_by_date=dict(record_ids_by_date),
        issues=issues,
    )


def build_occupancy(
    records: Iterable[IntervalRecord],
    exclude_id: RecordId | None = None,
    *,
    owner_id: Any = None,
) -> frozenset[date]:
    return build_occupancy_report(records, exclude_id, owner_id=owner_id).dates


def blocked_dates(
    records: Iterable[IntervalRecord],
    exclude_id: RecordId | None = None,
    *,
    owner_id: Any = None,
) -> list[date]:
    return sorted(build_occupancy(records, exclude_id, owner_id=owner_id))
