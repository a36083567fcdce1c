from __future__ import annotations

from datetime import date

from rostercal.models import IntervalRecord


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Closed-interval intersection test.

    Both intervals must already satisfy ``start <= end``; inverted input is not
    detected here.
    """
    return a_start <= b_end and b_start <= a_end


def record_overlaps(record: IntervalRecord, start_date: date, end_date: date) -> bool:
    return overlaps(record.start_date, record.end_date, start_date, end_date)
