from datetime import date

from fastapi import APIRouter, Path, Query, status

from rostercal.errors import ApiError
from rostercal.models import IntervalRecord
from rostercal.schemas import (
    CalendarCellRead,
    CalendarIssueRead,
    DateCheckRequest,
    DateCheckResponse,
    LeaveSummaryResponse,
    MonthGridResponse,
    MonthRef,
    MonthStatsResponse,
    OccupancyRequest,
    OccupancyResponse,
    RangeCheckRequest,
    RangeCheckResponse,
    RecordBatchRequest,
    issues_read,
)
from rostercal.services.aggregation import aggregate_month, summarize_leaves
from rostercal.services.calendar_grid import build_month_calendar, shift_month
from rostercal.services.conflicts import check_date, validate_range
from rostercal.services.occupancy import build_occupancy_report
from rostercal.settings import get_settings

router = APIRouter(tags=["Calendar"])


def _records(payload: RecordBatchRequest) -> list[IntervalRecord]:
    limit = get_settings().max_records_per_request
    if len(payload.records) > limit:
        raise ApiError(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            code="TOO_MANY_RECORDS",
            message=f"At most {limit} records can be checked per request.",
        )
    return payload.to_records()


def _month_grid(year: int, month: int, *, today: date | None, payload: RecordBatchRequest | None) -> MonthGridResponse:
    records = _records(payload) if payload is not None else []
    cells = build_month_calendar(year, month, today=today, records=records)
    previous_year, previous_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return MonthGridResponse(
        year=year,
        month=month,
        cells=[
            CalendarCellRead(
                day=cell.day,
                is_current_month=cell.is_current_month,
                is_today=cell.is_today,
                record_ids=[record.id for record in cell.records],
            )
            for cell in cells
        ],
        previous=MonthRef(year=previous_year, month=previous_month),
        next=MonthRef(year=next_year, month=next_month),
    )


@router.post("/api/occupancy", response_model=OccupancyResponse)
def occupancy_endpoint(payload: OccupancyRequest) -> OccupancyResponse:
    report = build_occupancy_report(
        _records(payload),
        payload.exclude_id,
        owner_id=payload.owner_id,
    )
    return OccupancyResponse(
        dates=report.sorted_dates(),
        record_ids_by_date={day: report.record_ids_by_date[day] for day in report.sorted_dates()},
        issues=issues_read(report.issues),
    )


@router.post("/api/conflicts/date", response_model=DateCheckResponse)
def check_date_endpoint(payload: DateCheckRequest) -> DateCheckResponse:
    result = check_date(
        _records(payload),
        payload.exclude_id,
        payload.candidate,
        owner_id=payload.owner_id,
    )
    return DateCheckResponse(
        blocked=result.blocked,
        error=CalendarIssueRead.from_error(result.error),
    )


@router.post("/api/conflicts/range", response_model=RangeCheckResponse)
def check_range_endpoint(payload: RangeCheckRequest) -> RangeCheckResponse:
    result = validate_range(
        _records(payload),
        payload.exclude_id,
        payload.candidate_start,
        payload.candidate_end,
        owner_id=payload.owner_id,
    )
    return RangeCheckResponse(
        ok=result.ok,
        conflict=result.conflict,
        conflicting_dates=result.conflicting_dates,
        error=CalendarIssueRead.from_error(result.error),
        issues=issues_read(result.issues),
    )


@router.get("/api/calendar/{year}/{month}/grid", response_model=MonthGridResponse)
def month_grid_endpoint(
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=0, le=11),
    today: date | None = Query(default=None),
) -> MonthGridResponse:
    return _month_grid(year, month, today=today, payload=None)


@router.post("/api/calendar/{year}/{month}/grid", response_model=MonthGridResponse)
def month_grid_with_records_endpoint(
    payload: RecordBatchRequest,
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=0, le=11),
    today: date | None = Query(default=None),
) -> MonthGridResponse:
    return _month_grid(year, month, today=today, payload=payload)


@router.post("/api/calendar/{year}/{month}/stats", response_model=MonthStatsResponse)
def month_stats_endpoint(
    payload: RecordBatchRequest,
    year: int = Path(ge=1, le=9999),
    month: int = Path(ge=0, le=11),
) -> MonthStatsResponse:
    stats = aggregate_month(_records(payload), year, month)
    return MonthStatsResponse(
        year=stats.year,
        month=stats.month,
        total_count=stats.total_count,
        count_by_shift_type=stats.count_by_shift_type,
        count_by_status=stats.count_by_status,
        total_minutes=stats.total_minutes,
        total_hours=round(stats.total_hours, 2),
        overnight_record_ids=stats.overnight_record_ids,
        issues=issues_read(stats.issues),
    )


@router.post("/api/leaves/summary", response_model=LeaveSummaryResponse)
def leave_summary_endpoint(payload: RecordBatchRequest) -> LeaveSummaryResponse:
    summary = summarize_leaves(_records(payload))
    return LeaveSummaryResponse(
        total_requests=summary.total_requests,
        approved=summary.approved,
        pending=summary.pending,
        rejected=summary.rejected,
        cancelled=summary.cancelled,
        total_days_used=summary.total_days_used,
        issues=issues_read(summary.issues),
    )
