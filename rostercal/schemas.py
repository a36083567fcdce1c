from datetime import date
from typing import Any

from pydantic import BaseModel, Field, model_validator

from rostercal.dates import parse_calendar_date
from rostercal.errors import CalendarError, MalformedDateError
from rostercal.models import IntervalRecord, RecordStatus


RecordIdValue = int | str


class CalendarIssueRead(BaseModel):
    code: str
    message: str

    @classmethod
    def from_error(cls, error: CalendarError | None) -> "CalendarIssueRead | None":
        if error is None:
            return None
        return cls(code=error.code, message=error.message)


def issues_read(errors: list[CalendarError]) -> list[CalendarIssueRead]:
    return [CalendarIssueRead(code=error.code, message=error.message) for error in errors]


SHIFT_KEY_ALIASES = {
    "shiftType": "type",
    "shift_type": "type",
    "startTime": "start_time",
    "endTime": "end_time",
    "breakDuration": "break_minutes",
}

RECORD_KEY_ALIASES = {
    "_id": "id",
    "ownerId": "owner_id",
    "employee_id": "owner_id",
    "employee": "owner_id",
    "startDate": "start_date",
    "endDate": "end_date",
    "type": "leave_type",
    "isHalfDay": "is_half_day",
}


def _apply_aliases(data: dict[str, Any], aliases: dict[str, str]) -> dict[str, Any]:
    normalized = dict(data)
    for alias, name in aliases.items():
        if alias in normalized:
            value = normalized.pop(alias)
            if normalized.get(name) is None:
                normalized[name] = value
    return normalized


def _calendar_date(value: Any) -> date:
    try:
        return parse_calendar_date(value)
    except MalformedDateError as exc:
        raise ValueError(exc.message) from None


class ShiftDetails(BaseModel):
    type: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    break_minutes: int | None = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _accept_document_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return _apply_aliases(data, SHIFT_KEY_ALIASES)
        return data


class IntervalRecordPayload(BaseModel):
    """One leave or shift record.

    Accepts the snake_case fields below as well as the portal's document keys
    (``_id``, ``employee``, ``startDate``/``endDate``, ``isHalfDay`` and a
    ``shift`` sub-document with ``startTime``/``endTime``/``breakDuration``).
    Dates may be plain ``YYYY-MM-DD`` or full ISO timestamps; only the
    calendar date is kept.
    """

    id: RecordIdValue
    owner_id: RecordIdValue | None = None
    start_date: date
    end_date: date
    status: str = RecordStatus.PENDING.value
    leave_type: str | None = None
    is_half_day: bool = False
    department: str | None = None
    shift: ShiftDetails | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_document(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = _apply_aliases(data, RECORD_KEY_ALIASES)

        owner = data.get("owner_id")
        if isinstance(owner, dict):
            data["owner_id"] = owner.get("_id", owner.get("id"))

        if data.get("shift") is None:
            shift_keys = set(SHIFT_KEY_ALIASES) | {"start_time", "end_time", "break_minutes"}
            top_level_shift = {key: data.pop(key) for key in list(data) if key in shift_keys}
            if top_level_shift:
                data["shift"] = top_level_shift

        single_day = data.pop("date", None)
        if single_day is not None and data.get("start_date") is None:
            data["start_date"] = single_day
            data.setdefault("end_date", single_day)
            if data.get("status") is None:
                data["status"] = RecordStatus.SCHEDULED.value
        if data.get("status") is None:
            data.pop("status", None)

        for key in ("start_date", "end_date"):
            if key in data:
                data[key] = _calendar_date(data[key])
        return data

    def to_record(self) -> IntervalRecord:
        metadata: dict[str, Any] = {"is_half_day": self.is_half_day}
        if self.leave_type is not None:
            metadata["leave_type"] = self.leave_type
        if self.department is not None:
            metadata["department"] = self.department
        if self.shift is not None:
            shift_metadata = {
                "shift_type": self.shift.type,
                "start_time": self.shift.start_time,
                "end_time": self.shift.end_time,
                "break_minutes": self.shift.break_minutes,
            }
            metadata.update({key: value for key, value in shift_metadata.items() if value is not None})
        return IntervalRecord(
            id=self.id,
            owner_id=self.owner_id,
            start_date=self.start_date,
            end_date=self.end_date,
            status=self.status,
            metadata=metadata,
        )


class RecordBatchRequest(BaseModel):
    records: list[IntervalRecordPayload] = Field(default_factory=list)

    def to_records(self) -> list[IntervalRecord]:
        return [item.to_record() for item in self.records]


class OccupancyRequest(RecordBatchRequest):
    exclude_id: RecordIdValue | None = None
    owner_id: RecordIdValue | None = None


class OccupancyResponse(BaseModel):
    dates: list[date]
    record_ids_by_date: dict[date, list[RecordIdValue]]
    issues: list[CalendarIssueRead] = Field(default_factory=list)


class DateCheckRequest(OccupancyRequest):
    candidate: str


class DateCheckResponse(BaseModel):
    blocked: bool
    error: CalendarIssueRead | None = None


class RangeCheckRequest(OccupancyRequest):
    candidate_start: str
    candidate_end: str


class RangeCheckResponse(BaseModel):
    ok: bool
    conflict: bool
    conflicting_dates: list[date] = Field(default_factory=list)
    error: CalendarIssueRead | None = None
    issues: list[CalendarIssueRead] = Field(default_factory=list)


class MonthRef(BaseModel):
    year: int
    month: int


class CalendarCellRead(BaseModel):
    day: date
    is_current_month: bool
    is_today: bool
    record_ids: list[RecordIdValue] = Field(default_factory=list)


class MonthGridResponse(BaseModel):
    year: int
    month: int
    cells: list[CalendarCellRead]
    previous: MonthRef
    next: MonthRef


class MonthStatsResponse(BaseModel):
    year: int
    month: int
    total_count: int
    count_by_shift_type: dict[str, int]
    count_by_status: dict[str, int]
    total_minutes: int
    total_hours: float
    overnight_record_ids: list[RecordIdValue] = Field(default_factory=list)
    issues: list[CalendarIssueRead] = Field(default_factory=list)


class LeaveSummaryResponse(BaseModel):
    total_requests: int
    approved: int
    pending: int
    rejected: int
    cancelled: int
    total_days_used: float
    issues: list[CalendarIssueRead] = Field(default_factory=list)

