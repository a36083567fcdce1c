from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from rostercal.dates import parse_calendar_date


RecordId = str | int


class RecordStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    MODIFIED = "modified"
    CONFIRMED = "confirmed"


class ShiftType(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"
    CUSTOM = "custom"
    OTHER = "other"


NON_OCCUPYING_STATUSES: frozenset[str] = frozenset(
    {
        RecordStatus.REJECTED.value,
        RecordStatus.CANCELLED.value,
    }
)


def normalize_status(value: Any) -> str:
    if isinstance(value, RecordStatus):
        return value.value
    return str(value or "").strip().lower()


def is_occupying_status(status: Any) -> bool:
    # Unknown statuses block dates.
    return normalize_status(status) not in NON_OCCUPYING_STATUSES


def _owner_from_payload(payload: Mapping[str, Any]) -> Any:
    for key in ("owner_id", "ownerId", "employee_id", "employee"):
        value = payload.get(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            return value.get("_id", value.get("id"))
        return value
    return None


def _shift_metadata(payload: Mapping[str, Any]) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    shift = payload.get("shift")
    if isinstance(shift, Mapping):
        metadata["shift_type"] = shift.get("type")
        metadata["start_time"] = shift.get("startTime", shift.get("start_time"))
        metadata["end_time"] = shift.get("endTime", shift.get("end_time"))
        metadata["break_minutes"] = shift.get("breakDuration", shift.get("break_minutes"))
    else:
        metadata["shift_type"] = payload.get("shiftType", payload.get("shift_type"))
        metadata["start_time"] = payload.get("startTime", payload.get("start_time"))
        metadata["end_time"] = payload.get("endTime", payload.get("end_time"))
        metadata["break_minutes"] = payload.get("breakDuration", payload.get("break_minutes"))
    return {key: value for key, value in metadata.items() if value is not None}


@dataclass(frozen=True)
class IntervalRecord:
    """A leave request or shift assignment reduced to its date interval.

    ``start_date``/``end_date`` are inclusive calendar dates. ``metadata`` is
    carried through untouched except for the shift keys read by the monthly
    aggregator (``shift_type``, ``start_time``, ``end_time``,
    ``break_minutes``) and ``is_half_day`` for leave summaries.
    """

    id: RecordId
    owner_id: Any
    start_date: date
    end_date: date
    status: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", normalize_status(self.status))

    @property
    def is_occupying(self) -> bool:
        return is_occupying_status(self.status)

    @property
    def is_single_day(self) -> bool:
        return self.start_date == self.end_date

    @property
    def shift_type(self) -> str | None:
        value = self.metadata.get("shift_type")
        if value is None:
            return None
        if isinstance(value, ShiftType):
            return value.value
        return str(value).strip().lower() or None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @classmethod
    def shift(
        cls,
        record_id: RecordId,
        owner_id: Any,
        day: date,
        *,
        shift_type: ShiftType | str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        break_minutes: int | None = None,
        status: RecordStatus | str = RecordStatus.SCHEDULED,
        **extra: Any,
    ) -> IntervalRecord:
        metadata: dict[str, Any] = dict(extra)
        if shift_type is not None:
            metadata["shift_type"] = shift_type.value if isinstance(shift_type, ShiftType) else shift_type
        if start_time is not None:
            metadata["start_time"] = start_time
        if end_time is not None:
            metadata["end_time"] = end_time
        if break_minutes is not None:
            metadata["break_minutes"] = break_minutes
        return cls(
            id=record_id,
            owner_id=owner_id,
            start_date=day,
            end_date=day,
            status=status,
            metadata=metadata,
        )

    @classmethod
    def leave(
        cls,
        record_id: RecordId,
        owner_id: Any,
        start_date: date,
        end_date: date,
        *,
        status: RecordStatus | str = RecordStatus.PENDING,
        leave_type: str | None = None,
        is_half_day: bool = False,
    ) -> IntervalRecord:
        metadata: dict[str, Any] = {"is_half_day": is_half_day}
        if leave_type is not None:
            metadata["leave_type"] = leave_type
        return cls(
            id=record_id,
            owner_id=owner_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            metadata=metadata,
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> IntervalRecord:
        """Build a record from an API document.

        Understands both leave documents (``startDate``/``endDate``) and shift
        documents (a single ``date`` plus a ``shift`` sub-document). Raises
        ``MalformedDateError`` for unparseable dates and ``ValueError`` when
        the document has no id.
        """
        record_id = payload.get("id", payload.get("_id"))
        if record_id is None:
            raise ValueError("Record id is required")

        single_day = payload.get("date")
        if single_day is not None and payload.get("startDate", payload.get("start_date")) is None:
            start_date = end_date = parse_calendar_date(single_day)
            default_status = RecordStatus.SCHEDULED.value
            metadata = _shift_metadata(payload)
        else:
            start_date = parse_calendar_date(payload.get("start_date", payload.get("startDate")))
            end_date = parse_calendar_date(payload.get("end_date", payload.get("endDate")))
            default_status = RecordStatus.PENDING.value
            metadata = {}
            leave_type = payload.get("leave_type", payload.get("type"))
            if leave_type is not None:
                metadata["leave_type"] = leave_type
            metadata["is_half_day"] = bool(payload.get("is_half_day", payload.get("isHalfDay", False)))

        department = payload.get("department")
        if department is not None:
            metadata["department"] = department

        return cls(
            id=record_id,
            owner_id=_owner_from_payload(payload),
            start_date=start_date,
            end_date=end_date,
            status=payload.get("status") or default_status,
            metadata=metadata,
        )
