from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


class CalendarError(Exception):
    """Base for input problems detected by the calendar core.

    Validation functions hand these back as values (``error`` fields and
    ``issues`` lists) instead of raising them, so a single bad record or cell
    never aborts a whole calendar view.
    """

    code = "CALENDAR_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CalendarError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message))


class InvalidRangeError(CalendarError):
    code = "INVALID_RANGE"


class MalformedDateError(CalendarError):
    code = "MALFORMED_DATE"


class InvalidMonthError(CalendarError):
    code = "INVALID_MONTH"


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
