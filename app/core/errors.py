from enum import StrEnum


class ErrorCode(StrEnum):
    """Every error code the booking engine may return. The set is closed."""

    INVALID_INPUT = "invalid_input"
    INVALID_PROCEDURE = "invalid_procedure"
    PROFESSIONAL_NOT_FOUND = "professional_not_found"
    TIME_CONFLICT = "time_conflict"
    GOOGLE_API_FAILURE = "google_api_failure"
    CONCURRENCY_FAILURE = "concurrency_failure"


class BookingError(Exception):
    """Recognized failure of one booking step; carries the code returned to the caller."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        super().__init__(message or code.value)
        self.code = code


class CalendarAPIError(Exception):
    """The calendar provider could not complete a list or create call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
