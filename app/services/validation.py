import re
from collections.abc import Mapping
from typing import Any

from app.core.errors import BookingError, ErrorCode
from app.models.booking import BookingRequest

REQUIRED_FIELDS = (
    "client_name",
    "client_phone",
    "client_email",
    "procedure",
    "date",
    "start_time",
    "timezone",
)

# ASCII digits only; \d would also accept other Unicode digits
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIME_RE = re.compile(r"[0-9]{2}:[0-9]{2}")


def validate_booking_payload(payload: Any) -> BookingRequest:
    """Structural checks on a raw request, in order, stopping at the first failure.

    Calendar validity (e.g. 2025-02-30) is not checked here; building the time
    window rejects it with the same invalid_input code.
    """
    if not isinstance(payload, Mapping):
        raise BookingError(ErrorCode.INVALID_INPUT, "Request must be an object")
    for field in REQUIRED_FIELDS:
        value = payload.get(field)
        if not isinstance(value, str) or not value.strip():
            raise BookingError(ErrorCode.INVALID_INPUT, f"Missing or empty field: {field}")
    if not _DATE_RE.fullmatch(payload["date"]):
        raise BookingError(ErrorCode.INVALID_INPUT, "date must be YYYY-MM-DD")
    if not _TIME_RE.fullmatch(payload["start_time"]):
        raise BookingError(ErrorCode.INVALID_INPUT, "start_time must be HH:MM")
    return BookingRequest(**{field: payload[field] for field in REQUIRED_FIELDS})
