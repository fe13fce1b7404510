import pytest

from app.core.errors import BookingError, ErrorCode
from app.services.validation import REQUIRED_FIELDS, validate_booking_payload


def _code(payload) -> ErrorCode:
    with pytest.raises(BookingError) as exc:
        validate_booking_payload(payload)
    return exc.value.code


def test_valid_payload_returns_request(payload):
    request = validate_booking_payload(payload)
    assert request.procedure == payload["procedure"]
    assert request.timezone == "Europe/Rome"


@pytest.mark.parametrize("raw", [None, "string", 42, ["a", "b"]])
def test_non_object_is_invalid(raw):
    assert _code(raw) == ErrorCode.INVALID_INPUT


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
def test_missing_field_is_invalid(payload, field):
    del payload[field]
    assert _code(payload) == ErrorCode.INVALID_INPUT


@pytest.mark.parametrize("value", ["", "   ", 123, None])
def test_empty_or_non_string_field_is_invalid(payload, value):
    payload["client_email"] = value
    assert _code(payload) == ErrorCode.INVALID_INPUT


@pytest.mark.parametrize("value", ["2025-1-01", "01-01-2025", "2025/01/01", "2025-01-01T10:00", "2025-01-01\n"])
def test_malformed_date(payload, value):
    payload["date"] = value
    assert _code(payload) == ErrorCode.INVALID_INPUT


@pytest.mark.parametrize("value", ["9:00", "10:00:00", "10.00", "1000", "١٠:٠٠"])
def test_malformed_time(payload, value):
    payload["start_time"] = value
    assert _code(payload) == ErrorCode.INVALID_INPUT


def test_semantic_date_validity_is_not_checked_here(payload):
    payload["date"] = "2025-02-30"
    payload["start_time"] = "99:99"
    assert validate_booking_payload(payload).date == "2025-02-30"


def test_extra_fields_are_ignored(payload):
    payload["note"] = "first visit"
    assert validate_booking_payload(payload).client_name == "Test Client"
