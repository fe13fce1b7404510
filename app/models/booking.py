from datetime import UTC, datetime, timedelta
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.errors import ErrorCode


def format_utc(dt: datetime) -> str:
    """Render a datetime as a UTC instant, e.g. 2025-01-01T09:00:00Z. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class BookingRequest(BaseModel):
    """A booking request that already passed structural validation."""

    model_config = ConfigDict(frozen=True)

    client_name: str
    client_phone: str
    client_email: str
    procedure: str
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    timezone: str  # IANA name, e.g. Europe/Rome


class ProcedureDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    professional_id: str
    duration_minutes: int = Field(gt=0)


class TimeWindow(BaseModel):
    """Candidate booking window; all instants are aware UTC datetimes."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    buffer_end: datetime


class ExistingEvent(BaseModel):
    """A booking already committed on a calendar (stored interval, no buffer)."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v.astimezone(UTC)

    def buffer_end(self, buffer_minutes: int) -> datetime:
        return self.end + timedelta(minutes=buffer_minutes)


class NewEvent(BaseModel):
    """Payload handed to the calendar when committing a booking."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    start: datetime
    end: datetime


class BookingResult(BaseModel):
    status: Literal["success", "error"]
    code: ErrorCode | None = None
    professional_id: str | None = None
    resource_id: str | None = None
    start: str | None = None
    end: str | None = None

    @classmethod
    def success(cls, professional_id: str, resource_id: str, window: TimeWindow) -> "BookingResult":
        return cls(
            status="success",
            professional_id=professional_id,
            resource_id=resource_id,
            start=format_utc(window.start),
            end=format_utc(window.end),
        )

    @classmethod
    def error(cls, code: ErrorCode) -> "BookingResult":
        return cls(status="error", code=code)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_response(self) -> dict:
        """Wire shape: success carries ids and instants, error carries only the code."""
        if self.ok:
            return {
                "status": "success",
                "professional_id": self.professional_id,
                "resource_id": self.resource_id,
                "start": self.start,
                "end": self.end,
            }
        return {"status": "error", "code": self.code.value if self.code else None}
