from typing import Literal

from pydantic import BaseModel

from app.core.errors import ErrorCode


class BookingSuccessResponse(BaseModel):
    status: Literal["success"] = "success"
    professional_id: str
    resource_id: str
    start: str  # UTC, e.g. 2025-01-01T09:00:00Z
    end: str


class BookingErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    code: ErrorCode


class ProcedureInfo(BaseModel):
    name: str
    professional_id: str
    duration_minutes: int
