from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_booking_engine
from app.api.schemas.booking import BookingErrorResponse, BookingSuccessResponse
from app.core.errors import ErrorCode
from app.services.booking_service import BookingEngine

router = APIRouter(prefix="/bookings", tags=["bookings"])

ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PROCEDURE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PROFESSIONAL_NOT_FOUND: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.TIME_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.GOOGLE_API_FAILURE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.CONCURRENCY_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=BookingSuccessResponse,
    responses={
        400: {"model": BookingErrorResponse},
        409: {"model": BookingErrorResponse},
        500: {"model": BookingErrorResponse},
        502: {"model": BookingErrorResponse},
    },
)
async def create_booking(
    payload: Any = Body(default=None),
    engine: BookingEngine = Depends(get_booking_engine),
) -> JSONResponse:
    """Book a procedure slot. The body is passed to the engine unvalidated so that
    every malformed request maps to the invalid_input code."""
    result = await engine.process(payload)
    if result.ok:
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=result.to_response())
    return JSONResponse(status_code=ERROR_STATUS[result.code], content=result.to_response())
