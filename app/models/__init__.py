from app.models.booking import (
    BookingRequest,
    BookingResult,
    ExistingEvent,
    NewEvent,
    ProcedureDefinition,
    TimeWindow,
)

__all__ = [
    "BookingRequest",
    "BookingResult",
    "ExistingEvent",
    "NewEvent",
    "ProcedureDefinition",
    "TimeWindow",
]
