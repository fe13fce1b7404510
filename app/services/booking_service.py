import logging
from typing import Any

from app.core.catalog import Catalog
from app.core.errors import BookingError, CalendarAPIError, ErrorCode
from app.models.booking import BookingRequest, BookingResult, NewEvent, TimeWindow
from app.services.calendar_service import CalendarService
from app.services.conflict_service import find_conflicts, query_range
from app.services.lock_manager import ResourceLockManager
from app.services.time_window import build_time_window
from app.services.validation import validate_booking_payload

logger = logging.getLogger(__name__)


def build_event(request: BookingRequest, window: TimeWindow) -> NewEvent:
    """Calendar entry for a booking. Spans [start, end]; the buffer is never stored."""
    return NewEvent(
        title=f"{request.procedure} - {request.client_name}",
        description=(
            f"Name: {request.client_name}\n"
            f"Phone: {request.client_phone}\n"
            f"Email: {request.client_email}\n"
            f"Procedure: {request.procedure}"
        ),
        start=window.start,
        end=window.end,
    )


async def commit_booking(
    calendar: CalendarService, resource_id: str, request: BookingRequest, window: TimeWindow
) -> str:
    try:
        return await calendar.create_event(resource_id, build_event(request, window))
    except CalendarAPIError as e:
        logger.warning("Create event failed on %s: %s", resource_id, e)
        raise BookingError(ErrorCode.GOOGLE_API_FAILURE, str(e)) from e


class BookingEngine:
    """Validates a booking request and commits it if the slot is free.

    Query, conflict check and commit for one calendar run under that calendar's
    lock, so concurrent requests for the same professional are decided one at a
    time against an up-to-date view of the calendar.
    """

    def __init__(
        self,
        catalog: Catalog,
        calendar: CalendarService,
        locks: ResourceLockManager | None = None,
        buffer_minutes: int = 10,
    ) -> None:
        if buffer_minutes < 0:
            raise ValueError("buffer_minutes must be >= 0")
        self.catalog = catalog
        self.calendar = calendar
        self.locks = locks if locks is not None else ResourceLockManager()
        self.buffer_minutes = buffer_minutes

    async def process(self, payload: Any) -> BookingResult:
        try:
            return await self._process(payload)
        except BookingError as e:
            logger.info("Booking rejected: %s (%s)", e.code.value, e)
            return BookingResult.error(e.code)
        except Exception as e:
            logger.exception("Unexpected booking failure: %s", e)
            return BookingResult.error(ErrorCode.CONCURRENCY_FAILURE)

    async def _process(self, payload: Any) -> BookingResult:
        request = validate_booking_payload(payload)
        procedure = self.catalog.get_procedure(request.procedure)
        resource_id = self.catalog.get_resource_id(procedure.professional_id)
        window = build_time_window(
            request.date,
            request.start_time,
            request.timezone,
            procedure.duration_minutes,
            self.buffer_minutes,
        )

        logger.debug("Waiting for lock on %s", resource_id)
        async with self.locks.acquire(resource_id):
            logger.debug("Lock acquired on %s", resource_id)
            range_start, range_end = query_range(window, self.buffer_minutes)
            try:
                existing = await self.calendar.list_events(resource_id, range_start, range_end)
            except CalendarAPIError as e:
                logger.warning("List events failed on %s: %s", resource_id, e)
                raise BookingError(ErrorCode.GOOGLE_API_FAILURE, str(e)) from e
            logger.debug(
                "%d existing event(s) on %s between %s and %s",
                len(existing),
                resource_id,
                range_start.isoformat(),
                range_end.isoformat(),
            )

            conflicts = find_conflicts(window, existing, self.buffer_minutes)
            if conflicts:
                logger.info(
                    "Time conflict on %s for %s: %d overlapping event(s)",
                    resource_id,
                    window.start.isoformat(),
                    len(conflicts),
                )
                raise BookingError(ErrorCode.TIME_CONFLICT)

            event_id = await commit_booking(self.calendar, resource_id, request, window)
        logger.debug("Lock released on %s", resource_id)

        logger.info(
            "Booked %s on %s: %s - %s (event %s)",
            procedure.name,
            resource_id,
            window.start.isoformat(),
            window.end.isoformat(),
            event_id,
        )
        return BookingResult.success(procedure.professional_id, resource_id, window)
