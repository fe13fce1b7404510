"""Calendar test doubles. Failure injection lives here and never in app code."""

import random
from datetime import datetime

from app.core.errors import CalendarAPIError
from app.models.booking import ExistingEvent, NewEvent
from app.services.calendar_service import InMemoryCalendarService


class FlakyCalendarService(InMemoryCalendarService):
    def __init__(
        self,
        latency_seconds: float = 0.0,
        fail_list: bool = False,
        fail_create: bool = False,
        failure_rate: float = 0.0,
        seed: int = 0,
    ) -> None:
        super().__init__(latency_seconds=latency_seconds)
        self.fail_list = fail_list
        self.fail_create = fail_create
        self.failure_rate = failure_rate
        self._rng = random.Random(seed)

    async def list_events(
        self, resource_id: str, range_start: datetime, range_end: datetime
    ) -> list[ExistingEvent]:
        if self.fail_list:
            self.calls.append(("list_events", resource_id))
            raise CalendarAPIError("Simulated Google API 500", status_code=500)
        return await super().list_events(resource_id, range_start, range_end)

    async def create_event(self, resource_id: str, event: NewEvent) -> str:
        if self.fail_create or (self.failure_rate and self._rng.random() < self.failure_rate):
            self.calls.append(("create_event", resource_id))
            raise CalendarAPIError("Simulated Google API 500", status_code=500)
        return await super().create_event(resource_id, event)


class BrokenCalendarService(InMemoryCalendarService):
    """Raises something that is not a calendar error."""

    async def list_events(self, resource_id, range_start, range_end):
        raise RuntimeError("boom")
