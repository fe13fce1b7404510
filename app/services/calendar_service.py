import asyncio
import itertools
import logging
from datetime import UTC, date, datetime, time
from typing import Any, Protocol
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from app.core.config import Settings
from app.core.errors import CalendarAPIError
from app.models.booking import ExistingEvent, NewEvent, format_utc
from app.services.google_auth_service import GoogleTokenProvider

logger = logging.getLogger(__name__)


class CalendarService(Protocol):
    async def list_events(
        self, resource_id: str, range_start: datetime, range_end: datetime
    ) -> list[ExistingEvent]:
        """Events whose stored interval overlaps the range. May return extra events."""
        ...

    async def create_event(self, resource_id: str, event: NewEvent) -> str:
        """Create the event and return its id. Raises CalendarAPIError on failure."""
        ...


def _parse_event_time(value: dict[str, Any], calendar_tz: ZoneInfo) -> datetime:
    if "dateTime" in value:
        dt = datetime.fromisoformat(value["dateTime"].replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=calendar_tz)
        return dt.astimezone(UTC)
    # All-day event: midnight in the calendar's own timezone
    d = date.fromisoformat(value["date"])
    return datetime.combine(d, time(0, 0), tzinfo=calendar_tz).astimezone(UTC)


def _calendar_zone(name: str | None) -> ZoneInfo:
    if not name:
        return ZoneInfo("UTC")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, TypeError, ValueError):
        logger.warning("Calendar reported unknown timeZone %r, using UTC", name)
        return ZoneInfo("UTC")


class GoogleCalendarService:
    """Google Calendar v3 REST client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.google_timeout_seconds)
        self._owns_client = client is None
        self._tokens = GoogleTokenProvider(settings, self._client)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _events_url(self, resource_id: str) -> str:
        base = self._settings.google_calendar_api_base.rstrip("/")
        return f"{base}/calendars/{quote(resource_id, safe='')}/events"

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        for attempt in range(2):
            token = await self._tokens.get_access_token()
            try:
                resp = await self._client.request(
                    method, url, headers={"Authorization": f"Bearer {token}"}, **kwargs
                )
            except httpx.HTTPError as e:
                logger.warning("Google Calendar %s %s failed: %s", method, url, type(e).__name__)
                raise CalendarAPIError(f"Calendar request failed: {type(e).__name__}") from e
            # Stale token: refresh once and retry
            if resp.status_code == 401 and attempt == 0:
                self._tokens.invalidate()
                continue
            if resp.status_code >= 400:
                logger.warning(
                    "Google Calendar %s %s: status=%s body=%s",
                    method,
                    url,
                    resp.status_code,
                    resp.text[:500],
                )
                raise CalendarAPIError("Calendar request rejected", status_code=resp.status_code)
            try:
                data = resp.json()
            except ValueError as e:
                raise CalendarAPIError("Calendar response is not JSON", status_code=resp.status_code) from e
            if not isinstance(data, dict):
                raise CalendarAPIError("Calendar response is not an object", status_code=resp.status_code)
            return data
        raise CalendarAPIError("Calendar request unauthorized", status_code=401)

    async def list_events(
        self, resource_id: str, range_start: datetime, range_end: datetime
    ) -> list[ExistingEvent]:
        url = self._events_url(resource_id)
        params: dict[str, Any] = {
            "timeMin": format_utc(range_start),
            "timeMax": format_utc(range_end),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": 250,
        }
        events: list[ExistingEvent] = []
        while True:
            data = await self._request("GET", url, params=params)
            tz = _calendar_zone(data.get("timeZone"))
            items = data.get("items") or []
            if not isinstance(items, list):
                raise CalendarAPIError("Calendar response items is not a list")
            for item in items:
                if not isinstance(item, dict):
                    raise CalendarAPIError("Calendar response item is not an object")
                if item.get("status") == "cancelled":
                    continue
                try:
                    events.append(
                        ExistingEvent(
                            start=_parse_event_time(item["start"], tz),
                            end=_parse_event_time(item["end"], tz),
                        )
                    )
                except (KeyError, TypeError, AttributeError, ValueError) as e:
                    raise CalendarAPIError(f"Malformed event {item.get('id')!r}") from e
            page_token = data.get("nextPageToken")
            if not page_token:
                return events
            params = {**params, "pageToken": page_token}

    async def create_event(self, resource_id: str, event: NewEvent) -> str:
        body = {
            "summary": event.title,
            "description": event.description,
            "start": {"dateTime": format_utc(event.start), "timeZone": "UTC"},
            "end": {"dateTime": format_utc(event.end), "timeZone": "UTC"},
        }
        data = await self._request("POST", self._events_url(resource_id), json=body)
        event_id = data.get("id")
        if not event_id:
            raise CalendarAPIError("Create response without event id")
        return str(event_id)


class InMemoryCalendarService:
    """Process-local calendar store for development and tests. Deterministic."""

    def __init__(self, latency_seconds: float = 0.0) -> None:
        self.latency_seconds = latency_seconds
        self._events: dict[str, list[tuple[str, ExistingEvent, NewEvent | None]]] = {}
        self._ids = itertools.count(1)
        self.calls: list[tuple[str, str]] = []

    async def _pause(self) -> None:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

    def seed(self, resource_id: str, events: list[ExistingEvent]) -> None:
        self._events[resource_id] = [(f"seed_{next(self._ids)}", e, None) for e in events]

    def clear(self) -> None:
        self._events.clear()
        self.calls.clear()

    def events_for(self, resource_id: str) -> list[ExistingEvent]:
        return [e for _, e, _ in self._events.get(resource_id, [])]

    async def list_events(
        self, resource_id: str, range_start: datetime, range_end: datetime
    ) -> list[ExistingEvent]:
        self.calls.append(("list_events", resource_id))
        await self._pause()
        return [
            e
            for _, e, _ in self._events.get(resource_id, [])
            if e.start < range_end and e.end > range_start
        ]

    async def create_event(self, resource_id: str, event: NewEvent) -> str:
        self.calls.append(("create_event", resource_id))
        await self._pause()
        event_id = f"evt_{next(self._ids)}"
        stored = ExistingEvent(start=event.start, end=event.end)
        self._events.setdefault(resource_id, []).append((event_id, stored, event))
        return event_id
