from collections.abc import Iterable
from datetime import datetime, timedelta

from app.models.booking import ExistingEvent, TimeWindow


def query_range(window: TimeWindow, buffer_minutes: int) -> tuple[datetime, datetime]:
    """Range to ask the calendar for.

    The left edge is pulled back by the buffer: an event that ends shortly before
    the candidate starts can still reach into it through its own buffer.
    """
    return window.start - timedelta(minutes=buffer_minutes), window.buffer_end


def overlaps(window: TimeWindow, event: ExistingEvent, buffer_minutes: int) -> bool:
    """Strict overlap of effective intervals [start, end + buffer]. Touching edges do not conflict."""
    return window.start < event.buffer_end(buffer_minutes) and window.buffer_end > event.start


def find_conflicts(
    window: TimeWindow, events: Iterable[ExistingEvent], buffer_minutes: int
) -> list[ExistingEvent]:
    # The calendar's own range filter is approximate; every event is re-checked here.
    return [e for e in events if overlaps(window, e, buffer_minutes)]
