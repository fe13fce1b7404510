from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.errors import BookingError, ErrorCode
from app.models.booking import TimeWindow


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise BookingError(ErrorCode.INVALID_INPUT, f"Unknown timezone: {name}") from e


def local_to_utc(date_str: str, time_str: str, tz_name: str) -> datetime:
    """Interpret date + time as wall-clock time in tz_name and return the UTC instant.

    Wall times skipped by a DST transition are rejected. Ambiguous wall times
    (repeated hour at fall-back) resolve to the earlier instant.
    """
    tz = _zone(tz_name)
    try:
        d = date.fromisoformat(date_str)
        t = time.fromisoformat(time_str)
    except ValueError as e:
        raise BookingError(ErrorCode.INVALID_INPUT, f"Invalid date/time: {date_str} {time_str}") from e
    local = datetime.combine(d, t, tzinfo=tz)
    try:
        as_utc = local.astimezone(UTC)
        round_trip = as_utc.astimezone(tz)
    except OverflowError as e:
        raise BookingError(ErrorCode.INVALID_INPUT, f"{date_str} {time_str} is out of range") from e
    # A non-existent wall time does not survive the round trip
    if round_trip.replace(tzinfo=None) != local.replace(tzinfo=None):
        raise BookingError(ErrorCode.INVALID_INPUT, f"{date_str} {time_str} does not exist in {tz_name}")
    return as_utc


def build_time_window(
    date_str: str,
    time_str: str,
    tz_name: str,
    duration_minutes: int,
    buffer_minutes: int,
) -> TimeWindow:
    start = local_to_utc(date_str, time_str, tz_name)
    buffer = timedelta(minutes=buffer_minutes)
    try:
        end = start + timedelta(minutes=duration_minutes)
        buffer_end = end + buffer
        # The calendar query reaches one buffer before the start
        start - buffer
    except OverflowError as e:
        raise BookingError(ErrorCode.INVALID_INPUT, f"{date_str} {time_str} is out of range") from e
    return TimeWindow(start=start, end=end, buffer_end=buffer_end)
