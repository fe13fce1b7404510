from datetime import UTC, datetime, timedelta

import pytest

from app.models.booking import ExistingEvent, TimeWindow
from app.services.conflict_service import find_conflicts, overlaps, query_range

BUFFER = 10


def _window(start: datetime, minutes: int) -> TimeWindow:
    end = start + timedelta(minutes=minutes)
    return TimeWindow(start=start, end=end, buffer_end=end + timedelta(minutes=BUFFER))


def _event(start: datetime, end: datetime) -> ExistingEvent:
    return ExistingEvent(start=start, end=end)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute, tzinfo=UTC)


EXISTING = _event(at(9), at(11))  # effective [09:00, 11:10]


@pytest.mark.parametrize(
    "start, minutes, expected",
    [
        (at(9), 120, True),  # identical
        (at(10), 60, True),  # inside
        (at(8), 60, True),  # ends in existing: [08:00, 09:10] vs [09:00, ...]
        (at(11, 5), 60, True),  # buffer-only overlap
        (at(11, 10), 60, False),  # starts exactly at existing buffer end
        (at(7, 50), 60, False),  # candidate buffer end touches existing start
        (at(7, 51), 60, True),  # one minute of overlap
        (at(12), 30, False),
    ],
)
def test_overlap_is_strict_on_effective_intervals(start, minutes, expected):
    assert overlaps(_window(start, minutes), EXISTING, BUFFER) is expected


def test_zero_buffer_allows_back_to_back():
    window = TimeWindow(start=at(11), end=at(12), buffer_end=at(12))
    assert overlaps(window, EXISTING, 0) is False


def test_query_range_widened_on_left_edge():
    window = _window(at(11, 5), 60)
    start, end = query_range(window, BUFFER)
    assert start == at(10, 55)
    assert end == window.buffer_end


def test_find_conflicts_rechecks_superset():
    window = _window(at(13), 60)
    far = _event(at(6), at(7))
    near = _event(at(13, 30), at(14))
    assert find_conflicts(window, [far, EXISTING, near], BUFFER) == [near]
    assert find_conflicts(window, [far, EXISTING], BUFFER) == []


def test_events_in_other_offsets_are_compared_as_instants():
    rome = ExistingEvent(start="2025-01-01T10:00:00+01:00", end="2025-01-01T12:00:00+01:00")
    assert rome.start == at(9)
    assert overlaps(_window(at(11, 5), 60), rome, BUFFER) is True
