"""
Tests for free/busy resolution and the point re-check.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

import httpx
import pytest

from receptionist.application.exceptions import CalendarUnavailable
from receptionist.application.ports.calendar import CalendarPort, EventRequest
from receptionist.application.use_cases.availability import AvailabilityResolver
from receptionist.domain.entities.time_interval import Slot, TimeInterval
from receptionist.infrastructure.calendar.mock_calendar import MockCalendar

TZ = ZoneInfo("America/New_York")
MONDAY_8AM = datetime(2026, 10, 19, 8, 0, tzinfo=TZ)


def _at(hour: int, minute: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=TZ)


def _resolver(calendar: CalendarPort) -> AvailabilityResolver:
    return AvailabilityResolver(
        calendar=calendar,
        timezone=TZ,
        work_start=time(9, 0),
        work_end=time(18, 0),
        slot_minutes=60,
        min_lead_minutes=120,
    )


class RecordingCalendar(CalendarPort):
    def __init__(self, busy: list[TimeInterval] | None = None, error: Exception | None = None) -> None:
        self.busy = busy or []
        self.error = error
        self.queries: list[tuple[datetime, datetime, str]] = []

    def query_busy(self, time_min: datetime, time_max: datetime, timezone: str) -> list[TimeInterval]:
        self.queries.append((time_min, time_max, timezone))
        if self.error is not None:
            raise self.error
        return list(self.busy)

    def insert_event(self, request: EventRequest) -> str:
        raise AssertionError("availability must never write")


def test_end_to_end_first_free_slot():
    """No busy time: resolve_free starts with Monday 10:00-11:00."""
    free = _resolver(MockCalendar()).resolve_free(MONDAY_8AM, 10)

    assert free[0] == Slot(start=_at(10), end=_at(11))
    assert len(free) == 8 + 9 * 9


def test_partial_overlap_excludes_slot():
    """Busy [10:30, 10:45) removes the [10:00, 11:00) slot."""
    calendar = MockCalendar(busy=[TimeInterval(start=_at(10, 30), end=_at(10, 45))])
    free = _resolver(calendar).resolve_free(MONDAY_8AM, 1)

    starts = [slot.start for slot in free]
    assert _at(10) not in starts
    assert starts[0] == _at(11)


def test_touching_interval_is_not_overlap():
    """Busy [9:00, 10:00) touches but does not overlap the [10:00, 11:00) slot."""
    calendar = MockCalendar(busy=[TimeInterval(start=_at(9), end=_at(10))])
    free = _resolver(calendar).resolve_free(MONDAY_8AM, 1)

    assert free[0] == Slot(start=_at(10), end=_at(11))


def test_unordered_overlapping_busy_intervals():
    """Busy intervals may come unordered and overlapping each other."""
    busy = [
        TimeInterval(start=_at(15), end=_at(16, 30)),
        TimeInterval(start=_at(11, 15), end=_at(12, 15)),
        TimeInterval(start=_at(11, 45), end=_at(13)),
    ]
    free = _resolver(RecordingCalendar(busy)).resolve_free(MONDAY_8AM, 1)

    assert [slot.start.hour for slot in free] == [10, 13, 14, 17]


def test_busy_interval_reported_in_utc():
    """Busy intervals in another zone are compared as instants."""
    busy = [TimeInterval.from_iso("2026-10-19T14:00:00Z", "2026-10-19T15:00:00Z")]  # 10:00-11:00 EDT
    free = _resolver(RecordingCalendar(busy)).resolve_free(MONDAY_8AM, 1)

    assert free[0].start == _at(11)


def test_single_batched_query_over_horizon():
    """One freebusy query covers the whole horizon in the business timezone."""
    calendar = RecordingCalendar()
    _resolver(calendar).resolve_free(MONDAY_8AM, 10)

    assert calendar.queries == [(MONDAY_8AM, MONDAY_8AM + timedelta(days=10), "America/New_York")]


def test_fully_booked_returns_empty_list():
    """A successful query with no free time is an empty list, not an error."""
    calendar = MockCalendar(busy=[TimeInterval(start=_at(0), end=_at(23, 59, day=20))])
    free = _resolver(calendar).resolve_free(MONDAY_8AM, 2)

    assert free == []


def test_calendar_failure_propagates():
    """Calendar failures surface as CalendarUnavailable instead of an empty list."""
    calendar = MockCalendar()
    calendar.fail_queries = True

    with pytest.raises(CalendarUnavailable):
        _resolver(calendar).resolve_free(MONDAY_8AM, 10)


def test_unexpected_calendar_error_is_wrapped():
    calendar = RecordingCalendar(error=httpx.ConnectTimeout("timed out"))

    with pytest.raises(CalendarUnavailable) as excinfo:
        _resolver(calendar).resolve_free(MONDAY_8AM, 10)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectTimeout)


def test_is_still_free_scoped_to_slot():
    """The point re-check queries exactly the slot window."""
    calendar = RecordingCalendar()
    slot = Slot(start=_at(14), end=_at(15))

    assert _resolver(calendar).is_still_free(slot) is True
    assert calendar.queries == [(slot.start, slot.end, "America/New_York")]


def test_is_still_free_false_when_busy_reported():
    calendar = MockCalendar(busy=[TimeInterval(start=_at(14, 30), end=_at(14, 45))])

    assert _resolver(calendar).is_still_free(Slot(start=_at(14), end=_at(15))) is False
    assert _resolver(calendar).is_still_free(Slot(start=_at(15), end=_at(16))) is True
