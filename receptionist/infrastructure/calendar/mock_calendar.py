from __future__ import annotations

import logging
from datetime import datetime

from receptionist.application.exceptions import CalendarUnavailable
from receptionist.application.ports.calendar import CalendarPort, EventRequest
from receptionist.domain.entities.time_interval import TimeInterval


class MockCalendar(CalendarPort):
    def __init__(self, busy: list[TimeInterval] | None = None) -> None:
        self._busy: list[TimeInterval] = list(busy or [])
        self._events: dict[str, EventRequest] = {}
        self.query_count = 0
        self.insert_count = 0
        self.fail_queries = False
        self.fail_inserts = False
        self._logger = logging.getLogger(__name__)

    @property
    def events(self) -> dict[str, EventRequest]:
        return dict(self._events)

    def add_busy(self, start: datetime, end: datetime) -> None:
        self._busy.append(TimeInterval(start=start, end=end))

    def query_busy(self, time_min: datetime, time_max: datetime, timezone: str) -> list[TimeInterval]:
        self.query_count += 1
        if self.fail_queries:
            raise CalendarUnavailable("Mock calendar query failure")
        window = TimeInterval(start=time_min, end=time_max)
        return [interval for interval in self._busy if interval.overlaps(window)]

    def insert_event(self, request: EventRequest) -> str:
        self.insert_count += 1
        if self.fail_inserts:
            raise CalendarUnavailable("Mock calendar insert failure")
        event_id = f"mock_event_{len(self._events) + 1}"
        self._events[event_id] = request
        self._busy.append(TimeInterval(start=request.start, end=request.end))
        self._logger.info(
            "Mock calendar event created",
            extra={"event_id": event_id, "slot_start": request.start.isoformat()},
        )
        return event_id
