from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from receptionist.domain.entities.time_interval import TimeInterval


@dataclass(frozen=True)
class EventRequest:
    start: datetime
    end: datetime
    timezone: str
    summary: str
    description: str = ""


class CalendarPort(ABC):
    @abstractmethod
    def query_busy(self, time_min: datetime, time_max: datetime, timezone: str) -> list[TimeInterval]:
        """
        Return busy intervals within [time_min, time_max).
        Results may be unordered and may overlap each other.
        Raises CalendarUnavailable when the calendar cannot be queried.
        """
        raise NotImplementedError

    @abstractmethod
    def insert_event(self, request: EventRequest) -> str:
        """Create calendar event. Returns event_id."""
        raise NotImplementedError
