from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from receptionist.application.exceptions import CalendarUnavailable
from receptionist.application.ports.calendar import CalendarPort
from receptionist.application.utils.time_grid import generate_slots
from receptionist.core.logging import timed_call
from receptionist.domain.entities.time_interval import Slot, TimeInterval


class AvailabilityResolver:
    def __init__(
        self,
        calendar: CalendarPort,
        timezone: ZoneInfo,
        work_start: time,
        work_end: time,
        slot_minutes: int = 60,
        min_lead_minutes: int = 120,
        slow_call_threshold_ms: int = 2000,
    ) -> None:
        self._calendar = calendar
        self._timezone = timezone
        self._work_start = work_start
        self._work_end = work_end
        self._slot_minutes = slot_minutes
        self._min_lead_minutes = min_lead_minutes
        self._slow_call_threshold_ms = slow_call_threshold_ms
        self._logger = logging.getLogger(__name__)

    @property
    def timezone(self) -> ZoneInfo:
        return self._timezone

    def resolve_free(self, from_instant: datetime, horizon_days: int) -> list[Slot]:
        """
        Return every free grid slot in [from_instant, from_instant + horizon_days),
        chronologically. Truncation to a shortlist is the caller's job.

        An empty list means "no free time"; failure to reach the calendar raises
        CalendarUnavailable instead.
        """
        if horizon_days <= 0:
            return []
        time_max = from_instant + timedelta(days=horizon_days)
        busy = self._query_busy(from_instant, time_max, action="freebusy-query")

        candidates = generate_slots(
            from_instant,
            horizon_days,
            self._timezone,
            self._work_start,
            self._work_end,
            self._slot_minutes,
            self._min_lead_minutes,
        )
        free = [slot for slot in candidates if not any(slot.overlaps(interval) for interval in busy)]

        self._logger.info(
            "Resolved free slots",
            extra={"slot_count": len(candidates), "free_count": len(free), "busy_count": len(busy)},
        )
        return free

    def is_still_free(self, slot: Slot) -> bool:
        """Point re-check scoped exactly to [slot.start, slot.end)."""
        busy = self._query_busy(slot.start, slot.end, action="freebusy-check")
        is_free = not busy
        self._logger.info(
            "Slot re-checked",
            extra={"slot_start": slot.start.isoformat(), "busy_count": len(busy)},
        )
        return is_free

    def _query_busy(self, time_min: datetime, time_max: datetime, action: str) -> list[TimeInterval]:
        with timed_call(self._logger, "calendar", action, self._slow_call_threshold_ms):
            try:
                return list(self._calendar.query_busy(time_min, time_max, self._timezone.key))
            except CalendarUnavailable:
                raise
            except Exception as e:
                self._logger.error("Calendar query failed", extra={"action": action, "error": str(e)})
                raise CalendarUnavailable(str(e)) from e
