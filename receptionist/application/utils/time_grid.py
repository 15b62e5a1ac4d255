from __future__ import annotations

import re
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from receptionist.domain.entities.time_interval import Slot

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


def parse_clock(value: str) -> time:
    """Parse an "HH:MM" wall-clock string (e.g. WORK_START) into a time."""
    match = _CLOCK_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid clock value: {value!r} (expected HH:MM)")
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid clock value: {value!r}")
    return time(hour, minute)


def generate_slots(
    from_instant: datetime,
    horizon_days: int,
    timezone: ZoneInfo,
    work_start: time,
    work_end: time,
    slot_minutes: int,
    min_lead_minutes: int,
) -> list[Slot]:
    """
    Build the candidate business-hours grid for [0, horizon_days) days starting at
    the business-local date of from_instant.

    Slots are computed on wall-clock time in the business timezone, so a
    daylight-saving change never moves a 09:00 slot to 08:00 or 10:00. Slots that
    would end after work_end are not emitted. On day 0, starts earlier than
    from_instant + min_lead_minutes are skipped in slot_minutes steps.
    """
    if slot_minutes <= 0:
        raise ValueError("slot_minutes must be positive")
    if horizon_days < 0:
        raise ValueError("horizon_days must not be negative")
    if work_end <= work_start:
        raise ValueError("work_end must be after work_start")

    step = timedelta(minutes=slot_minutes)
    local_now = from_instant.astimezone(timezone)
    lead_floor = local_now + timedelta(minutes=min_lead_minutes)
    first_day = local_now.date()

    slots: list[Slot] = []
    for offset in range(horizon_days):
        day = first_day + timedelta(days=offset)
        current = datetime.combine(day, work_start)
        day_end = datetime.combine(day, work_end)

        if offset == 0:
            while current < day_end and current.replace(tzinfo=timezone) < lead_floor:
                current += step

        while current + step <= day_end:
            slots.append(
                Slot(
                    start=current.replace(tzinfo=timezone),
                    end=(current + step).replace(tzinfo=timezone),
                )
            )
            current += step

    return slots
