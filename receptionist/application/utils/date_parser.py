from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from receptionist.domain.entities.preference import PartOfDay, PreferenceFilter
from receptionist.domain.entities.time_interval import Slot

WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

# Checked in this order; the first keyword present wins.
PART_OF_DAY_KEYWORDS = (
    (PartOfDay.MORNING, ("morning",)),
    (PartOfDay.AFTERNOON, ("afternoon",)),
    (PartOfDay.EVENING, ("evening", "night")),
)

_WEEKDAY_RE = re.compile(r"\b(?:this\s+|next\s+)?(" + "|".join(WEEKDAYS) + r")\b")
_TWELVE_HOUR_RE = re.compile(r"\b(1[0-2]|0?[1-9])(?:[:.]([0-5]\d))?\s*([ap])\.?\s?m\b\.?")
_TWENTY_FOUR_HOUR_RE = re.compile(r"\b([01]?\d|2[0-3])(?:[:.]([0-5]\d))?\b")
_NOON_RE = re.compile(r"\bnoon\b")


def parse_weekday(text: str) -> int | None:
    """Return the weekday (Monday=0) of the first weekday name in text, or None."""
    match = _WEEKDAY_RE.search((text or "").lower())
    if not match:
        return None
    return WEEKDAYS[match.group(1)]


def parse_part_of_day(text: str) -> PartOfDay | None:
    normalized = (text or "").lower()
    for part, keywords in PART_OF_DAY_KEYWORDS:
        if any(re.search(rf"\b{keyword}\b", normalized) for keyword in keywords):
            return part
    return None


def parse_clock_time(text: str) -> tuple[int, int] | None:
    """
    Parse a stated clock time. Returns (hour, minute) or None.

    12-hour forms ("2pm", "9:30 a.m.", "11.15 am") are preferred over bare
    numbers; a bare number 0-23 with optional ":mm" is read as a 24-hour time.
    """
    normalized = (text or "").lower().strip()

    match = _TWELVE_HOUR_RE.search(normalized)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2)) if match.group(2) else 0
        if match.group(3) == "p" and hour < 12:
            hour += 12
        elif match.group(3) == "a" and hour == 12:
            hour = 0
        return (hour, minute)

    if _NOON_RE.search(normalized):
        return (12, 0)

    match = _TWENTY_FOUR_HOUR_RE.search(normalized)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2)) if match.group(2) else 0
        return (hour, minute)

    return None


def derive_filter(utterance: str, now: datetime) -> PreferenceFilter:
    """
    Derive a day / part-of-day preference from a caller utterance.

    Day priority: "today" > "tomorrow" > a weekday name. A weekday always means
    its next occurrence strictly after today, so naming today's weekday means
    next week. now should already be in the business timezone.
    """
    normalized = (utterance or "").lower()
    today = now.date()

    day: date | None = None
    if re.search(r"\btoday\b", normalized):
        day = today
    elif re.search(r"\btomorrow\b", normalized):
        day = today + timedelta(days=1)
    else:
        weekday = parse_weekday(normalized)
        if weekday is not None:
            days_ahead = (weekday - today.weekday()) % 7
            if days_ahead == 0:
                days_ahead = 7
            day = today + timedelta(days=days_ahead)

    return PreferenceFilter(day=day, part_of_day=parse_part_of_day(normalized))


def apply_filter(
    slots: Iterable[Slot],
    preference: PreferenceFilter | None,
    timezone: ZoneInfo | None = None,
) -> list[Slot]:
    """
    Keep slots matching both axes of the preference, preserving order.
    An unset axis always passes; an empty result is a valid outcome.
    """
    if preference is None or preference.is_empty:
        return list(slots)

    hour_range = preference.part_of_day.hour_range if preference.part_of_day else None
    result: list[Slot] = []
    for slot in slots:
        local_start = slot.start.astimezone(timezone) if timezone else slot.start
        if preference.day is not None and local_start.date() != preference.day:
            continue
        if hour_range is not None and not (hour_range[0] <= local_start.hour < hour_range[1]):
            continue
        result.append(slot)
    return result
