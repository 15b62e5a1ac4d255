from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from receptionist.domain.entities.time_interval import Slot


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def speak_time(value: datetime) -> str:
    """Render a wall-clock time for text-to-speech, e.g. "2 p.m." or "9:30 a.m."."""
    hour_12 = value.hour % 12 or 12
    minute = "" if value.minute == 0 else f":{value.minute:02d}"
    period = "p.m." if value.hour >= 12 else "a.m."
    return f"{hour_12}{minute} {period}"


def speak_date(value: datetime, now: datetime) -> str:
    """
    Render a date relative to now: "today", "tomorrow", "this Wednesday, the 21st"
    for two to six days ahead, otherwise "Monday, November 2nd".
    value is converted to now's timezone first.
    """
    local = value.astimezone(now.tzinfo) if now.tzinfo else value
    diff_days = (local.date() - now.date()).days

    if diff_days == 0:
        return "today"
    if diff_days == 1:
        return "tomorrow"

    weekday = local.strftime("%A")
    if 2 <= diff_days <= 6:
        return f"this {weekday}, the {ordinal(local.day)}"
    return f"{weekday}, {local.strftime('%B')} {ordinal(local.day)}"


def human_date_time(value: datetime, now: datetime) -> str:
    local = value.astimezone(now.tzinfo) if now.tzinfo else value
    return f"{speak_date(local, now)} at {speak_time(local)}"


def options_text(slots: Sequence[Slot], now: datetime) -> str:
    return " ".join(
        f"Option {index}: {human_date_time(slot.start, now)}." for index, slot in enumerate(slots, start=1)
    )
