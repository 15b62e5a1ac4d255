from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class PartOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @property
    def hour_range(self) -> tuple[int, int]:
        return PART_OF_DAY_HOURS[self]

    @property
    def center_minute(self) -> int:
        start, end = self.hour_range
        return (start + end) * 30


PART_OF_DAY_HOURS = {
    PartOfDay.MORNING: (9, 12),
    PartOfDay.AFTERNOON: (12, 16),
    PartOfDay.EVENING: (16, 19),
}


@dataclass(frozen=True)
class PreferenceFilter:
    day: date | None = None
    part_of_day: PartOfDay | None = None

    @property
    def is_empty(self) -> bool:
        return self.day is None and self.part_of_day is None
