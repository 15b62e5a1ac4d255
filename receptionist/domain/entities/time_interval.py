from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeInterval bounds must be timezone-aware")
        if not self.start < self.end:
            raise ValueError(f"TimeInterval start must precede end: {self.start} >= {self.end}")

    def overlaps(self, other: TimeInterval) -> bool:
        # Half-open: touching endpoints are not an overlap.
        return self.start < other.end and other.start < self.end

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    @classmethod
    def from_iso(cls, start: str, end: str) -> TimeInterval:
        return cls(
            start=datetime.fromisoformat(start.replace("Z", "+00:00")),
            end=datetime.fromisoformat(end.replace("Z", "+00:00")),
        )


@dataclass(frozen=True)
class Slot(TimeInterval):
    """One offerable appointment window in the business timezone."""


BusyInterval = TimeInterval
