from __future__ import annotations

from dataclasses import dataclass

from receptionist.domain.entities.time_interval import Slot

SLOT_TAKEN = "slot_taken"


@dataclass(frozen=True)
class AttendeeFacts:
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    intent: str | None = None


@dataclass(frozen=True)
class BookingRecord:
    slot: Slot
    subject: str
    attendee: AttendeeFacts
    event_id: str


@dataclass(frozen=True)
class BookingOutcome:
    committed: bool
    record: BookingRecord | None = None
    reason: str | None = None  # "slot_taken" when the re-check found the slot occupied

    @classmethod
    def taken(cls) -> BookingOutcome:
        return cls(committed=False, reason=SLOT_TAKEN)

    @classmethod
    def booked(cls, record: BookingRecord) -> BookingOutcome:
        return cls(committed=True, record=record)
