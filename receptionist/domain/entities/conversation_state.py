from __future__ import annotations

from dataclasses import dataclass

from receptionist.domain.entities.booking import AttendeeFacts, BookingRecord
from receptionist.domain.entities.preference import PreferenceFilter
from receptionist.domain.entities.time_interval import Slot


@dataclass(frozen=True)
class ConversationState:
    stage: str = "none"  # "none", "awaiting_preference", "offered", "confirming", "booked"
    facts: AttendeeFacts = AttendeeFacts()
    offered: tuple[Slot, ...] = ()  # current shortlist, indices valid until the next offer
    preference: PreferenceFilter | None = None
    chosen_index: int | None = None
    offer_attempts: int = 0  # failed selection attempts against the current shortlist
    booking: BookingRecord | None = None
    updated_at: float | None = None

    @property
    def has_shortlist(self) -> bool:
        return bool(self.offered)
