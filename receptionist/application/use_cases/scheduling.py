from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from receptionist.application.exceptions import ShortlistRequired
from receptionist.application.use_cases.availability import AvailabilityResolver
from receptionist.application.use_cases.booking import BookingTransactor
from receptionist.application.use_cases.selection import SelectionMatcher
from receptionist.application.utils.date_parser import apply_filter, derive_filter
from receptionist.application.utils.speech import human_date_time
from receptionist.application.utils.state_helpers import (
    clear_shortlist,
    mark_booked,
    with_facts,
    with_shortlist,
)
from receptionist.core.config import SHORTLIST_SIZE
from receptionist.domain.entities.booking import BookingRecord
from receptionist.domain.entities.conversation_state import ConversationState
from receptionist.domain.entities.time_interval import Slot

DTMF_AFTER_ATTEMPTS = 2

PLANNER_ACTIONS = {"OFFER_SLOTS", "BOOK", "NONE"}


@dataclass(frozen=True)
class SchedulingResult:
    action: str  # "ask_preference", "offer_slots", "no_free_slots", "confirm", "ambiguous_selection",
    # "invalid_choice", "slot_taken", "booked", "none"
    updated_state: ConversationState
    slots: tuple[Slot, ...] = ()
    options: tuple[str, ...] = ()  # human-readable rendering of slots, same order
    chosen_index: int | None = None
    use_dtmf: bool = False
    booking: BookingRecord | None = None


@dataclass(frozen=True)
class PlannerDirective:
    """Intent signal emitted by the dialogue planner for one turn."""

    action: str = "NONE"  # "OFFER_SLOTS", "BOOK", "NONE"
    chosen_index: int | None = None
    updates: dict[str, str] = field(default_factory=dict)  # captured facts: name, phone, address, intent


class SchedulingUseCase:
    """
    Drive one caller turn through offer, selection and booking.

    State is passed in and returned; the use case never stores it. Calendar
    errors (CalendarUnavailable, BookingFailed) propagate to the caller.
    """

    def __init__(
        self,
        availability: AvailabilityResolver,
        booking: BookingTransactor,
        matcher: SelectionMatcher | None = None,
        horizon_days: int = 10,
    ) -> None:
        self._availability = availability
        self._booking = booking
        self._matcher = matcher or SelectionMatcher()
        self._horizon_days = horizon_days
        self._logger = logging.getLogger(__name__)

    def ask_preference(self, state: ConversationState) -> SchedulingResult:
        return SchedulingResult(
            action="ask_preference",
            updated_state=replace(clear_shortlist(state, stage="awaiting_preference"), preference=None),
        )

    def offer_slots(
        self,
        state: ConversationState,
        preference_text: str | None = None,
        now: datetime | None = None,
    ) -> SchedulingResult:
        tz = self._availability.timezone
        now = (now or datetime.now(tz)).astimezone(tz)

        preference = state.preference
        if preference_text:
            stated = derive_filter(preference_text, now)
            if not stated.is_empty:
                preference = stated
        free = self._availability.resolve_free(now, self._horizon_days)
        shortlist = apply_filter(free, preference, tz)[:SHORTLIST_SIZE]

        updated = with_shortlist(state, shortlist, preference)
        if not shortlist:
            self._logger.info("No free slots for preference", extra={"action": "no_free_slots"})
            return SchedulingResult(action="no_free_slots", updated_state=replace(updated, stage="awaiting_preference"))

        self._logger.info("Offering slots", extra={"action": "offer_slots", "free_count": len(shortlist)})
        return SchedulingResult(
            action="offer_slots",
            updated_state=updated,
            slots=tuple(shortlist),
            options=tuple(human_date_time(slot.start, now) for slot in shortlist),
        )

    def select_slot(
        self,
        state: ConversationState,
        utterance: str,
        digits: str | None = None,
    ) -> SchedulingResult:
        index = self._matcher.match(utterance, state, digits)

        if index is None:
            attempts = state.offer_attempts + 1
            return SchedulingResult(
                action="ambiguous_selection",
                updated_state=replace(state, offer_attempts=attempts),
                slots=state.offered,
                use_dtmf=attempts >= DTMF_AFTER_ATTEMPTS,
            )

        return SchedulingResult(
            action="confirm",
            updated_state=replace(state, stage="confirming", chosen_index=index),
            slots=(state.offered[index],),
            chosen_index=index,
        )

    def book_slot(self, state: ConversationState, index: int | None = None) -> SchedulingResult:
        if not state.has_shortlist:
            raise ShortlistRequired("Booking requires a freshly offered shortlist")

        if index is None:
            index = state.chosen_index
        if index is None or not 0 <= index < len(state.offered):
            return SchedulingResult(action="invalid_choice", updated_state=state, slots=state.offered)

        slot = state.offered[index]
        outcome = self._booking.book(slot, state.facts)

        if not outcome.committed:
            return SchedulingResult(
                action="slot_taken",
                updated_state=clear_shortlist(state, stage="awaiting_preference"),
            )

        return SchedulingResult(
            action="booked",
            updated_state=mark_booked(state, outcome.record),
            slots=(slot,),
            chosen_index=index,
            booking=outcome.record,
        )

    def apply_directive(
        self,
        state: ConversationState,
        directive: PlannerDirective,
        utterance: str = "",
        now: datetime | None = None,
    ) -> SchedulingResult:
        if directive.action not in PLANNER_ACTIONS:
            raise ValueError(f"Unknown planner action: {directive.action}")

        state = with_facts(state, directive.updates)

        if directive.action == "OFFER_SLOTS":
            return self.offer_slots(state, utterance or None, now)
        if directive.action == "BOOK":
            return self.book_slot(state, directive.chosen_index)
        return SchedulingResult(action="none", updated_state=state)
