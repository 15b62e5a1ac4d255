from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import fields, replace

from receptionist.domain.entities.booking import AttendeeFacts, BookingRecord
from receptionist.domain.entities.conversation_state import ConversationState
from receptionist.domain.entities.preference import PreferenceFilter
from receptionist.domain.entities.time_interval import Slot


def with_shortlist(
    state: ConversationState,
    slots: Sequence[Slot],
    preference: PreferenceFilter | None,
) -> ConversationState:
    """Replace the offered shortlist; indices from any previous offer become invalid."""
    return replace(
        state,
        stage="offered",
        offered=tuple(slots),
        preference=preference,
        chosen_index=None,
        offer_attempts=0,
        updated_at=time.time(),
    )


def clear_shortlist(state: ConversationState, stage: str = "none") -> ConversationState:
    return replace(
        state,
        stage=stage,
        offered=(),
        chosen_index=None,
        offer_attempts=0,
        updated_at=time.time(),
    )


def mark_booked(state: ConversationState, record: BookingRecord) -> ConversationState:
    return replace(clear_shortlist(state, stage="booked"), booking=record)


def with_facts(state: ConversationState, updates: Mapping[str, str | None]) -> ConversationState:
    """Merge captured caller facts; unknown keys and empty values are ignored."""
    known = {f.name for f in fields(AttendeeFacts)}
    changes = {key: value for key, value in updates.items() if key in known and value}
    if not changes:
        return state
    return replace(state, facts=replace(state.facts, **changes), updated_at=time.time())


def reset_scheduling_state(state: ConversationState) -> ConversationState:
    """Drop everything except the caller's captured facts."""
    return ConversationState(facts=state.facts, updated_at=time.time())
