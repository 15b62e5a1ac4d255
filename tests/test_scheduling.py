"""
Tests for the offer -> select -> book cycle driven by SchedulingUseCase.
"""

from __future__ import annotations

from datetime import datetime, time
from zoneinfo import ZoneInfo

import pytest

from receptionist.application.exceptions import BookingFailed, CalendarUnavailable, ShortlistRequired
from receptionist.application.use_cases.availability import AvailabilityResolver
from receptionist.application.use_cases.booking import BookingTransactor
from receptionist.application.use_cases.scheduling import PlannerDirective, SchedulingUseCase
from receptionist.domain.entities.booking import AttendeeFacts
from receptionist.domain.entities.conversation_state import ConversationState
from receptionist.domain.entities.preference import PartOfDay
from receptionist.infrastructure.calendar.mock_calendar import MockCalendar

TZ = ZoneInfo("America/New_York")
MONDAY_8AM = datetime(2026, 10, 19, 8, 0, tzinfo=TZ)


def _at(day: int, hour: int) -> datetime:
    return datetime(2026, 10, day, hour, 0, tzinfo=TZ)


def _use_case(calendar: MockCalendar) -> SchedulingUseCase:
    availability = AvailabilityResolver(
        calendar=calendar,
        timezone=TZ,
        work_start=time(9, 0),
        work_end=time(18, 0),
        slot_minutes=60,
        min_lead_minutes=120,
    )
    booking = BookingTransactor(calendar=calendar, availability=availability, subject="Home visit")
    return SchedulingUseCase(availability=availability, booking=booking, horizon_days=10)


def _offered_state(use_case: SchedulingUseCase, text: str = "tomorrow morning") -> ConversationState:
    state = ConversationState(facts=AttendeeFacts(name="Dana", address="12 Palm Ave"))
    return use_case.offer_slots(state, text, now=MONDAY_8AM).updated_state


def test_offer_without_preference_lists_first_three():
    result = _use_case(MockCalendar()).offer_slots(ConversationState(), now=MONDAY_8AM)

    assert result.action == "offer_slots"
    assert [slot.start for slot in result.slots] == [_at(19, 10), _at(19, 11), _at(19, 12)]
    assert result.options == ("today at 10 a.m.", "today at 11 a.m.", "today at 12 p.m.")
    assert result.updated_state.offered == result.slots
    assert result.updated_state.stage == "offered"


def test_offer_applies_preference_filter():
    result = _use_case(MockCalendar()).offer_slots(ConversationState(), "tomorrow morning", now=MONDAY_8AM)

    assert [slot.start for slot in result.slots] == [_at(20, 9), _at(20, 10), _at(20, 11)]
    assert result.updated_state.preference.part_of_day == PartOfDay.MORNING
    assert result.options[0] == "tomorrow at 9 a.m."


def test_offer_skips_busy_time():
    calendar = MockCalendar()
    calendar.add_busy(_at(20, 9), _at(20, 11))

    result = _use_case(calendar).offer_slots(ConversationState(), "tomorrow morning", now=MONDAY_8AM)

    assert [slot.start for slot in result.slots] == [_at(20, 11)]


def test_no_free_slots_is_normal_outcome():
    calendar = MockCalendar()
    calendar.add_busy(_at(20, 0), _at(21, 0))

    result = _use_case(calendar).offer_slots(ConversationState(), "tomorrow", now=MONDAY_8AM)

    assert result.action == "no_free_slots"
    assert result.slots == ()
    assert not result.updated_state.has_shortlist


def test_offer_propagates_calendar_unavailable():
    calendar = MockCalendar()
    calendar.fail_queries = True

    with pytest.raises(CalendarUnavailable):
        _use_case(calendar).offer_slots(ConversationState(), now=MONDAY_8AM)


def test_new_offer_replaces_shortlist():
    use_case = _use_case(MockCalendar())
    state = _offered_state(use_case, "tomorrow morning")

    reoffered = use_case.offer_slots(state, "wednesday afternoon", now=MONDAY_8AM).updated_state

    assert [slot.start for slot in reoffered.offered] == [_at(21, 12), _at(21, 13), _at(21, 14)]
    assert reoffered.chosen_index is None


def test_select_then_book():
    calendar = MockCalendar()
    use_case = _use_case(calendar)
    state = _offered_state(use_case)

    selected = use_case.select_slot(state, "option two")
    assert selected.action == "confirm"
    assert selected.chosen_index == 1
    assert selected.updated_state.stage == "confirming"

    booked = use_case.book_slot(selected.updated_state)
    assert booked.action == "booked"
    assert booked.booking.slot.start == _at(20, 10)
    assert booked.booking.attendee.name == "Dana"
    assert booked.updated_state.stage == "booked"
    assert booked.updated_state.offered == ()
    assert booked.updated_state.booking == booked.booking
    assert calendar.insert_count == 1


def test_slot_taken_discards_shortlist():
    calendar = MockCalendar()
    use_case = _use_case(calendar)
    state = use_case.select_slot(_offered_state(use_case), "two").updated_state

    calendar.add_busy(_at(20, 10), _at(20, 11))
    result = use_case.book_slot(state)

    assert result.action == "slot_taken"
    assert result.updated_state.offered == ()
    assert result.updated_state.stage == "awaiting_preference"
    assert calendar.insert_count == 0


def test_ambiguous_selection_escalates_to_dtmf():
    use_case = _use_case(MockCalendar())
    state = _offered_state(use_case)

    first = use_case.select_slot(state, "hmm, not sure")
    assert first.action == "ambiguous_selection"
    assert first.use_dtmf is False
    assert first.updated_state.offered == state.offered

    second = use_case.select_slot(first.updated_state, "what were they again")
    assert second.use_dtmf is True
    assert second.updated_state.offer_attempts == 2

    picked = use_case.select_slot(second.updated_state, "", digits="3")
    assert picked.chosen_index == 2


def test_select_and_book_require_shortlist():
    use_case = _use_case(MockCalendar())

    with pytest.raises(ShortlistRequired):
        use_case.select_slot(ConversationState(), "two")
    with pytest.raises(ShortlistRequired):
        use_case.book_slot(ConversationState(), 0)


def test_book_rejects_out_of_range_index():
    calendar = MockCalendar()
    use_case = _use_case(calendar)
    state = _offered_state(use_case)

    result = use_case.book_slot(state, 5)

    assert result.action == "invalid_choice"
    assert result.updated_state == state
    assert calendar.insert_count == 0


def test_booking_failure_propagates():
    calendar = MockCalendar()
    use_case = _use_case(calendar)
    state = _offered_state(use_case)
    calendar.fail_inserts = True

    with pytest.raises(BookingFailed):
        use_case.book_slot(state, 0)


def test_ask_preference_clears_shortlist():
    use_case = _use_case(MockCalendar())
    result = use_case.ask_preference(_offered_state(use_case))

    assert result.action == "ask_preference"
    assert result.updated_state.stage == "awaiting_preference"
    assert result.updated_state.offered == ()


def test_planner_directives_drive_the_cycle():
    """OFFER_SLOTS merges captured facts and offers; BOOK commits the chosen index."""
    calendar = MockCalendar()
    use_case = _use_case(calendar)

    offered = use_case.apply_directive(
        ConversationState(),
        PlannerDirective(action="OFFER_SLOTS", updates={"name": "Dana", "phone": "3055550142", "unknown": "x"}),
        utterance="wednesday afternoon",
        now=MONDAY_8AM,
    )
    assert offered.action == "offer_slots"
    assert offered.updated_state.facts == AttendeeFacts(name="Dana", phone="3055550142")

    booked = use_case.apply_directive(offered.updated_state, PlannerDirective(action="BOOK", chosen_index=2))
    assert booked.action == "booked"
    assert booked.booking.slot.start == _at(21, 14)

    idle = use_case.apply_directive(booked.updated_state, PlannerDirective())
    assert idle.action == "none"
    assert calendar.insert_count == 1


def test_unknown_planner_action_rejected():
    with pytest.raises(ValueError):
        _use_case(MockCalendar()).apply_directive(ConversationState(), PlannerDirective(action="DANCE"))

