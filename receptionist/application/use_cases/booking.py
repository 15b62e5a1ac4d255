from __future__ import annotations

import logging

from receptionist.application.exceptions import BookingFailed
from receptionist.application.ports.calendar import CalendarPort, EventRequest
from receptionist.application.use_cases.availability import AvailabilityResolver
from receptionist.core.logging import timed_call
from receptionist.domain.entities.booking import AttendeeFacts, BookingOutcome, BookingRecord
from receptionist.domain.entities.time_interval import Slot


class BookingTransactor:
    def __init__(
        self,
        calendar: CalendarPort,
        availability: AvailabilityResolver,
        subject: str = "Appointment",
        company_name: str = "",
        slow_call_threshold_ms: int = 2000,
    ) -> None:
        self._calendar = calendar
        self._availability = availability
        self._subject = subject
        self._company_name = company_name
        self._slow_call_threshold_ms = slow_call_threshold_ms
        self._logger = logging.getLogger(__name__)

    def book(self, slot: Slot, attendee: AttendeeFacts) -> BookingOutcome:
        """
        Re-check the slot, then create the event.

        Returns a "slot_taken" outcome without writing when the re-check finds the
        slot occupied. Any failure of either call raises BookingFailed. The write
        is issued at most once; there are no retries here.
        """
        slot_start = slot.start.isoformat()

        try:
            still_free = self._availability.is_still_free(slot)
        except Exception as e:
            self._logger.error("Booking re-check failed", extra={"slot_start": slot_start, "error": str(e)})
            raise BookingFailed(f"Could not re-check slot {slot_start}: {e}") from e

        if not still_free:
            self._logger.info("Slot taken before commit", extra={"slot_start": slot_start, "reason": "slot_taken"})
            return BookingOutcome.taken()

        request = EventRequest(
            start=slot.start,
            end=slot.end,
            timezone=self._availability.timezone.key,
            summary=self._subject,
            description=self._build_description(attendee),
        )
        try:
            with timed_call(self._logger, "calendar", "events-insert", self._slow_call_threshold_ms):
                event_id = self._calendar.insert_event(request)
        except Exception as e:
            self._logger.error("Booking insert failed", extra={"slot_start": slot_start, "error": str(e)})
            raise BookingFailed(f"Could not create event for {slot_start}: {e}") from e

        self._logger.info("Booking committed", extra={"slot_start": slot_start, "event_id": event_id})
        return BookingOutcome.booked(
            BookingRecord(slot=slot, subject=self._subject, attendee=attendee, event_id=event_id)
        )

    def _build_description(self, attendee: AttendeeFacts) -> str:
        booked_by = f"Booked by {self._company_name} receptionist." if self._company_name else "Booked by receptionist."
        lines = [
            booked_by,
            f"Name: {attendee.name or ''}",
            f"Phone: {attendee.phone or ''}",
            f"Address: {attendee.address or ''}",
            f"Intent: {attendee.intent or ''}",
        ]
        return "\n".join(lines)
