from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from receptionist.core.config import settings
from receptionist.application.ports.calendar import CalendarPort
from receptionist.application.ports.conversation_store import ConversationStorePort
from receptionist.application.use_cases.availability import AvailabilityResolver
from receptionist.application.use_cases.booking import BookingTransactor
from receptionist.application.use_cases.scheduling import SchedulingUseCase
from receptionist.application.use_cases.selection import SelectionMatcher
from receptionist.application.utils.time_grid import parse_clock
from receptionist.infrastructure.calendar.google_calendar import GoogleCalendar
from receptionist.infrastructure.calendar.mock_calendar import MockCalendar
from receptionist.infrastructure.store.memory_store import MemoryConversationStore


_conversation_store: ConversationStorePort | None = None


def get_conversation_store() -> ConversationStorePort:
    global _conversation_store
    if _conversation_store is None:
        _conversation_store = MemoryConversationStore()
    return _conversation_store


@lru_cache
def get_calendar() -> CalendarPort:
    logger = logging.getLogger(__name__)
    has_credentials = bool(settings.GOOGLE_CLIENT_EMAIL and settings.GOOGLE_PRIVATE_KEY and settings.CALENDAR_ID)
    if not has_credentials:
        if settings.ENV.lower() in {"dev", "local", "test"}:
            logger.info("Using MockCalendar (Google credentials missing, ENV=%s)", settings.ENV)
            return MockCalendar()
        raise ValueError("GOOGLE_CLIENT_EMAIL, GOOGLE_PRIVATE_KEY and CALENDAR_ID are required outside dev.")

    logger.info("Using GoogleCalendar")
    return GoogleCalendar()


def get_availability_resolver(calendar: CalendarPort | None = None) -> AvailabilityResolver:
    return AvailabilityResolver(
        calendar=calendar or get_calendar(),
        timezone=ZoneInfo(settings.BUSINESS_TIMEZONE),
        work_start=parse_clock(settings.WORK_START),
        work_end=parse_clock(settings.WORK_END),
        slot_minutes=settings.SLOT_MINUTES,
        min_lead_minutes=settings.MIN_BUFFER_MINUTES,
        slow_call_threshold_ms=settings.SLOW_CALL_THRESHOLD_MS,
    )


def get_scheduling_use_case(calendar: CalendarPort | None = None) -> SchedulingUseCase:
    calendar = calendar or get_calendar()
    availability = get_availability_resolver(calendar)
    booking = BookingTransactor(
        calendar=calendar,
        availability=availability,
        subject=settings.BOOKING_SUBJECT,
        company_name=settings.COMPANY_NAME,
        slow_call_threshold_ms=settings.SLOW_CALL_THRESHOLD_MS,
    )
    return SchedulingUseCase(
        availability=availability,
        booking=booking,
        matcher=SelectionMatcher(),
        horizon_days=settings.SEARCH_HORIZON_DAYS,
    )


def get_container() -> dict[str, object]:
    return {
        "use_case": get_scheduling_use_case(),
        "store": get_conversation_store(),
    }
