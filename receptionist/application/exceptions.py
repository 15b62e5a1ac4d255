class SchedulingError(RuntimeError):
    """Base class for errors raised by the scheduling core."""
    pass


class CalendarUnavailable(SchedulingError):
    """Raised when the external calendar cannot be queried (network, auth, quota, timeout)."""
    pass


class BookingFailed(SchedulingError):
    """Raised when the pre-booking re-check or the event insert fails."""
    pass


class ShortlistRequired(SchedulingError):
    """Raised when selection or booking is attempted without a freshly offered shortlist."""
    pass
