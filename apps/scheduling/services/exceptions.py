"""Domain-specific exceptions for scheduling services."""


class SchedulingServiceError(Exception):
    """Base exception for scheduling services."""
    pass


class InvalidRecurrenceError(SchedulingServiceError):
    """Raised when a recurrence rule is inconsistent."""
    pass


class NotASeriesInstanceError(SchedulingServiceError):
    """Raised when a series operation targets a standalone session."""
    pass


class ReadOnlySessionError(SchedulingServiceError):
    """Raised when editing a session imported read-only from Google Calendar."""
    pass


class ClientMismatchError(SchedulingServiceError):
    """Raised when a client belongs to another therapist."""
    pass


class BookingUnavailableError(SchedulingServiceError):
    """Raised when no therapist accepts public bookings under a slug."""
    pass


class SlotTakenError(SchedulingServiceError):
    """Raised when a public booking targets a time that is already booked."""
    pass


class InvalidBookingError(SchedulingServiceError):
    """Raised when a public booking asks for a slot that cannot be booked."""
    pass
