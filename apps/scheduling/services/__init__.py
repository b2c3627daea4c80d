"""Services for sessions and recurring series."""

from .exceptions import (
    SchedulingServiceError,
    InvalidRecurrenceError,
    NotASeriesInstanceError,
    ReadOnlySessionError,
    ClientMismatchError,
    BookingUnavailableError,
    SlotTakenError,
    InvalidBookingError,
)
from .session_management import (
    create_session,
    update_session,
    set_session_status,
    delete_session,
    sessions_needing_attention,
)
from .recurrence import (
    generate_occurrence_dates,
    create_recurring,
    generate_instances,
    update_recurring,
    update_all_instances,
    update_single_instance,
    delete_recurring,
    extend_all_series,
)
from .public_booking import booking_page, book_public_session

__all__ = [
    # Exceptions
    'SchedulingServiceError',
    'InvalidRecurrenceError',
    'NotASeriesInstanceError',
    'ReadOnlySessionError',
    'ClientMismatchError',
    'BookingUnavailableError',
    'SlotTakenError',
    'InvalidBookingError',
    # Sessions
    'create_session',
    'update_session',
    'set_session_status',
    'delete_session',
    'sessions_needing_attention',
    # Recurring series
    'generate_occurrence_dates',
    'create_recurring',
    'generate_instances',
    'update_recurring',
    'update_all_instances',
    'update_single_instance',
    'delete_recurring',
    'extend_all_series',
    # Public booking
    'booking_page',
    'book_public_session',
]
