"""Services for Google Calendar sync."""

from .exceptions import (
    CalendarSyncError,
    CalendarNotConnectedError,
    TokenRefreshError,
    OAuthExchangeError,
    GoogleCalendarAPIError,
    SessionAlreadySyncedError,
    EventNotImportableError,
)
from .oauth import (
    build_authorization_url,
    make_state,
    user_id_from_state,
    connect,
    disconnect,
    get_connection,
    get_valid_access_token,
)
from .client import GoogleCalendarClient
from .sync import (
    build_event_body,
    send_session_to_google,
    update_google_event,
    unsync_session,
    delete_remote_event,
    list_calendar_events,
    import_google_event,
    import_events,
    check_cancelled_events,
)

__all__ = [
    # Exceptions
    'CalendarSyncError',
    'CalendarNotConnectedError',
    'TokenRefreshError',
    'OAuthExchangeError',
    'GoogleCalendarAPIError',
    'SessionAlreadySyncedError',
    'EventNotImportableError',
    # OAuth
    'build_authorization_url',
    'make_state',
    'user_id_from_state',
    'connect',
    'disconnect',
    'get_connection',
    'get_valid_access_token',
    # API client
    'GoogleCalendarClient',
    # Sync
    'build_event_body',
    'send_session_to_google',
    'update_google_event',
    'unsync_session',
    'delete_remote_event',
    'list_calendar_events',
    'import_google_event',
    'import_events',
    'check_cancelled_events',
]
