"""Domain-specific exceptions for Google Calendar sync."""


class CalendarSyncError(Exception):
    """Base exception for calendar sync services."""
    pass


class CalendarNotConnectedError(CalendarSyncError):
    """Raised when the user has not connected a Google calendar."""
    pass


class TokenRefreshError(CalendarSyncError):
    """Raised when Google rejects the refresh token; the user must reconnect."""
    pass


class OAuthExchangeError(CalendarSyncError):
    """Raised when the authorization code cannot be exchanged for tokens."""
    pass


class GoogleCalendarAPIError(CalendarSyncError):
    """Raised when the Calendar API answers with an error status."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def is_gone(self):
        return self.status_code in (404, 410)


class SessionAlreadySyncedError(CalendarSyncError):
    """Raised when a session is already linked to a Google event."""
    pass


class EventNotImportableError(CalendarSyncError):
    """Raised when a Google event cannot become a session."""
    pass
