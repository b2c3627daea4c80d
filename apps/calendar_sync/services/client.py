"""Thin Google Calendar v3 REST client bound to one connection."""

from typing import Optional
from urllib.parse import quote
import logging

import requests
from django.conf import settings

from ..models import GoogleCalendarConnection
from .exceptions import GoogleCalendarAPIError
from .oauth import get_valid_access_token

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
MAX_EVENTS = 250


class GoogleCalendarClient:
    """
    Calendar API calls on behalf of one user.

    Every request carries a token from ``get_valid_access_token``. When
    Google still answers 401 the token is force-refreshed and the request
    is retried once.
    """

    def __init__(self, connection: GoogleCalendarConnection):
        self.connection = connection

    @property
    def events_url(self):
        return f"{GOOGLE_CALENDAR_API}/calendars/{quote(self.connection.calendar_id, safe='')}/events"

    def _send(self, method, url, token, **kwargs):
        return requests.request(
            method,
            url,
            headers={'Authorization': f'Bearer {token}'},
            timeout=settings.GOOGLE_API_TIMEOUT,
            **kwargs,
        )

    def _request(self, method, url, **kwargs):
        token = get_valid_access_token(connection=self.connection)
        try:
            response = self._send(method, url, token, **kwargs)
            if response.status_code == 401:
                logger.info("Google answered 401 for user %s, forcing token refresh", self.connection.user_id)
                token = get_valid_access_token(connection=self.connection, force_refresh=True)
                response = self._send(method, url, token, **kwargs)
        except requests.RequestException as e:
            raise GoogleCalendarAPIError(f"Could not reach Google Calendar: {e}")

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {'raw': response.text}
            message = payload.get('error', {}).get('message') if isinstance(payload.get('error'), dict) else None
            raise GoogleCalendarAPIError(
                message or f"Google Calendar API error (HTTP {response.status_code})",
                status_code=response.status_code,
                payload=payload,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def list_events(self, time_min, time_max, max_results: int = MAX_EVENTS) -> list:
        data = self._request('GET', self.events_url, params={
            'timeMin': time_min.isoformat(),
            'timeMax': time_max.isoformat(),
            'maxResults': min(max_results, MAX_EVENTS),
            'singleEvents': 'true',
            'orderBy': 'startTime',
        })
        return (data or {}).get('items', [])

    def get_event(self, event_id: str) -> Optional[dict]:
        return self._request('GET', f"{self.events_url}/{quote(event_id, safe='')}")

    def create_event(self, body: dict) -> dict:
        return self._request('POST', self.events_url, json=body)

    def update_event(self, event_id: str, body: dict) -> dict:
        return self._request('PATCH', f"{self.events_url}/{quote(event_id, safe='')}", json=body)

    def delete_event(self, event_id: str) -> None:
        self._request('DELETE', f"{self.events_url}/{quote(event_id, safe='')}")
