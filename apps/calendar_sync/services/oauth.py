"""
OAuth2 handling for Google Calendar.

Access tokens live about an hour. ``get_valid_access_token`` hands out the
stored token while it is comfortably valid and otherwise refreshes it,
serializing concurrent refreshes of the same connection with a row lock.
"""

from datetime import timedelta
from urllib.parse import urlencode
import logging

import requests
from django.conf import settings
from django.core import signing
from django.db import transaction
from django.utils import timezone

from ..models import GoogleCalendarConnection
from .exceptions import CalendarNotConnectedError, OAuthExchangeError, TokenRefreshError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
]
DEFAULT_EXPIRES_IN = 3600
STATE_SALT = 'calendar_sync.oauth'
STATE_MAX_AGE = 600


def build_authorization_url(*, state: str) -> str:
    params = {
        'client_id': settings.GOOGLE_CLIENT_ID,
        'redirect_uri': settings.GOOGLE_REDIRECT_URI,
        'response_type': 'code',
        'scope': ' '.join(GOOGLE_SCOPES),
        'access_type': 'offline',
        'prompt': 'consent',
        'include_granted_scopes': 'true',
        'state': state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def make_state(user) -> str:
    """Signed, short-lived OAuth state identifying the user across the redirect."""
    return signing.dumps({'user': str(user.pk)}, salt=STATE_SALT)


def user_id_from_state(state: str) -> str:
    """
    Raises:
        OAuthExchangeError: If the state was tampered with or is too old
    """
    try:
        return signing.loads(state, salt=STATE_SALT, max_age=STATE_MAX_AGE)['user']
    except (signing.BadSignature, KeyError, TypeError):
        raise OAuthExchangeError("Invalid or expired OAuth state")


def _post_token_endpoint(data: dict) -> requests.Response:
    return requests.post(
        GOOGLE_TOKEN_URL,
        data={
            'client_id': settings.GOOGLE_CLIENT_ID,
            'client_secret': settings.GOOGLE_CLIENT_SECRET,
            **data,
        },
        timeout=settings.GOOGLE_API_TIMEOUT,
    )


@transaction.atomic
def connect(*, user, code: str, now=None) -> GoogleCalendarConnection:
    """
    Exchange an authorization code and store the tokens for ``user``.

    Raises:
        OAuthExchangeError: If Google rejects the code or is unreachable
    """
    now = now or timezone.now()
    try:
        response = _post_token_endpoint({
            'code': code,
            'grant_type': 'authorization_code',
            'redirect_uri': settings.GOOGLE_REDIRECT_URI,
        })
    except requests.RequestException as e:
        raise OAuthExchangeError(f"Could not reach Google: {e}")

    if response.status_code != 200:
        logger.warning("Google code exchange failed for user %s: %s", user.id, response.status_code)
        raise OAuthExchangeError("Google rejected the authorization code")

    tokens = response.json()
    if not tokens.get('access_token'):
        raise OAuthExchangeError("No access token in Google response")

    defaults = {
        'access_token': tokens['access_token'],
        'token_expires_at': now + timedelta(seconds=tokens.get('expires_in', DEFAULT_EXPIRES_IN)),
    }
    if tokens.get('refresh_token'):
        defaults['refresh_token'] = tokens['refresh_token']

    connection, created = GoogleCalendarConnection.objects.update_or_create(user=user, defaults=defaults)
    logger.info("Google Calendar %s for user %s", 'connected' if created else 'reconnected', user.id)
    return connection


def get_connection(user) -> GoogleCalendarConnection:
    """
    Raises:
        CalendarNotConnectedError: If the user has no connection
    """
    try:
        return GoogleCalendarConnection.objects.get(user=user)
    except GoogleCalendarConnection.DoesNotExist:
        raise CalendarNotConnectedError("Google Calendar is not connected")


def get_valid_access_token(
    *,
    connection: GoogleCalendarConnection,
    force_refresh: bool = False,
    now=None,
) -> str:
    """
    Return an access token valid for at least the refresh margin.

    Args:
        connection: The user's calendar connection.
        force_refresh: Refresh even if the stored token looks valid (used
            after Google answered 401).

    Raises:
        TokenRefreshError: If there is no refresh token or Google rejects it
    """
    margin = settings.GOOGLE_TOKEN_REFRESH_MARGIN_SECONDS
    now = now or timezone.now()

    if not force_refresh and not connection.expires_within(margin, now=now):
        return connection.access_token

    with transaction.atomic():
        locked = GoogleCalendarConnection.objects.select_for_update().get(pk=connection.pk)

        # Someone else may have refreshed while we waited for the lock
        if locked.access_token != connection.access_token or (
            not force_refresh and not locked.expires_within(margin, now=now)
        ):
            _copy_tokens(locked, connection)
            return locked.access_token

        if not locked.refresh_token:
            raise TokenRefreshError("No refresh token stored; reconnect Google Calendar")

        logger.info("Refreshing Google Calendar token for user %s", locked.user_id)
        try:
            response = _post_token_endpoint({
                'refresh_token': locked.refresh_token,
                'grant_type': 'refresh_token',
            })
        except requests.RequestException as e:
            raise TokenRefreshError(f"Could not reach Google: {e}")

        if response.status_code != 200:
            logger.error(
                "Token refresh rejected for user %s (HTTP %s)",
                locked.user_id, response.status_code,
            )
            raise TokenRefreshError("Google rejected the refresh token; reconnect Google Calendar")

        tokens = response.json()
        access_token = tokens.get('access_token')
        if not access_token:
            raise TokenRefreshError("No access token in refresh response")

        locked.access_token = access_token
        locked.token_expires_at = now + timedelta(seconds=tokens.get('expires_in', DEFAULT_EXPIRES_IN))
        fields = ['access_token', 'token_expires_at', 'updated_at']
        if tokens.get('refresh_token'):
            locked.refresh_token = tokens['refresh_token']
            fields.append('refresh_token')
        locked.save(update_fields=fields)

    _copy_tokens(locked, connection)
    return access_token


def _copy_tokens(source, target):
    target.access_token = source.access_token
    target.refresh_token = source.refresh_token
    target.token_expires_at = source.token_expires_at


def disconnect(*, user) -> bool:
    """Forget the user's Google tokens. Linked sessions keep their event ids."""
    deleted, _ = GoogleCalendarConnection.objects.filter(user=user).delete()
    if deleted:
        logger.info("Google Calendar disconnected for user %s", user.id)
    return bool(deleted)
