"""Moving sessions between the practice schedule and Google Calendar."""

from datetime import datetime, time, timedelta
from typing import Optional
import logging

from dateutil import parser as date_parser
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.clients.services import find_or_create_client_by_email
from apps.scheduling.models import GoogleSyncType, Session
from apps.scheduling.services import create_session
from ..models import GoogleCalendarConnection
from .client import GoogleCalendarClient
from .exceptions import (
    EventNotImportableError,
    GoogleCalendarAPIError,
    SessionAlreadySyncedError,
)
from .oauth import get_connection

logger = logging.getLogger(__name__)

EVENT_SUMMARY_PREFIX = 'Session'


def calendar_client_for(user) -> GoogleCalendarClient:
    return GoogleCalendarClient(get_connection(user))


def build_event_body(session: Session) -> dict:
    """Google event resource for a session, in the practice time zone."""
    start = datetime.combine(session.date, session.time)
    end = start + timedelta(minutes=session.duration_minutes)
    body = {
        'summary': f"{EVENT_SUMMARY_PREFIX} - {session.client.name}",
        'description': session.notes,
        'start': {'dateTime': start.isoformat(), 'timeZone': settings.TIME_ZONE},
        'end': {'dateTime': end.isoformat(), 'timeZone': settings.TIME_ZONE},
    }
    if session.client.email:
        body['attendees'] = [{'email': session.client.email}]
    return body


def _link(session: Session, event: dict, sync_type: str) -> None:
    session.google_event_id = event['id']
    session.google_html_link = event.get('htmlLink', '')
    session.google_sync_type = sync_type
    session.google_last_synced = timezone.now()
    session.save(update_fields=[
        'google_event_id', 'google_html_link', 'google_sync_type', 'google_last_synced', 'updated_at',
    ])


def send_session_to_google(*, session: Session) -> Session:
    """
    Create a Google event for a session and link the two.

    Raises:
        SessionAlreadySyncedError: If the session already has an event
        CalendarNotConnectedError: If the owner has no calendar connection
        GoogleCalendarAPIError: If Google rejects the event
    """
    if session.google_event_id:
        raise SessionAlreadySyncedError("Session is already linked to a Google Calendar event")

    client = calendar_client_for(session.owner)
    event = client.create_event(build_event_body(session))
    _link(session, event, GoogleSyncType.SENT)

    logger.info("Session %s sent to Google as event %s", session.id, event['id'])
    return session


def update_google_event(*, session: Session) -> Session:
    """
    Push date, time, duration and notes of a linked session to Google.

    Raises:
        EventNotImportableError: If the session is not linked
    """
    if not session.google_event_id:
        raise EventNotImportableError("Session is not linked to a Google Calendar event")

    client = calendar_client_for(session.owner)
    client.update_event(session.google_event_id, build_event_body(session))

    session.google_last_synced = timezone.now()
    session.save(update_fields=['google_last_synced', 'updated_at'])
    return session


def unsync_session(*, session: Session, delete_remote: bool = False) -> Session:
    """Remove the Google link of a session, optionally deleting the event as well."""
    if delete_remote and session.google_event_id and session.google_sync_type == GoogleSyncType.SENT:
        try:
            calendar_client_for(session.owner).delete_event(session.google_event_id)
        except GoogleCalendarAPIError as e:
            if not e.is_gone:
                raise

    session.google_event_id = ''
    session.google_html_link = ''
    session.google_sync_type = None
    session.google_last_synced = None
    session.save(update_fields=[
        'google_event_id', 'google_html_link', 'google_sync_type', 'google_last_synced', 'updated_at',
    ])
    return session


def delete_remote_event(*, user_id, event_id: str) -> bool:
    """Delete an event if the user is still connected. Missing events are ignored."""
    connection = GoogleCalendarConnection.objects.filter(user_id=user_id).first()
    if connection is None:
        return False
    try:
        GoogleCalendarClient(connection).delete_event(event_id)
    except GoogleCalendarAPIError as e:
        if e.is_gone:
            return False
        raise
    return True


def list_calendar_events(*, user, time_min=None, time_max=None) -> list:
    """Events of the connected calendar, 30 days ahead by default."""
    time_min = time_min or timezone.now()
    time_max = time_max or time_min + timedelta(days=settings.RECURRENCE_HORIZON_DAYS)
    return calendar_client_for(user).list_events(time_min, time_max)


def _event_bounds(event: dict):
    start = event.get('start', {}).get('dateTime')
    end = event.get('end', {}).get('dateTime')
    if not start:
        raise EventNotImportableError("All-day events cannot be imported as sessions")

    start_at = timezone.localtime(date_parser.isoparse(start))
    if end:
        end_at = timezone.localtime(date_parser.isoparse(end))
        duration = max(1, int((end_at - start_at).total_seconds() // 60))
    else:
        duration = settings.DEFAULT_SESSION_DURATION_MINUTES
    return start_at, duration


def _client_hint(event: dict):
    """Email and name of the client an event refers to."""
    summary = (event.get('summary') or '').strip()
    name = summary.split(' - ', 1)[1].strip() if ' - ' in summary else summary

    attendees = [a for a in event.get('attendees', []) if not a.get('self')]
    if attendees:
        first = attendees[0]
        return first.get('email', ''), first.get('displayName') or name
    return '', name


@transaction.atomic
def import_google_event(*, user, event: dict, editable: bool = False) -> Session:
    """
    Turn a Google event into a session.

    The client is found (or created) from the first attendee's email, or
    from the event summary when there is no attendee. The session value is
    the therapist's default. A read-only import stays linked to the event
    (sync type ``imported``); an editable copy is a plain local session.

    Raises:
        EventNotImportableError: For all-day events or events already imported
    """
    if not editable and Session.objects.filter(owner=user, google_event_id=event['id']).exists():
        raise EventNotImportableError("Event already imported")

    start_at, duration = _event_bounds(event)
    email, name = _client_hint(event)
    client = find_or_create_client_by_email(
        owner=user,
        email=email,
        name=name,
        notes='Imported from Google Calendar',
    )

    session = create_session(
        owner=user,
        client=client,
        date=start_at.date(),
        time=time(start_at.hour, start_at.minute),
        duration_minutes=duration,
        value=user.default_session_value,
        notes=event.get('description', '') or '',
    )

    if not editable:
        _link(session, event, GoogleSyncType.IMPORTED)

    logger.info("Imported Google event %s as session %s (editable=%s)", event['id'], session.id, editable)
    return session


def import_events(*, user, event_ids, editable: bool = False) -> dict:
    """Fetch and import several events. Failures are reported per event."""
    client = calendar_client_for(user)
    imported, errors = [], {}

    for event_id in event_ids:
        try:
            event = client.get_event(event_id)
            imported.append(import_google_event(user=user, event=event, editable=editable))
        except (EventNotImportableError, GoogleCalendarAPIError) as e:
            errors[event_id] = str(e)

    return {'imported': imported, 'errors': errors}


def check_cancelled_events(*, user, now: Optional[datetime] = None) -> int:
    """
    Flag linked sessions whose Google event was deleted or cancelled.

    Returns:
        Number of sessions newly marked with sync type ``cancelled``.
    """
    client = calendar_client_for(user)
    linked = (
        Session.objects
        .filter(owner=user, google_sync_type__in=[GoogleSyncType.SENT, GoogleSyncType.IMPORTED])
        .exclude(google_event_id='')
    )

    cancelled = 0
    for session in linked:
        try:
            event = client.get_event(session.google_event_id)
            gone = (event or {}).get('status') == 'cancelled'
        except GoogleCalendarAPIError as e:
            if not e.is_gone:
                raise
            gone = True

        if gone:
            session.google_sync_type = GoogleSyncType.CANCELLED
            session.google_last_synced = now or timezone.now()
            session.save(update_fields=['google_sync_type', 'google_last_synced', 'updated_at'])
            cancelled += 1

    if cancelled:
        logger.info("%d session(s) of user %s cancelled in Google", cancelled, user.id)
    return cancelled
