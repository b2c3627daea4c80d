"""
Tests for moving sessions between the schedule and Google Calendar.

The Calendar API is replaced by mocked HTTP responses.
"""

from datetime import date, time
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from apps.calendar_sync.services import (
    GoogleCalendarClient,
    build_event_body,
    send_session_to_google,
    unsync_session,
    delete_remote_event,
    import_google_event,
    import_events,
    check_cancelled_events,
    CalendarNotConnectedError,
    EventNotImportableError,
    GoogleCalendarAPIError,
    SessionAlreadySyncedError,
)
from apps.clients.models import Client
from apps.scheduling.models import GoogleSyncType, Session
from apps.scheduling.services import create_session
from apps.scheduling.services.recurrence import push_instances_to_google

API_REQUEST = 'apps.calendar_sync.services.client.requests.request'
TOKEN_POST = 'apps.calendar_sync.services.oauth.requests.post'


def api_response(status_code=200, payload=None):
    response = Mock(status_code=status_code, content=b'{}' if payload is not None else b'', text='')
    response.json.return_value = payload
    return response


def google_event(event_id='evt-1', **overrides):
    event = {
        'id': event_id,
        'status': 'confirmed',
        'summary': 'Session - Carla Mendes',
        'description': 'First meeting',
        'htmlLink': f'https://calendar.google.com/event?eid={event_id}',
        'start': {'dateTime': '2026-03-02T14:00:00-03:00'},
        'end': {'dateTime': '2026-03-02T14:50:00-03:00'},
        'attendees': [
            {'email': 'therapist@example.com', 'self': True},
            {'email': 'carla@example.com', 'displayName': 'Carla'},
        ],
    }
    event.update(overrides)
    return event


@pytest.fixture
def session(therapist, patient):
    return create_session(
        owner=therapist,
        client=patient,
        date=date(2026, 3, 2),
        time=time(10, 0),
        duration_minutes=50,
        notes='Bring diary',
    )


def link(session, event_id, sync_type=GoogleSyncType.SENT):
    session.google_event_id = event_id
    session.google_sync_type = sync_type
    session.save()
    return session


class TestEventBody:

    @pytest.mark.django_db
    def test_body(self, session, settings):
        body = build_event_body(session)

        assert body['summary'] == 'Session - Carla Mendes'
        assert body['description'] == 'Bring diary'
        assert body['start'] == {'dateTime': '2026-03-02T10:00:00', 'timeZone': settings.TIME_ZONE}
        assert body['end'] == {'dateTime': '2026-03-02T10:50:00', 'timeZone': settings.TIME_ZONE}
        assert body['attendees'] == [{'email': 'carla@example.com'}]

    @pytest.mark.django_db
    def test_no_attendees_without_email(self, session, patient):
        patient.email = ''
        patient.save()

        assert 'attendees' not in build_event_body(session)


@pytest.mark.django_db
class TestCalendarClient:

    def test_retries_once_after_401(self, connection):
        with patch(API_REQUEST) as mock_request, patch(TOKEN_POST) as mock_post:
            mock_request.side_effect = [api_response(401, {}), api_response(200, {'id': 'evt-1'})]
            mock_post.return_value = Mock(status_code=200, **{'json.return_value': {'access_token': 'access-2'}})

            event = GoogleCalendarClient(connection).get_event('evt-1')

        assert event == {'id': 'evt-1'}
        assert mock_request.call_count == 2
        assert mock_request.call_args.kwargs['headers'] == {'Authorization': 'Bearer access-2'}

    def test_error_payload(self, connection):
        payload = {'error': {'code': 404, 'message': 'Not Found'}}
        with patch(API_REQUEST, return_value=api_response(404, payload)):
            with pytest.raises(GoogleCalendarAPIError) as exc_info:
                GoogleCalendarClient(connection).get_event('missing')

        assert str(exc_info.value) == 'Not Found'
        assert exc_info.value.is_gone

    def test_calendar_id_is_quoted(self, connection):
        connection.calendar_id = 'team@group.calendar.google.com'

        assert GoogleCalendarClient(connection).events_url.endswith(
            '/calendars/team%40group.calendar.google.com/events'
        )


@pytest.mark.django_db
class TestSendSession:

    def test_send(self, session, connection):
        created = {'id': 'evt-9', 'htmlLink': 'https://calendar.google.com/event?eid=evt-9'}
        with patch(API_REQUEST, return_value=api_response(200, created)) as mock_request:
            send_session_to_google(session=session)

        method, url = mock_request.call_args.args
        assert method == 'POST'
        assert url.endswith('/calendars/primary/events')
        assert mock_request.call_args.kwargs['json']['summary'] == 'Session - Carla Mendes'

        session.refresh_from_db()
        assert session.google_event_id == 'evt-9'
        assert session.google_sync_type == GoogleSyncType.SENT
        assert session.google_last_synced is not None

    def test_already_linked(self, session, connection):
        link(session, 'evt-1')

        with pytest.raises(SessionAlreadySyncedError):
            send_session_to_google(session=session)

    def test_not_connected(self, session):
        with pytest.raises(CalendarNotConnectedError):
            send_session_to_google(session=session)


@pytest.mark.django_db
class TestUnsync:

    def test_unsync_deletes_sent_event(self, session, connection):
        link(session, 'evt-1')

        with patch(API_REQUEST, return_value=api_response(204)) as mock_request:
            unsync_session(session=session, delete_remote=True)

        assert mock_request.call_args.args[0] == 'DELETE'
        session.refresh_from_db()
        assert session.google_event_id == ''
        assert session.google_sync_type is None

    def test_missing_remote_event_is_ignored(self, session, connection):
        link(session, 'evt-1')

        with patch(API_REQUEST, return_value=api_response(410, {})):
            unsync_session(session=session, delete_remote=True)

        assert session.google_event_id == ''

    def test_imported_event_is_never_deleted(self, session, connection):
        link(session, 'evt-1', GoogleSyncType.IMPORTED)

        with patch(API_REQUEST) as mock_request:
            unsync_session(session=session, delete_remote=True)

        mock_request.assert_not_called()

    def test_delete_remote_event_without_connection(self, therapist):
        assert delete_remote_event(user_id=therapist.id, event_id='evt-1') is False


@pytest.mark.django_db
class TestImport:

    def test_read_only_import(self, therapist, patient):
        session = import_google_event(user=therapist, event=google_event())

        assert session.client == patient
        assert session.date == date(2026, 3, 2)
        assert session.time == time(14, 0)
        assert session.duration_minutes == 50
        assert session.value == Decimal('150.00')
        assert session.notes == 'First meeting'
        assert session.google_event_id == 'evt-1'
        assert session.google_sync_type == GoogleSyncType.IMPORTED
        assert session.payments.count() == 1

    def test_same_event_twice(self, therapist):
        import_google_event(user=therapist, event=google_event())

        with pytest.raises(EventNotImportableError):
            import_google_event(user=therapist, event=google_event())

    def test_editable_copy(self, therapist):
        session = import_google_event(user=therapist, event=google_event(), editable=True)

        assert session.google_event_id == ''
        assert session.google_sync_type is None

    def test_creates_client_from_attendee(self, therapist):
        event = google_event(attendees=[{'email': 'New.Person@Example.com', 'displayName': 'New Person'}])

        session = import_google_event(user=therapist, event=event)

        assert session.client.name == 'New Person'
        assert session.client.email == 'new.person@example.com'

    def test_client_from_summary(self, therapist):
        event = google_event(summary='Session - Daniel Rocha', attendees=[])

        session = import_google_event(user=therapist, event=event)

        assert session.client.name == 'Daniel Rocha'
        assert Client.objects.filter(owner=therapist).count() == 1

    def test_all_day_event(self, therapist):
        event = google_event(start={'date': '2026-03-02'}, end={'date': '2026-03-03'})

        with pytest.raises(EventNotImportableError):
            import_google_event(user=therapist, event=event)

        assert not Session.objects.exists()

    def test_import_events_reports_failures(self, therapist, connection):
        events = {
            'evt-1': google_event('evt-1'),
            'evt-2': google_event('evt-2', start={'date': '2026-03-02'}),
        }
        with patch.object(GoogleCalendarClient, 'get_event', side_effect=lambda event_id: events[event_id]):
            result = import_events(user=therapist, event_ids=['evt-1', 'evt-2'])

        assert [s.google_event_id for s in result['imported']] == ['evt-1']
        assert list(result['errors']) == ['evt-2']


@pytest.mark.django_db
class TestCheckCancelled:

    def test_flags_deleted_and_cancelled_events(self, therapist, patient, session, connection):
        link(session, 'evt-cancelled')
        gone = link(
            create_session(owner=therapist, client=patient, date=date(2026, 3, 3), time=time(10, 0)),
            'evt-gone',
        )
        alive = link(
            create_session(owner=therapist, client=patient, date=date(2026, 3, 4), time=time(10, 0)),
            'evt-alive',
            GoogleSyncType.IMPORTED,
        )

        def get_event(event_id):
            if event_id == 'evt-gone':
                raise GoogleCalendarAPIError('Not Found', status_code=404)
            return {'id': event_id, 'status': 'cancelled' if event_id == 'evt-cancelled' else 'confirmed'}

        with patch.object(GoogleCalendarClient, 'get_event', side_effect=get_event):
            assert check_cancelled_events(user=therapist) == 2

        session.refresh_from_db()
        gone.refresh_from_db()
        alive.refresh_from_db()
        assert session.google_sync_type == GoogleSyncType.CANCELLED
        assert gone.google_sync_type == GoogleSyncType.CANCELLED
        assert alive.google_sync_type == GoogleSyncType.IMPORTED

    def test_other_errors_propagate(self, session, therapist, connection):
        link(session, 'evt-1')

        with patch.object(
            GoogleCalendarClient, 'get_event',
            side_effect=GoogleCalendarAPIError('Backend Error', status_code=500),
        ):
            with pytest.raises(GoogleCalendarAPIError):
                check_cancelled_events(user=therapist)


@pytest.mark.django_db
class TestAutoSync:

    def test_pushes_when_auto_sync_enabled(self, session, connection):
        connection.auto_sync = True
        connection.save()

        with patch.object(GoogleCalendarClient, 'create_event', return_value={'id': 'evt-3'}):
            assert push_instances_to_google([session.pk]) == 1

        session.refresh_from_db()
        assert session.google_sync_type == GoogleSyncType.SENT

    def test_skipped_without_auto_sync(self, session, connection):
        with patch.object(GoogleCalendarClient, 'create_event') as mock_create:
            assert push_instances_to_google([session.pk]) == 0

        mock_create.assert_not_called()

    def test_skipped_without_connection(self, session):
        assert push_instances_to_google([session.pk]) == 0

    def test_only_owners_with_auto_sync_are_pushed(self, session, connection, other_therapist, foreign_patient):
        connection.auto_sync = True
        connection.save()
        unsynced = create_session(
            owner=other_therapist,
            client=foreign_patient,
            date=session.date,
            time=session.time,
        )

        with patch.object(GoogleCalendarClient, 'create_event', return_value={'id': 'evt-4'}) as mock_create:
            assert push_instances_to_google([unsynced.pk, session.pk]) == 1

        mock_create.assert_called_once()
        unsynced.refresh_from_db()
        assert unsynced.google_event_id == ''
