from datetime import date, time
from unittest.mock import Mock, patch

import pytest
from django.urls import reverse
from rest_framework import status

from apps.calendar_sync.models import GoogleCalendarConnection
from apps.calendar_sync.services import GoogleCalendarAPIError, make_state
from apps.scheduling.models import GoogleSyncType
from apps.scheduling.services import create_session

TOKEN_POST = 'apps.calendar_sync.services.oauth.requests.post'
LIST_EVENTS = 'apps.calendar_sync.services.client.GoogleCalendarClient.list_events'
GET_EVENT = 'apps.calendar_sync.services.client.GoogleCalendarClient.get_event'
CREATE_EVENT = 'apps.calendar_sync.services.client.GoogleCalendarClient.create_event'


def token_response(status_code=200, payload=None):
    return Mock(status_code=status_code, **{'json.return_value': payload or {}})


@pytest.mark.django_db
class TestConnectionEndpoints:
    """Tests for /api/calendar/ connection management"""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('calendar_sync:status'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_status_not_connected(self, authenticated_client):
        response = authenticated_client.get(reverse('calendar_sync:status'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'connected': False}

    def test_status_connected(self, authenticated_client, connection):
        response = authenticated_client.get(reverse('calendar_sync:status'))

        assert response.data['connected'] is True
        assert response.data['calendar_id'] == 'primary'
        assert 'access_token' not in response.data

    def test_authorize(self, authenticated_client):
        response = authenticated_client.get(reverse('calendar_sync:authorize'))

        assert response.status_code == status.HTTP_200_OK
        assert 'state=' in response.data['authorization_url']

    def test_callback(self, api_client, therapist):
        with patch(TOKEN_POST, return_value=token_response(payload={'access_token': 'access-1', 'refresh_token': 'r'})):
            response = api_client.get(reverse('calendar_sync:callback'), {
                'code': 'auth-code',
                'state': make_state(therapist),
            })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['connected'] is True
        assert GoogleCalendarConnection.objects.filter(user=therapist).exists()

    def test_callback_with_bad_state(self, api_client):
        response = api_client.get(reverse('calendar_sync:callback'), {'code': 'auth-code', 'state': 'forged'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_callback_with_consent_denied(self, api_client, therapist):
        response = api_client.get(reverse('calendar_sync:callback'), {
            'error': 'access_denied',
            'state': make_state(therapist),
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'access_denied'

    def test_connect_with_code(self, authenticated_client):
        with patch(TOKEN_POST, return_value=token_response(payload={'access_token': 'access-1'})):
            response = authenticated_client.post(reverse('calendar_sync:connect'), {'code': 'auth-code'})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['connected'] is True

    def test_connect_rejected(self, authenticated_client):
        with patch(TOKEN_POST, return_value=token_response(status_code=400)):
            response = authenticated_client.post(reverse('calendar_sync:connect'), {'code': 'bad'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_settings(self, authenticated_client, connection):
        response = authenticated_client.patch(reverse('calendar_sync:settings'), {'auto_sync': True})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['auto_sync'] is True

    def test_settings_without_connection(self, authenticated_client):
        response = authenticated_client.patch(reverse('calendar_sync:settings'), {'auto_sync': True})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_disconnect(self, authenticated_client, connection):
        response = authenticated_client.post(reverse('calendar_sync:disconnect'))

        assert response.data == {'connected': False}
        assert not GoogleCalendarConnection.objects.exists()


@pytest.mark.django_db
class TestEventEndpoints:
    """Tests for /api/calendar/events/, import/ and check-cancelled/"""

    def test_events(self, authenticated_client, therapist, patient, connection):
        session = create_session(owner=therapist, client=patient, date=date(2026, 3, 2), time=time(9, 0))
        session.google_event_id = 'evt-1'
        session.google_sync_type = GoogleSyncType.IMPORTED
        session.save()
        events = [
            {'id': 'evt-1', 'summary': 'Session - Carla', 'start': {'dateTime': '2026-03-02T09:00:00-03:00'}},
            {'id': 'evt-2', 'summary': 'Holiday', 'start': {'date': '2026-03-03'}},
        ]

        with patch(LIST_EVENTS, return_value=events):
            response = authenticated_client.get(reverse('calendar_sync:events'))

        assert response.status_code == status.HTTP_200_OK
        assert [e['already_imported'] for e in response.data] == [True, False]
        assert [e['all_day'] for e in response.data] == [False, True]

    def test_events_google_error(self, authenticated_client, connection):
        with patch(LIST_EVENTS, side_effect=GoogleCalendarAPIError('Backend Error', status_code=500)):
            response = authenticated_client.get(reverse('calendar_sync:events'))

        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_events_not_connected(self, authenticated_client):
        response = authenticated_client.get(reverse('calendar_sync:events'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_import(self, authenticated_client, connection):
        event = {
            'id': 'evt-5',
            'summary': 'Session - Daniel Rocha',
            'start': {'dateTime': '2026-03-05T16:00:00-03:00'},
            'end': {'dateTime': '2026-03-05T17:00:00-03:00'},
        }
        with patch(GET_EVENT, return_value=event):
            response = authenticated_client.post(
                reverse('calendar_sync:import'),
                {'event_ids': ['evt-5']},
                format='json',
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['errors'] == {}
        imported = response.data['imported'][0]
        assert imported['client']['name'] == 'Daniel Rocha'
        assert imported['google_sync_type'] == 'imported'
        assert imported['duration_minutes'] == 60

    def test_check_cancelled(self, authenticated_client, connection):
        response = authenticated_client.post(reverse('calendar_sync:check-cancelled'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'cancelled': 0}


@pytest.mark.django_db
class TestSessionLinkEndpoints:
    """Tests for /api/calendar/sessions/{id}/send/ and unsync/"""

    @pytest.fixture
    def session(self, therapist, patient):
        return create_session(owner=therapist, client=patient, date=date(2026, 3, 2), time=time(10, 0))

    def test_send(self, authenticated_client, session, connection):
        with patch(CREATE_EVENT, return_value={'id': 'evt-7', 'htmlLink': 'https://calendar.google.com/e/7'}):
            response = authenticated_client.post(reverse('calendar_sync:session-send', args=[session.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['google_event_id'] == 'evt-7'
        assert response.data['google_sync_type'] == 'sent'

    def test_send_not_connected(self, authenticated_client, session):
        response = authenticated_client.post(reverse('calendar_sync:session-send', args=[session.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_send_foreign_session(self, authenticated_client, other_therapist, foreign_patient, connection):
        foreign = create_session(owner=other_therapist, client=foreign_patient, date=date(2026, 3, 2), time=time(10, 0))

        response = authenticated_client.post(reverse('calendar_sync:session-send', args=[foreign.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unsync(self, authenticated_client, session):
        session.google_event_id = 'evt-1'
        session.google_sync_type = GoogleSyncType.IMPORTED
        session.save()

        response = authenticated_client.post(reverse('calendar_sync:session-unsync', args=[session.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['google_event_id'] == ''
        assert response.data['google_sync_type'] is None
