from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.scheduling.models import Session
from apps.scheduling.serializers import SessionSerializer
from .models import GoogleCalendarConnection
from .serializers import (
    ConnectionStatusSerializer,
    ConnectionSettingsSerializer,
    AuthorizationCodeSerializer,
    OAuthCallbackSerializer,
    EventRangeSerializer,
    EventImportSerializer,
    UnsyncSerializer,
    CalendarEventSerializer,
)
from .services import (
    CalendarSyncError,
    GoogleCalendarAPIError,
    build_authorization_url,
    make_state,
    user_id_from_state,
    connect,
    disconnect,
    get_connection,
    list_calendar_events,
    import_events,
    send_session_to_google,
    unsync_session,
    check_cancelled_events,
)


class AuthorizationUrlSerializer(serializers.Serializer):
    authorization_url = serializers.URLField()


def _error_response(e):
    """Google failures are upstream problems (502); the rest are client errors."""
    if isinstance(e, GoogleCalendarAPIError):
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _status_payload(user):
    connection = GoogleCalendarConnection.objects.filter(user=user).first()
    if connection is None:
        return {'connected': False}
    return ConnectionStatusSerializer(connection).data


@extend_schema(description="Google Calendar connection state of the current user.")
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def connection_status(request):
    return Response(_status_payload(request.user))


@extend_schema(responses={200: AuthorizationUrlSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def authorize(request):
    """URL of Google's consent screen; the state identifies the user on callback."""
    url = build_authorization_url(state=make_state(request.user))
    return Response({'authorization_url': url})


@extend_schema(parameters=[OAuthCallbackSerializer])
@api_view(['GET'])
@permission_classes([AllowAny])
def oauth_callback(request):
    """
    Redirect target of Google's consent screen.

    GET /api/calendar/callback/?code=...&state=...
    """
    params = OAuthCallbackSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)
    data = params.validated_data

    if data.get('error') or not data.get('code'):
        return Response({'error': data.get('error') or 'Missing authorization code'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        user_id = user_id_from_state(data['state'])
        user = get_user_model().objects.get(pk=user_id, is_active=True)
        connect(user=user, code=data['code'])
    except get_user_model().DoesNotExist:
        return Response({'error': 'Unknown user'}, status=status.HTTP_400_BAD_REQUEST)
    except CalendarSyncError as e:
        return _error_response(e)

    return Response(_status_payload(user))


@extend_schema(request=AuthorizationCodeSerializer)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def connect_calendar(request):
    """Exchange an authorization code obtained by the frontend."""
    serializer = AuthorizationCodeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        connect(user=request.user, code=serializer.validated_data['code'])
    except CalendarSyncError as e:
        return _error_response(e)

    return Response(_status_payload(request.user), status=status.HTTP_201_CREATED)


@extend_schema(request=ConnectionSettingsSerializer, responses={200: ConnectionStatusSerializer})
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def connection_settings(request):
    try:
        connection = get_connection(request.user)
    except CalendarSyncError as e:
        return _error_response(e)

    serializer = ConnectionSettingsSerializer(connection, data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(ConnectionStatusSerializer(connection).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def disconnect_calendar(request):
    disconnect(user=request.user)
    return Response({'connected': False})


@extend_schema(parameters=[EventRangeSerializer], responses={200: CalendarEventSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def calendar_events(request):
    """
    Events of the connected calendar (next 30 days by default).

    GET /api/calendar/events/?time_min=...&time_max=...
    """
    params = EventRangeSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)

    try:
        events = list_calendar_events(user=request.user, **params.validated_data)
    except CalendarSyncError as e:
        return _error_response(e)

    linked = set(
        Session.objects
        .filter(owner=request.user)
        .exclude(google_event_id='')
        .values_list('google_event_id', flat=True)
    )
    return Response(CalendarEventSerializer(events, many=True, context={'linked_event_ids': linked}).data)


@extend_schema(request=EventImportSerializer)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def import_calendar_events(request):
    """
    Import Google events as sessions.

    POST /api/calendar/import/
    Body: {"event_ids": ["abc", "def"], "editable": false}

    Read-only imports stay linked to Google; editable copies become plain sessions.
    """
    serializer = EventImportSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = import_events(user=request.user, **serializer.validated_data)
    except CalendarSyncError as e:
        return _error_response(e)

    return Response({
        'imported': SessionSerializer(result['imported'], many=True).data,
        'errors': result['errors'],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_session(request, session_id):
    """Create a Google event for a session."""
    session = get_object_or_404(Session.objects.select_related('client', 'owner'), pk=session_id, owner=request.user)

    try:
        session = send_session_to_google(session=session)
    except CalendarSyncError as e:
        return _error_response(e)

    return Response(SessionSerializer(session).data)


@extend_schema(request=UnsyncSerializer)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def unsync(request, session_id):
    """Remove a session's Google link, optionally deleting the event."""
    session = get_object_or_404(Session.objects.select_related('client', 'owner'), pk=session_id, owner=request.user)
    serializer = UnsyncSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        session = unsync_session(session=session, **serializer.validated_data)
    except CalendarSyncError as e:
        return _error_response(e)

    return Response(SessionSerializer(session).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def check_cancelled(request):
    """Flag linked sessions whose Google event was deleted or cancelled."""
    try:
        cancelled = check_cancelled_events(user=request.user)
    except CalendarSyncError as e:
        return _error_response(e)

    return Response({'cancelled': cancelled})
