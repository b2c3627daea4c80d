from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from django.utils import timezone
from drf_spectacular.utils import extend_schema

from apps.clients.permissions import IsOwner
from apps.packages.services import PackagesServiceError
from .models import RecurringSession, Session
from .serializers import (
    SessionSerializer,
    SessionFilterSerializer,
    SessionCreateSerializer,
    SessionUpdateSerializer,
    SessionStatusSerializer,
    RecurringSessionSerializer,
    RecurringSessionCreateSerializer,
    RecurringSessionUpdateSerializer,
    RecurringDeleteSerializer,
    BookingPageSerializer,
    PublicBookingSerializer,
    PublicBookingResponseSerializer,
)
from .services import (
    SchedulingServiceError,
    BookingUnavailableError,
    SlotTakenError,
    booking_page,
    book_public_session,
    create_session,
    update_session,
    update_single_instance,
    set_session_status,
    delete_session,
    sessions_needing_attention,
    create_recurring,
    generate_instances,
    update_recurring,
    update_all_instances,
    delete_recurring,
)


class SessionPagination(PageNumberPagination):
    """Custom pagination for sessions."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class SessionViewSet(viewsets.ModelViewSet):
    """
    ViewSet for therapy sessions.

    list: Sessions of the current user (filter: client, status, date_from,
          date_to, recurring_session, package)
    create: Schedule a single session (creates its pending payment)
    retrieve: Session details
    partial_update: Edit date, time, duration, value or notes
    destroy: Delete the session and its payments
    """

    serializer_class = SessionSerializer
    permission_classes = [IsAuthenticated, IsOwner]
    pagination_class = SessionPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = (
            Session.objects
            .filter(owner=self.request.user)
            .select_related('client')
            .prefetch_related('payments')
        )

        if self.action != 'list':
            return queryset

        filter_serializer = SessionFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('client'):
            queryset = queryset.filter(client_id=params['client'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        if params.get('date_from'):
            queryset = queryset.filter(date__gte=params['date_from'])
        if params.get('date_to'):
            queryset = queryset.filter(date__lte=params['date_to'])
        if params.get('recurring_session'):
            queryset = queryset.filter(recurring_session_id=params['recurring_session'])
        if params.get('package'):
            queryset = queryset.filter(package_id=params['package'])

        return queryset

    @extend_schema(request=SessionCreateSerializer, responses={201: SessionSerializer})
    def create(self, request, *args, **kwargs):
        serializer = SessionCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        try:
            session = create_session(owner=request.user, **serializer.validated_data)
        except SchedulingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=SessionUpdateSerializer, responses={200: SessionSerializer})
    def partial_update(self, request, *args, **kwargs):
        session = self.get_object()
        serializer = SessionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        edit = update_single_instance if session.recurring_session_id else update_session
        try:
            session = edit(session=session, **serializer.validated_data)
        except SchedulingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SessionSerializer(session).data)

    def destroy(self, request, *args, **kwargs):
        delete_session(session=self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=SessionStatusSerializer, responses={200: SessionSerializer})
    @action(detail=True, methods=['post'], url_path='status', url_name='status')
    def set_status(self, request, pk=None):
        """
        Mark a session completed, cancelled, no-show or scheduled again.

        POST /api/sessions/{id}/status/
        Body: {"status": "completed"}

        The linked payment and package consumption follow the new status.
        Bringing back a cancelled package session fails with 400 when the
        package is full or cancelled.
        """
        serializer = SessionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            session = set_session_status(session=self.get_object(), status=serializer.validated_data['status'])
        except PackagesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        session = self.get_queryset().get(pk=session.pk)
        return Response(SessionSerializer(session).data)

    @action(detail=False, methods=['get'], url_path='needs-attention')
    def needs_attention(self, request):
        """
        Past sessions still marked as scheduled.

        GET /api/sessions/needs-attention/
        """
        sessions = sessions_needing_attention(owner=request.user).prefetch_related('payments')
        return Response(SessionSerializer(sessions, many=True).data)


class RecurringSessionViewSet(viewsets.ModelViewSet):
    """
    ViewSet for recurring series.

    list: Series of the current user
    create: Store a rule and generate its sessions for the next window
    retrieve: Series details
    partial_update: Change the rule, defaults or status (active, paused, cancelled)
    destroy: Delete the series (?delete_future_instances=true also deletes
             sessions from today on)
    """

    serializer_class = RecurringSessionSerializer
    permission_classes = [IsAuthenticated, IsOwner]
    pagination_class = SessionPagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        return RecurringSession.objects.filter(owner=self.request.user).select_related('client')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['today'] = timezone.localdate()
        return context

    @extend_schema(request=RecurringSessionCreateSerializer, responses={201: RecurringSessionSerializer})
    def create(self, request, *args, **kwargs):
        serializer = RecurringSessionCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        try:
            recurring, sessions = create_recurring(owner=request.user, **serializer.validated_data)
        except SchedulingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = self.get_serializer(recurring).data
        data['sessions_created'] = len(sessions)
        return Response(data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RecurringSessionUpdateSerializer, responses={200: RecurringSessionSerializer})
    def partial_update(self, request, *args, **kwargs):
        recurring = self.get_object()
        serializer = RecurringSessionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            recurring = update_recurring(recurring=recurring, **serializer.validated_data)
        except SchedulingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(self.get_serializer(recurring).data)

    def destroy(self, request, *args, **kwargs):
        recurring = self.get_object()
        params = RecurringDeleteSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        deleted = delete_recurring(
            recurring=recurring,
            delete_future_instances=params.validated_data['delete_future_instances'],
        )
        return Response({'deleted_sessions': deleted}, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get'])
    def instances(self, request, pk=None):
        """
        Sessions generated from this series.

        GET /api/sessions/recurring/{id}/instances/
        """
        recurring = self.get_object()
        sessions = recurring.instances.select_related('client').prefetch_related('payments')

        page = self.paginate_queryset(sessions)
        if page is not None:
            return self.get_paginated_response(SessionSerializer(page, many=True).data)
        return Response(SessionSerializer(sessions, many=True).data)

    @action(detail=True, methods=['post'])
    def generate(self, request, pk=None):
        """
        Generate the sessions missing from the current window.

        POST /api/sessions/recurring/{id}/generate/
        """
        sessions = generate_instances(recurring=self.get_object())
        return Response({'sessions_created': len(sessions)})

    @extend_schema(request=SessionUpdateSerializer)
    @action(detail=True, methods=['post'], url_path='update-instances')
    def update_instances(self, request, pk=None):
        """
        Apply time, duration, value or notes to every future unmodified session.

        POST /api/sessions/recurring/{id}/update-instances/
        """
        serializer = SessionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        updated = update_all_instances(recurring=self.get_object(), **serializer.validated_data)
        return Response({'updated': updated})


class PublicBookingView(APIView):
    """
    Anonymous booking page of a therapist.

    GET  /api/sessions/book/{slug}/ - Therapist name and session length
    POST /api/sessions/book/{slug}/ - Book a session as a client
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'public_booking'

    def get_throttles(self):
        if self.request.method != 'POST':
            return []
        return super().get_throttles()

    @extend_schema(responses={200: BookingPageSerializer})
    def get(self, request, slug):
        try:
            owner = booking_page(slug)
        except BookingUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(BookingPageSerializer(owner).data)

    @extend_schema(request=PublicBookingSerializer, responses={201: PublicBookingResponseSerializer})
    def post(self, request, slug):
        serializer = PublicBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            session = book_public_session(slug=slug, **serializer.validated_data)
        except BookingUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except SlotTakenError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except SchedulingServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = {'message': 'Session booked', 'date': session.date, 'time': session.time}
        return Response(PublicBookingResponseSerializer(data).data, status=status.HTTP_201_CREATED)
