from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from django.db.models import Q
from drf_spectacular.utils import extend_schema

from .models import Client
from .permissions import IsOwner
from .serializers import (
    ClientSerializer,
    ClientListSerializer,
    ClientFilterSerializer,
    ClientSummarySerializer,
    RegistrationInviteSerializer,
    RegistrationLinkSerializer,
    ClientRegistrationSerializer,
)
from .services import (
    create_client,
    update_client,
    deactivate_client,
    reactivate_client,
    client_summary,
    create_registration_invite,
    validate_registration_token,
    register_client_with_token,
    ClientsServiceError,
    DuplicateClientEmailError,
    RegistrationTokenError,
)


class ClientPagination(PageNumberPagination):
    """Custom pagination for clients."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ClientViewSet(viewsets.ModelViewSet):
    """
    ViewSet for the therapist's clients.

    list: Clients of the current user (filter: search, is_active)
    create: Register a new client
    retrieve: Client with clinical record
    update / partial_update: Edit client data
    destroy: Deactivate the client (records are kept)
    """

    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated, IsOwner]
    pagination_class = ClientPagination

    def get_queryset(self):
        queryset = Client.objects.filter(owner=self.request.user)

        if self.action != 'list':
            return queryset

        filter_serializer = ClientFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(phone__icontains=search)
            )
        if params.get('is_active') is not None:
            queryset = queryset.filter(is_active=params['is_active'])

        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return ClientListSerializer
        return ClientSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            client = create_client(owner=request.user, **serializer.validated_data)
        except DuplicateClientEmailError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        client = self.get_object()
        serializer = self.get_serializer(client, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)

        try:
            client = update_client(client=client, **serializer.validated_data)
        except DuplicateClientEmailError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ClientSerializer(client).data)

    def destroy(self, request, *args, **kwargs):
        deactivate_client(client=self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        client = reactivate_client(client=self.get_object())
        return Response(ClientSerializer(client).data)

    @extend_schema(responses={200: ClientSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """
        Sessions, payments and packages overview for one client.

        GET /api/clients/{id}/summary/
        """
        summary = client_summary(client=self.get_object())
        return Response(ClientSummarySerializer(summary).data)

    @extend_schema(request=None, responses={201: RegistrationInviteSerializer})
    @action(detail=False, methods=['post'], url_path='registration-invites', url_name='registration-invites')
    def registration_invite(self, request):
        """
        Issue a single-use link a new client can use to register themselves.

        POST /api/clients/registration-invites/
        """
        invite = create_registration_invite(owner=request.user)
        return Response(RegistrationInviteSerializer(invite).data, status=status.HTTP_201_CREATED)


class ClientRegistrationView(APIView):
    """
    Anonymous registration form behind a registration link.

    GET  /api/clients/register/{token}/ - Check the link
    POST /api/clients/register/{token}/ - Register as a client
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'client_registration'

    @extend_schema(responses={200: RegistrationLinkSerializer})
    def get(self, request, token):
        try:
            invite = validate_registration_token(token)
        except RegistrationTokenError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(RegistrationLinkSerializer(invite).data)

    @extend_schema(request=ClientRegistrationSerializer)
    def post(self, request, token):
        serializer = ClientRegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            client = register_client_with_token(token=token, **serializer.validated_data)
        except ClientsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'message': 'Registration completed',
            'professional_name': client.owner.get_display_name(),
            'client_id': str(client.id),
        }, status=status.HTTP_201_CREATED)
