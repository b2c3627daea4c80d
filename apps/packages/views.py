from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.clients.permissions import IsOwner
from apps.scheduling.serializers import SessionSerializer
from .models import Package
from .serializers import (
    PackageSerializer,
    PackageFilterSerializer,
    PackageCreateSerializer,
    PackageUpdateSerializer,
    PackageScheduleSerializer,
    PackageProgressSerializer,
)
from .services import (
    PackagesServiceError,
    create_package,
    create_sessions_for_package,
    cancel_package,
    delete_package,
    package_progress,
)


class PackagePagination(PageNumberPagination):
    """Custom pagination for packages."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PackageViewSet(viewsets.ModelViewSet):
    """
    ViewSet for session packages.

    list: Packages of the current user (filter: client, status)
    create: Sell a package (opens one pending payment for the full value)
    retrieve: Package details
    partial_update: Edit name, payment method, end date or notes
    destroy: Delete the package with its sessions and payments
    """

    serializer_class = PackageSerializer
    permission_classes = [IsAuthenticated, IsOwner]
    pagination_class = PackagePagination
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Package.objects.filter(owner=self.request.user).select_related('client')

        if self.action != 'list':
            return queryset

        filter_serializer = PackageFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('client'):
            queryset = queryset.filter(client_id=params['client'])
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        return queryset

    @extend_schema(request=PackageCreateSerializer, responses={201: PackageSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PackageCreateSerializer(data=request.data, context={'request': request})
        serializer.is_valid(raise_exception=True)

        try:
            package = create_package(owner=request.user, **serializer.validated_data)
        except PackagesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PackageSerializer(package).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PackageUpdateSerializer, responses={200: PackageSerializer})
    def partial_update(self, request, *args, **kwargs):
        package = self.get_object()
        serializer = PackageUpdateSerializer(package, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(PackageSerializer(package).data)

    def destroy(self, request, *args, **kwargs):
        delete_package(package=self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: PackageProgressSerializer})
    @action(detail=True, methods=['get'])
    def progress(self, request, pk=None):
        """
        Consumption of a package.

        GET /api/packages/{id}/progress/
        """
        return Response(PackageProgressSerializer(package_progress(self.get_object())).data)

    @extend_schema(request=PackageScheduleSerializer, responses={201: SessionSerializer(many=True)})
    @action(detail=True, methods=['post'])
    def schedule(self, request, pk=None):
        """
        Schedule sessions drawn from the package.

        POST /api/packages/{id}/schedule/
        Body: {"sessions": [{"date": "2024-05-06", "time": "14:00"}, ...]}
        """
        package = self.get_object()
        serializer = PackageScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sessions = create_sessions_for_package(package=package, slots=serializer.validated_data['sessions'])
        except PackagesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(SessionSerializer(sessions, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def sessions(self, request, pk=None):
        """
        Sessions booked on the package.

        GET /api/packages/{id}/sessions/
        """
        sessions = self.get_object().sessions.select_related('client').prefetch_related('payments')
        return Response(SessionSerializer(sessions, many=True).data)

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """
        Cancel the package and its upcoming scheduled sessions.

        POST /api/packages/{id}/cancel/
        """
        package = cancel_package(package=self.get_object())
        return Response(PackageSerializer(package).data)
