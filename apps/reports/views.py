from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema

from .exceptions import ReportsServiceError
from .reports import PracticeReports, PlatformReports
from .serializers import (
    PeriodQuerySerializer,
    TopClientsQuerySerializer,
    SummarySerializer,
    TimeseriesPointSerializer,
    TopClientSerializer,
    DashboardSerializer,
    PlatformOverviewSerializer,
    ErrorSerializer,
)


@extend_schema(
    parameters=[PeriodQuerySerializer],
    responses={200: SummarySerializer, 400: ErrorSerializer},
    description="Sessions, revenue and clients for a month or date range (default: current month).",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def summary(request):
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = PracticeReports.summary(request.user, params.get('start_date'), params.get('end_date'))
    except ReportsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SummarySerializer(data).data)


@extend_schema(
    parameters=[PeriodQuerySerializer],
    responses={200: TimeseriesPointSerializer(many=True), 400: ErrorSerializer},
    description="Received vs expected revenue per month.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def revenue_timeseries(request):
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = PracticeReports.revenue_timeseries(request.user, params.get('start_date'), params.get('end_date'))
    except ReportsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(TimeseriesPointSerializer(data, many=True).data)


@extend_schema(
    parameters=[TopClientsQuerySerializer],
    responses={200: TopClientSerializer(many=True)},
    description="Clients ranked by paid revenue.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_clients(request):
    query_serializer = TopClientsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    data = PracticeReports.top_clients(
        request.user,
        limit=params['limit'],
        start_date=params.get('start_date'),
        end_date=params.get('end_date'),
    )
    return Response(TopClientSerializer(data, many=True).data)


@extend_schema(
    responses={200: DashboardSerializer},
    description="Current month summary, upcoming sessions, sessions needing attention and overdue payments.",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    return Response(DashboardSerializer(PracticeReports.dashboard(request.user)).data)


@extend_schema(
    responses={200: PlatformOverviewSerializer},
    description="Platform-wide figures (staff only).",
    tags=['reports'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def platform_overview(request):
    return Response(PlatformOverviewSerializer(PlatformReports.overview()).data)
