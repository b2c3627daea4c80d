import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    PayoutFilterSerializer,
    ProcessPayoutsSerializer,
    ReferralSerializer,
    ReferralPayoutSerializer,
    ReferralStatsSerializer,
)
from .services import ReferralsServiceError, process_payouts, referral_stats

logger = logging.getLogger(__name__)


class ReferralPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(responses={200: ReferralStatsSerializer})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stats(request):
    """
    Referral dashboard of the current user.

    GET /api/referrals/stats/
    """
    return Response(ReferralStatsSerializer(referral_stats(user=request.user)).data)


@extend_schema(responses={200: ReferralSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def referral_list(request):
    referrals = request.user.referrals_made.select_related('referred')
    paginator = ReferralPagination()
    page = paginator.paginate_queryset(referrals, request)
    return paginator.get_paginated_response(ReferralSerializer(page, many=True).data)


@extend_schema(parameters=[PayoutFilterSerializer], responses={200: ReferralPayoutSerializer(many=True)})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payout_list(request):
    """
    Commission payouts of the current user, newest first.

    GET /api/referrals/payouts/?status=pending
    """
    params = PayoutFilterSerializer(data=request.query_params)
    params.is_valid(raise_exception=True)

    payouts = request.user.referral_payouts.order_by('-created_at')
    if params.validated_data.get('status'):
        payouts = payouts.filter(status=params.validated_data['status'])

    paginator = ReferralPagination()
    page = paginator.paginate_queryset(payouts, request)
    return paginator.get_paginated_response(ReferralPayoutSerializer(page, many=True).data)


@extend_schema(request=ProcessPayoutsSerializer)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def process(request):
    """
    Run the payout batch now (staff only).

    POST /api/referrals/payouts/process/
    Body: {"dry_run": true}
    """
    serializer = ProcessPayoutsSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        summary = process_payouts(dry_run=serializer.validated_data['dry_run'])
    except ReferralsServiceError as e:
        logger.error("Payout batch could not start: %s", e)
        return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response(summary)
