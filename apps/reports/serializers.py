"""
Serializers for the reports app.

Input Serializers:
    PeriodQuerySerializer - period or date range query parameters
    TopClientsQuerySerializer - ranking size and optional range

Response Serializers:
    SummarySerializer, TimeseriesPointSerializer, TopClientSerializer,
    DashboardSerializer, PlatformOverviewSerializer
"""

from rest_framework import serializers

from .exceptions import InvalidPeriodError
from .reports import PracticeReports


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class PeriodQuerySerializer(serializers.Serializer):
    """
    Validate period and date range query parameters.

    Query Parameters:
        period (str): Month in YYYY-MM format (e.g., '2025-01')
        start_date (date): Start of date range
        end_date (date): End of date range

    Note:
        If 'period' is provided it takes precedence and becomes the full month.
    """

    period = serializers.CharField(required=False, allow_blank=True, help_text='Month period in YYYY-MM format')
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        period = attrs.get('period')
        if period:
            try:
                attrs['start_date'], attrs['end_date'] = PracticeReports.parse_period(period)
            except InvalidPeriodError as e:
                raise serializers.ValidationError({'period': str(e)})

        start = attrs.get('start_date')
        end = attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError({'end_date': 'End date must be on or after start date'})
        return attrs


class TopClientsQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)


# =============================================================================
# Response Serializers
# =============================================================================

class SummarySerializer(serializers.Serializer):
    period_start = serializers.DateField()
    period_end = serializers.DateField()
    sessions_total = serializers.IntegerField()
    sessions_by_status = serializers.DictField(child=serializers.IntegerField())
    completion_rate = serializers.FloatField()
    revenue_received = serializers.DecimalField(max_digits=12, decimal_places=2)
    revenue_expected = serializers.DecimalField(max_digits=12, decimal_places=2)
    outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    overdue = serializers.DecimalField(max_digits=12, decimal_places=2)
    active_clients = serializers.IntegerField()
    new_clients = serializers.IntegerField()


class TimeseriesPointSerializer(serializers.Serializer):
    month = serializers.CharField()
    received = serializers.DecimalField(max_digits=12, decimal_places=2)
    expected = serializers.DecimalField(max_digits=12, decimal_places=2)


class TopClientSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    name = serializers.CharField()
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    sessions_completed = serializers.IntegerField()


class DashboardSessionSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    client_name = serializers.CharField()
    date = serializers.DateField()
    time = serializers.TimeField()
    duration_minutes = serializers.IntegerField()
    status = serializers.CharField()


class DashboardPaymentSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    reference = serializers.CharField()
    client_name = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    due_date = serializers.DateField(allow_null=True)


class NeedsAttentionSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    sessions = DashboardSessionSerializer(many=True)


class OverduePaymentsSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    payments = DashboardPaymentSerializer(many=True)


class DashboardSerializer(serializers.Serializer):
    month = SummarySerializer()
    upcoming_sessions = DashboardSessionSerializer(many=True)
    needs_attention = NeedsAttentionSerializer()
    overdue_payments = OverduePaymentsSerializer()


class PlatformOverviewSerializer(serializers.Serializer):
    users_total = serializers.IntegerField()
    users_by_plan = serializers.DictField(child=serializers.IntegerField())
    sessions_this_month = serializers.IntegerField()
    sessions_by_status = serializers.DictField(child=serializers.IntegerField())
    payouts_by_status = serializers.DictField()


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
