from decimal import Decimal

from rest_framework import serializers

from apps.clients.models import Client
from apps.clients.serializers import ClientMinimalSerializer, OwnedPrimaryKeyRelatedField
from .models import Payment, PaymentMethod, PaymentStatus


# =============================================================================
# Input Serializers
# =============================================================================

class PaymentFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for payment filtering.

    Query Parameters:
        client (uuid): Payments of one client
        status (str): pending, paid, overdue, cancelled or refunded
        method (str): Payment method
        due_from (date): Due on or after this date
        due_to (date): Due on or before this date
        session (uuid): Payments of one session
        package (uuid): Payments of one package
    """

    client = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    due_from = serializers.DateField(required=False)
    due_to = serializers.DateField(required=False)
    session = serializers.UUIDField(required=False)
    package = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if attrs.get('due_from') and attrs.get('due_to') and attrs['due_from'] > attrs['due_to']:
            raise serializers.ValidationError({'due_to': 'Must be on or after due_from'})
        return attrs


class PaymentCreateSerializer(serializers.Serializer):
    """Manual charge, not tied to a session or package."""

    client = OwnedPrimaryKeyRelatedField(queryset=Client.objects.all())
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    due_date = serializers.DateField(required=False, allow_null=True)
    method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentUpdateSerializer(serializers.ModelSerializer):

    class Meta:
        model = Payment
        fields = ['due_date', 'method', 'notes']


class MarkPaidSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_blank=True, default='')
    paid_at = serializers.DateTimeField(required=False, allow_null=True)


class OutstandingFilterSerializer(serializers.Serializer):
    client = OwnedPrimaryKeyRelatedField(queryset=Client.objects.all(), required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    client = ClientMinimalSerializer(read_only=True)
    session_date = serializers.DateField(source='session.date', read_only=True, default=None)
    package_name = serializers.CharField(source='package.name', read_only=True, default=None)

    class Meta:
        model = Payment
        fields = [
            'id',
            'reference',
            'client',
            'session',
            'session_date',
            'package',
            'package_name',
            'amount',
            'status',
            'method',
            'due_date',
            'paid_at',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PixChargeSerializer(serializers.Serializer):
    reference = serializers.CharField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    payload = serializers.CharField()
    qr_code_base64 = serializers.CharField()


class OutstandingSummarySerializer(serializers.Serializer):
    total_outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    count = serializers.IntegerField()
    overdue_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    overdue_count = serializers.IntegerField()
