from rest_framework import serializers

from apps.clients.models import Client
from apps.clients.serializers import ClientMinimalSerializer, OwnedPrimaryKeyRelatedField
from apps.payments.models import PaymentMethod
from .models import Package, PackageStatus


# =============================================================================
# Input Serializers
# =============================================================================

class PackageFilterSerializer(serializers.Serializer):
    client = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PackageStatus.choices, required=False)


class PackageCreateSerializer(serializers.Serializer):
    """
    Validate a package sale.

    ``value_per_session`` defaults to total_value / total_sessions.
    """

    client = OwnedPrimaryKeyRelatedField(queryset=Client.objects.all())
    name = serializers.CharField(max_length=200)
    total_sessions = serializers.IntegerField(min_value=1)
    total_value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    value_per_session = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, required=False, allow_blank=True, default='')
    start_date = serializers.DateField()
    end_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        end = attrs.get('end_date')
        if end and end < attrs['start_date']:
            raise serializers.ValidationError({'end_date': 'Must be on or after start_date'})
        return attrs


class PackageUpdateSerializer(serializers.ModelSerializer):
    """Descriptive fields only; counts and values are fixed once sold."""

    class Meta:
        model = Package
        fields = ['name', 'payment_method', 'end_date', 'notes']


class PackageSlotSerializer(serializers.Serializer):
    date = serializers.DateField()
    time = serializers.TimeField()
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PackageScheduleSerializer(serializers.Serializer):
    sessions = PackageSlotSerializer(many=True, allow_empty=False)


# =============================================================================
# Output Serializers
# =============================================================================

class PackageProgressSerializer(serializers.Serializer):
    consumed = serializers.IntegerField()
    total = serializers.IntegerField()
    remaining = serializers.IntegerField()
    percentage = serializers.FloatField()
    is_complete = serializers.BooleanField()


class PackageSerializer(serializers.ModelSerializer):
    client = ClientMinimalSerializer(read_only=True)
    remaining_sessions = serializers.IntegerField(read_only=True)

    class Meta:
        model = Package
        fields = [
            'id',
            'client',
            'name',
            'total_sessions',
            'consumed_sessions',
            'remaining_sessions',
            'total_value',
            'value_per_session',
            'payment_method',
            'status',
            'start_date',
            'end_date',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
