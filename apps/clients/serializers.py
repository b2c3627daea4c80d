from datetime import timedelta

from django.conf import settings
from rest_framework import serializers
from .models import Client


class OwnedPrimaryKeyRelatedField(serializers.PrimaryKeyRelatedField):
    """
    Primary key field limited to objects owned by the requesting user.

    Foreign ids from other tenants fail validation exactly like unknown ids.
    """

    def get_queryset(self):
        queryset = super().get_queryset()
        request = self.context.get('request')
        if request is None or not request.user.is_authenticated:
            return queryset.none()
        return queryset.filter(owner=request.user)


# =============================================================================
# Input Serializers
# =============================================================================

class ClientFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for client filtering.

    Query Parameters:
        search (str): Match on name, email or phone
        is_active (bool): Filter by active flag
    """

    search = serializers.CharField(max_length=200, required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


# =============================================================================
# Output Serializers
# =============================================================================

class ClientMinimalSerializer(serializers.ModelSerializer):
    """Minimal client info for nested serialization."""

    class Meta:
        model = Client
        fields = ['id', 'name', 'email']
        read_only_fields = fields


class ClientSerializer(serializers.ModelSerializer):

    class Meta:
        model = Client
        fields = [
            'id',
            'name',
            'email',
            'phone',
            'birth_date',
            'clinical_notes',
            'history',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_active', 'created_at', 'updated_at']


class ClientListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for client lists (no clinical record)."""

    class Meta:
        model = Client
        fields = ['id', 'name', 'email', 'phone', 'is_active', 'created_at']
        read_only_fields = fields


class ClientSummarySerializer(serializers.Serializer):
    client = ClientMinimalSerializer()
    sessions_total = serializers.IntegerField()
    sessions_by_status = serializers.DictField(child=serializers.IntegerField())
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2)
    outstanding_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    active_packages = serializers.IntegerField()
    next_session = serializers.DateTimeField(allow_null=True)
    last_session = serializers.DateTimeField(allow_null=True)


class RegistrationInviteSerializer(serializers.Serializer):
    token = serializers.CharField()
    registration_url = serializers.CharField()
    expires_at = serializers.DateTimeField()
    professional_name = serializers.CharField()


class RegistrationLinkSerializer(serializers.Serializer):
    """State of a registration link as shown to the client before the form."""

    professional_name = serializers.CharField(source='owner.get_display_name')
    expires_at = serializers.SerializerMethodField()

    def get_expires_at(self, obj):
        expires_at = obj.created_at + timedelta(days=settings.CLIENT_REGISTRATION_TOKEN_DAYS)
        return serializers.DateTimeField().to_representation(expires_at)


class ClientRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField(max_length=255)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    birth_date = serializers.DateField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
