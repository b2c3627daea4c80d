from django.conf import settings
from rest_framework import serializers

from apps.clients.models import Client
from apps.clients.serializers import ClientMinimalSerializer, OwnedPrimaryKeyRelatedField
from .models import (
    RecurrenceType,
    RecurringSession,
    RecurringStatus,
    Session,
    SessionStatus,
)


# =============================================================================
# Input Serializers
# =============================================================================

class SessionFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for session filtering.

    Query Parameters:
        client (uuid): Sessions of one client
        status (str): scheduled, completed, cancelled or no_show
        date_from (date): Sessions on or after this date
        date_to (date): Sessions on or before this date
        recurring_session (uuid): Instances of one series
        package (uuid): Sessions of one package
    """

    client = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=SessionStatus.choices, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    recurring_session = serializers.UUIDField(required=False)
    package = serializers.UUIDField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({'date_to': 'Must be on or after date_from'})
        return attrs


class SessionCreateSerializer(serializers.Serializer):
    client = OwnedPrimaryKeyRelatedField(queryset=Client.objects.all())
    date = serializers.DateField()
    time = serializers.TimeField()
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=SessionStatus.choices, required=False, default=SessionStatus.SCHEDULED)


class SessionUpdateSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    time = serializers.TimeField(required=False)
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class SessionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SessionStatus.choices)


class RecurringSessionCreateSerializer(serializers.Serializer):
    """Validate a new recurrence rule."""

    client = OwnedPrimaryKeyRelatedField(queryset=Client.objects.all())
    recurrence_type = serializers.ChoiceField(choices=RecurrenceType.choices)
    recurrence_interval = serializers.IntegerField(min_value=1, default=1)
    start_date = serializers.DateField()
    recurrence_end_date = serializers.DateField(required=False, allow_null=True)
    recurrence_count = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    weekday = serializers.IntegerField(min_value=0, max_value=6, required=False, allow_null=True)
    time = serializers.TimeField()
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    google_calendar_sync = serializers.BooleanField(default=False)

    def validate(self, attrs):
        end = attrs.get('recurrence_end_date')
        if end and end < attrs['start_date']:
            raise serializers.ValidationError({'recurrence_end_date': 'Must be on or after start_date'})
        return attrs


class RecurringSessionUpdateSerializer(serializers.Serializer):
    recurrence_type = serializers.ChoiceField(choices=RecurrenceType.choices, required=False)
    recurrence_interval = serializers.IntegerField(min_value=1, required=False)
    start_date = serializers.DateField(required=False)
    recurrence_end_date = serializers.DateField(required=False, allow_null=True)
    recurrence_count = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    weekday = serializers.IntegerField(min_value=0, max_value=6, required=False, allow_null=True)
    time = serializers.TimeField(required=False)
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=RecurringStatus.choices, required=False)
    google_calendar_sync = serializers.BooleanField(required=False)


class RecurringDeleteSerializer(serializers.Serializer):
    delete_future_instances = serializers.BooleanField(default=False)


# =============================================================================
# Output Serializers
# =============================================================================

class SessionSerializer(serializers.ModelSerializer):
    client = ClientMinimalSerializer(read_only=True)
    payment_status = serializers.SerializerMethodField()
    needs_attention = serializers.SerializerMethodField()

    class Meta:
        model = Session
        fields = [
            'id',
            'client',
            'date',
            'time',
            'duration_minutes',
            'value',
            'status',
            'session_type',
            'notes',
            'recurring_session',
            'is_modified',
            'package',
            'payment_status',
            'needs_attention',
            'google_event_id',
            'google_sync_type',
            'google_html_link',
            'google_last_synced',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_payment_status(self, obj):
        payment = next(iter(obj.payments.all()), None)
        return payment.status if payment else None

    def get_needs_attention(self, obj):
        return obj.needs_attention()


class RecurringSessionSerializer(serializers.ModelSerializer):
    client = ClientMinimalSerializer(read_only=True)
    upcoming_sessions = serializers.SerializerMethodField()

    class Meta:
        model = RecurringSession
        fields = [
            'id',
            'client',
            'recurrence_type',
            'recurrence_interval',
            'start_date',
            'recurrence_end_date',
            'recurrence_count',
            'weekday',
            'time',
            'duration_minutes',
            'value',
            'notes',
            'status',
            'google_calendar_sync',
            'upcoming_sessions',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_upcoming_sessions(self, obj):
        today = self.context.get('today')
        instances = obj.instances.filter(status=SessionStatus.SCHEDULED)
        if today:
            instances = instances.filter(date__gte=today)
        return instances.count()


# =============================================================================
# Public Booking
# =============================================================================

class BookingPageSerializer(serializers.Serializer):
    """What anonymous visitors see of a therapist's booking page."""

    professional_name = serializers.CharField(source='get_display_name')
    profession = serializers.CharField()
    session_duration_minutes = serializers.SerializerMethodField()

    def get_session_duration_minutes(self, obj) -> int:
        return settings.DEFAULT_SESSION_DURATION_MINUTES


class PublicBookingSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    email = serializers.EmailField(max_length=100)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    date = serializers.DateField()
    time = serializers.TimeField()


class PublicBookingResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    date = serializers.DateField()
    time = serializers.TimeField()
