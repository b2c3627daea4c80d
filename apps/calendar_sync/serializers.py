from rest_framework import serializers

from .models import GoogleCalendarConnection


class ConnectionStatusSerializer(serializers.ModelSerializer):
    connected = serializers.SerializerMethodField()

    class Meta:
        model = GoogleCalendarConnection
        fields = ['connected', 'calendar_id', 'auto_sync', 'token_expires_at', 'connected_at']
        read_only_fields = fields

    def get_connected(self, obj):
        return True


class ConnectionSettingsSerializer(serializers.ModelSerializer):

    class Meta:
        model = GoogleCalendarConnection
        fields = ['calendar_id', 'auto_sync']


class AuthorizationCodeSerializer(serializers.Serializer):
    code = serializers.CharField()


class OAuthCallbackSerializer(serializers.Serializer):
    code = serializers.CharField(required=False)
    state = serializers.CharField()
    error = serializers.CharField(required=False)


class EventRangeSerializer(serializers.Serializer):
    time_min = serializers.DateTimeField(required=False)
    time_max = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if attrs.get('time_min') and attrs.get('time_max') and attrs['time_min'] >= attrs['time_max']:
            raise serializers.ValidationError({'time_max': 'Must be after time_min'})
        return attrs


class EventImportSerializer(serializers.Serializer):
    event_ids = serializers.ListField(child=serializers.CharField(), allow_empty=False, max_length=250)
    editable = serializers.BooleanField(default=False)


class UnsyncSerializer(serializers.Serializer):
    delete_remote = serializers.BooleanField(default=False)


class CalendarEventSerializer(serializers.Serializer):
    """Subset of a Google event resource shown before import."""

    id = serializers.CharField()
    summary = serializers.CharField(default='')
    status = serializers.CharField(default='')
    start = serializers.SerializerMethodField()
    end = serializers.SerializerMethodField()
    all_day = serializers.SerializerMethodField()
    html_link = serializers.CharField(source='htmlLink', default='')
    attendees = serializers.SerializerMethodField()
    already_imported = serializers.SerializerMethodField()

    def get_start(self, obj):
        start = obj.get('start', {})
        return start.get('dateTime') or start.get('date')

    def get_end(self, obj):
        end = obj.get('end', {})
        return end.get('dateTime') or end.get('date')

    def get_all_day(self, obj):
        return 'dateTime' not in obj.get('start', {})

    def get_attendees(self, obj):
        return [a.get('email', '') for a in obj.get('attendees', []) if not a.get('self')]

    def get_already_imported(self, obj):
        return obj['id'] in self.context.get('linked_event_ids', set())
