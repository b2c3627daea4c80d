from django.contrib import admin
from django.utils.html import format_html

from .models import RecurringSession, Session, SessionStatus

STATUS_COLORS = {
    SessionStatus.SCHEDULED: '#007bff',
    SessionStatus.COMPLETED: 'green',
    SessionStatus.CANCELLED: 'gray',
    SessionStatus.NO_SHOW: 'red',
}


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ['client', 'owner', 'date', 'time', 'value', 'status_badge', 'session_type', 'google_sync_type']
    list_filter = ['status', 'session_type', 'google_sync_type', 'date']
    search_fields = ['client__name', 'owner__email', 'notes', 'google_event_id']
    raw_id_fields = ['owner', 'client', 'recurring_session', 'package']
    readonly_fields = ['created_at', 'updated_at', 'google_last_synced']
    date_hierarchy = 'date'

    fieldsets = (
        ('Session', {
            'fields': ('owner', 'client', 'date', 'time', 'duration_minutes', 'value', 'status', 'session_type', 'notes')
        }),
        ('Series & package', {
            'fields': ('recurring_session', 'occurrence_date', 'is_modified', 'package')
        }),
        ('Google Calendar', {
            'fields': ('google_event_id', 'google_sync_type', 'google_html_link', 'google_last_synced'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def status_badge(self, obj):
        return format_html(
            '<span style="color: {};">{}</span>',
            STATUS_COLORS.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'


@admin.register(RecurringSession)
class RecurringSessionAdmin(admin.ModelAdmin):
    list_display = ['client', 'owner', 'recurrence_type', 'recurrence_interval', 'weekday', 'time', 'status', 'start_date']
    list_filter = ['recurrence_type', 'status', 'google_calendar_sync']
    search_fields = ['client__name', 'owner__email']
    raw_id_fields = ['owner', 'client']
    readonly_fields = ['created_at', 'updated_at']
