from django.contrib import admin

from .models import GoogleCalendarConnection


@admin.register(GoogleCalendarConnection)
class GoogleCalendarConnectionAdmin(admin.ModelAdmin):
    list_display = ['user', 'calendar_id', 'auto_sync', 'token_expires_at', 'connected_at']
    list_filter = ['auto_sync']
    search_fields = ['user__email']
    raw_id_fields = ['user']
    exclude = ['access_token', 'refresh_token']
    readonly_fields = ['token_expires_at', 'connected_at', 'updated_at']
