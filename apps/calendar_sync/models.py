from datetime import timedelta
import uuid

from django.db import models
from django.utils import timezone


class GoogleCalendarConnection(models.Model):
    """OAuth credentials linking a therapist to a Google calendar."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField('accounts.User', on_delete=models.CASCADE, related_name='google_calendar')

    access_token = models.TextField()
    refresh_token = models.TextField(blank=True)
    token_expires_at = models.DateTimeField()

    calendar_id = models.CharField(max_length=255, default='primary')
    auto_sync = models.BooleanField(default=False)

    connected_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'google_calendar_connections'

    def __str__(self):
        return f"Google Calendar for {self.user.email}"

    def expires_within(self, seconds, now=None):
        now = now or timezone.now()
        return self.token_expires_at <= now + timedelta(seconds=seconds)
