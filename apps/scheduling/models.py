from datetime import datetime, timedelta
from decimal import Decimal
import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone


class SessionStatus(models.TextChoices):
    SCHEDULED = 'scheduled', 'Scheduled'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'
    NO_SHOW = 'no_show', 'No show'


class SessionType(models.TextChoices):
    SINGLE = 'single', 'Single'
    RECURRING = 'recurring', 'Recurring'
    PACKAGE = 'package', 'Package'


class GoogleSyncType(models.TextChoices):
    IMPORTED = 'imported', 'Imported (read-only)'
    MIRRORED = 'mirrored', 'Mirrored'
    SENT = 'sent', 'Sent to Google'
    CANCELLED = 'cancelled', 'Cancelled in Google'


class RecurrenceType(models.TextChoices):
    DAILY = 'daily', 'Daily'
    WEEKLY = 'weekly', 'Weekly'
    BIWEEKLY = 'biweekly', 'Every two weeks'
    MONTHLY = 'monthly', 'Monthly'


class RecurringStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    PAUSED = 'paused', 'Paused'
    CANCELLED = 'cancelled', 'Cancelled'


class RecurringSession(models.Model):
    """Recurrence rule from which individual sessions are generated."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='recurring_sessions')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='recurring_sessions')

    # Rule
    recurrence_type = models.CharField(max_length=10, choices=RecurrenceType.choices)
    recurrence_interval = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    start_date = models.DateField()
    recurrence_end_date = models.DateField(null=True, blank=True)
    recurrence_count = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)]
    )
    weekday = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(6)],
        help_text='0 = Monday ... 6 = Sunday'
    )

    # Defaults copied onto each generated session
    time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    value = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)

    status = models.CharField(
        max_length=10,
        choices=RecurringStatus.choices,
        default=RecurringStatus.ACTIVE
    )
    google_calendar_sync = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'recurring_sessions'
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['client']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.client} - {self.get_recurrence_type_display()} at {self.time:%H:%M}"

    @property
    def is_active(self):
        return self.status == RecurringStatus.ACTIVE


class Session(models.Model):
    """A single therapy session."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='sessions')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='sessions')

    date = models.DateField()
    time = models.TimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    value = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(
        max_length=10,
        choices=SessionStatus.choices,
        default=SessionStatus.SCHEDULED
    )
    session_type = models.CharField(
        max_length=10,
        choices=SessionType.choices,
        default=SessionType.SINGLE
    )
    notes = models.TextField(blank=True)

    # Series membership
    recurring_session = models.ForeignKey(
        RecurringSession,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='instances'
    )
    occurrence_date = models.DateField(
        null=True,
        blank=True,
        help_text='Series slot this session was generated for'
    )
    is_modified = models.BooleanField(default=False)

    package = models.ForeignKey(
        'packages.Package',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sessions'
    )

    # Google Calendar link
    google_event_id = models.CharField(max_length=255, blank=True)
    google_sync_type = models.CharField(
        max_length=10,
        choices=GoogleSyncType.choices,
        null=True,
        blank=True
    )
    google_html_link = models.URLField(max_length=500, blank=True)
    google_last_synced = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sessions'
        constraints = [
            models.UniqueConstraint(
                fields=['recurring_session', 'occurrence_date'],
                condition=models.Q(recurring_session__isnull=False),
                name='unique_series_occurrence',
            ),
        ]
        indexes = [
            models.Index(fields=['owner', 'date']),
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['client', 'date']),
            models.Index(fields=['google_event_id']),
        ]
        ordering = ['date', 'time']

    def __str__(self):
        return f"{self.client} on {self.date} {self.time:%H:%M} ({self.status})"

    @property
    def starts_at(self):
        """Aware start datetime in the practice time zone."""
        return timezone.make_aware(datetime.combine(self.date, self.time))

    @property
    def ends_at(self):
        return self.starts_at + timedelta(minutes=self.duration_minutes)

    @property
    def is_google_linked(self):
        return bool(self.google_event_id)

    def needs_attention(self, now=None):
        """Still marked scheduled although its start time has passed."""
        now = now or timezone.now()
        return self.status == SessionStatus.SCHEDULED and self.starts_at < now
