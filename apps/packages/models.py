from decimal import Decimal
import uuid

from django.core.validators import MinValueValidator
from django.db import models

from apps.payments.models import PaymentMethod


class PackageStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class Package(models.Model):
    """Pre-paid bundle of sessions for one client."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='packages')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='packages')

    name = models.CharField(max_length=200)
    total_sessions = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    consumed_sessions = models.PositiveIntegerField(default=0)

    total_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    value_per_session = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        blank=True
    )

    status = models.CharField(
        max_length=10,
        choices=PackageStatus.choices,
        default=PackageStatus.ACTIVE
    )
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'packages'
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['client', 'status']),
        ]
        ordering = ['-start_date', '-created_at']

    def __str__(self):
        return f"{self.name} ({self.consumed_sessions}/{self.total_sessions})"

    @property
    def remaining_sessions(self):
        return max(0, self.total_sessions - self.consumed_sessions)

    @property
    def is_complete(self):
        return self.consumed_sessions >= self.total_sessions
