from decimal import Decimal
import secrets
import uuid

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    OVERDUE = 'overdue', 'Overdue'
    CANCELLED = 'cancelled', 'Cancelled'
    REFUNDED = 'refunded', 'Refunded'


class PaymentMethod(models.TextChoices):
    PIX = 'pix', 'PIX'
    CASH = 'cash', 'Cash'
    CREDIT_CARD = 'credit_card', 'Credit card'
    DEBIT_CARD = 'debit_card', 'Debit card'
    BANK_TRANSFER = 'bank_transfer', 'Bank transfer'
    OTHER = 'other', 'Other'


OUTSTANDING_STATUSES = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)


class Payment(models.Model):
    """Amount owed by a client for a session or a package."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='payments')
    client = models.ForeignKey('clients.Client', on_delete=models.CASCADE, related_name='payments')

    session = models.ForeignKey(
        'scheduling.Session',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='payments'
    )
    package = models.ForeignKey(
        'packages.Package',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='payments'
    )

    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(
        max_length=10,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    method = models.CharField(max_length=20, choices=PaymentMethod.choices, blank=True)
    due_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    # Unique reference, also used as the PIX transaction id
    reference = models.CharField(max_length=25, unique=True, db_index=True, editable=False)
    pix_payload = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['owner', 'status']),
            models.Index(fields=['owner', 'due_date']),
            models.Index(fields=['owner', 'paid_at']),
            models.Index(fields=['client', 'status']),
        ]
        ordering = ['-due_date', '-created_at']

    def __str__(self):
        return f"{self.client} - R$ {self.amount} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.reference:
            self.reference = self._generate_reference()
        super().save(*args, **kwargs)

    def _generate_reference(self):
        # Alphanumeric only: PIX txids reject separators
        short_id = self.id.hex[:8].upper()
        return f"PAY{short_id}{secrets.randbelow(10000):04d}"

    @property
    def is_outstanding(self):
        return self.status in OUTSTANDING_STATUSES

    def mark_paid(self, method='', paid_at=None):
        self.status = PaymentStatus.PAID
        self.paid_at = paid_at or timezone.now()
        if method:
            self.method = method
        self.save(update_fields=['status', 'paid_at', 'method', 'updated_at'])
