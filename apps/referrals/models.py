from decimal import Decimal
import uuid

from django.db import models


class ReferralStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CONVERTED = 'converted', 'Converted'
    CANCELLED = 'cancelled', 'Cancelled'


class PayoutStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    PROCESSING = 'processing', 'Processing'
    PAID = 'paid', 'Paid'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'


class PayoutMethod(models.TextChoices):
    PIX = 'PIX', 'PIX'
    TED = 'TED', 'TED (bank transfer)'


class PaymentGateway(models.TextChoices):
    ASAAS = 'asaas', 'Asaas'
    STRIPE = 'stripe', 'Stripe'


class Referral(models.Model):
    """A partner (referrer) bringing in a new user (referred)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    referrer = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='referrals_made')
    referred = models.OneToOneField('accounts.User', on_delete=models.CASCADE, related_name='referral')

    status = models.CharField(
        max_length=10,
        choices=ReferralStatus.choices,
        default=ReferralStatus.PENDING
    )
    subscription_plan = models.CharField(max_length=20, blank=True)
    subscription_amount_cents = models.PositiveIntegerField(default=0)
    commission_rate = models.DecimalField(max_digits=5, decimal_places=4, default=Decimal('0'))
    commission_amount_cents = models.PositiveIntegerField(default=0)
    first_payment_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'referrals'
        indexes = [
            models.Index(fields=['referrer', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.referrer.email} -> {self.referred.email} ({self.status})"


class ReferralPayout(models.Model):
    """One commission installment owed to a referrer. Amounts in centavos."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    referrer = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='referral_payouts')
    referral = models.ForeignKey(
        Referral,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payouts'
    )

    amount_cents = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default='brl')
    status = models.CharField(
        max_length=10,
        choices=PayoutStatus.choices,
        default=PayoutStatus.PENDING
    )

    period_start = models.DateField()
    period_end = models.DateField()
    approval_deadline = models.DateField()

    referred_user_name = models.CharField(max_length=200, blank=True)
    referred_plan = models.CharField(max_length=20, blank=True)
    installment = models.BooleanField(default=False)
    installment_number = models.PositiveSmallIntegerField(null=True, blank=True)

    # Settlement
    paid_at = models.DateTimeField(null=True, blank=True)
    transfer_id = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(max_length=3, choices=PayoutMethod.choices, blank=True)
    failure_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'referral_payouts'
        indexes = [
            models.Index(fields=['status', 'approval_deadline']),
            models.Index(fields=['referrer', 'status']),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.referrer.email}: R$ {self.amount_cents / 100:.2f} ({self.status})"


class ReferralAuditLog(models.Model):
    """Append-only trail of commission and payout events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    action = models.CharField(max_length=50)

    referrer = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    referred = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    referral = models.ForeignKey(
        Referral,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )
    payout = models.ForeignKey(
        ReferralPayout,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs'
    )

    gateway = models.CharField(max_length=10, choices=PaymentGateway.choices, blank=True)
    status = models.CharField(max_length=20, blank=True)
    gross_amount_cents = models.IntegerField(null=True, blank=True)
    net_amount_cents = models.IntegerField(null=True, blank=True)
    commission_amount_cents = models.IntegerField(null=True, blank=True)
    failure_reason = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'referral_audit_logs'
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['referrer', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} ({self.created_at:%Y-%m-%d %H:%M})"
