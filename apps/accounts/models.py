from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone
from decimal import Decimal
import secrets
import uuid


REFERRAL_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_referral_code(length=8):
    return ''.join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length))


class SubscriptionPlan(models.TextChoices):
    BASIC = 'basic', 'Basic'
    PRO = 'pro', 'Pro'
    PREMIUM = 'premium', 'Premium'


class BankAccountType(models.TextChoices):
    CHECKING = 'checking', 'Checking'
    SAVINGS = 'savings', 'Savings'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('email_verified', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Therapist account with email authentication."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    display_name = models.CharField(max_length=100, blank=True)
    profession = models.CharField(max_length=100, blank=True)

    # Authentication & verification
    email_verified = models.BooleanField(default=False)
    verification_token = models.CharField(max_length=64, blank=True, null=True)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Subscription & referral programme
    subscription_plan = models.CharField(
        max_length=20,
        choices=SubscriptionPlan.choices,
        default=SubscriptionPlan.BASIC,
    )
    referral_code = models.CharField(max_length=16, unique=True, db_index=True, editable=False)
    is_referral_partner = models.BooleanField(default=False)

    # Payout details (PIX or bank transfer)
    pix_key = models.CharField(max_length=140, blank=True)
    bank_name = models.CharField(max_length=100, blank=True)
    bank_agency = models.CharField(max_length=10, blank=True)
    bank_account = models.CharField(max_length=20, blank=True)
    bank_account_type = models.CharField(
        max_length=10,
        choices=BankAccountType.choices,
        default=BankAccountType.CHECKING,
    )
    tax_id = models.CharField(max_length=18, blank=True, help_text='CPF or CNPJ')
    account_holder_name = models.CharField(max_length=200, blank=True)
    bank_details_validated = models.BooleanField(default=False)

    # Practice defaults
    default_session_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
    )
    pix_merchant_name = models.CharField(max_length=25, blank=True)

    # Public booking page
    booking_slug = models.SlugField(max_length=60, unique=True, null=True, blank=True)
    booking_enabled = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email']),
            models.Index(fields=['created_at']),
            models.Index(fields=['subscription_plan']),
        ]

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        if not self.referral_code:
            self.referral_code = generate_referral_code()
        super().save(*args, **kwargs)

    def get_display_name(self):
        """Return display name or email prefix."""
        return self.display_name or self.email.split('@')[0]

    @property
    def has_paid_plan(self):
        return self.subscription_plan in (SubscriptionPlan.PRO, SubscriptionPlan.PREMIUM)

    @property
    def has_bank_transfer_details(self):
        return bool(self.bank_name and self.bank_agency and self.bank_account)


class Notification(models.Model):
    """In-app notification for a user."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=200)
    content = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['user', 'read_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.email}: {self.title}"

    @property
    def is_read(self):
        return self.read_at is not None

    def mark_read(self):
        if self.read_at is None:
            self.read_at = timezone.now()
            self.save(update_fields=['read_at'])
