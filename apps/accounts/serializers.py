from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, Notification


class UserSerializer(serializers.ModelSerializer):
    """Therapist profile."""

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'profession',
            'email_verified',
            'subscription_plan',
            'referral_code',
            'is_referral_partner',
            'default_session_value',
            'pix_merchant_name',
            'booking_slug',
            'booking_enabled',
            'created_at',
            'last_login',
        ]
        read_only_fields = [
            'id',
            'email',
            'email_verified',
            'subscription_plan',
            'referral_code',
            'is_referral_partner',
            'created_at',
            'last_login',
        ]

    def validate_booking_slug(self, value):
        return value.lower() if value else None

    def validate(self, attrs):
        slug = attrs.get('booking_slug', getattr(self.instance, 'booking_slug', None))
        enabled = attrs.get('booking_enabled', getattr(self.instance, 'booking_enabled', False))
        if enabled and not slug:
            raise serializers.ValidationError({
                'booking_slug': 'A booking slug is required to enable public booking'
            })
        return attrs


class UserRegistrationSerializer(serializers.ModelSerializer):
    """Serializer for user registration."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    referral_code = serializers.CharField(required=False, allow_blank=True, max_length=16)

    class Meta:
        model = User
        fields = ['email', 'password', 'password_confirm', 'display_name', 'profession', 'referral_code']

    def validate(self, attrs):
        """Validate password confirmation."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({
                'password_confirm': 'Passwords do not match'
            })
        return attrs


class UserLoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )


class PayoutDetailsSerializer(serializers.ModelSerializer):
    """Bank / PIX details used for referral payouts."""

    class Meta:
        model = User
        fields = [
            'pix_key',
            'bank_name',
            'bank_agency',
            'bank_account',
            'bank_account_type',
            'tax_id',
            'account_holder_name',
            'bank_details_validated',
        ]
        read_only_fields = ['bank_details_validated']
        extra_kwargs = {
            field: {'required': False, 'allow_blank': True}
            for field in ['pix_key', 'bank_name', 'bank_agency', 'bank_account', 'tax_id', 'account_holder_name']
        }


class NotificationSerializer(serializers.ModelSerializer):
    is_read = serializers.BooleanField(read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'title', 'content', 'created_at', 'read_at', 'is_read']
        read_only_fields = fields
