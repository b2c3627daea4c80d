from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html
from .models import User, Notification


def _badge(label, background, color='white'):
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        background, color, label,
    )


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin interface for therapist accounts.

    Besides the usual account management it lets operators flag referral
    partners and confirm payout details before the monthly payout batch.
    """

    list_display = [
        'email',
        'display_name',
        'subscription_plan',
        'is_active_badge',
        'partner_badge',
        'bank_details_badge',
        'created_at',
        'last_login',
    ]

    list_filter = [
        'is_active',
        'is_staff',
        'subscription_plan',
        'is_referral_partner',
        'bank_details_validated',
        'created_at',
    ]

    search_fields = [
        'email',
        'display_name',
        'referral_code',
    ]

    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    fieldsets = (
        ('Basic Information', {
            'fields': ('email', 'display_name', 'profession', 'password')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Subscription & Referrals', {
            'fields': ('subscription_plan', 'referral_code', 'is_referral_partner'),
        }),
        ('Payout Details', {
            'fields': (
                'pix_key', 'bank_name', 'bank_agency', 'bank_account',
                'bank_account_type', 'tax_id', 'account_holder_name',
                'bank_details_validated',
            ),
            'classes': ('collapse',),
        }),
        ('Practice', {
            'fields': ('default_session_value', 'pix_merchant_name', 'booking_slug', 'booking_enabled'),
            'classes': ('collapse',),
        }),
        ('Verification', {
            'fields': ('email_verified', 'verification_token'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        ('Create User', {
            'classes': ('wide',),
            'fields': ('email', 'display_name', 'password1', 'password2'),
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser'),
        }),
    )

    readonly_fields = [
        'referral_code',
        'created_at',
        'last_login',
    ]

    filter_horizontal = ['groups', 'user_permissions']

    def is_active_badge(self, obj):
        if obj.is_active:
            return _badge('Active', '#6B8E5E')
        return _badge('Inactive', '#B85C5C')
    is_active_badge.short_description = 'Status'
    is_active_badge.admin_order_field = 'is_active'

    def partner_badge(self, obj):
        if obj.is_referral_partner:
            return _badge('Partner', '#4A6FA5')
        return _badge('-', '#ccc', '#666')
    partner_badge.short_description = 'Referral'
    partner_badge.admin_order_field = 'is_referral_partner'

    def bank_details_badge(self, obj):
        if obj.bank_details_validated:
            return _badge('Validated', '#6B8E5E')
        if obj.pix_key or obj.has_bank_transfer_details:
            return _badge('Pending', '#E5C49A', '#2C1810')
        return _badge('Missing', '#ccc', '#666')
    bank_details_badge.short_description = 'Payout'
    bank_details_badge.admin_order_field = 'bank_details_validated'

    actions = [
        'activate_users',
        'deactivate_users',
        'make_partners',
        'validate_bank_details',
    ]

    @admin.action(description='Activate selected users')
    def activate_users(self, request, queryset):
        count = queryset.update(is_active=True)
        self.message_user(request, f'Activated {count} user(s).')

    @admin.action(description='Deactivate selected users')
    def deactivate_users(self, request, queryset):
        """Deactivate selected users, never superusers."""
        safe_queryset = queryset.filter(is_superuser=False)
        count = safe_queryset.update(is_active=False)
        skipped = queryset.count() - count
        msg = f'Deactivated {count} user(s).'
        if skipped:
            msg += f' Skipped {skipped} superuser(s).'
        self.message_user(request, msg)

    @admin.action(description='Enrol as referral partners')
    def make_partners(self, request, queryset):
        count = queryset.update(is_referral_partner=True)
        self.message_user(request, f'Enrolled {count} partner(s).')

    @admin.action(description='Mark payout details as validated')
    def validate_bank_details(self, request, queryset):
        count = queryset.update(bank_details_validated=True)
        self.message_user(request, f'Validated payout details of {count} user(s).')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'created_at', 'read_at']
    list_filter = ['created_at']
    search_fields = ['title', 'user__email']
    raw_id_fields = ['user']
    date_hierarchy = 'created_at'
