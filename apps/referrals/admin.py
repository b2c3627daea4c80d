from django.contrib import admin
from django.utils.html import format_html

from .models import Referral, ReferralPayout, ReferralAuditLog, PayoutStatus

PAYOUT_COLORS = {
    PayoutStatus.PENDING: 'orange',
    PayoutStatus.APPROVED: '#007bff',
    PayoutStatus.PROCESSING: 'purple',
    PayoutStatus.PAID: 'green',
    PayoutStatus.FAILED: 'red',
    PayoutStatus.CANCELLED: 'gray',
}


@admin.register(Referral)
class ReferralAdmin(admin.ModelAdmin):
    list_display = ['referrer', 'referred', 'status', 'subscription_plan', 'commission_amount_cents', 'first_payment_at', 'created_at']
    list_filter = ['status', 'subscription_plan']
    search_fields = ['referrer__email', 'referred__email']
    raw_id_fields = ['referrer', 'referred']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(ReferralPayout)
class ReferralPayoutAdmin(admin.ModelAdmin):
    list_display = ['referrer', 'amount_display', 'status_badge', 'period_start', 'approval_deadline', 'payment_method', 'paid_at']
    list_filter = ['status', 'payment_method', 'installment']
    search_fields = ['referrer__email', 'referred_user_name', 'transfer_id']
    raw_id_fields = ['referrer', 'referral']
    readonly_fields = ['paid_at', 'transfer_id', 'created_at', 'updated_at']
    date_hierarchy = 'approval_deadline'
    actions = ['approve_payouts', 'cancel_payouts', 'retry_payouts']

    def amount_display(self, obj):
        return f"R$ {obj.amount_cents / 100:.2f}"
    amount_display.short_description = 'Amount'

    def status_badge(self, obj):
        return format_html(
            '<span style="color: {};">{}</span>',
            PAYOUT_COLORS.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def approve_payouts(self, request, queryset):
        updated = queryset.filter(status=PayoutStatus.PENDING).update(status=PayoutStatus.APPROVED)
        self.message_user(request, f"{updated} payouts approved.")
    approve_payouts.short_description = "Approve selected pending payouts"

    def cancel_payouts(self, request, queryset):
        updated = queryset.filter(status__in=[PayoutStatus.PENDING, PayoutStatus.APPROVED]).update(
            status=PayoutStatus.CANCELLED,
            failure_reason='cancelled_by_staff',
        )
        self.message_user(request, f"{updated} payouts cancelled.")
    cancel_payouts.short_description = "Cancel selected payouts"

    def retry_payouts(self, request, queryset):
        updated = queryset.filter(status__in=[PayoutStatus.FAILED, PayoutStatus.PROCESSING]).update(
            status=PayoutStatus.APPROVED,
            failure_reason='',
        )
        self.message_user(request, f"{updated} payouts queued for the next batch.")
    retry_payouts.short_description = "Retry selected failed or stuck payouts"


@admin.register(ReferralAuditLog)
class ReferralAuditLogAdmin(admin.ModelAdmin):
    list_display = ['action', 'referrer', 'status', 'gateway', 'commission_amount_cents', 'created_at']
    list_filter = ['action', 'status', 'gateway']
    search_fields = ['referrer__email', 'referred__email', 'failure_reason']
    raw_id_fields = ['referrer', 'referred', 'referral', 'payout']
    readonly_fields = [f.name for f in ReferralAuditLog._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
