from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from .models import Payment, PaymentStatus

STATUS_COLORS = {
    PaymentStatus.PENDING: 'orange',
    PaymentStatus.PAID: 'green',
    PaymentStatus.OVERDUE: 'red',
    PaymentStatus.CANCELLED: 'gray',
    PaymentStatus.REFUNDED: '#6f42c1',
}


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['reference', 'client', 'owner', 'amount', 'status_badge', 'method', 'due_date', 'paid_at']
    list_filter = ['status', 'method', 'due_date']
    search_fields = ['reference', 'client__name', 'owner__email']
    raw_id_fields = ['owner', 'client', 'session', 'package']
    readonly_fields = ['reference', 'pix_payload', 'created_at', 'updated_at']
    date_hierarchy = 'due_date'
    actions = ['mark_as_paid']

    def status_badge(self, obj):
        return format_html(
            '<span style="color: {};">{}</span>',
            STATUS_COLORS.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def mark_as_paid(self, request, queryset):
        updated = queryset.filter(status__in=[PaymentStatus.PENDING, PaymentStatus.OVERDUE]).update(
            status=PaymentStatus.PAID,
            paid_at=timezone.now(),
            updated_at=timezone.now(),
        )
        self.message_user(request, f"{updated} payments marked as paid.")
    mark_as_paid.short_description = "Mark selected payments as paid"
