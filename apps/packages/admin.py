from django.contrib import admin

from .models import Package


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'owner', 'consumed_sessions', 'total_sessions', 'total_value', 'status', 'start_date']
    list_filter = ['status', 'payment_method', 'start_date']
    search_fields = ['name', 'client__name', 'owner__email']
    raw_id_fields = ['owner', 'client']
    readonly_fields = ['consumed_sessions', 'created_at', 'updated_at']
    date_hierarchy = 'start_date'
