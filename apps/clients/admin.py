from django.contrib import admin
from .models import Client, RegistrationInvite


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'owner', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'email', 'phone', 'owner__email']
    raw_id_fields = ['owner']
    readonly_fields = ['created_at', 'updated_at']
    date_hierarchy = 'created_at'


@admin.register(RegistrationInvite)
class RegistrationInviteAdmin(admin.ModelAdmin):
    list_display = ['id', 'owner', 'client', 'created_at', 'used_at']
    list_filter = ['created_at']
    search_fields = ['owner__email', 'client__name']
    raw_id_fields = ['owner', 'client']
    readonly_fields = ['created_at', 'used_at']
