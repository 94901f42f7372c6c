from django.contrib import admin
from .models import Vendor, Client


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'email', 'phone']
    ordering = ['name']


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'surname', 'phone', 'email', 'merged_into', 'created_at']
    list_filter = ['created_at']
    search_fields = ['first_name', 'surname', 'phone', 'email', 'id_number', 'passport_number']
    ordering = ['-created_at']
    raw_id_fields = ['merged_into']
