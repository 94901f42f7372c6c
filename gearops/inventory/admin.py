from django.contrib import admin
from .models import Bundle, BundleItem, Equipment, PriceHistory, RepairLog


class PriceHistoryInline(admin.TabularInline):
    model = PriceHistory
    extra = 0
    readonly_fields = ['old_price', 'new_price', 'reason', 'changed_by', 'changed_at']


class RepairLogInline(admin.TabularInline):
    model = RepairLog
    extra = 0
    fields = ['technician_name', 'status', 'estimated_cost', 'actual_cost', 'sent_at', 'completed_at']
    readonly_fields = ['sent_at']


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ['sku', 'name', 'brand', 'condition', 'status', 'intake_status', 'acquisition_type', 'selling_price', 'created_at']
    list_filter = ['status', 'intake_status', 'acquisition_type', 'condition', 'in_repair']
    search_fields = ['sku', 'name', 'brand', 'model', 'serial_number']
    raw_id_fields = ['vendor', 'client', 'source_verified_item']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [PriceHistoryInline, RepairLogInline]


@admin.register(RepairLog)
class RepairLogAdmin(admin.ModelAdmin):
    list_display = ['equipment', 'technician_name', 'status', 'estimated_cost', 'actual_cost', 'sent_at', 'completed_at']
    list_filter = ['status']
    search_fields = ['equipment__sku', 'technician_name']


class BundleItemInline(admin.TabularInline):
    model = BundleItem
    extra = 0
    raw_id_fields = ['equipment']
    readonly_fields = ['added_at']


@admin.register(Bundle)
class BundleAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'selling_price', 'cost_price', 'admin_approved_by', 'created_at']
    list_filter = ['status']
    search_fields = ['title', 'items__equipment__sku']
    readonly_fields = ['cost_price', 'admin_approved_at', 'created_at', 'updated_at']
    inlines = [BundleItemInline]
