from django.contrib import admin
from .models import (
    InspectionSession, IncomingGearItem, VerifiedGearItem, PricingSnapshot, PriceOverride,
)


class IncomingGearItemInline(admin.TabularInline):
    model = IncomingGearItem
    extra = 0
    fields = ['client_name', 'client_brand', 'client_model', 'status', 'client_selection', 'not_interested']


@admin.register(InspectionSession)
class InspectionSessionAdmin(admin.ModelAdmin):
    list_display = ['session_number', 'session_name', 'status', 'purchase', 'created_at', 'completed_at']
    list_filter = ['status', 'created_at']
    search_fields = ['session_number', 'session_name']
    inlines = [IncomingGearItemInline]


@admin.register(VerifiedGearItem)
class VerifiedGearItemAdmin(admin.ModelAdmin):
    list_display = ['incoming_item', 'product', 'condition', 'locked', 'verified_at', 'approved_at']
    list_filter = ['condition', 'locked', 'requires_repair']
    search_fields = ['product__name', 'serial_number']
    raw_id_fields = ['incoming_item', 'product']


@admin.register(PricingSnapshot)
class PricingSnapshotAdmin(admin.ModelAdmin):
    list_display = ['verified_item', 'condition_multiplier', 'final_buy_price', 'final_consign_price', 'updated_at']


@admin.register(PriceOverride)
class PriceOverrideAdmin(admin.ModelAdmin):
    list_display = ['verified_item', 'override_buy_price', 'override_consign_price', 'override_reason', 'overridden_by', 'overridden_at']
    list_filter = ['override_reason']
