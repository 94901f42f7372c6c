from django.contrib import admin
from .models import Product, AccessoryTemplate


class AccessoryTemplateInline(admin.TabularInline):
    model = AccessoryTemplate
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'brand', 'model', 'product_type', 'buy_price_max', 'consign_price_max', 'is_active']
    list_filter = ['product_type', 'brand', 'is_active']
    search_fields = ['name', 'brand', 'model']
    ordering = ['brand', 'name']
    inlines = [AccessoryTemplateInline]


@admin.register(AccessoryTemplate)
class AccessoryTemplateAdmin(admin.ModelAdmin):
    list_display = ['product', 'accessory_name', 'accessory_order', 'is_required', 'penalty_amount']
    list_filter = ['is_required']
    search_fields = ['product__name', 'accessory_name']
