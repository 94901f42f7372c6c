from django.contrib import admin
from .models import PendingPurchase, PendingItem, ClientDetails


class PendingItemInline(admin.TabularInline):
    model = PendingItem
    extra = 0
    fields = ['name', 'brand', 'model', 'bot_estimated_price', 'proposed_price', 'final_price', 'status']


@admin.register(PendingPurchase)
class PendingPurchaseAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'customer_phone', 'status', 'total_quote_amount', 'invoice_number', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['customer_name', 'customer_phone', 'customer_email', 'invoice_number', 'whatsapp_conversation_id']
    readonly_fields = ['quote_confirmation_token', 'invoice_accept_token', 'created_at', 'updated_at']
    raw_id_fields = ['client', 'delivery_booking']
    inlines = [PendingItemInline]


@admin.register(ClientDetails)
class ClientDetailsAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'surname', 'email', 'phone', 'purchase', 'submitted_at']
    search_fields = ['full_name', 'surname', 'email', 'phone', 'id_number']
    raw_id_fields = ['purchase', 'client']
