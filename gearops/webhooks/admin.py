from django.contrib import admin
from .models import WebhookEventLog


@admin.register(WebhookEventLog)
class WebhookEventLogAdmin(admin.ModelAdmin):
    list_display = ['event_id', 'event_type', 'version', 'status', 'signature_valid', 'retry_count', 'received_at', 'ignored_at']
    list_filter = ['status', 'event_type', 'signature_valid']
    search_fields = ['event_id', 'related_entity_id']
    readonly_fields = ['event_id', 'raw_payload', 'signature_provided', 'signature_computed', 'received_at', 'processed_at']
