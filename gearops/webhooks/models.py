from django.db import models
from gearops.core.models import User


class WebhookEventLog(models.Model):
    """Every signed delivery from the chat bot, stored once per event_id"""
    STATUS_PENDING = 'PENDING'
    STATUS_PROCESSING = 'PROCESSING'
    STATUS_PROCESSED = 'PROCESSED'
    STATUS_FAILED = 'FAILED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_PROCESSED, 'Processed'),
        (STATUS_FAILED, 'Failed'),
    ]
    TERMINAL_STATUSES = [STATUS_PROCESSED, STATUS_FAILED]

    event_id = models.UUIDField(unique=True)
    event_type = models.CharField(max_length=50)
    version = models.CharField(max_length=10)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    raw_payload = models.JSONField(default=dict)
    source_ip = models.GenericIPAddressField(null=True, blank=True)
    signature_provided = models.CharField(max_length=255, null=True, blank=True)
    signature_computed = models.CharField(max_length=255, null=True, blank=True)
    signature_valid = models.BooleanField(default=False)
    received_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    retry_count = models.PositiveIntegerField(default=0)
    last_retried_at = models.DateTimeField(null=True, blank=True)
    ignored_at = models.DateTimeField(null=True, blank=True)
    ignored_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    ignore_note = models.TextField(blank=True)
    related_entity_id = models.CharField(max_length=100, null=True, blank=True)
    related_entity_type = models.CharField(max_length=50, null=True, blank=True)

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({self.status})"

    @property
    def payload(self):
        """The event payload, whether or not it arrived wrapped in an envelope"""
        raw = self.raw_payload or {}
        if isinstance(raw, dict) and raw.get('payload'):
            return raw['payload']
        return raw

    class Meta:
        db_table = 'webhook_event_logs'
        ordering = ['-received_at']
        indexes = [
            models.Index(fields=['status', 'received_at'], name='idx_webhook_status_received'),
            models.Index(fields=['event_type'], name='idx_webhook_event_type'),
        ]
