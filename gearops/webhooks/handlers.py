"""Event log bookkeeping: idempotent insert, status transitions, replay safety"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from gearops.purchasing.models import PendingPurchase
from .models import WebhookEventLog
from .processing import ENTITY_PENDING_PURCHASE

logger = logging.getLogger(__name__)


def log_webhook_event(event_id, event_type, version, raw_payload, source_ip=None,
                      signature_provided=None, signature_computed=None, signature_valid=False):
    """
    Store the event unless its event_id is already logged.

    The unique constraint on event_id decides races between concurrent
    deliveries. Returns (event, is_new).
    """
    try:
        with transaction.atomic():
            event = WebhookEventLog.objects.create(
                event_id=event_id,
                event_type=event_type,
                version=version,
                status=WebhookEventLog.STATUS_PENDING,
                raw_payload=raw_payload,
                source_ip=source_ip,
                signature_provided=signature_provided,
                signature_computed=signature_computed,
                signature_valid=signature_valid,
            )
        return event, True
    except IntegrityError:
        existing = WebhookEventLog.objects.filter(event_id=event_id).first()
        if existing is None:
            raise
        logger.info(f"Duplicate webhook event {event_id} (status {existing.status})")
        return existing, False


def update_webhook_event_status(event, status, error_message=None, related_entity_id=None,
                                related_entity_type=None):
    """processed_at is only stamped when the event reaches PROCESSED or FAILED"""
    event.status = status
    update_fields = ['status']
    if status in WebhookEventLog.TERMINAL_STATUSES:
        event.processed_at = timezone.now()
        update_fields.append('processed_at')
    if error_message:
        event.error_message = error_message
        update_fields.append('error_message')
    if related_entity_id:
        event.related_entity_id = str(related_entity_id)
        update_fields.append('related_entity_id')
    if related_entity_type:
        event.related_entity_type = related_entity_type
        update_fields.append('related_entity_type')
    event.save(update_fields=update_fields)
    return event


def can_replay_event(event):
    """
    Safe to replay only when the entity the event created is gone.
    Unknown entity types are never safe.
    """
    if not event.related_entity_id or not event.related_entity_type:
        return True
    if event.related_entity_type == ENTITY_PENDING_PURCHASE:
        return not PendingPurchase.objects.filter(pk=event.related_entity_id).exists()
    return False
