"""
Business effects of webhook events.

Called by the receiving endpoint and again by an admin replay, so every
handler is idempotent: applying the same event twice leaves one purchase.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from gearops.core.utils import WorkflowError
from gearops.purchasing.models import PendingPurchase
from .serializers import PAYLOAD_SERIALIZERS, EVENT_QUOTE_ACCEPTED, EVENT_QUOTE_DECLINED

logger = logging.getLogger(__name__)

ENTITY_PENDING_PURCHASE = 'PendingPurchase'


class ProcessingResult:
    def __init__(self, ok, message, related_entity_id=None, related_entity_type=None,
                 noop=False, error_details=None):
        self.ok = ok
        self.message = message
        self.related_entity_id = str(related_entity_id) if related_entity_id is not None else None
        self.related_entity_type = related_entity_type
        self.noop = noop
        self.error_details = error_details

    def __repr__(self):
        return f"ProcessingResult(ok={self.ok}, noop={self.noop}, message={self.message!r})"


def validate_payload(event_type, version, payload):
    """Returns (validated_data, errors); exactly one of them is None"""
    serializer_class = PAYLOAD_SERIALIZERS.get((event_type, version))
    if serializer_class is None:
        return None, {'version': [f'Unsupported payload version {version} for {event_type}']}
    serializer = serializer_class(data=payload)
    if not serializer.is_valid():
        return None, serializer.errors
    return serializer.validated_data, None


def _recent_purchases(phone, conversation_id):
    cutoff = timezone.now() - timedelta(days=settings.WEBHOOK_IDEMPOTENCY_DAYS)
    queryset = PendingPurchase.objects.filter(customer_phone=phone, bot_quote_accepted_at__gte=cutoff)
    if conversation_id:
        queryset = queryset.filter(whatsapp_conversation_id=conversation_id)
    return queryset.order_by('-bot_quote_accepted_at')


def process_quote_accepted(data, event_id=None):
    from gearops.purchasing.services import create_purchase

    existing = _recent_purchases(data['customer_phone'], data.get('whatsapp_conversation_id')).first()
    if existing is not None:
        logger.info(f"Event {event_id}: purchase {existing.id} already exists for {data['customer_phone']}")
        return ProcessingResult(
            True,
            f'Purchase already exists: {existing.id} (no duplicate created)',
            related_entity_id=existing.id,
            related_entity_type=ENTITY_PENDING_PURCHASE,
            noop=True,
        )

    items = [dict(item) for item in data['items']]
    purchase_data = {key: value for key, value in data.items() if key != 'items'}
    purchase = create_purchase(purchase_data, items)
    logger.info(f"Event {event_id}: created purchase {purchase.id} with {len(items)} item(s)")
    return ProcessingResult(
        True,
        f'Purchase created: {purchase.id} with {len(items)} items',
        related_entity_id=purchase.id,
        related_entity_type=ENTITY_PENDING_PURCHASE,
    )


def process_quote_declined(data, event_id=None):
    from gearops.purchasing.services import decline_quote

    purchase = _recent_purchases(data['customer_phone'], data.get('whatsapp_conversation_id')).first()
    if purchase is None:
        return ProcessingResult(False, f"No recent purchase found for {data['customer_phone']}")
    if purchase.status == PendingPurchase.STATUS_CLIENT_DECLINED:
        return ProcessingResult(
            True,
            f'Purchase {purchase.id} already declined',
            related_entity_id=purchase.id,
            related_entity_type=ENTITY_PENDING_PURCHASE,
            noop=True,
        )
    try:
        decline_quote(purchase, data.get('reason', ''))
    except WorkflowError as e:
        return ProcessingResult(False, e.message, related_entity_id=purchase.id,
                                related_entity_type=ENTITY_PENDING_PURCHASE)
    logger.info(f"Event {event_id}: purchase {purchase.id} declined by client")
    return ProcessingResult(
        True,
        f'Purchase declined: {purchase.id}',
        related_entity_id=purchase.id,
        related_entity_type=ENTITY_PENDING_PURCHASE,
    )


HANDLERS = {
    EVENT_QUOTE_ACCEPTED: process_quote_accepted,
    EVENT_QUOTE_DECLINED: process_quote_declined,
}


def process_webhook_event(event):
    """Route a logged event to its handler. Never raises; failures come back as a result."""
    handler = HANDLERS.get(event.event_type)
    if handler is None:
        return ProcessingResult(False, f'Unsupported event type: {event.event_type}')

    data, errors = validate_payload(event.event_type, event.version, event.payload)
    if errors:
        return ProcessingResult(False, 'Payload validation failed', error_details=errors)

    try:
        return handler(data, event_id=event.event_id)
    except Exception as e:
        logger.exception(f"Processing {event.event_type} event {event.event_id} failed")
        return ProcessingResult(False, str(e), error_details={'exception': e.__class__.__name__})
