import json
import logging

from django.conf import settings
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from gearops.core.permissions import IsAdminRole
from gearops.core.utils import create_activity_log, error_response, get_client_ip, paginate
from .filters import WebhookEventFilter
from .handlers import log_webhook_event, update_webhook_event_status, can_replay_event
from .models import WebhookEventLog
from .processing import process_webhook_event, validate_payload
from .security import verify_signature
from .serializers import (
    WebhookEnvelopeSerializer, WebhookEventListSerializer, WebhookEventSerializer,
    IgnoreEventSerializer, ReplayEventSerializer,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'HTTP_X_WEBHOOK_SIGNATURE'


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def quote_accepted_webhook(request):
    """
    Signed quote decisions from the WhatsApp bot.

    GET is a health check. POST verifies the HMAC signature over the raw
    body, stores the event once per event_id and applies it.
    """
    if request.method == 'GET':
        return Response({
            'status': 'ok',
            'endpoint': 'quote-accepted webhook',
            'method': 'POST',
            'requiredHeaders': ['X-Webhook-Signature'],
            'eventTypes': ['quote_accepted', 'quote_declined'],
        })

    raw_body = request.body
    try:
        body = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError):
        return error_response('Invalid JSON body')
    if not isinstance(body, dict):
        return error_response('Invalid JSON body')

    envelope = WebhookEnvelopeSerializer(data=body)
    if not envelope.is_valid():
        return error_response('Invalid webhook envelope', details=envelope.errors)
    envelope_data = envelope.validated_data

    if not settings.WEBHOOK_SECRET:
        logger.error("WEBHOOK_SECRET is not configured; rejecting webhook")
        return error_response('Invalid signature', status.HTTP_401_UNAUTHORIZED)
    signature = verify_signature(raw_body, request.META.get(SIGNATURE_HEADER), settings.WEBHOOK_SECRET)
    if not signature.valid:
        logger.warning(f"Rejected webhook {envelope_data['event_id']}: invalid signature from {get_client_ip(request)}")
        return error_response('Invalid signature', status.HTTP_401_UNAUTHORIZED)

    event, is_new = log_webhook_event(
        event_id=envelope_data['event_id'],
        event_type=envelope_data['event_type'],
        version=envelope_data['version'],
        raw_payload=body,
        source_ip=get_client_ip(request),
        signature_provided=signature.provided,
        signature_computed=signature.computed,
        signature_valid=signature.valid,
    )
    if not is_new:
        return Response({
            'success': True,
            'duplicate': True,
            'eventId': str(event.event_id),
            'status': event.status,
            'relatedEntityId': event.related_entity_id,
            'message': 'Event already received',
        })

    _, errors = validate_payload(event.event_type, event.version, event.payload)
    if errors:
        update_webhook_event_status(event, WebhookEventLog.STATUS_FAILED, error_message='Payload validation failed')
        return error_response('Payload validation failed', details=errors, eventId=str(event.event_id))

    update_webhook_event_status(event, WebhookEventLog.STATUS_PROCESSING)
    result = process_webhook_event(event)
    if not result.ok:
        update_webhook_event_status(event, WebhookEventLog.STATUS_FAILED, error_message=result.message)
        logger.error(f"Webhook {event.event_id} failed: {result.message}")
        return error_response(
            result.message, status.HTTP_422_UNPROCESSABLE_ENTITY, eventId=str(event.event_id)
        )

    update_webhook_event_status(
        event,
        WebhookEventLog.STATUS_PROCESSED,
        related_entity_id=result.related_entity_id,
        related_entity_type=result.related_entity_type,
    )
    if not result.noop and event.event_type == 'quote_accepted':
        create_activity_log(
            request=request,
            action='PURCHASE_CREATED',
            entity_type='PENDING_PURCHASE',
            entity_id=result.related_entity_id,
            details={'source': 'webhook', 'event_id': str(event.event_id)},
        )
    return Response({
        'success': True,
        'eventId': str(event.event_id),
        'noop': result.noop,
        'message': result.message,
        'relatedEntityId': result.related_entity_id,
        'relatedEntityType': result.related_entity_type,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def webhook_event_list(request):
    """Failed events by default; ignored ones are hidden unless ?includeIgnored"""
    params = request.query_params.copy()
    params.setdefault('status', WebhookEventLog.STATUS_FAILED)
    queryset = WebhookEventLog.objects.select_related('ignored_by').order_by('-received_at')
    if params['status'] == WebhookEventLog.STATUS_FAILED and 'includeIgnored' not in params:
        queryset = queryset.filter(ignored_at__isnull=True)

    filterset = WebhookEventFilter(params, queryset=queryset)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    return paginate(request, filterset.qs, WebhookEventListSerializer, default_limit=50, limit_param='pageSize')


@api_view(['GET'])
@permission_classes([IsAdminRole])
def webhook_event_summary(request):
    counts = {choice: 0 for choice, _ in WebhookEventLog.STATUS_CHOICES}
    for row in WebhookEventLog.objects.values('status').annotate(total=Count('id')):
        counts[row['status']] = row['total']
    failed_not_ignored = WebhookEventLog.objects.filter(
        status=WebhookEventLog.STATUS_FAILED, ignored_at__isnull=True
    ).count()
    return Response({
        'counts': counts,
        'total': sum(counts.values()),
        'failed_not_ignored_count': failed_not_ignored,
    })


@api_view(['GET'])
@permission_classes([IsAdminRole])
def webhook_event_detail(request, pk):
    event = get_object_or_404(WebhookEventLog.objects.select_related('ignored_by'), pk=pk)
    return Response(WebhookEventSerializer(event).data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def webhook_event_ignore(request, pk):
    event = get_object_or_404(WebhookEventLog, pk=pk)
    serializer = IgnoreEventSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    event.ignored_at = timezone.now()
    event.ignored_by = request.user
    event.ignore_note = serializer.validated_data['note']
    event.save(update_fields=['ignored_at', 'ignored_by', 'ignore_note'])
    create_activity_log(
        request=request,
        action='WEBHOOK_IGNORED',
        entity_type='WEBHOOK_EVENT',
        entity_id=event.id,
        details={'event_id': str(event.event_id), 'note': event.ignore_note},
    )
    return Response(WebhookEventSerializer(event).data)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def webhook_event_replay(request, pk):
    """
    Re-run a FAILED or PROCESSED event. Safe mode refuses while the entity
    the event created still exists; force mode skips that check.
    """
    event = get_object_or_404(WebhookEventLog, pk=pk)
    serializer = ReplayEventSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    mode = serializer.validated_data['mode']

    if event.status not in WebhookEventLog.TERMINAL_STATUSES:
        return error_response(
            'Cannot replay event',
            reason=f'Event status is {event.status}. Only FAILED or PROCESSED events can be replayed.'
        )
    if event.ignored_at:
        return error_response('Cannot replay ignored event', reason='Event has been marked as ignored.')
    if mode == 'safe' and not can_replay_event(event):
        return error_response(
            'Replay refused',
            status.HTTP_409_CONFLICT,
            reason=f'{event.related_entity_type} {event.related_entity_id} still exists. Use force mode to replay anyway.'
        )

    logger.info(f"Replaying webhook {event.event_id} (mode {mode}, admin {request.user.username})")
    result = process_webhook_event(event)
    now = timezone.now()
    event.retry_count += 1
    event.last_retried_at = now
    if result.ok:
        event.status = WebhookEventLog.STATUS_PROCESSED
        event.processed_at = now
        prefix = 'Replay completed (noop)' if result.noop else 'Replay successful'
        event.error_message = f'{prefix}: {result.message}'
        event.related_entity_id = result.related_entity_id or event.related_entity_id
        event.related_entity_type = result.related_entity_type or event.related_entity_type
    else:
        event.error_message = f'Replay failed: {result.message}'
    event.save()

    create_activity_log(
        request=request,
        action='WEBHOOK_REPLAYED',
        entity_type='WEBHOOK_EVENT',
        entity_id=event.id,
        details={
            'event_id': str(event.event_id), 'mode': mode, 'ok': result.ok,
            'note': serializer.validated_data.get('note', ''),
        },
    )
    return Response({
        'success': result.ok,
        'noop': result.noop,
        'message': result.message,
        'errorDetails': result.error_details,
        'relatedEntityId': result.related_entity_id,
        'relatedEntityType': result.related_entity_type,
        'event': WebhookEventSerializer(event).data,
    })
