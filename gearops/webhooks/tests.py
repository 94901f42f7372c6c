"""
Test suite for the webhooks module
Tests: signatures, receiving quote events, idempotency, admin list/ignore/replay
"""
import json
import uuid
from decimal import Decimal

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from gearops.core.models import ActivityLog
from gearops.core.permissions import ADMIN, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.purchasing.models import PendingPurchase
from gearops.webhooks.handlers import can_replay_event, log_webhook_event
from gearops.webhooks.models import WebhookEventLog
from gearops.webhooks.processing import validate_payload
from gearops.webhooks.security import (
    InvalidSignature, compute_signature, require_valid_signature, verify_signature,
)

SECRET = 'test-webhook-secret'
URL = '/api/v1/webhooks/quote-accepted/'

ACCEPTED_PAYLOAD = {
    'customerName': 'Thandi Nkosi',
    'customerPhone': '0821234567',
    'customerEmail': 'thandi@example.com',
    'whatsappConversationId': 'wa-123',
    'totalQuoteAmount': '9500.00',
    'items': [
        {'name': 'Canon EOS R6', 'brand': 'Canon', 'botEstimatedPrice': '8000.00',
         'ocrText': 'EOS R6 Mark I', 'imageUrls': ['https://cdn.example.com/r6.jpg']},
        {'name': 'Canon RF 24-105', 'brand': 'Canon', 'botEstimatedPrice': '1500.00'},
    ],
}


def make_event(event_type='quote_accepted', payload=None, event_id=None, version='1.0'):
    return {
        'event_id': str(event_id or uuid.uuid4()),
        'event_type': event_type,
        'version': version,
        'timestamp': timezone.now().isoformat(),
        'payload': ACCEPTED_PAYLOAD if payload is None else payload,
    }


class SignatureTests(TestCase):

    def test_round_trip(self):
        body = b'{"a": 1}'
        signature = compute_signature(body, SECRET)
        self.assertTrue(signature.startswith('sha256='))
        self.assertTrue(verify_signature(body, signature, SECRET).valid)

    def test_prefix_is_optional(self):
        body = b'{"a": 1}'
        bare = compute_signature(body, SECRET)[len('sha256='):]
        self.assertTrue(verify_signature(body, bare, SECRET).valid)

    def test_tampered_body(self):
        signature = compute_signature(b'{"a": 1}', SECRET)
        check = verify_signature(b'{"a": 2}', signature, SECRET)
        self.assertFalse(check.valid)
        self.assertEqual(check.provided, signature)

    def test_missing_and_malformed_headers(self):
        self.assertFalse(verify_signature(b'{}', None, SECRET).valid)
        self.assertFalse(verify_signature(b'{}', 'sha256=abc', SECRET).valid)
        self.assertFalse(verify_signature(b'{}', 'sha256=' + 'é' * 64, SECRET).valid)

    def test_require_valid_signature(self):
        with self.assertRaises(InvalidSignature):
            require_valid_signature(b'{}', 'sha256=nope', SECRET)


class PayloadValidationTests(TestCase):

    def test_accepted_payload_maps_to_model_fields(self):
        data, errors = validate_payload('quote_accepted', '1.0', ACCEPTED_PAYLOAD)
        self.assertIsNone(errors)
        self.assertEqual(data['customer_phone'], '0821234567')
        self.assertEqual(data['items'][0]['bot_estimated_price'], Decimal('8000.00'))
        self.assertEqual(data['items'][0]['ocr_text'], 'EOS R6 Mark I')

    def test_bot_prices_are_rounded_to_cents(self):
        payload = dict(ACCEPTED_PAYLOAD, totalQuoteAmount=9500.005, items=[
            {'name': 'Canon EOS R6', 'botEstimatedPrice': '1234.567', 'proposedPrice': 1199.994},
        ])
        data, errors = validate_payload('quote_accepted', '1.0', payload)
        self.assertIsNone(errors)
        self.assertEqual(data['total_quote_amount'], Decimal('9500.01'))
        self.assertEqual(data['items'][0]['bot_estimated_price'], Decimal('1234.57'))
        self.assertEqual(data['items'][0]['proposed_price'], Decimal('1199.99'))

    def test_bad_or_negative_prices_still_rejected(self):
        for price in ['abc', '-0.01', 'NaN']:
            payload = dict(ACCEPTED_PAYLOAD, items=[{'name': 'Lens', 'botEstimatedPrice': price}])
            _, errors = validate_payload('quote_accepted', '1.0', payload)
            self.assertIn('items', errors, price)

    def test_unsupported_version(self):
        data, errors = validate_payload('quote_accepted', '2.0', ACCEPTED_PAYLOAD)
        self.assertIsNone(data)
        self.assertIn('version', errors)

    def test_rules(self):
        bad = dict(ACCEPTED_PAYLOAD, totalQuoteAmount='0', items=[])
        _, errors = validate_payload('quote_accepted', '1.0', bad)
        self.assertIn('totalQuoteAmount', errors)
        self.assertIn('items', errors)
        bad = dict(ACCEPTED_PAYLOAD, items=[{'name': 'Lens', 'imageUrls': ['not a url']}])
        _, errors = validate_payload('quote_accepted', '1.0', bad)
        self.assertIn('items', errors)


@override_settings(WEBHOOK_SECRET=SECRET)
class ReceiveWebhookTests(TestCase):
    """Test the public quote webhook"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def _send(self, event, secret=SECRET, signature=None):
        body = json.dumps(event)
        if signature is None:
            signature = compute_signature(body, secret)
        return self.client.post(URL, data=body, content_type='application/json',
                                HTTP_X_WEBHOOK_SIGNATURE=signature)

    def test_health_check(self):
        response = self.client.get(URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')

    def test_quote_accepted_creates_purchase(self):
        event = make_event()
        response = self._send(event)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['noop'])
        purchase = PendingPurchase.objects.get()
        self.assertEqual(response.data['relatedEntityId'], str(purchase.id))
        self.assertEqual(purchase.status, PendingPurchase.STATUS_PENDING_REVIEW)
        self.assertEqual(purchase.whatsapp_conversation_id, 'wa-123')
        self.assertTrue(purchase.has_valid_quote_token)
        self.assertEqual(purchase.items.count(), 2)
        self.assertEqual(purchase.items.get(name='Canon EOS R6').proposed_price, Decimal('8000.00'))

        logged = WebhookEventLog.objects.get()
        self.assertEqual(logged.status, WebhookEventLog.STATUS_PROCESSED)
        self.assertTrue(logged.signature_valid)
        self.assertIsNotNone(logged.processed_at)
        self.assertEqual(logged.related_entity_type, 'PendingPurchase')
        self.assertTrue(ActivityLog.objects.filter(action='PURCHASE_CREATED').exists())

    def test_bad_signature_is_not_stored(self):
        response = self._send(make_event(), secret='wrong-secret')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(WebhookEventLog.objects.count(), 0)
        self.assertEqual(PendingPurchase.objects.count(), 0)

    def test_missing_signature(self):
        body = json.dumps(make_event())
        response = self.client.post(URL, data=body, content_type='application/json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    @override_settings(WEBHOOK_SECRET='')
    def test_unconfigured_secret_rejects(self):
        response = self._send(make_event(), secret='')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_invalid_json(self):
        response = self.client.post(URL, data='{not json', content_type='application/json',
                                    HTTP_X_WEBHOOK_SIGNATURE=compute_signature('{not json', SECRET))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_envelope(self):
        event = make_event()
        event['event_id'] = 'not-a-uuid'
        response = self._send(event)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('event_id', response.data['details'])

    def test_duplicate_delivery(self):
        event = make_event()
        self._send(event)
        response = self._send(event)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['duplicate'])
        self.assertEqual(response.data['status'], WebhookEventLog.STATUS_PROCESSED)
        self.assertEqual(PendingPurchase.objects.count(), 1)
        self.assertEqual(WebhookEventLog.objects.count(), 1)

    def test_same_quote_new_event_is_noop(self):
        self._send(make_event())
        response = self._send(make_event())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['noop'])
        self.assertEqual(PendingPurchase.objects.count(), 1)

    def test_invalid_payload_marks_failed(self):
        response = self._send(make_event(payload=dict(ACCEPTED_PAYLOAD, items=[])))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        logged = WebhookEventLog.objects.get()
        self.assertEqual(logged.status, WebhookEventLog.STATUS_FAILED)
        self.assertEqual(logged.error_message, 'Payload validation failed')

    def test_decline_applies_to_recent_purchase(self):
        purchase = TestDataFactory.create_purchase(
            customer_phone='0821234567', whatsapp_conversation_id='wa-123',
            status=PendingPurchase.STATUS_QUOTE_SENT
        )
        payload = {'customerPhone': '0821234567', 'whatsappConversationId': 'wa-123', 'reason': 'Changed my mind'}
        response = self._send(make_event('quote_declined', payload))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, PendingPurchase.STATUS_CLIENT_DECLINED)
        self.assertIsNone(purchase.quote_confirmation_token)

        response = self._send(make_event('quote_declined', payload))
        self.assertTrue(response.data['noop'])

    def test_decline_without_purchase_fails(self):
        payload = {'customerPhone': '0820000000'}
        response = self._send(make_event('quote_declined', payload))
        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(WebhookEventLog.objects.get().status, WebhookEventLog.STATUS_FAILED)


class EventLogHandlerTests(TestCase):

    def test_log_is_idempotent(self):
        event_id = uuid.uuid4()
        first, is_new = log_webhook_event(event_id, 'quote_accepted', '1.0', make_event(event_id=event_id))
        self.assertTrue(is_new)
        second, is_new = log_webhook_event(event_id, 'quote_accepted', '1.0', make_event(event_id=event_id))
        self.assertFalse(is_new)
        self.assertEqual(first.id, second.id)

    def test_can_replay(self):
        event, _ = log_webhook_event(uuid.uuid4(), 'quote_accepted', '1.0', make_event())
        self.assertTrue(can_replay_event(event))
        purchase = TestDataFactory.create_purchase()
        event.related_entity_id = str(purchase.id)
        event.related_entity_type = 'PendingPurchase'
        self.assertFalse(can_replay_event(event))
        purchase.delete()
        self.assertTrue(can_replay_event(event))
        event.related_entity_type = 'Equipment'
        self.assertFalse(can_replay_event(event))

    def test_payload_falls_back_to_raw_body(self):
        event, _ = log_webhook_event(uuid.uuid4(), 'quote_declined', '1.0', {'customerPhone': '0821111111'})
        self.assertEqual(event.payload['customerPhone'], '0821111111')


@override_settings(WEBHOOK_SECRET=SECRET)
class WebhookAdminTests(TestCase):
    """Test the admin event list, ignore and replay"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def _event(self, status_value, event_type='quote_accepted', payload=None, **fields):
        event, _ = log_webhook_event(uuid.uuid4(), event_type, '1.0', make_event(event_type, payload))
        WebhookEventLog.objects.filter(pk=event.pk).update(status=status_value, **fields)
        event.refresh_from_db()
        return event

    def test_staff_cannot_see_events(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))
        response = self.client.get('/api/v1/admin/webhooks/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_defaults_to_failed_not_ignored(self):
        self._event(WebhookEventLog.STATUS_FAILED)
        self._event(WebhookEventLog.STATUS_FAILED, ignored_at=timezone.now())
        self._event(WebhookEventLog.STATUS_PROCESSED)
        response = self.client.get('/api/v1/admin/webhooks/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/admin/webhooks/?includeIgnored=true')
        self.assertEqual(response.data['count'], 2)
        response = self.client.get('/api/v1/admin/webhooks/?status=ALL')
        self.assertEqual(response.data['count'], 3)

    def test_list_search_by_phone(self):
        self._event(WebhookEventLog.STATUS_FAILED)
        self._event(WebhookEventLog.STATUS_FAILED, payload=dict(ACCEPTED_PAYLOAD, customerPhone='0839998888'))
        response = self.client.get('/api/v1/admin/webhooks/?q=0839998888')
        self.assertEqual(response.data['count'], 1)

    def test_summary(self):
        self._event(WebhookEventLog.STATUS_FAILED)
        self._event(WebhookEventLog.STATUS_FAILED, ignored_at=timezone.now())
        self._event(WebhookEventLog.STATUS_PROCESSED)
        response = self.client.get('/api/v1/admin/webhooks/summary/')
        self.assertEqual(response.data['counts'][WebhookEventLog.STATUS_FAILED], 2)
        self.assertEqual(response.data['counts'][WebhookEventLog.STATUS_PENDING], 0)
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(response.data['failed_not_ignored_count'], 1)

    def test_detail_includes_raw_payload(self):
        event = self._event(WebhookEventLog.STATUS_FAILED)
        response = self.client.get(f'/api/v1/admin/webhooks/{event.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['raw_payload']['payload']['customerName'], 'Thandi Nkosi')

    def test_ignore_needs_note(self):
        event = self._event(WebhookEventLog.STATUS_FAILED)
        response = self.client.post(f'/api/v1/admin/webhooks/{event.id}/ignore/', {'note': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(f'/api/v1/admin/webhooks/{event.id}/ignore/', {'note': 'Test message'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ignored_by'], self.admin.id)
        self.assertTrue(ActivityLog.objects.filter(action='WEBHOOK_IGNORED').exists())

    def test_replay_failed_event(self):
        event = self._event(WebhookEventLog.STATUS_FAILED)
        response = self.client.post(f'/api/v1/admin/webhooks/{event.id}/replay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        event.refresh_from_db()
        self.assertEqual(event.status, WebhookEventLog.STATUS_PROCESSED)
        self.assertEqual(event.retry_count, 1)
        self.assertIsNotNone(event.last_retried_at)
        self.assertTrue(event.error_message.startswith('Replay successful:'))
        self.assertEqual(PendingPurchase.objects.count(), 1)

    def test_safe_replay_refused_while_purchase_exists(self):
        purchase = TestDataFactory.create_purchase()
        event = self._event(
            WebhookEventLog.STATUS_PROCESSED,
            related_entity_id=str(purchase.id), related_entity_type='PendingPurchase'
        )
        response = self.client.post(f'/api/v1/admin/webhooks/{event.id}/replay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_force_replay_is_noop_for_existing_purchase(self):
        body = json.dumps(make_event())
        self.client.post(URL, data=body, content_type='application/json',
                         HTTP_X_WEBHOOK_SIGNATURE=compute_signature(body, SECRET))
        event = WebhookEventLog.objects.get()
        response = self.client.post(f'/api/v1/admin/webhooks/{event.id}/replay/', {'mode': 'force'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['noop'])
        event.refresh_from_db()
        self.assertTrue(event.error_message.startswith('Replay completed (noop):'))
        self.assertEqual(PendingPurchase.objects.count(), 1)

    def test_replay_that_fails_again(self):
        event = self._event(WebhookEventLog.STATUS_FAILED, event_type='quote_declined',
                            payload={'customerPhone': '0820000000'})
        response = self.client.post(f'/api/v1/admin/webhooks/{event.id}/replay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['success'])
        event.refresh_from_db()
        self.assertEqual(event.status, WebhookEventLog.STATUS_FAILED)
        self.assertTrue(event.error_message.startswith('Replay failed:'))
        self.assertEqual(event.retry_count, 1)

    def test_cannot_replay_pending_or_ignored(self):
        pending = self._event(WebhookEventLog.STATUS_PENDING)
        response = self.client.post(f'/api/v1/admin/webhooks/{pending.id}/replay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        ignored = self._event(WebhookEventLog.STATUS_FAILED, ignored_at=timezone.now())
        response = self.client.post(f'/api/v1/admin/webhooks/{ignored.id}/replay/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot replay ignored event')
