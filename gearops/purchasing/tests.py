"""
Test suite for the purchasing module
Tests: purchase intake, review, quotes, receiving, final quote, payment, public links
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from gearops.core.models import ActivityLog
from gearops.core.permissions import ADMIN, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.inspections.models import IncomingGearItem, InspectionSession
from gearops.inventory.models import Equipment
from gearops.logistics.models import DeliveryBooking
from gearops.parties.models import Client
from gearops.purchasing.models import PendingPurchase, PendingItem
from gearops.purchasing.services import validate_quote_token

CLIENT_DETAILS = {
    'fullName': 'Thandi',
    'surname': 'Nkosi',
    'email': 'thandi@example.com',
    'phone': '0821234567',
    'physicalAddress': '12 Long Street, Cape Town',
    'idNumber': '8001015009087',
    'bankName': 'FNB',
    'accountNumber': '62000000001',
    'branchCode': '250655',
    'accountHolderName': 'T Nkosi',
}


class PurchaseIntakeTests(TestCase):
    """Test creating and listing purchases"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.client = AuthenticatedAPIClient()
        self.payload = {
            'customer_name': 'Thandi Nkosi',
            'customer_phone': '0821234567',
            'customer_email': 'thandi@example.com',
            'total_quote_amount': '9500.00',
            'items': [
                {'name': 'Canon EOS R6', 'brand': 'Canon', 'bot_estimated_price': '8000.00'},
                {'name': 'Canon RF 24-105', 'brand': 'Canon', 'bot_estimated_price': '1500.00',
                 'proposed_price': '1400.00'},
            ],
        }

    def test_create_purchase(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/incoming-gear/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], PendingPurchase.STATUS_PENDING_REVIEW)
        purchase = PendingPurchase.objects.get()
        self.assertTrue(purchase.has_valid_quote_token)
        self.assertIsNotNone(purchase.bot_quote_accepted_at)
        prices = list(purchase.items.order_by('id').values_list('proposed_price', flat=True))
        self.assertEqual(prices, [Decimal('8000.00'), Decimal('1400.00')])

    def test_items_required(self):
        self.client.authenticate_user(self.staff)
        self.payload['items'] = []
        response = self.client.post('/api/v1/incoming-gear/', self.payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(DASHBOARD_API_KEY='bot-key')
    def test_create_with_api_key(self):
        response = self.client.post('/api/v1/incoming-gear/', self.payload, format='json', HTTP_X_API_KEY='bot-key')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/incoming-gear/', self.payload, format='json', HTTP_X_API_KEY='wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    @override_settings(DASHBOARD_API_KEY='bot-key')
    def test_api_key_cannot_list(self):
        response = self.client.get('/api/v1/incoming-gear/', HTTP_X_API_KEY='bot-key')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_filters_by_status(self):
        TestDataFactory.create_purchase()
        TestDataFactory.create_purchase(status=PendingPurchase.STATUS_APPROVED)
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/incoming-gear/?status=APPROVED')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/incoming-gear/?status=ALL')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['results'][0]['item_count'], 1)

    def test_review_actions(self):
        purchase = TestDataFactory.create_purchase()
        self.client.authenticate_user(self.staff)
        response = self.client.patch(f'/api/v1/incoming-gear/{purchase.id}/', {'action': 'approve'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], PendingPurchase.STATUS_APPROVED)
        self.assertEqual(response.data['approved_by'], self.staff.id)
        self.assertTrue(ActivityLog.objects.filter(action='PURCHASE_APPROVED').exists())

        response = self.client.patch(
            f'/api/v1/incoming-gear/{purchase.id}/', {'action': 'reject', 'rejected_reason': 'Fake'}, format='json'
        )
        self.assertEqual(response.data['status'], PendingPurchase.STATUS_REJECTED)
        self.assertEqual(response.data['rejected_reason'], 'Fake')

    def test_adjust_item_price(self):
        purchase = TestDataFactory.create_purchase()
        item = purchase.items.get()
        self.client.authenticate_user(self.staff)
        response = self.client.patch(
            f'/api/v1/incoming-gear/items/{item.id}/', {'final_price': '7500.00', 'status': 'PRICE_ADJUSTED'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertEqual(item.effective_price, Decimal('7500.00'))

    def test_walk_in(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/incoming-gear/walk-in/', {
            'first_name': 'Sipho',
            'surname': 'Dlamini',
            'phone': '0831112222',
            'items': [{'client_name': 'Sony A7 III', 'client_brand': 'Sony'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['client_created'])
        self.assertEqual(response.data['purchase']['status'], PendingPurchase.STATUS_INSPECTION_IN_PROGRESS)
        self.assertEqual(len(response.data['inspection_session']['incoming_items']), 1)
        self.assertEqual(Client.objects.get().full_name, 'Sipho Dlamini')

    def test_approve_straight_to_inventory(self):
        purchase = TestDataFactory.create_purchase(items=[
            {'name': 'Nikon Z6', 'brand': 'Nikon', 'proposed_price': Decimal('8000.00'),
             'status': PendingItem.STATUS_APPROVED},
            {'name': 'Broken flash', 'brand': 'Godox', 'status': PendingItem.STATUS_REJECTED},
        ])
        self.client.authenticate_user(self.staff)
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/approve/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        equipment = Equipment.objects.get()
        self.assertEqual(equipment.selling_price, Decimal('10400.00'))
        self.assertEqual(purchase.items.get(name='Nikon Z6').status, PendingItem.STATUS_ADDED_TO_INVENTORY)


class SendQuoteTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))

    def test_send_quote_issues_new_token(self):
        purchase = TestDataFactory.create_purchase(status=PendingPurchase.STATUS_APPROVED)
        old_token = purchase.quote_confirmation_token
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/send-quote/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotEqual(response.data['token'], old_token)
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, PendingPurchase.STATUS_QUOTE_SENT)
        self.assertIsNotNone(purchase.quote_confirmed_at)

    def test_send_quote_twice(self):
        purchase = TestDataFactory.create_purchase(status=PendingPurchase.STATUS_APPROVED)
        self.client.post(f'/api/v1/incoming-gear/{purchase.id}/send-quote/')
        PendingPurchase.objects.filter(pk=purchase.pk).update(status=PendingPurchase.STATUS_APPROVED)
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/send-quote/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('token', response.data)

    def test_send_quote_needs_email(self):
        purchase = TestDataFactory.create_purchase(customer_email=None)
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/send-quote/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post(
            f'/api/v1/incoming-gear/{purchase.id}/send-quote/', {'customer_email': 'late@example.com'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_rejected_purchase_cannot_be_quoted(self):
        purchase = TestDataFactory.create_purchase(status=PendingPurchase.STATUS_REJECTED)
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/send-quote/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ReceivingTests(TestCase):
    """Test mark received, the undo window and client notification"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))
        self.purchase = TestDataFactory.create_purchase(status=PendingPurchase.STATUS_AWAITING_DELIVERY)

    def _post(self, action):
        return self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/{action}/')

    def _age_receipt(self, minutes):
        PendingPurchase.objects.filter(pk=self.purchase.pk).update(
            gear_received_at=timezone.now() - timedelta(minutes=minutes)
        )

    def test_mark_received_opens_session(self):
        response = self._post('mark-received')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['can_undo'])
        session = InspectionSession.objects.get(pk=response.data['inspection_session_id'])
        self.assertEqual(session.incoming_items.count(), 1)
        self.assertEqual(response.data['purchase']['status'], PendingPurchase.STATUS_INSPECTION_IN_PROGRESS)

    def test_mark_received_twice(self):
        self._post('mark-received')
        self.assertEqual(self._post('mark-received').status_code, status.HTTP_400_BAD_REQUEST)

    def test_undo_within_window(self):
        self._post('mark-received')
        response = self._post('undo-received')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.purchase.refresh_from_db()
        self.assertIsNone(self.purchase.gear_received_at)
        self.assertEqual(self.purchase.status, PendingPurchase.STATUS_AWAITING_DELIVERY)
        self.assertEqual(InspectionSession.objects.count(), 0)

    def test_undo_after_window(self):
        self._post('mark-received')
        self._age_receipt(11)
        response = self._post('undo-received')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Undo window has expired')

    def test_notify_only_after_window(self):
        self._post('mark-received')
        self.assertEqual(self._post('notify-client').status_code, status.HTTP_400_BAD_REQUEST)
        self._age_receipt(11)
        response = self._post('notify-client')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['client_notified_at'])
        self.assertEqual(self._post('notify-client').status_code, status.HTTP_400_BAD_REQUEST)

    def test_undo_blocked_after_notification(self):
        self._post('mark-received')
        PendingPurchase.objects.filter(pk=self.purchase.pk).update(client_notified_at=timezone.now())
        response = self._post('undo-received')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_start_inspection_when_session_exists(self):
        self._post('mark-received')
        response = self._post('start-inspection')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Inspection session already exists')

    def test_start_inspection_before_receipt(self):
        PendingPurchase.objects.filter(pk=self.purchase.pk).update(
            status=PendingPurchase.STATUS_INSPECTION_IN_PROGRESS
        )
        response = self._post('start-inspection')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class FinalQuoteAndPaymentTests(TestCase):
    """Test the final quote, invoice and payment steps"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role=STAFF)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.purchase = TestDataFactory.create_purchase(status=PendingPurchase.STATUS_AWAITING_DELIVERY)
        self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/mark-received/')
        self.item = IncomingGearItem.objects.get(session__purchase=self.purchase)
        self.product = TestDataFactory.create_product(buy_max=Decimal('10000.00'))

    def test_final_quote_needs_every_item_decided(self):
        TestDataFactory.create_verified_item(self.item, product=self.product, selection=None)
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/send-final-quote/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['pending_items'], 1)

    def test_final_quote_needs_an_approved_item(self):
        self.item.status = IncomingGearItem.STATUS_REJECTED
        self.item.save(update_fields=['status'])
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/send-final-quote/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'At least one item must be approved')

    def test_final_quote_completes_session(self):
        TestDataFactory.create_verified_item(self.item, product=self.product, approve=True, selection=None)
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/send-final-quote/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['token'], self.purchase.quote_confirmation_token)
        session = InspectionSession.objects.get(purchase=self.purchase)
        self.assertEqual(session.status, InspectionSession.STATUS_COMPLETED)
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/send-final-quote/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invoice_uses_client_selection(self):
        TestDataFactory.create_verified_item(
            self.item, product=self.product, approve=True, selection=IncomingGearItem.SELECTION_CONSIGNMENT
        )
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/approve-for-payment/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['invoice_number'], 'INV-000001')
        self.assertEqual(response.data['invoice_total'], Decimal('11480'))

    def test_mark_paid_requires_awaiting_payment(self):
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_paid_creates_stock(self):
        TestDataFactory.create_verified_item(
            self.item, product=self.product, approve=True, requires_repair=True, repair_notes='AF motor'
        )
        self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/approve-for-payment/')
        response = self.client.post(f'/api/v1/incoming-gear/{self.purchase.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['equipment_ids']), 1)
        self.assertEqual(response.data['items_requiring_repair'], 1)
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, PendingPurchase.STATUS_PAYMENT_RECEIVED)
        equipment = Equipment.objects.get()
        self.assertEqual(equipment.purchase_price, Decimal('8200'))
        self.assertEqual(equipment.status, Equipment.STATUS_IN_REPAIR)

    def test_item_reopened_after_final_quote_is_not_stocked(self):
        admin = TestDataFactory.create_user(role=ADMIN)
        purchase = TestDataFactory.create_purchase(
            status=PendingPurchase.STATUS_AWAITING_DELIVERY,
            items=[
                {'name': 'Canon EOS R6', 'brand': 'Canon', 'proposed_price': Decimal('8000.00')},
                {'name': 'Canon RF 50mm', 'brand': 'Canon', 'proposed_price': Decimal('2000.00')},
            ]
        )
        self.client.post(f'/api/v1/incoming-gear/{purchase.id}/mark-received/')
        first, second = IncomingGearItem.objects.filter(session__purchase=purchase).order_by('id')
        TestDataFactory.create_verified_item(first, product=self.product, approve=True)
        TestDataFactory.create_verified_item(second, product=self.product, approve=True)
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/send-final-quote/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.authenticate_user(admin)
        response = self.client.patch(
            f'/api/v1/inspections/items/{second.id}/', {'action': 'reopen', 'reason': 'Sensor dust'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/approve-for-payment/')
        self.assertEqual(response.data['invoice_total'], Decimal('8200'))
        response = self.client.post(f'/api/v1/incoming-gear/{purchase.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['equipment_ids']), 1)
        equipment = Equipment.objects.get()
        self.assertEqual(equipment.source_verified_item.incoming_item, first)


class PublicQuoteTests(TestCase):
    """Test the client-facing quote link"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.purchase = TestDataFactory.create_purchase(status=PendingPurchase.STATUS_QUOTE_SENT)
        self.token = self.purchase.quote_confirmation_token

    def test_view_quote(self):
        response = self.client.get(f'/api/v1/quote/{self.token}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quote']['items'][0]['price'], Decimal('8000.00'))

    def test_unknown_and_expired_tokens(self):
        self.assertEqual(self.client.get('/api/v1/quote/nope/').status_code, status.HTTP_404_NOT_FOUND)
        PendingPurchase.objects.filter(pk=self.purchase.pk).update(
            quote_token_expires_at=timezone.now() - timedelta(minutes=1)
        )
        self.assertIsNone(validate_quote_token(self.token))
        self.assertEqual(self.client.get(f'/api/v1/quote/{self.token}/').status_code, status.HTTP_404_NOT_FOUND)

    def test_accept_then_view(self):
        response = self.client.post(f'/api/v1/quote/{self.token}/accept/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], PendingPurchase.STATUS_CLIENT_ACCEPTED)
        response = self.client.get(f'/api/v1/quote/{self.token}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['accepted'])
        response = self.client.post(f'/api/v1/quote/{self.token}/accept/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_decline_kills_link(self):
        response = self.client.post(f'/api/v1/quote/{self.token}/decline/', {'reason': 'Too low'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.client_decline_reason, 'Too low')
        self.assertIsNone(self.purchase.quote_confirmation_token)
        self.assertEqual(self.client.get(f'/api/v1/quote/{self.token}/').status_code, status.HTTP_404_NOT_FOUND)

    def test_self_delivery_needs_date(self):
        response = self.client.post(
            f'/api/v1/quote/{self.token}/delivery/', {'deliveryMethod': 'SELF_DELIVER'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_courier_booking_and_tracking(self):
        response = self.client.post(
            f'/api/v1/quote/{self.token}/delivery/', {'deliveryMethod': 'COURIER', 'courierName': 'Aramex'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['booking_status'], DeliveryBooking.STATUS_CONFIRMED)
        response = self.client.post(
            f'/api/v1/quote/{self.token}/tracking/',
            {'courierCompany': 'Aramex', 'trackingNumber': 'AX123'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(DeliveryBooking.objects.get().tracking_number, 'AX123')

    def test_details_before_accepting(self):
        response = self.client.post(f'/api/v1/quote/{self.token}/submit-details/', CLIENT_DETAILS, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Please accept the quote first')

    def test_details_with_invalid_id(self):
        self.client.post(f'/api/v1/quote/{self.token}/accept/')
        payload = dict(CLIENT_DETAILS, idNumber='8001015009088')
        response = self.client.post(f'/api/v1/quote/{self.token}/submit-details/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_inspection_results_without_session(self):
        response = self.client.get(f'/api/v1/quote/{self.token}/inspection/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class FullWorkflowTests(TestCase):
    """Walk one purchase from the bot's quote to stock"""

    def test_quote_to_stock(self):
        staff = TestDataFactory.create_user(role=STAFF)
        api = AuthenticatedAPIClient()
        api.authenticate_user(staff)
        public = AuthenticatedAPIClient()
        purchase = TestDataFactory.create_purchase()

        api.patch(f'/api/v1/incoming-gear/{purchase.id}/', {'action': 'approve'}, format='json')
        token = api.post(f'/api/v1/incoming-gear/{purchase.id}/send-quote/').data['token']
        self.assertEqual(public.post(f'/api/v1/quote/{token}/accept/').status_code, status.HTTP_200_OK)
        public.post(f'/api/v1/quote/{token}/delivery/', {'deliveryMethod': 'COURIER'}, format='json')

        response = api.post(f'/api/v1/incoming-gear/{purchase.id}/mark-received/')
        item = InspectionSession.objects.get(pk=response.data['inspection_session_id']).incoming_items.get()
        product = TestDataFactory.create_product(buy_max=Decimal('10000.00'))
        TestDataFactory.create_verified_item(item, product=product, approve=True, selection=None)

        response = api.post(f'/api/v1/incoming-gear/{purchase.id}/send-final-quote/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = public.get(f'/api/v1/quote/{token}/inspection/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['buy_price_display'], 'R8 200')

        response = public.post(f'/api/v1/quote/{token}/select-products/', {
            'selections': [{'itemId': item.id, 'selection': 'BUY'}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = public.post(f'/api/v1/quote/{token}/submit-details/', CLIENT_DETAILS, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        purchase.refresh_from_db()
        self.assertEqual(purchase.status, PendingPurchase.STATUS_AWAITING_PAYMENT)
        self.assertEqual(purchase.client.bank_name, 'FNB')
        self.assertEqual(purchase.client_details.date_of_birth.year, 1980)
        self.assertEqual(public.get(f'/api/v1/quote/{token}/').status_code, status.HTTP_404_NOT_FOUND)

        response = api.post(f'/api/v1/incoming-gear/{purchase.id}/approve-for-payment/')
        self.assertEqual(response.data['invoice_total'], Decimal('8200'))
        invoice_token = response.data['invoice_accept_token']

        response = public.get(f'/api/v1/invoice/{invoice_token}/')
        self.assertEqual(response.data['invoice_total_display'], 'R8 200')
        response = public.post(f'/api/v1/invoice/{invoice_token}/', {
            'bankName': 'Capitec', 'accountNumber': '1234567890'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = api.post(f'/api/v1/incoming-gear/{purchase.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        equipment = Equipment.objects.get()
        self.assertEqual(equipment.client, purchase.client)
        self.assertEqual(equipment.client.bank_name, 'Capitec')
        self.assertEqual(equipment.selling_price, Decimal('10660'))
