"""
Test suite for the inspections module
Tests: pricing, sessions, identify/verify/approve/reopen, price overrides
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from gearops.core.models import ActivityLog
from gearops.core.permissions import ADMIN, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.inspections.models import IncomingGearItem, InspectionSession, PricingSnapshot, VerifiedGearItem
from gearops.inspections.pricing import (
    calculate_accessory_penalty, compute_pricing, format_price, get_final_display_price, round_rand,
)


class PricingTests(TestCase):
    """Test the condition/penalty price calculation"""

    def test_condition_multiplier_applies_to_band_maximum(self):
        result = compute_pricing(8000, 10000, 11000, 14000, 'VERY_GOOD')
        self.assertEqual(result['computed_buy_price'], Decimal('9000'))
        self.assertEqual(result['computed_consign_price'], Decimal('12600'))
        self.assertEqual(result['final_buy_price'], Decimal('9000'))

    def test_penalty_is_subtracted(self):
        result = compute_pricing(8000, 10000, 11000, 14000, 'GOOD', Decimal('500'))
        self.assertEqual(result['final_buy_price'], Decimal('7700'))
        self.assertEqual(result['final_consign_price'], Decimal('10980'))
        self.assertEqual(result['total_penalty'], Decimal('500'))

    def test_price_never_negative(self):
        result = compute_pricing(100, 200, 100, 200, 'WORN', Decimal('1000'))
        self.assertEqual(result['final_buy_price'], Decimal('0'))
        self.assertEqual(result['final_consign_price'], Decimal('0'))

    def test_unknown_condition(self):
        with self.assertRaises(KeyError):
            compute_pricing(1, 2, 3, 4, 'BROKEN')

    def test_rounding_half_up(self):
        self.assertEqual(round_rand(Decimal('10.5')), Decimal('11'))
        self.assertEqual(round_rand(Decimal('10.49')), Decimal('10'))

    def test_accessory_penalty_is_case_insensitive(self):
        product = TestDataFactory.create_product(
            accessories=[('Battery', Decimal('400.00')), ('Charger', Decimal('250.00'))]
        )
        penalty = calculate_accessory_penalty(
            [{'accessory_name': 'battery', 'is_present': False},
             {'accessory_name': 'Charger', 'is_present': True},
             {'accessory_name': 'Lens cap', 'is_present': False}],
            product.accessories.all()
        )
        self.assertEqual(penalty, Decimal('400.00'))

    def test_zero_override_wins(self):
        prices = get_final_display_price(Decimal('9000'), Decimal('12000'), override_buy_price=Decimal('0'))
        self.assertEqual(prices['final_buy_price'], Decimal('0'))
        self.assertTrue(prices['is_buy_overridden'])
        self.assertEqual(prices['final_consign_price'], Decimal('12000'))
        self.assertFalse(prices['is_consign_overridden'])

    def test_format_price(self):
        self.assertEqual(format_price(Decimal('12345.60')), 'R12 346')
        self.assertEqual(format_price(None), '-')


class SessionAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))

    def test_create_session_with_items(self):
        response = self.client.post('/api/v1/inspections/sessions/', {
            'session_name': 'Walk-in Tuesday',
            'items': [
                {'client_name': 'Nikon D750', 'client_brand': 'Nikon'},
                {'client_name': 'Nikon 24-70', 'client_brand': 'Nikon'},
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['session_number'], 'INS-000001')
        self.assertEqual(response.data['item_count'], 2)
        self.assertTrue(ActivityLog.objects.filter(action='INSPECTION_STARTED').exists())

    def test_session_numbers_increase(self):
        TestDataFactory.create_session()
        second = TestDataFactory.create_session()
        self.assertEqual(second.session_number, 'INS-000002')

    def test_list_sessions(self):
        TestDataFactory.create_session()
        response = self.client.get('/api/v1/inspections/sessions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['item_count'], 1)

    def test_add_item_to_completed_session(self):
        session = TestDataFactory.create_session()
        session.status = InspectionSession.STATUS_COMPLETED
        session.save(update_fields=['status'])
        response = self.client.post(
            f'/api/v1/inspections/sessions/{session.id}/items/', {'client_name': 'Extra lens'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_item(self):
        session = TestDataFactory.create_session()
        response = self.client.post(
            f'/api/v1/inspections/sessions/{session.id}/items/', {'client_name': 'Extra lens'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], IncomingGearItem.STATUS_UNVERIFIED)


class ItemWorkflowTests(TestCase):
    """Test identify, verify, approve, reopen and reject"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.product = TestDataFactory.create_product(
            buy_max=Decimal('10000.00'), consign_max=Decimal('14000.00'),
            accessories=[('Battery', Decimal('500.00'))]
        )
        self.session = TestDataFactory.create_session()
        self.item = self.session.incoming_items.first()

    def _identify(self, product=None):
        return self.client.post(
            f'/api/v1/inspections/items/{self.item.id}/identify/',
            {'product_id': (product or self.product).id},
            format='json'
        )

    def _action(self, action, **data):
        data['action'] = action
        return self.client.patch(f'/api/v1/inspections/items/{self.item.id}/', data, format='json')

    def test_identify_creates_verified_item(self):
        response = self._identify()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['reidentified'])
        self.assertEqual(response.data['item']['status'], IncomingGearItem.STATUS_IN_PROGRESS)
        self.assertEqual(response.data['item']['client_name'], self.product.name)

    def test_identify_unknown_product(self):
        response = self.client.post(
            f'/api/v1/inspections/items/{self.item.id}/identify/', {'product_id': 99999}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_reidentify_discards_previous_pricing(self):
        self._identify()
        self._action('verify', condition='GOOD')
        self.assertEqual(PricingSnapshot.objects.count(), 1)
        other = TestDataFactory.create_product(brand='Sony', model='A7 III')
        response = self._identify(other)
        self.assertTrue(response.data['reidentified'])
        self.assertEqual(PricingSnapshot.objects.count(), 0)
        self.assertEqual(VerifiedGearItem.objects.get().product, other)

    def test_verify_prices_with_missing_accessory(self):
        self._identify()
        response = self._action('verify', condition='GOOD', serial_number='SN1', accessories=[
            {'accessory_name': 'Battery', 'is_present': False},
        ], answers=[{'question_text': 'Shutter count?', 'answer': '12000'}])
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        verified = response.data['item']['verified_item']
        self.assertEqual(response.data['item']['status'], IncomingGearItem.STATUS_VERIFIED)
        self.assertEqual(Decimal(verified['pricing_snapshot']['final_buy_price']), Decimal('7700'))
        self.assertEqual(Decimal(verified['pricing_snapshot']['final_consign_price']), Decimal('10980'))
        self.assertEqual(verified['final_prices']['final_buy_price_display'], 'R7 700')
        self.assertEqual(len(verified['answers']), 1)

    def test_verify_before_identify(self):
        response = self._action('verify', condition='GOOD')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_action(self):
        response = self._action('archive')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_approve_locks_item(self):
        self._identify()
        self._action('verify', condition='EXCELLENT')
        response = self._action('approve')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['item']['verified_item']['locked'])
        self.assertEqual(response.data['item']['status'], IncomingGearItem.STATUS_APPROVED)

    def test_locked_item_blocks_staff(self):
        self._identify()
        self._action('verify', condition='GOOD')
        self._action('approve')
        self.assertEqual(self._action('verify', condition='WORN').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self._identify().status_code, status.HTTP_403_FORBIDDEN)

    def test_only_admin_reopens(self):
        self._identify()
        self._action('verify', condition='GOOD')
        self._action('approve')
        self.assertEqual(self._action('reopen', reason='Wrong grade').status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        self.assertEqual(self._action('reopen', reason='  ').status_code, status.HTTP_400_BAD_REQUEST)
        response = self._action('reopen', reason='Wrong grade')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        verified = VerifiedGearItem.objects.get()
        self.assertFalse(verified.locked)
        self.assertEqual(verified.reopen_reason, 'Wrong grade')
        self.assertEqual(response.data['item']['status'], IncomingGearItem.STATUS_REOPENED)

    def test_reject_unidentified_item(self):
        response = self._action('reject')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.item.refresh_from_db()
        self.assertEqual(self.item.status, IncomingGearItem.STATUS_REJECTED)


class PriceOverrideTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.session = TestDataFactory.create_session()
        self.item = self.session.incoming_items.first()
        self.url = f'/api/v1/inspections/items/{self.item.id}/price-override/'

    def test_override_requires_verified_item(self):
        response = self.client.post(self.url, {'override_buy_price': '5000', 'override_reason': 'RARE_ITEM'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_override_and_revert(self):
        TestDataFactory.create_verified_item(self.item)
        response = self.client.post(self.url, {
            'override_buy_price': '5000.00', 'override_reason': 'CUSTOMER_NEGOTIATION'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        prices = response.data['item']['verified_item']['final_prices']
        self.assertEqual(prices['final_buy_price'], Decimal('5000.00'))
        self.assertTrue(prices['is_buy_overridden'])
        self.assertFalse(prices['is_consign_overridden'])

        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['item']['verified_item']['price_override'])
        self.assertTrue(ActivityLog.objects.filter(action='PRICE_OVERRIDE_REMOVED').exists())

    def test_other_reason_needs_notes(self):
        TestDataFactory.create_verified_item(self.item)
        response = self.client.post(self.url, {'override_buy_price': '100', 'override_reason': 'OTHER'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_needs_a_price(self):
        TestDataFactory.create_verified_item(self.item)
        response = self.client.post(self.url, {'override_reason': 'RARE_ITEM'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_locked_item_needs_admin(self):
        TestDataFactory.create_verified_item(self.item, approve=True)
        data = {'override_consign_price': '9000.00', 'override_reason': 'RARE_ITEM'}
        self.assertEqual(self.client.post(self.url, data, format='json').status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.admin)
        self.assertEqual(self.client.post(self.url, data, format='json').status_code, status.HTTP_200_OK)
