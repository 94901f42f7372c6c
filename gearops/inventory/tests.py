"""
Test suite for the inventory module
Tests: SKUs, equipment CRUD, price history, intake, repairs, conversion, bundles
"""
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from rest_framework import status
from gearops.core.models import ActivityLog
from gearops.core.permissions import ADMIN, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.inspections.models import IncomingGearItem
from gearops.inventory.conversion import (
    create_equipment_from_inspection, create_equipment_from_verified_item,
)
from gearops.inventory.models import Bundle, BundleItem, Equipment, PriceHistory, RepairLog
from gearops.inventory.recommendation import get_price_recommendation
from gearops.inventory.sku import generate_sku, get_brand_prefix, validate_sku


class SKUTests(TestCase):

    def test_brand_prefixes(self):
        self.assertEqual(get_brand_prefix('Canon'), 'CA')
        self.assertEqual(get_brand_prefix('FUJIFILM'), 'FU')
        self.assertEqual(get_brand_prefix('Sony Corporation'), 'SO')
        self.assertEqual(get_brand_prefix('Unknown'), 'GE')
        self.assertEqual(get_brand_prefix(None), 'GE')

    def test_suffix_from_serial(self):
        self.assertEqual(generate_sku('Nikon', 'abc12345'), 'NI-2345')

    def test_random_suffix_without_serial(self):
        sku = generate_sku('Leica')
        self.assertRegex(sku, r'^LE-\d{4}$')

    def test_collision_gets_new_suffix(self):
        TestDataFactory.create_equipment(sku='CA-2345')
        sku = generate_sku('Canon', 'XX2345')
        self.assertNotEqual(sku, 'CA-2345')
        self.assertTrue(sku.startswith('CA-'))

    def test_validate_sku(self):
        equipment = TestDataFactory.create_equipment(sku='SO-1111')
        self.assertFalse(validate_sku('SO-1111'))
        self.assertTrue(validate_sku('SO-1111', exclude_id=equipment.id))
        self.assertTrue(validate_sku('SO-2222'))


class EquipmentAPITests(TestCase):
    """Test equipment list, create, update and delete"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.admin = TestDataFactory.create_user(role=ADMIN, password='adminpass1')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/equipment/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_generates_sku(self):
        response = self.client.post('/api/v1/equipment/', {
            'name': 'Nikon Z6',
            'brand': 'Nikon',
            'serial_number': 'SN998877',
            'selling_price': '15000.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sku'], 'NI-8877')
        self.assertTrue(ActivityLog.objects.filter(action='CREATED_EQUIPMENT').exists())

    def test_duplicate_sku_rejected(self):
        TestDataFactory.create_equipment(sku='CA-0001')
        response = self.client.post('/api/v1/equipment/', {
            'sku': 'ca-0001', 'name': 'Canon R', 'brand': 'Canon'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_negative_price_rejected(self):
        response = self.client.post('/api/v1/equipment/', {
            'name': 'Canon R', 'brand': 'Canon', 'selling_price': '-10.00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_equipment(name='Sony A7 IV', brand='Sony')
        TestDataFactory.create_equipment(status=Equipment.STATUS_SOLD)
        response = self.client.get('/api/v1/equipment/?status=READY_FOR_SALE')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        response = self.client.get('/api/v1/equipment/?q=sony a7')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['brand'], 'Sony')

    def test_invalid_filter_value(self):
        response = self.client.get('/api/v1/equipment/?status=LOST')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_marking_sold_sets_sold_at(self):
        equipment = TestDataFactory.create_equipment()
        response = self.client.patch(f'/api/v1/equipment/{equipment.id}/', {'status': 'SOLD'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['sold_at'])

    def test_only_admin_deletes(self):
        equipment = TestDataFactory.create_equipment()
        response = self.client.delete(f'/api/v1/equipment/{equipment.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/equipment/{equipment.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Equipment.objects.filter(pk=equipment.id).exists())

    def test_validate_sku_endpoint(self):
        equipment = TestDataFactory.create_equipment(sku='PA-4321')
        response = self.client.get('/api/v1/equipment/validate-sku/?sku=pa-4321')
        self.assertFalse(response.data['available'])
        response = self.client.get(f'/api/v1/equipment/validate-sku/?sku=PA-4321&exclude_id={equipment.id}')
        self.assertTrue(response.data['available'])
        response = self.client.get('/api/v1/equipment/validate-sku/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PriceUpdateTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(role=STAFF)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.equipment = TestDataFactory.create_equipment(selling_price=Decimal('9000.00'))

    def test_price_change_records_history(self):
        response = self.client.put(
            f'/api/v1/equipment/{self.equipment.id}/price/',
            {'price': '8500.00', 'reason': 'Slow mover'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        history = PriceHistory.objects.get(equipment=self.equipment)
        self.assertEqual(history.old_price, Decimal('9000.00'))
        self.assertEqual(history.new_price, Decimal('8500.00'))
        self.assertEqual(history.changed_by, self.user)
        self.assertEqual(len(response.data['price_history']), 1)

    def test_default_reason(self):
        self.client.put(f'/api/v1/equipment/{self.equipment.id}/price/', {'price': '100.00'}, format='json')
        self.assertEqual(PriceHistory.objects.get().reason, 'Manual price update')

    def test_negative_price(self):
        response = self.client.put(
            f'/api/v1/equipment/{self.equipment.id}/price/', {'price': '-1.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PriceHistory.objects.count(), 0)


class CompleteIntakeTests(TestCase):
    """Test putting converted stock on the shelf"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.admin = TestDataFactory.create_user(role=ADMIN, password='adminpass1')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.equipment = TestDataFactory.create_equipment(
            status=Equipment.STATUS_PENDING_INSPECTION, selling_price=None
        )

    def _complete(self, **overrides):
        payload = {
            'admin_id': self.admin.id,
            'admin_password': 'adminpass1',
            'sku': 'ca-7777',
            'shelf_location': 'A3',
            'selling_price': '12000.00',
        }
        payload.update(overrides)
        return self.client.post(
            f'/api/v1/equipment/{self.equipment.id}/complete-intake/', payload, format='json'
        )

    def test_complete_intake(self):
        response = self._complete()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.equipment.refresh_from_db()
        self.assertEqual(self.equipment.sku, 'CA-7777')
        self.assertEqual(self.equipment.intake_status, Equipment.INTAKE_COMPLETE)
        self.assertEqual(self.equipment.status, Equipment.STATUS_READY_FOR_SALE)
        log = ActivityLog.objects.get(action='INTAKE_COMPLETED')
        self.assertEqual(log.details['approved_by_admin'], self.admin.id)

    def test_wrong_admin_password(self):
        response = self._complete(admin_password='wrong')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_non_admin_credentials(self):
        response = self._complete(admin_id=self.staff.id, admin_password='testpass123')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_shelf_location(self):
        response = self._complete(shelf_location='')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Shelf location is required')

    def test_zero_selling_price(self):
        response = self._complete(selling_price='0.00')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sku_taken(self):
        TestDataFactory.create_equipment(sku='CA-7777')
        response = self._complete()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'SKU already exists')


class RepairTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))
        self.equipment = TestDataFactory.create_equipment()

    def _log_repair(self):
        return self.client.post('/api/v1/repairs/', {
            'equipment': self.equipment.id,
            'technician_name': 'Sipho',
            'issue_description': 'Sticky shutter',
            'estimated_cost': '850.00',
        }, format='json')

    def test_logging_repair_moves_equipment_to_repair(self):
        response = self._log_repair()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.equipment.refresh_from_db()
        self.assertTrue(self.equipment.in_repair)
        self.assertEqual(self.equipment.status, Equipment.STATUS_IN_REPAIR)

    def test_completing_repair(self):
        repair_id = self._log_repair().data['id']
        response = self.client.patch(f'/api/v1/repairs/{repair_id}/', {'status': 'COMPLETED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['completed_at'])
        self.equipment.refresh_from_db()
        self.assertFalse(self.equipment.in_repair)
        self.assertEqual(self.equipment.status, Equipment.STATUS_REPAIR_COMPLETED)

    def test_negative_cost(self):
        response = self.client.post('/api/v1/repairs/', {
            'equipment': self.equipment.id,
            'technician_name': 'Sipho',
            'issue_description': 'Dent',
            'actual_cost': '-5.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_includes_flagged_inspection_items(self):
        purchase = TestDataFactory.create_purchase(status='PAYMENT_RECEIVED')
        session = TestDataFactory.create_session(purchase=purchase)
        TestDataFactory.create_verified_item(
            session.incoming_items.first(), requires_repair=True, repair_notes='Cracked LCD'
        )
        self._log_repair()
        response = self.client.get('/api/v1/repairs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['repairs']), 1)
        self.assertEqual(len(response.data['items_requiring_repair']), 1)
        self.assertEqual(response.data['items_requiring_repair'][0]['repair_notes'], 'Cracked LCD')


class ConversionTests(TestCase):
    """Test turning verified inspection items into stock"""

    def setUp(self):
        self.user = TestDataFactory.create_user(role=STAFF)
        self.seller = TestDataFactory.create_client()
        self.purchase = TestDataFactory.create_purchase(client=self.seller)
        self.session = TestDataFactory.create_session(
            purchase=self.purchase,
            items=[
                {'client_name': 'Canon EOS R6', 'client_brand': 'Canon'},
                {'client_name': 'Canon RF 50mm', 'client_brand': 'Canon'},
            ]
        )
        self.product = TestDataFactory.create_product(buy_max=Decimal('10000.00'), consign_max=Decimal('14000.00'))
        self.first, self.second = self.session.incoming_items.order_by('id')

    def test_buy_item_conversion(self):
        verified = TestDataFactory.create_verified_item(self.first, product=self.product, serial_number='R6-00123')
        equipment = create_equipment_from_verified_item(verified, self.purchase, self.user)
        self.assertEqual(equipment.sku, 'CA-0123')
        self.assertEqual(equipment.acquisition_type, Equipment.ACQUISITION_PURCHASED)
        self.assertEqual(equipment.purchase_price, Decimal('8200'))
        self.assertEqual(equipment.selling_price, Decimal('10660'))
        self.assertEqual(equipment.client, self.seller)
        self.assertEqual(equipment.status, Equipment.STATUS_PENDING_INSPECTION)
        self.assertEqual(equipment.intake_status, Equipment.INTAKE_PENDING)
        self.assertIsNone(equipment.consignment_rate)

    def test_consignment_conversion(self):
        verified = TestDataFactory.create_verified_item(
            self.first, product=self.product, condition='LIKE_NEW',
            selection=IncomingGearItem.SELECTION_CONSIGNMENT
        )
        equipment = create_equipment_from_verified_item(verified, self.purchase, self.user)
        self.assertEqual(equipment.acquisition_type, Equipment.ACQUISITION_CONSIGNMENT)
        self.assertEqual(equipment.purchase_price, Decimal('14000'))
        self.assertEqual(equipment.selling_price, Decimal('21000'))
        self.assertEqual(equipment.consignment_rate, Decimal('70'))
        self.assertEqual(equipment.condition, 'MINT')

    def test_conversion_is_idempotent(self):
        verified = TestDataFactory.create_verified_item(self.first, product=self.product)
        first = create_equipment_from_verified_item(verified, self.purchase)
        second = create_equipment_from_verified_item(verified, self.purchase)
        self.assertEqual(first.id, second.id)
        self.assertEqual(Equipment.objects.count(), 1)

    def test_not_interested_is_skipped(self):
        verified = TestDataFactory.create_verified_item(self.first, product=self.product)
        self.first.not_interested = True
        self.first.save(update_fields=['not_interested'])
        self.assertIsNone(create_equipment_from_verified_item(verified, self.purchase))

    def test_repair_item_gets_repair_log(self):
        verified = TestDataFactory.create_verified_item(
            self.first, product=self.product, requires_repair=True, repair_notes='Mount wobble'
        )
        equipment = create_equipment_from_verified_item(verified, self.purchase)
        self.assertEqual(equipment.status, Equipment.STATUS_IN_REPAIR)
        self.assertTrue(equipment.in_repair)
        self.assertEqual(RepairLog.objects.get(equipment=equipment).issue_description, 'Mount wobble')

    def test_convert_purchase_skips_unverified_and_rejected(self):
        TestDataFactory.create_verified_item(self.first, product=self.product, approve=True)
        created, errors = create_equipment_from_inspection(self.purchase, self.user)
        self.assertEqual(len(created), 1)
        self.assertEqual(errors, [])

        self.second.status = IncomingGearItem.STATUS_REJECTED
        self.second.save(update_fields=['status'])
        created, errors = create_equipment_from_inspection(self.purchase, self.user)
        self.assertEqual(len(created), 1)
        self.assertEqual(Equipment.objects.count(), 1)

    def test_convert_purchase_only_takes_approved_items(self):
        TestDataFactory.create_verified_item(self.first, product=self.product, approve=True)
        TestDataFactory.create_verified_item(self.second, product=self.product)
        created, _ = create_equipment_from_inspection(self.purchase, self.user)
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].source_verified_item.incoming_item, self.first)

    def test_convert_purchase_skips_reopened_and_not_interested(self):
        TestDataFactory.create_verified_item(self.first, product=self.product, approve=True)
        TestDataFactory.create_verified_item(self.second, product=self.product, approve=True)
        self.first.status = IncomingGearItem.STATUS_REOPENED
        self.first.save(update_fields=['status'])
        self.second.not_interested = True
        self.second.save(update_fields=['not_interested'])
        created, errors = create_equipment_from_inspection(self.purchase, self.user)
        self.assertEqual(created, [])
        self.assertEqual(errors, [])
        self.assertEqual(Equipment.objects.count(), 0)

    def test_one_failure_does_not_stop_the_rest(self):
        TestDataFactory.create_verified_item(self.first, product=self.product, approve=True)
        TestDataFactory.create_verified_item(self.second, product=self.product, approve=True)
        real_convert = create_equipment_from_verified_item
        calls = []

        def flaky(verified, purchase=None, user=None):
            calls.append(verified.id)
            if len(calls) == 1:
                raise ValueError('boom')
            return real_convert(verified, purchase, user)

        with patch('gearops.inventory.conversion.create_equipment_from_verified_item', side_effect=flaky):
            created, errors = create_equipment_from_inspection(self.purchase)
        self.assertEqual(len(created), 1)
        self.assertEqual(errors[0]['error'], 'boom')

    def test_purchase_without_session(self):
        purchase = TestDataFactory.create_purchase()
        created, errors = create_equipment_from_inspection(purchase)
        self.assertEqual(created, [])
        self.assertEqual(len(errors), 1)


class RecommendationTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))

    def test_no_sales(self):
        result = get_price_recommendation(brand='Canon', model='R6')
        self.assertEqual(result['sample_size'], 0)
        self.assertEqual(result['confidence'], 'low')

    def test_brand_model_match(self):
        for price, condition in (('10000.00', 'GOOD'), ('12000.00', 'GOOD'), ('15000.00', 'MINT')):
            TestDataFactory.create_equipment(
                brand='Canon', model='EOS R6', status=Equipment.STATUS_SOLD,
                selling_price=Decimal(price), condition=condition
            )
        TestDataFactory.create_equipment(brand='Canon', model='EOS R6', selling_price=Decimal('99999.00'))

        result = get_price_recommendation(brand='canon', model='r6', condition='GOOD')
        self.assertEqual(result['sample_size'], 3)
        self.assertEqual(result['confidence'], 'medium')
        self.assertEqual(result['recommended_price'], 11000)
        self.assertEqual(result['average_price'], 12333)
        self.assertEqual(result['median_price'], 12000)
        self.assertEqual(result['min_price'], 10000)
        self.assertEqual(result['max_price'], 15000)
        self.assertEqual(result['prices_by_condition']['MINT'], 15000)

    def test_endpoint_requires_product_or_brand(self):
        response = self.client.get('/api/v1/equipment/recommend-price/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/equipment/recommend-price/?brand=Canon')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class BundleTests(TestCase):
    """Test grouping shelf items into bundles"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.admin = TestDataFactory.create_user(role=ADMIN, password='adminpass1')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)
        self.body = TestDataFactory.create_equipment(
            intake_status=Equipment.INTAKE_COMPLETE, cost_price=Decimal('8200.00')
        )
        self.lens = TestDataFactory.create_equipment(
            intake_status=Equipment.INTAKE_COMPLETE, cost_price=Decimal('1800.00')
        )
        self.grip = TestDataFactory.create_equipment(intake_status=Equipment.INTAKE_COMPLETE)

    def _create(self, equipment, **overrides):
        payload = {
            'title': 'R6 starter kit',
            'description': 'Body and kit lens',
            'selling_price': '13500.00',
            'equipment_ids': [item.id for item in equipment],
            'admin_id': self.admin.id,
            'admin_password': 'adminpass1',
        }
        payload.update(overrides)
        return self.client.post('/api/v1/bundles/', payload, format='json')

    def test_create_bundle(self):
        response = self._create([self.body, self.lens, self.grip])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        bundle = Bundle.objects.get()
        self.assertEqual(bundle.status, Bundle.STATUS_ACTIVE)
        self.assertEqual(bundle.cost_price, Decimal('10000.00'))
        self.assertEqual(bundle.selling_price, Decimal('13500.00'))
        self.assertEqual(bundle.created_by, self.staff)
        self.assertEqual(bundle.admin_approved_by, self.admin)
        self.assertEqual(len(response.data['bundle']['items']), 3)
        log = ActivityLog.objects.get(action='CREATED_BUNDLE')
        self.assertEqual(log.details['item_count'], 3)
        self.assertEqual(log.details['approved_by'], self.admin.username)

    def test_needs_two_items(self):
        response = self._create([self.body])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self._create([self.body, self.body])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Bundle.objects.exists())

    def test_needs_admin_approval(self):
        response = self._create([self.body, self.lens], admin_password='wrong')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self._create([self.body, self.lens], admin_id=self.staff.id, admin_password='testpass123')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self._create([self.body, self.lens], admin_password='')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Bundle.objects.exists())

    def test_only_shelf_items_outside_a_bundle(self):
        pending = TestDataFactory.create_equipment()
        response = self._create([self.body, pending])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['unavailable_ids'], [pending.id])

        self.assertEqual(self._create([self.body, self.lens]).status_code, status.HTTP_201_CREATED)
        response = self._create([self.lens, self.grip])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['unavailable_ids'], [self.lens.id])
        self.assertEqual(Bundle.objects.count(), 1)

    def test_list_shows_active_bundles(self):
        self._create([self.body, self.lens])
        response = self.client.get('/api/v1/bundles/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        Bundle.objects.update(status=Bundle.STATUS_DISSOLVED)
        self.assertEqual(self.client.get('/api/v1/bundles/').data['count'], 0)
        self.assertEqual(self.client.get('/api/v1/bundles/?status=ALL').data['count'], 1)
        response = self.client.get('/api/v1/bundles/?status=SOLD')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_edit_price(self):
        bundle_id = self._create([self.body, self.lens]).data['bundle']['id']
        response = self.client.patch(f'/api/v1/bundles/{bundle_id}/', {'selling_price': '12900.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Bundle.objects.get().selling_price, Decimal('12900.00'))
        response = self.client.patch(f'/api/v1/bundles/{bundle_id}/', {'selling_price': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_dissolve_frees_items(self):
        bundle_id = self._create([self.body, self.lens]).data['bundle']['id']
        response = self.client.delete(f'/api/v1/bundles/{bundle_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Bundle.objects.get().status, Bundle.STATUS_DISSOLVED)
        self.assertFalse(BundleItem.objects.exists())
        self.assertTrue(ActivityLog.objects.filter(action='DISSOLVED_BUNDLE').exists())
        self.assertEqual(self._create([self.body, self.lens]).status_code, status.HTTP_201_CREATED)

        response = self.client.delete(f'/api/v1/bundles/{bundle_id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_remove_item_recalculates_cost(self):
        bundle_id = self._create([self.body, self.lens, self.grip]).data['bundle']['id']
        response = self.client.post(
            f'/api/v1/bundles/{bundle_id}/remove-item/', {'equipment_id': self.lens.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        bundle = Bundle.objects.get()
        self.assertEqual(bundle.status, Bundle.STATUS_ACTIVE)
        self.assertEqual(bundle.cost_price, Decimal('8200.00'))
        self.assertEqual(bundle.items.count(), 2)

    def test_removing_down_to_one_item_dissolves(self):
        bundle_id = self._create([self.body, self.lens]).data['bundle']['id']
        response = self.client.post(
            f'/api/v1/bundles/{bundle_id}/remove-item/', {'equipment_id': self.body.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['bundle']['status'], Bundle.STATUS_DISSOLVED)
        self.assertFalse(BundleItem.objects.exists())

    def test_remove_item_not_in_bundle(self):
        bundle_id = self._create([self.body, self.lens]).data['bundle']['id']
        response = self.client.post(
            f'/api/v1/bundles/{bundle_id}/remove-item/', {'equipment_id': self.grip.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(BundleItem.objects.count(), 2)

    def test_requires_authentication(self):
        self.client.logout()
        self.assertEqual(self.client.get('/api/v1/bundles/').status_code, status.HTTP_401_UNAUTHORIZED)
