"""
Test suite for the consignment module
Tests: payout change requests, admin approval, consignor confirm/decline
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from gearops.consignment.models import ConsignmentChangeRequest
from gearops.consignment.services import confirm_change, decline_change, request_change
from gearops.core.models import ActivityLog
from gearops.core.permissions import ADMIN, MANAGER, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.core.utils import WorkflowError
from gearops.inventory.models import Equipment, PriceHistory


class ChangeRequestAPITests(TestCase):
    """Test the staff side of payout changes"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.admin = TestDataFactory.create_user(role=ADMIN, password='adminpass1')
        self.consignor = TestDataFactory.create_client(first_name='Lerato')
        self.equipment = TestDataFactory.create_equipment(
            acquisition_type=Equipment.ACQUISITION_CONSIGNMENT,
            client=self.consignor,
            purchase_price=Decimal('6000.00'),
            selling_price=Decimal('9000.00'),
        )
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def _payload(self, **overrides):
        payload = {
            'equipment_id': self.equipment.id,
            'proposed_payout': '5000.00',
            'proposed_selling_price': '7500.00',
            'reason': 'No interest after 60 days',
            'admin_id': self.admin.id,
            'admin_password': 'adminpass1',
        }
        payload.update(overrides)
        return payload

    def test_create_request(self):
        response = self.client.post('/api/v1/consignment/requests/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], ConsignmentChangeRequest.STATUS_PENDING_CLIENT)
        self.assertEqual(Decimal(response.data['current_payout']), Decimal('6000.00'))
        self.assertEqual(response.data['client_name'], self.consignor.full_name)
        self.assertEqual(len(response.data['token']), 64)
        self.assertEqual(response.data['approved_by_admin'], self.admin.id)
        self.assertTrue(ActivityLog.objects.filter(action='CONSIGNMENT_CHANGE_REQUESTED').exists())

    def test_staff_cannot_request(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=STAFF))
        response = self.client.post('/api/v1/consignment/requests/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_bad_admin_password(self):
        response = self.client.post(
            '/api/v1/consignment/requests/', self._payload(admin_password='nope'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(ConsignmentChangeRequest.objects.count(), 0)

    def test_purchased_item_rejected(self):
        bought = TestDataFactory.create_equipment()
        response = self.client.post(
            '/api/v1/consignment/requests/', self._payload(equipment_id=bought.id), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_equipment(self):
        response = self.client.post(
            '/api/v1/consignment/requests/', self._payload(equipment_id=99999), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters(self):
        other = TestDataFactory.create_equipment(acquisition_type=Equipment.ACQUISITION_CONSIGNMENT)
        request_change(self.equipment, Decimal('5000'), admin=self.admin, user=self.manager)
        declined = request_change(other, Decimal('100'), admin=self.admin, user=self.manager)
        decline_change(declined)
        response = self.client.get('/api/v1/consignment/requests/?status=PENDING_CLIENT')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'/api/v1/consignment/requests/?equipment={other.id}')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['status'], ConsignmentChangeRequest.STATUS_DECLINED)


class ConsignorReviewTests(TestCase):
    """Test the consignor's review link"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.equipment = TestDataFactory.create_equipment(
            acquisition_type=Equipment.ACQUISITION_CONSIGNMENT,
            purchase_price=Decimal('6000.00'),
            cost_price=Decimal('6000.00'),
            selling_price=Decimal('9000.00'),
        )
        self.change = request_change(
            self.equipment, Decimal('5000.00'), admin=self.admin, user=self.manager,
            proposed_selling_price=Decimal('7500.00')
        )
        self.client = AuthenticatedAPIClient()
        self.base = f'/api/v1/consignment/review/{self.change.token}/'

    def test_review_without_login(self):
        response = self.client.get(self.base)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['proposed_payout']), Decimal('5000.00'))
        self.assertNotIn('token', response.data)

    def test_unknown_token(self):
        response = self.client.get('/api/v1/consignment/review/not-a-token/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_confirm_updates_equipment(self):
        response = self.client.post(f'{self.base}confirm/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], ConsignmentChangeRequest.STATUS_CONFIRMED)
        self.equipment.refresh_from_db()
        self.assertEqual(self.equipment.purchase_price, Decimal('5000.00'))
        self.assertEqual(self.equipment.cost_price, Decimal('5000.00'))
        self.assertEqual(self.equipment.selling_price, Decimal('7500.00'))
        history = PriceHistory.objects.get(equipment=self.equipment)
        self.assertEqual(history.old_price, Decimal('9000.00'))
        self.assertEqual(history.changed_by, self.manager)

    def test_confirm_with_lower_payout(self):
        response = self.client.post(f'{self.base}confirm/', {'adjusted_payout': '4500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.equipment.refresh_from_db()
        self.assertEqual(self.equipment.purchase_price, Decimal('4500.00'))

    def test_payout_cannot_be_raised(self):
        response = self.client.post(f'{self.base}confirm/', {'adjusted_payout': '5500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.equipment.refresh_from_db()
        self.assertEqual(self.equipment.purchase_price, Decimal('6000.00'))

    def test_decline_leaves_equipment_alone(self):
        response = self.client.post(f'{self.base}decline/', {'reason': 'Rather collect it'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.change.refresh_from_db()
        self.assertEqual(self.change.decline_reason, 'Rather collect it')
        self.equipment.refresh_from_db()
        self.assertEqual(self.equipment.purchase_price, Decimal('6000.00'))

    def test_request_can_only_be_answered_once(self):
        self.client.post(f'{self.base}decline/', {}, format='json')
        response = self.client.post(f'{self.base}confirm/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['status'], ConsignmentChangeRequest.STATUS_DECLINED)


class ConsignmentServiceTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_user(role=ADMIN)

    def test_cost_price_used_when_no_purchase_price(self):
        equipment = TestDataFactory.create_equipment(
            acquisition_type=Equipment.ACQUISITION_CONSIGNMENT, cost_price=Decimal('3000.00')
        )
        change = request_change(equipment, Decimal('2500.00'), admin=self.admin, user=self.admin)
        self.assertEqual(change.current_payout, Decimal('3000.00'))

    def test_same_selling_price_adds_no_history(self):
        equipment = TestDataFactory.create_equipment(
            acquisition_type=Equipment.ACQUISITION_CONSIGNMENT, selling_price=Decimal('9000.00')
        )
        change = request_change(
            equipment, Decimal('2500.00'), admin=self.admin, user=self.admin,
            proposed_selling_price=Decimal('9000.00')
        )
        confirm_change(change)
        self.assertEqual(PriceHistory.objects.count(), 0)
        self.assertEqual(change.final_payout, Decimal('2500.00'))

    def test_confirm_twice(self):
        equipment = TestDataFactory.create_equipment(acquisition_type=Equipment.ACQUISITION_CONSIGNMENT)
        change = request_change(equipment, Decimal('1000.00'), admin=self.admin, user=self.admin)
        confirm_change(change)
        with self.assertRaises(WorkflowError):
            confirm_change(change)
