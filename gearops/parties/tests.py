"""
Test suite for the parties module
Tests: vendors, clients, de-duplication and merging
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from gearops.core.models import ActivityLog
from gearops.core.permissions import ADMIN, MANAGER, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.inventory.models import Equipment
from gearops.parties.models import Client
from gearops.parties.services import ClientMergeError, find_or_create_client, merge_clients


class VendorAPITests(TestCase):
    """Test vendor endpoints and role checks"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()

    def test_list_vendors_with_equipment_count(self):
        vendor = TestDataFactory.create_vendor(name='Orms')
        TestDataFactory.create_equipment(vendor=vendor)
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/vendors/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Orms')
        self.assertEqual(response.data[0]['equipment_count'], 1)

    def test_staff_cannot_create_vendor(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/vendors/', {'name': 'Cameraland'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_creates_vendor(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/vendors/', {'name': 'Cameraland'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_active'])

    def test_vendor_search(self):
        TestDataFactory.create_vendor(name='Orms Direct')
        TestDataFactory.create_vendor(name='Kameraz')
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/vendors/?q=orms')
        self.assertEqual(len(response.data), 1)

    def test_only_admin_deletes_vendor(self):
        vendor = TestDataFactory.create_vendor()
        self.client.authenticate_user(self.manager)
        self.assertEqual(self.client.delete(f'/api/v1/vendors/{vendor.id}/').status_code, status.HTTP_403_FORBIDDEN)
        self.client.authenticate_user(self.admin)
        self.assertEqual(self.client.delete(f'/api/v1/vendors/{vendor.id}/').status_code, status.HTTP_204_NO_CONTENT)

    def test_vendor_with_equipment_cannot_be_deleted(self):
        vendor = TestDataFactory.create_vendor()
        TestDataFactory.create_equipment(vendor=vendor)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/vendors/{vendor.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ClientAPITests(TestCase):
    """Test client list, detail and merge endpoints"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_list_clients_with_totals(self):
        seller = TestDataFactory.create_client(first_name='Thandi')
        TestDataFactory.create_equipment(client=seller, purchase_price=Decimal('5000.00'))
        TestDataFactory.create_equipment(
            client=seller, acquisition_type=Equipment.ACQUISITION_CONSIGNMENT, purchase_price=Decimal('3000.00')
        )
        response = self.client.get('/api/v1/clients/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        row = response.data['results'][0]
        self.assertEqual(row['item_count'], 2)
        self.assertEqual(row['buy_items_count'], 1)
        self.assertEqual(row['consignment_items_count'], 1)
        self.assertEqual(Decimal(row['total_paid']), Decimal('5000.00'))

    def test_merged_clients_are_hidden(self):
        target = TestDataFactory.create_client()
        TestDataFactory.create_client(merged_into=target)
        response = self.client.get('/api/v1/clients/')
        self.assertEqual(response.data['count'], 1)

    def test_client_detail_includes_equipment(self):
        seller = TestDataFactory.create_client()
        TestDataFactory.create_equipment(client=seller)
        response = self.client.get(f'/api/v1/clients/{seller.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['equipment']), 1)

    def test_missing_client(self):
        response = self.client.get('/api/v1/clients/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_merge_requires_admin(self):
        a, b = TestDataFactory.create_client(), TestDataFactory.create_client()
        response = self.client.post('/api/v1/clients/merge/', {'source_id': a.id, 'target_id': b.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_merges_clients(self):
        source = TestDataFactory.create_client(email='dup@example.com', bank_name='FNB')
        target = TestDataFactory.create_client()
        TestDataFactory.create_equipment(client=source)
        self.client.authenticate_user(self.admin)
        response = self.client.post(
            '/api/v1/clients/merge/', {'source_id': source.id, 'target_id': target.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['moved_equipment'], 1)
        target.refresh_from_db()
        source.refresh_from_db()
        self.assertEqual(target.bank_name, 'FNB')
        self.assertEqual(source.merged_into, target)
        self.assertTrue(ActivityLog.objects.filter(action='CLIENTS_MERGED').exists())

    def test_merge_into_self_is_rejected(self):
        a = TestDataFactory.create_client()
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/clients/merge/', {'source_id': a.id, 'target_id': a.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ClientServiceTests(TestCase):

    def test_find_by_phone(self):
        existing = TestDataFactory.create_client(phone='0821112222')
        client, created = find_or_create_client('Other', 'Name', '0821112222', email='new@example.com')
        self.assertFalse(created)
        self.assertEqual(client, existing)
        existing.refresh_from_db()
        self.assertEqual(existing.email, 'new@example.com')

    def test_find_by_email(self):
        existing = TestDataFactory.create_client(email='seller@example.com')
        client, created = find_or_create_client('Seller', '', '0839999999', email='SELLER@example.com')
        self.assertFalse(created)
        self.assertEqual(client, existing)

    def test_create_when_no_match(self):
        client, created = find_or_create_client('New', 'Seller', '0830000000')
        self.assertTrue(created)
        self.assertEqual(Client.objects.count(), 1)
        self.assertEqual(client.full_name, 'New Seller')

    def test_cannot_merge_twice(self):
        source, target = TestDataFactory.create_client(), TestDataFactory.create_client()
        merge_clients(source.id, target.id)
        with self.assertRaises(ClientMergeError):
            merge_clients(source.id, target.id)
