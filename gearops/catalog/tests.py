"""
Test suite for the catalog module
Tests: product search, price bands, accessory templates
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from gearops.catalog.models import Product
from gearops.core.permissions import ADMIN, MANAGER, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def _product_payload(self, **overrides):
        payload = {
            'name': 'Sony A7 III',
            'brand': 'Sony',
            'model': 'A7 III',
            'product_type': 'CAMERA_BODY',
            'buy_price_min': '12000.00',
            'buy_price_max': '15000.00',
            'consign_price_min': '16000.00',
            'consign_price_max': '19000.00',
        }
        payload.update(overrides)
        return payload

    def test_search_matches_every_word(self):
        TestDataFactory.create_product(name='Canon EOS R6', brand='Canon', model='EOS R6')
        TestDataFactory.create_product(name='Canon EOS R5', brand='Canon', model='EOS R5')
        TestDataFactory.create_product(name='Nikon Z6', brand='Nikon', model='Z6')
        response = self.client.get('/api/v1/products/?q=canon r6')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Canon EOS R6')

    def test_filter_by_type(self):
        TestDataFactory.create_product(product_type='LENS', model='RF 50mm')
        TestDataFactory.create_product(product_type='CAMERA_BODY')
        response = self.client.get('/api/v1/products/?product_type=LENS')
        self.assertEqual(response.data['count'], 1)

    def test_staff_cannot_create_product(self):
        response = self.client.post('/api/v1/products/', self._product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_creates_product(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/products/', self._product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Product.objects.get().buy_price_max, Decimal('15000.00'))

    def test_band_maximum_below_minimum(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post(
            '/api/v1/products/', self._product_payload(buy_price_max='1000.00'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_price(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post(
            '/api/v1/products/', self._product_payload(consign_price_min='-1.00'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_product_in_use_cannot_be_deleted(self):
        product = TestDataFactory.create_product()
        session = TestDataFactory.create_session()
        TestDataFactory.create_verified_item(session.incoming_items.first(), product=product)
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Product.objects.filter(pk=product.id).exists())


class AccessoryTemplateTests(TestCase):
    """Test accessory checklist endpoints"""

    def setUp(self):
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.product = TestDataFactory.create_product(accessories=[('Battery', Decimal('500.00'))])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.manager)

    def test_list_accessories(self):
        response = self.client.get(f'/api/v1/products/{self.product.id}/accessories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['accessory_name'], 'Battery')

    def test_duplicate_accessory_name(self):
        response = self.client.post(
            f'/api/v1/products/{self.product.id}/accessories/',
            {'accessory_name': 'battery', 'penalty_amount': '100.00'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_add_and_remove_accessory(self):
        response = self.client.post(
            f'/api/v1/products/{self.product.id}/accessories/',
            {'accessory_name': 'Charger', 'penalty_amount': '300.00', 'is_required': True},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.delete(f"/api/v1/accessories/{response.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.product.accessories.count(), 1)

    def test_negative_penalty(self):
        response = self.client.post(
            f'/api/v1/products/{self.product.id}/accessories/',
            {'accessory_name': 'Strap', 'penalty_amount': '-5.00'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
