"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from gearops.catalog.models import Product, AccessoryTemplate
from gearops.core.permissions import ADMIN, assign_role
from gearops.inspections import services as inspection_services
from gearops.inspections.models import IncomingGearItem
from gearops.inventory.models import Equipment
from gearops.logistics.models import DeliveryBooking
from gearops.parties.models import Vendor, Client
from gearops.purchasing.models import PendingPurchase, PendingItem
from gearops.purchasing.services import issue_quote_token
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def random_phone():
        return f'082{random.randint(1000000, 9999999)}'

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role=None, is_superuser=False):
        """Create a test user, optionally in a role group (ADMIN, MANAGER, STAFF)"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_superuser=is_superuser,
            is_staff=is_superuser or role == ADMIN,
        )
        if role:
            assign_role(user, role)
        return user

    @staticmethod
    def create_vendor(name=None, **kwargs):
        if not name:
            name = f'Vendor_{TestDataFactory.random_string(6)}'
        return Vendor.objects.create(name=name, phone=kwargs.pop('phone', '0215550100'), **kwargs)

    @staticmethod
    def create_client(first_name=None, surname='Tester', phone=None, email=None, **kwargs):
        if not first_name:
            first_name = f'Client{TestDataFactory.random_string(4)}'
        return Client.objects.create(
            first_name=first_name,
            surname=surname,
            phone=phone or TestDataFactory.random_phone(),
            email=email,
            **kwargs
        )

    @staticmethod
    def create_product(name=None, brand='Canon', model='EOS R6', product_type='CAMERA_BODY',
                       buy_max=Decimal('10000.00'), consign_max=Decimal('14000.00'), accessories=None):
        """
        Create a catalog product. accessories is a list of
        (accessory_name, penalty_amount) pairs.
        """
        if not name:
            name = f'{brand} {model} {TestDataFactory.random_string(4)}'
        product = Product.objects.create(
            name=name,
            brand=brand,
            model=model,
            product_type=product_type,
            buy_price_min=(buy_max * Decimal('0.8')).quantize(Decimal('0.01')),
            buy_price_max=buy_max,
            consign_price_min=(consign_max * Decimal('0.8')).quantize(Decimal('0.01')),
            consign_price_max=consign_max,
        )
        for order, (accessory_name, penalty) in enumerate(accessories or []):
            AccessoryTemplate.objects.create(
                product=product,
                accessory_name=accessory_name,
                accessory_order=order,
                penalty_amount=penalty,
            )
        return product

    @staticmethod
    def create_equipment(name=None, brand='Canon', sku=None, status=Equipment.STATUS_READY_FOR_SALE,
                         acquisition_type=Equipment.ACQUISITION_PURCHASED, selling_price=Decimal('9000.00'),
                         **kwargs):
        if not name:
            name = f'{brand} Body {TestDataFactory.random_string(4)}'
        if not sku:
            sku = f'TST-{TestDataFactory.random_string(8).upper()}'
        return Equipment.objects.create(
            sku=sku,
            name=name,
            brand=brand,
            status=status,
            acquisition_type=acquisition_type,
            selling_price=selling_price,
            **kwargs
        )

    @staticmethod
    def create_purchase(customer_name=None, customer_phone=None, status=PendingPurchase.STATUS_PENDING_REVIEW,
                        items=None, with_token=True, **kwargs):
        """
        Create a purchase with quoted items. items is a list of dicts of
        PendingItem fields; one default item is created when omitted.
        """
        purchase = PendingPurchase(
            customer_name=customer_name or f'Customer {TestDataFactory.random_string(4)}',
            customer_phone=customer_phone or TestDataFactory.random_phone(),
            customer_email=kwargs.pop('customer_email', 'seller@example.com'),
            bot_quote_accepted_at=kwargs.pop('bot_quote_accepted_at', timezone.now()),
            status=status,
            **kwargs
        )
        if with_token:
            issue_quote_token(purchase)
        purchase.save()
        if items is None:
            items = [{'name': 'Canon EOS R6', 'brand': 'Canon', 'bot_estimated_price': Decimal('8000.00'),
                      'proposed_price': Decimal('8000.00')}]
        for item in items:
            PendingItem.objects.create(purchase=purchase, **item)
        return purchase

    @staticmethod
    def create_delivery_booking(method=DeliveryBooking.METHOD_COURIER, purchase=None, **kwargs):
        booking = DeliveryBooking.objects.create(delivery_method=method, **kwargs)
        if purchase is not None:
            purchase.delivery_booking = booking
            purchase.save(update_fields=['delivery_booking'])
        return booking

    @staticmethod
    def create_session(name=None, purchase=None, user=None, items=None):
        if items is None:
            items = [{'client_name': 'Canon EOS R6', 'client_brand': 'Canon'}]
        return inspection_services.create_session(
            name or f'Session {TestDataFactory.random_string(4)}',
            user=user,
            purchase=purchase,
            items=items,
        )

    @staticmethod
    def create_verified_item(incoming_item, product=None, condition='GOOD', user=None, approve=False,
                             selection=IncomingGearItem.SELECTION_BUY, **verify_data):
        """Identify, verify (and optionally approve) an incoming item"""
        product = product or TestDataFactory.create_product()
        verified, _ = inspection_services.identify_item(incoming_item, product)
        verify_data['condition'] = condition
        verified, _ = inspection_services.verify_item(incoming_item, verify_data, user)
        if approve:
            inspection_services.approve_item(incoming_item, user)
        if selection:
            incoming_item.client_selection = selection
            incoming_item.save(update_fields=['client_selection'])
        verified.refresh_from_db()
        return verified


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
