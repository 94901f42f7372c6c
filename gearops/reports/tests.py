"""
Test suite for the reports module
Tests: dashboard stats, sidebar notification counts, cache invalidation
"""
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from gearops.consignment.models import ConsignmentChangeRequest
from gearops.core.cache_utils import invalidate_dashboard_cache
from gearops.core.permissions import ADMIN, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.core.utils import create_activity_log
from gearops.inventory.models import Equipment
from gearops.logistics.models import DeliveryBooking
from gearops.purchasing.models import PendingPurchase
from gearops.reports.views import get_dashboard_stats, get_notification_counts


class DashboardStatsTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(role=STAFF)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_login(self):
        self.client.logout()
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_counts_and_value(self):
        TestDataFactory.create_equipment(selling_price=Decimal('9000.00'))
        TestDataFactory.create_equipment(status=Equipment.STATUS_RESERVED, selling_price=Decimal('1500.50'))
        TestDataFactory.create_equipment(status=Equipment.STATUS_SOLD, selling_price=Decimal('20000.00'))
        TestDataFactory.create_equipment(status=Equipment.STATUS_IN_REPAIR)
        TestDataFactory.create_vendor()
        TestDataFactory.create_vendor(is_active=False)

        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totalInventory'], 4)
        self.assertEqual(response.data['readyForSale'], 1)
        self.assertEqual(response.data['inRepair'], 1)
        self.assertEqual(Decimal(response.data['totalValue']), Decimal('10500.50'))
        self.assertEqual(response.data['activeVendors'], 1)

    def test_empty_shop(self):
        stats = get_dashboard_stats()
        self.assertEqual(stats['totalInventory'], 0)
        self.assertEqual(Decimal(stats['totalValue']), Decimal('0'))
        self.assertEqual(stats['recentActivity'], [])

    def test_recent_activity_is_capped(self):
        for index in range(12):
            create_activity_log(action='TEST', entity_type='EQUIPMENT', entity_id=index, user=self.user)
        activity = get_dashboard_stats()['recentActivity']
        self.assertEqual(len(activity), 10)

    def test_stats_are_cached_until_a_record_changes(self):
        equipment = TestDataFactory.create_equipment()
        self.assertEqual(get_dashboard_stats()['readyForSale'], 1)

        # queryset.update() skips post_save, so the cached figure survives
        Equipment.objects.filter(pk=equipment.pk).update(status=Equipment.STATUS_SOLD)
        self.assertEqual(get_dashboard_stats()['readyForSale'], 1)

        TestDataFactory.create_equipment(status=Equipment.STATUS_IN_REPAIR)
        stats = get_dashboard_stats()
        self.assertEqual(stats['readyForSale'], 0)
        self.assertEqual(stats['inRepair'], 1)

    def test_manual_invalidation(self):
        equipment = TestDataFactory.create_equipment()
        get_dashboard_stats()
        Equipment.objects.filter(pk=equipment.pk).update(status=Equipment.STATUS_SOLD)
        invalidate_dashboard_cache()
        self.assertEqual(get_dashboard_stats()['readyForSale'], 0)


class NotificationCountsTests(TestCase):

    def setUp(self):
        cache.clear()
        self.admin = TestDataFactory.create_user(role=ADMIN)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_all_badges_present(self):
        response = self.client.get('/api/v1/notifications/counts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(set(response.data), {
            'calendar', 'incomingGear', 'awaitingPayment', 'uploadingStock',
            'inventory', 'consignment', 'repairs',
        })
        self.assertEqual(response.data['inventory'], 0)

    def test_badge_counts(self):
        TestDataFactory.create_delivery_booking(method=DeliveryBooking.METHOD_SELF_DELIVER)
        TestDataFactory.create_delivery_booking(flagged_for_follow_up=True)
        TestDataFactory.create_purchase(status=PendingPurchase.STATUS_AWAITING_DELIVERY)
        TestDataFactory.create_purchase(status=PendingPurchase.STATUS_INSPECTION_IN_PROGRESS)
        TestDataFactory.create_purchase(status=PendingPurchase.STATUS_AWAITING_PAYMENT)
        TestDataFactory.create_equipment(intake_status=Equipment.INTAKE_PENDING)
        TestDataFactory.create_equipment(intake_status=Equipment.INTAKE_COMPLETE)
        TestDataFactory.create_equipment(intake_status=Equipment.INTAKE_COMPLETE, in_repair=True)

        counts = get_notification_counts()
        self.assertEqual(counts['calendar'], 2)
        self.assertEqual(counts['incomingGear'], 3)
        self.assertEqual(counts['awaitingPayment'], 1)
        self.assertEqual(counts['uploadingStock'], 1)
        self.assertEqual(counts['repairs'], 1)

    def test_consignment_badge(self):
        equipment = TestDataFactory.create_equipment(acquisition_type=Equipment.ACQUISITION_CONSIGNMENT)
        base = {
            'equipment': equipment,
            'current_payout': Decimal('5000.00'),
            'proposed_payout': Decimal('4000.00'),
            'approved_by_admin': self.admin,
            'requested_by': self.admin,
        }
        ConsignmentChangeRequest.objects.create(token='a' * 64, **base)
        ConsignmentChangeRequest.objects.create(
            token='b' * 64, status=ConsignmentChangeRequest.STATUS_CONFIRMED,
            client_confirmed_at=timezone.now() - timedelta(hours=2), **base
        )
        ConsignmentChangeRequest.objects.create(
            token='c' * 64, status=ConsignmentChangeRequest.STATUS_CONFIRMED,
            client_confirmed_at=timezone.now() - timedelta(days=3), **base
        )
        ConsignmentChangeRequest.objects.create(
            token='d' * 64, status=ConsignmentChangeRequest.STATUS_DECLINED, **base
        )
        self.assertEqual(get_notification_counts()['consignment'], 2)
