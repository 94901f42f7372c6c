"""
Test suite for the logistics module
Tests: delivery bookings, drop-off calendar, courier tracking reminders
"""
from datetime import timedelta
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from gearops.core.permissions import MANAGER, STAFF
from gearops.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from gearops.logistics.models import CalendarAvailability, DeliveryBooking
from gearops.logistics.services import bookings_needing_reminder, process_tracking_reminders


class DeliveryBookingAPITests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.staff)

    def test_book_for_purchase(self):
        purchase = TestDataFactory.create_purchase()
        response = self.client.post('/api/v1/delivery-bookings/', {
            'delivery_method': 'SELF_DELIVER',
            'requested_date': '2026-11-02',
            'requested_time': '10:00',
            'purchase_id': purchase.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['purchases'][0]['id'], purchase.id)
        purchase.refresh_from_db()
        self.assertEqual(purchase.delivery_booking_id, response.data['id'])

    def test_book_for_missing_purchase(self):
        response = self.client.post('/api/v1/delivery-bookings/', {
            'delivery_method': 'COURIER', 'purchase_id': 99999
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(DeliveryBooking.objects.count(), 0)

    def test_confirm_records_who(self):
        booking = TestDataFactory.create_delivery_booking(method=DeliveryBooking.METHOD_SELF_DELIVER)
        response = self.client.patch(f'/api/v1/delivery-bookings/{booking.id}/', {'status': 'CONFIRMED'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['confirmed_at'])
        self.assertEqual(response.data['confirmed_by'], self.staff.id)

    def test_decline(self):
        booking = TestDataFactory.create_delivery_booking()
        response = self.client.patch(f'/api/v1/delivery-bookings/{booking.id}/', {
            'status': 'DECLINED', 'decline_reason': 'Fully booked'
        }, format='json')
        self.assertIsNotNone(response.data['declined_at'])
        self.assertEqual(response.data['decline_reason'], 'Fully booked')

    def test_list_filters(self):
        TestDataFactory.create_delivery_booking(status=DeliveryBooking.STATUS_CONFIRMED)
        TestDataFactory.create_delivery_booking(flagged_for_follow_up=True)
        response = self.client.get('/api/v1/delivery-bookings/?status=CONFIRMED')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/delivery-bookings/?flagged=true')
        self.assertEqual(len(response.data), 1)
        self.assertTrue(response.data[0]['flagged_for_follow_up'])


class CalendarAvailabilityTests(TestCase):

    def setUp(self):
        self.staff = TestDataFactory.create_user(role=STAFF)
        self.manager = TestDataFactory.create_user(role=MANAGER)
        self.client = AuthenticatedAPIClient()

    def test_staff_cannot_edit_calendar(self):
        self.client.authenticate_user(self.staff)
        response = self.client.post('/api/v1/calendar/availability/', {
            'day_of_week': 1, 'start_time': '09:00', 'end_time': '17:00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_adds_weekly_slot(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/calendar/availability/', {
            'day_of_week': 1, 'start_time': '09:00', 'end_time': '17:00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created_by'], self.manager.id)

    def test_slot_needs_day_or_date(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/calendar/availability/', {
            'start_time': '09:00', 'end_time': '17:00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_end_before_start(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/calendar/availability/', {
            'day_of_week': 2, 'start_time': '15:00', 'end_time': '09:00'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_block_a_date(self):
        self.client.authenticate_user(self.manager)
        response = self.client.post('/api/v1/calendar/availability/', {
            'specific_date': '2026-12-25', 'start_time': '00:00', 'end_time': '23:59',
            'is_available': False, 'block_reason': 'Christmas'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/calendar/availability/?specific_date=2026-12-25')
        self.assertEqual(len(response.data), 1)
        self.assertFalse(response.data[0]['is_available'])

    def test_filter_by_day(self):
        CalendarAvailability.objects.create(day_of_week=1, start_time='09:00', end_time='12:00')
        CalendarAvailability.objects.create(day_of_week=3, start_time='09:00', end_time='12:00')
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/calendar/availability/?day_of_week=3')
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/calendar/availability/?day_of_week=monday')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete_slot(self):
        slot = CalendarAvailability.objects.create(day_of_week=4, start_time='09:00', end_time='12:00')
        self.client.authenticate_user(self.manager)
        response = self.client.patch(f'/api/v1/calendar/availability/{slot.id}/', {'end_time': '08:00'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.patch(f'/api/v1/calendar/availability/{slot.id}/', {'end_time': '13:00'},
                                     format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.delete(f'/api/v1/calendar/availability/{slot.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


@override_settings(TRACKING_REMINDER_LIMIT=3)
class TrackingReminderTests(TestCase):
    """Test the daily courier tracking follow-up"""

    def setUp(self):
        self.later = timezone.now() + timedelta(days=2)
        self.purchase = TestDataFactory.create_purchase()
        self.booking = TestDataFactory.create_delivery_booking(purchase=self.purchase)

    def test_fresh_bookings_are_left_alone(self):
        self.assertEqual(list(bookings_needing_reminder()), [])

    def test_tracked_and_non_courier_bookings_are_ignored(self):
        TestDataFactory.create_delivery_booking(tracking_number='AX1', purchase=TestDataFactory.create_purchase())
        TestDataFactory.create_delivery_booking(
            method=DeliveryBooking.METHOD_SELF_DELIVER, purchase=TestDataFactory.create_purchase()
        )
        self.assertEqual(list(bookings_needing_reminder(self.later)), [self.booking])

    def test_reminder_counts_up(self):
        result = process_tracking_reminders(now=self.later)
        self.assertEqual(result, {'reminded': 1, 'flagged': 0, 'skipped': 0})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.reminders_sent, 1)
        self.assertEqual(self.booking.last_reminder_at, self.later)

    def test_last_reminder_flags_booking(self):
        DeliveryBooking.objects.filter(pk=self.booking.pk).update(reminders_sent=2)
        result = process_tracking_reminders(now=self.later)
        self.assertEqual(result['flagged'], 1)
        self.booking.refresh_from_db()
        self.assertTrue(self.booking.flagged_for_follow_up)
        self.assertEqual(self.booking.reminders_sent, 2)
        self.assertEqual(process_tracking_reminders(now=self.later)['flagged'], 0)

    def test_booking_without_email_is_skipped(self):
        self.purchase.customer_email = None
        self.purchase.save(update_fields=['customer_email'])
        result = process_tracking_reminders(now=self.later)
        self.assertEqual(result['skipped'], 1)

    def test_dry_run_changes_nothing(self):
        result = process_tracking_reminders(now=self.later, dry_run=True)
        self.assertEqual(result['reminded'], 1)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.reminders_sent, 0)

    def test_management_command(self):
        DeliveryBooking.objects.filter(pk=self.booking.pk).update(created_at=timezone.now() - timedelta(days=2))
        out = StringIO()
        call_command('process_tracking_reminders', stdout=out)
        self.assertIn('Reminders: 1', out.getvalue())
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.reminders_sent, 1)
