"""Courier tracking follow-up"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from .models import DeliveryBooking

logger = logging.getLogger(__name__)


def bookings_needing_reminder(now=None):
    """Courier bookings older than a day that still have no tracking number"""
    now = now or timezone.now()
    return DeliveryBooking.objects.filter(
        Q(tracking_number__isnull=True) | Q(tracking_number=''),
        delivery_method=DeliveryBooking.METHOD_COURIER,
        created_at__lt=now - timedelta(days=1),
        reminders_sent__lt=settings.TRACKING_REMINDER_LIMIT,
        flagged_for_follow_up=False,
    ).prefetch_related('purchases')


def process_tracking_reminders(now=None, dry_run=False):
    """
    Count a reminder for each waiting booking. The last allowed reminder
    flags the booking for manual follow-up instead.

    Returns a dict with reminded, flagged and skipped counts.
    """
    now = now or timezone.now()
    limit = settings.TRACKING_REMINDER_LIMIT
    result = {'reminded': 0, 'flagged': 0, 'skipped': 0}

    for booking in bookings_needing_reminder(now):
        purchase = next((p for p in booking.purchases.all() if p.customer_email), None)
        if purchase is None:
            result['skipped'] += 1
            continue

        if booking.reminders_sent >= limit - 1:
            result['flagged'] += 1
            if not dry_run:
                booking.flagged_for_follow_up = True
                booking.last_reminder_at = now
                booking.save(update_fields=['flagged_for_follow_up', 'last_reminder_at', 'updated_at'])
            logger.info(f"Booking {booking.id} flagged for follow-up after {booking.reminders_sent} reminder(s)")
            continue

        result['reminded'] += 1
        if not dry_run:
            booking.reminders_sent += 1
            booking.last_reminder_at = now
            booking.save(update_fields=['reminders_sent', 'last_reminder_at', 'updated_at'])
        logger.info(f"Tracking reminder {booking.reminders_sent} due for {purchase.customer_email} (booking {booking.id})")

    return result
