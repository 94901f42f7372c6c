"""
Cache invalidation signals
Dashboard figures are dropped whenever a record they count changes.
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import invalidate_dashboard_cache

logger = logging.getLogger(__name__)

DASHBOARD_MODELS = {
    'Equipment',
    'RepairLog',
    'Vendor',
    'PendingPurchase',
    'DeliveryBooking',
    'ConsignmentChangeRequest',
    'ActivityLog',
}


@receiver([post_save, post_delete])
def invalidate_dashboard_on_change(sender, instance, **kwargs):
    if sender.__name__ not in DASHBOARD_MODELS:
        return
    invalidate_dashboard_cache()
