"""Bundles: finished stock items grouped and sold at a single price"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework import status

from gearops.core.utils import WorkflowError, create_activity_log
from .models import Bundle, BundleItem, Equipment

logger = logging.getLogger(__name__)

MIN_BUNDLE_ITEMS = 2


def bundle_cost(equipment):
    """Sum of the items' cost prices; a missing cost counts as zero"""
    return sum((item.cost_price or Decimal('0') for item in equipment), Decimal('0'))


def bundleable_equipment(equipment_ids):
    """Equipment that is on the shelf and not already in a bundle"""
    return list(
        Equipment.objects.select_for_update(of=('self',))
        .filter(pk__in=equipment_ids, intake_status=Equipment.INTAKE_COMPLETE, bundle_item__isnull=True)
        .order_by('id')
    )


def create_bundle(title, selling_price, equipment_ids, admin, user, description=''):
    equipment_ids = list(dict.fromkeys(equipment_ids))
    if len(equipment_ids) < MIN_BUNDLE_ITEMS:
        raise WorkflowError(f'Bundle requires at least {MIN_BUNDLE_ITEMS} items')

    with transaction.atomic():
        equipment = bundleable_equipment(equipment_ids)
        if len(equipment) != len(equipment_ids):
            available = {item.id for item in equipment}
            raise WorkflowError(
                'Some equipment items are not available for bundling',
                extra={'unavailable_ids': [pk for pk in equipment_ids if pk not in available]},
            )
        bundle = Bundle.objects.create(
            title=title,
            description=description,
            selling_price=selling_price,
            cost_price=bundle_cost(equipment),
            status=Bundle.STATUS_ACTIVE,
            created_by=user,
            admin_approved_by=admin,
            admin_approved_at=timezone.now(),
        )
        BundleItem.objects.bulk_create([BundleItem(bundle=bundle, equipment=item) for item in equipment])

    create_activity_log(
        action='CREATED_BUNDLE',
        entity_type='BUNDLE',
        entity_id=bundle.id,
        details={
            'title': bundle.title,
            'item_count': len(equipment),
            'selling_price': str(bundle.selling_price),
            'approved_by': admin.username,
        },
        user=user,
    )
    logger.info(f"Bundle {bundle.id} created: {bundle.title} with {len(equipment)} items")
    return bundle


def _require_active(bundle):
    if bundle.status != Bundle.STATUS_ACTIVE:
        raise WorkflowError('Bundle is not active', extra={'status': bundle.status})


def dissolve_bundle(bundle, user):
    """Release every item back to single sale"""
    _require_active(bundle)
    with transaction.atomic():
        item_count, _ = bundle.items.all().delete()
        bundle.status = Bundle.STATUS_DISSOLVED
        bundle.save(update_fields=['status', 'updated_at'])

    create_activity_log(
        action='DISSOLVED_BUNDLE',
        entity_type='BUNDLE',
        entity_id=bundle.id,
        details={'title': bundle.title, 'item_count': item_count},
        user=user,
    )
    logger.info(f"Bundle {bundle.id} dissolved")
    return bundle


def remove_bundle_item(bundle, equipment_id, user):
    """
    Take one item out of a bundle. A bundle left with a single item is
    dissolved; otherwise its cost price is recalculated.
    """
    _require_active(bundle)
    with transaction.atomic():
        deleted, _ = bundle.items.filter(equipment_id=equipment_id).delete()
        if not deleted:
            raise WorkflowError('Equipment is not in this bundle', status_code=status.HTTP_404_NOT_FOUND)

        remaining = bundle.items.count()
        if remaining < MIN_BUNDLE_ITEMS:
            bundle.items.all().delete()
            bundle.status = Bundle.STATUS_DISSOLVED
            bundle.save(update_fields=['status', 'updated_at'])
        else:
            cost = bundle.items.aggregate(total=Sum('equipment__cost_price'))['total']
            bundle.cost_price = cost or Decimal('0')
            bundle.save(update_fields=['cost_price', 'updated_at'])

    create_activity_log(
        action='REMOVED_ITEM_FROM_BUNDLE',
        entity_type='BUNDLE',
        entity_id=bundle.id,
        details={
            'bundle_title': bundle.title,
            'equipment_id': equipment_id,
            'remaining_items': remaining,
            'dissolved': bundle.status == Bundle.STATUS_DISSOLVED,
        },
        user=user,
    )
    return bundle
