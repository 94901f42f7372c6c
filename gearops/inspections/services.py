"""
Inspection workflow: sessions, product identification, verification,
approval/locking and manual price overrides.
"""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.utils import timezone

from gearops.core.utils import WorkflowError
from .models import (
    InspectionSession, IncomingGearItem, VerifiedGearItem, VerifiedAnswer,
    VerifiedAccessory, PricingSnapshot, PriceOverride,
)
from .pricing import calculate_accessory_penalty, compute_pricing, get_final_display_price

logger = logging.getLogger(__name__)

INCOMING_ITEM_FIELDS = [
    'client_name', 'client_brand', 'client_model', 'client_description',
    'client_condition', 'client_serial_number', 'client_images',
]


def create_session(session_name, user=None, purchase=None, notes='', items=None):
    """Open an inspection session with optional incoming items (dicts of client_* fields)"""
    session = InspectionSession.objects.create(
        session_number=InspectionSession.next_session_number(),
        session_name=session_name,
        purchase=purchase,
        notes=notes or '',
        created_by=user if user is not None and user.is_authenticated else None,
    )
    for item in items or []:
        add_incoming_item(session, item)
    logger.info(f"Opened inspection session {session.session_number} with {len(items or [])} item(s)")
    return session


def add_incoming_item(session, data):
    values = {field: data[field] for field in INCOMING_ITEM_FIELDS if data.get(field) is not None}
    values.setdefault('client_name', 'Unnamed item')
    return IncomingGearItem.objects.create(session=session, **values)


def identify_item(incoming_item, product):
    """
    Link an incoming item to a catalog product. Re-identifying discards the
    previous answers, accessories, snapshot and override.

    Returns (verified_item, reidentified)
    """
    with transaction.atomic():
        verified = VerifiedGearItem.objects.filter(incoming_item=incoming_item).first()
        if verified:
            verified.answers.all().delete()
            verified.accessories.all().delete()
            PricingSnapshot.objects.filter(verified_item=verified).delete()
            PriceOverride.objects.filter(verified_item=verified).delete()
            verified.product = product
            verified.save(update_fields=['product', 'updated_at'])
            reidentified = True
        else:
            verified = VerifiedGearItem.objects.create(
                incoming_item=incoming_item,
                product=product,
                condition='GOOD',
                serial_number=incoming_item.client_serial_number or '',
            )
            reidentified = False

        incoming_item.client_name = product.name
        if not reidentified:
            incoming_item.status = IncomingGearItem.STATUS_IN_PROGRESS
        incoming_item.save(update_fields=['client_name', 'status', 'updated_at'])
    return verified, reidentified


def refresh_pricing(verified):
    """Recompute and upsert the pricing snapshot from the product band and accessories"""
    product = verified.product
    penalty = calculate_accessory_penalty(verified.accessories.all(), product.accessories.all())
    pricing = compute_pricing(
        base_buy_min=product.buy_price_min,
        base_buy_max=product.buy_price_max,
        base_consign_min=product.consign_price_min,
        base_consign_max=product.consign_price_max,
        condition=verified.condition,
        accessory_penalty=penalty,
    )
    snapshot, _ = PricingSnapshot.objects.update_or_create(
        verified_item=verified,
        defaults={
            'base_buy_min': pricing['base_buy_min'],
            'base_buy_max': pricing['base_buy_max'],
            'base_consign_min': pricing['base_consign_min'],
            'base_consign_max': pricing['base_consign_max'],
            'condition_multiplier': pricing['condition_multiplier'],
            'computed_buy_price': pricing['computed_buy_price'],
            'computed_consign_price': pricing['computed_consign_price'],
            'accessory_penalty': pricing['accessory_penalty'],
            'final_buy_price': pricing['final_buy_price'],
            'final_consign_price': pricing['final_consign_price'],
        }
    )
    return snapshot


def verify_item(incoming_item, data, user):
    """Record verification details (validated data from VerifyItemSerializer)"""
    verified = incoming_item.verified_item
    with transaction.atomic():
        for field in ('serial_number', 'general_notes', 'requires_repair', 'repair_notes'):
            if field in data:
                setattr(verified, field, data[field])
        condition = data.get('condition')
        if condition:
            verified.condition = condition
        verified.verified_at = timezone.now()
        verified.verified_by = user
        verified.save()

        if data.get('answers') is not None:
            verified.answers.all().delete()
            VerifiedAnswer.objects.bulk_create([
                VerifiedAnswer(
                    verified_item=verified,
                    question_text=answer['question_text'],
                    answer=answer.get('answer', ''),
                    notes=answer.get('notes', ''),
                )
                for answer in data['answers']
            ])
        if data.get('accessories') is not None:
            verified.accessories.all().delete()
            VerifiedAccessory.objects.bulk_create([
                VerifiedAccessory(
                    verified_item=verified,
                    accessory_name=accessory['accessory_name'],
                    is_present=accessory.get('is_present', True),
                    notes=accessory.get('notes', ''),
                )
                for accessory in data['accessories']
            ])

        snapshot = refresh_pricing(verified) if condition else None

        incoming_item.status = IncomingGearItem.STATUS_VERIFIED
        incoming_item.save(update_fields=['status', 'updated_at'])
    return verified, snapshot


def approve_item(incoming_item, user):
    verified = incoming_item.verified_item
    with transaction.atomic():
        verified.approved_at = timezone.now()
        verified.approved_by = user
        verified.locked = True
        verified.save(update_fields=['approved_at', 'approved_by', 'locked', 'updated_at'])
        incoming_item.status = IncomingGearItem.STATUS_APPROVED
        incoming_item.save(update_fields=['status', 'updated_at'])
    return verified


def reopen_item(incoming_item, user, reason):
    if not reason or not reason.strip():
        raise WorkflowError('Reopen reason is required')
    verified = incoming_item.verified_item
    with transaction.atomic():
        verified.locked = False
        verified.reopened_at = timezone.now()
        verified.reopened_by = user
        verified.reopen_reason = reason.strip()
        verified.save(update_fields=['locked', 'reopened_at', 'reopened_by', 'reopen_reason', 'updated_at'])
        incoming_item.status = IncomingGearItem.STATUS_REOPENED
        incoming_item.save(update_fields=['status', 'updated_at'])
    return verified


def reject_item(incoming_item):
    incoming_item.status = IncomingGearItem.STATUS_REJECTED
    incoming_item.save(update_fields=['status', 'updated_at'])
    return incoming_item


def set_price_override(verified, data, user):
    """Upsert the manual price override (validated data from PriceOverrideSerializer)"""
    override, _ = PriceOverride.objects.update_or_create(
        verified_item=verified,
        defaults={
            'override_buy_price': data.get('override_buy_price'),
            'override_consign_price': data.get('override_consign_price'),
            'override_reason': data['override_reason'],
            'notes': data.get('notes', ''),
            'overridden_by': user,
        }
    )
    return override


def remove_price_override(verified):
    deleted, _ = PriceOverride.objects.filter(verified_item=verified).delete()
    return deleted > 0


def related_or_none(instance, name):
    """Reverse one-to-one accessor that yields None instead of raising"""
    try:
        return getattr(instance, name)
    except ObjectDoesNotExist:
        return None


def item_prices(verified):
    """Final buy/consign prices for a verified item, overrides applied"""
    snapshot = related_or_none(verified, 'pricing_snapshot')
    override = related_or_none(verified, 'price_override')
    return get_final_display_price(
        auto_buy_price=snapshot.final_buy_price if snapshot else None,
        auto_consign_price=snapshot.final_consign_price if snapshot else None,
        override_buy_price=override.override_buy_price if override else None,
        override_consign_price=override.override_consign_price if override else None,
    )
