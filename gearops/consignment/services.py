"""Consignment payout changes: staff propose, an admin approves, the consignor decides"""
import logging

from django.db import transaction
from django.utils import timezone

from gearops.core.tokens import generate_token
from gearops.core.utils import WorkflowError, create_activity_log
from gearops.inventory.models import Equipment, PriceHistory
from .models import ConsignmentChangeRequest

logger = logging.getLogger(__name__)


def current_payout(equipment):
    if equipment.purchase_price is not None:
        return equipment.purchase_price
    return equipment.cost_price


def request_change(equipment, proposed_payout, admin, user, proposed_selling_price=None, reason=''):
    if equipment.acquisition_type != Equipment.ACQUISITION_CONSIGNMENT:
        raise WorkflowError('Only consignment items can have their payout changed')

    change = ConsignmentChangeRequest.objects.create(
        equipment=equipment,
        client=equipment.client,
        current_payout=current_payout(equipment),
        proposed_payout=proposed_payout,
        proposed_selling_price=proposed_selling_price,
        reason=reason,
        status=ConsignmentChangeRequest.STATUS_PENDING_CLIENT,
        token=generate_token(),
        requested_by=user,
        approved_by_admin=admin,
    )
    create_activity_log(
        action='CONSIGNMENT_CHANGE_REQUESTED',
        entity_type='CONSIGNMENT_CHANGE_REQUEST',
        entity_id=change.id,
        details={
            'equipment_id': equipment.id,
            'current_payout': str(change.current_payout) if change.current_payout is not None else None,
            'proposed_payout': str(proposed_payout),
            'approved_by_admin': admin.id,
        },
        user=user,
    )
    logger.info(f"Consignment change {change.id} requested for {equipment.sku}")
    return change


def _require_pending(change):
    if change.status != ConsignmentChangeRequest.STATUS_PENDING_CLIENT:
        raise WorkflowError(
            f'This request has already been {change.get_status_display().lower()}',
            extra={'status': change.status},
        )


@transaction.atomic
def confirm_change(change, adjusted_payout=None):
    """
    The consignor accepts. They may ask for less than proposed, never more.
    The final payout becomes the item's purchase and cost price.
    """
    _require_pending(change)
    if adjusted_payout is not None and adjusted_payout > change.proposed_payout:
        raise WorkflowError('Adjusted payout cannot exceed the proposed payout')

    now = timezone.now()
    change.status = ConsignmentChangeRequest.STATUS_CONFIRMED
    change.client_confirmed_at = now
    change.client_adjusted_payout = adjusted_payout
    change.save(update_fields=['status', 'client_confirmed_at', 'client_adjusted_payout', 'updated_at'])

    equipment = change.equipment
    equipment.purchase_price = change.final_payout
    equipment.cost_price = change.final_payout
    update_fields = ['purchase_price', 'cost_price', 'updated_at']
    if change.proposed_selling_price is not None and change.proposed_selling_price != equipment.selling_price:
        PriceHistory.objects.create(
            equipment=equipment,
            old_price=equipment.selling_price,
            new_price=change.proposed_selling_price,
            reason=f'Consignment change request #{change.id}',
            changed_by=change.requested_by,
        )
        equipment.selling_price = change.proposed_selling_price
        update_fields.append('selling_price')
    equipment.save(update_fields=update_fields)

    create_activity_log(
        action='CONSIGNMENT_CHANGE_CONFIRMED',
        entity_type='CONSIGNMENT_CHANGE_REQUEST',
        entity_id=change.id,
        details={'equipment_id': equipment.id, 'final_payout': str(change.final_payout)},
    )
    return change


def decline_change(change, reason=''):
    _require_pending(change)
    change.status = ConsignmentChangeRequest.STATUS_DECLINED
    change.client_declined_at = timezone.now()
    change.decline_reason = reason
    change.save(update_fields=['status', 'client_declined_at', 'decline_reason', 'updated_at'])
    create_activity_log(
        action='CONSIGNMENT_CHANGE_DECLINED',
        entity_type='CONSIGNMENT_CHANGE_REQUEST',
        entity_id=change.id,
        details={'equipment_id': change.equipment_id, 'reason': reason},
    )
    return change
