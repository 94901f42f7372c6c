"""
Client bookkeeping: de-duplication on intake, merging duplicates and the
per-client history views.
"""
import logging

from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from .models import Client

logger = logging.getLogger(__name__)

FILLABLE_FIELDS = [
    'email', 'id_number', 'passport_number', 'date_of_birth', 'physical_address',
    'postal_address', 'bank_name', 'account_number', 'branch_code', 'account_type',
    'account_holder',
]


class ClientMergeError(Exception):
    pass


def find_or_create_client(first_name, surname, phone, email=None, **extra):
    """
    Match an existing (non-merged) client by phone, or by email when one is
    given. A match without an email picks up the supplied one.

    Returns (client, created)
    """
    lookup = Q(phone=phone)
    if email:
        lookup |= Q(email__iexact=email)
    client = Client.objects.filter(lookup, merged_into__isnull=True).order_by('created_at').first()

    if client:
        if email and not client.email:
            client.email = email
            client.save(update_fields=['email', 'updated_at'])
        return client, False

    client = Client.objects.create(
        first_name=first_name,
        surname=surname or '',
        phone=phone,
        email=email or None,
        **extra
    )
    logger.info(f"Created client {client.id} ({client.full_name})")
    return client, True


def merge_clients(source_id, target_id):
    """
    Fold the source client into the target: equipment and purchases move
    across, blank target fields are filled from the source and the source is
    marked as merged.
    """
    if str(source_id) == str(target_id):
        raise ClientMergeError('Cannot merge a client into itself')

    with transaction.atomic():
        clients = {c.id: c for c in Client.objects.select_for_update().filter(id__in=[source_id, target_id])}
        source = clients.get(int(source_id))
        target = clients.get(int(target_id))
        if source is None or target is None:
            raise ClientMergeError('Client not found')
        if source.is_merged:
            raise ClientMergeError('Source client has already been merged')
        if target.is_merged:
            raise ClientMergeError('Target client has been merged into another client')

        moved_equipment = source.equipment.update(client=target)
        moved_purchases = source.purchases.update(client=target)

        changed = []
        for field in FILLABLE_FIELDS:
            if not getattr(target, field) and getattr(source, field):
                setattr(target, field, getattr(source, field))
                changed.append(field)
        if changed:
            target.save(update_fields=changed + ['updated_at'])

        source.merged_into = target
        source.save(update_fields=['merged_into', 'updated_at'])

    logger.info(
        f"Merged client {source.id} into {target.id} "
        f"({moved_equipment} equipment, {moved_purchases} purchases moved)"
    )
    return {
        'target': target,
        'moved_equipment': moved_equipment,
        'moved_purchases': moved_purchases,
        'filled_fields': changed,
    }


def clients_with_counts():
    """Active (non-merged) clients annotated with their equipment totals"""
    from gearops.inventory.models import Equipment

    return Client.objects.filter(merged_into__isnull=True).annotate(
        item_count=Count('equipment', distinct=True),
        buy_items_count=Count(
            'equipment',
            filter=Q(equipment__acquisition_type=Equipment.ACQUISITION_PURCHASED),
            distinct=True,
        ),
        consignment_items_count=Count(
            'equipment',
            filter=Q(equipment__acquisition_type=Equipment.ACQUISITION_CONSIGNMENT),
            distinct=True,
        ),
        total_paid=Coalesce(
            Sum('equipment__purchase_price', filter=Q(equipment__acquisition_type=Equipment.ACQUISITION_PURCHASED)),
            Value(0),
            output_field=DecimalField(max_digits=12, decimal_places=2),
        ),
    )


def client_with_history(client_id):
    """Client plus its equipment, newest first. None when missing"""
    client = Client.objects.filter(pk=client_id).first()
    if client is None:
        return None, []
    equipment = list(client.equipment.all().order_by('-created_at'))
    return client, equipment
