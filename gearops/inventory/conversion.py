"""
Turn approved inspection results into stock.

Called once a purchase is paid: every approved item the client still wants
becomes an Equipment row waiting for intake (shelf location, final SKU and selling price).
"""
import logging
from decimal import Decimal

from django.db import transaction

from gearops.core.utils import create_activity_log
from gearops.inspections.models import IncomingGearItem, VerifiedGearItem
from gearops.inspections.pricing import round_rand
from gearops.inspections.services import item_prices, related_or_none
from .models import Equipment, RepairLog
from .sku import generate_sku

logger = logging.getLogger(__name__)

CONSIGNMENT_MARKUP = Decimal('1.5')
BUY_MARKUP = Decimal('1.3')
DEFAULT_CONSIGNMENT_RATE = Decimal('70')

# Inspection grades are finer than stock grades
CONDITION_MAP = {
    'LIKE_NEW': 'MINT',
    'EXCELLENT': 'EXCELLENT',
    'VERY_GOOD': 'GOOD',
    'GOOD': 'GOOD',
    'WORN': 'FAIR',
}


def _purchase_price(verified, consignment):
    prices = item_prices(verified)
    price = prices['final_consign_price'] if consignment else prices['final_buy_price']
    return Decimal(price) if price is not None else Decimal('0')


def create_equipment_from_verified_item(verified_item, purchase=None, user=None):
    """
    Create the Equipment row for one verified item.

    Returns the new equipment, the existing one when the item was converted
    before, or None when the client is not interested in selling it.
    """
    existing = related_or_none(verified_item, 'equipment')
    if existing is not None:
        return existing

    incoming = verified_item.incoming_item
    if incoming.not_interested:
        logger.info(f"Skipping verified item {verified_item.id}: client not interested")
        return None

    product = verified_item.product
    consignment = incoming.client_selection == IncomingGearItem.SELECTION_CONSIGNMENT
    purchase_price = _purchase_price(verified_item, consignment)
    markup = CONSIGNMENT_MARKUP if consignment else BUY_MARKUP
    selling_price = round_rand(purchase_price * markup)

    with transaction.atomic():
        equipment = Equipment.objects.create(
            sku=generate_sku(product.brand, verified_item.serial_number),
            name=product.name,
            brand=product.brand,
            model=product.model,
            category=product.product_type,
            condition=CONDITION_MAP.get(verified_item.condition, 'GOOD'),
            description=verified_item.general_notes or '',
            serial_number=verified_item.serial_number or '',
            acquisition_type=Equipment.ACQUISITION_CONSIGNMENT if consignment else Equipment.ACQUISITION_PURCHASED,
            client=purchase.client if purchase is not None else None,
            purchase_price=purchase_price,
            cost_price=purchase_price,
            selling_price=selling_price,
            consignment_rate=DEFAULT_CONSIGNMENT_RATE if consignment else None,
            status=Equipment.STATUS_IN_REPAIR if verified_item.requires_repair else Equipment.STATUS_PENDING_INSPECTION,
            intake_status=Equipment.INTAKE_PENDING,
            in_repair=verified_item.requires_repair,
            repair_notes=verified_item.repair_notes or '',
            images=incoming.client_images or [],
            source_verified_item=verified_item,
            created_by=user if user is not None and user.is_authenticated else None,
        )

        if verified_item.requires_repair and verified_item.repair_notes:
            RepairLog.objects.create(
                equipment=equipment,
                technician_name='Unassigned',
                issue_description=verified_item.repair_notes,
                status=RepairLog.STATUS_SENT_TO_TECH,
            )

    create_activity_log(
        action='CREATED_EQUIPMENT_FROM_INSPECTION',
        entity_type='EQUIPMENT',
        entity_id=equipment.id,
        details={
            'verified_item_id': verified_item.id,
            'product_name': product.name,
            'acquisition_type': equipment.acquisition_type,
            'requires_repair': verified_item.requires_repair,
            'sku': equipment.sku,
        },
        user=user,
    )
    logger.info(f"Created equipment {equipment.sku} from verified item {verified_item.id}")
    return equipment


def create_equipment_from_inspection(purchase, user=None):
    """
    Convert every approved item in the purchase's inspection session.

    Items that were reopened, rejected, never approved or marked not
    interested are left out.

    A failure on one item is logged and collected; the rest still convert.
    Returns (created, errors)
    """
    session = related_or_none(purchase, 'inspection_session')
    if session is None:
        return [], [{'error': 'Purchase has no inspection session'}]

    created = []
    errors = []
    for incoming in session.incoming_items.all().order_by('id'):
        verified = VerifiedGearItem.objects.filter(incoming_item=incoming).select_related('product').first()
        if verified is None:
            logger.warning(f"Skipping incoming item {incoming.id}: not verified")
            continue
        if incoming.status != IncomingGearItem.STATUS_APPROVED or incoming.not_interested:
            logger.info(f"Skipping incoming item {incoming.id}: status {incoming.status}")
            continue
        try:
            equipment = create_equipment_from_verified_item(verified, purchase, user)
        except Exception as e:
            logger.error(f"Failed to create equipment from incoming item {incoming.id}: {str(e)}")
            errors.append({'incoming_item_id': incoming.id, 'error': str(e)})
            continue
        if equipment is not None:
            created.append(equipment)

    logger.info(f"Created {len(created)} equipment record(s) from purchase {purchase.id}")
    return created, errors
