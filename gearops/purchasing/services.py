"""
Incoming gear workflow.

A purchase moves from the bot's quote (or a walk-in) through review, the
client's acceptance, delivery, inspection, the final quote and payment into
stock. Each step checks the current state and raises WorkflowError when the
transition is not allowed.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from gearops.core.tokens import generate_token, token_expiry
from gearops.core.utils import WorkflowError
from gearops.core.validators import (
    extract_dob_from_sa_id, validate_client_identity, validate_phone_number,
)
from gearops.inspections.models import InspectionSession, IncomingGearItem
from gearops.inspections.services import create_session, item_prices, related_or_none
from gearops.logistics.models import DeliveryBooking
from gearops.parties.services import find_or_create_client
from .models import PendingPurchase, PendingItem, ClientDetails

logger = logging.getLogger(__name__)

ITEM_FIELDS = [
    'name', 'brand', 'model', 'category', 'condition', 'description', 'serial_number',
    'ocr_text', 'ocr_brand', 'ocr_model', 'bot_estimated_price', 'proposed_price',
    'final_price', 'suggested_sell_price', 'image_urls',
]
PRICED_ITEM_STATUSES = [PendingItem.STATUS_APPROVED, PendingItem.STATUS_PRICE_ADJUSTED]


def undo_window():
    return timedelta(minutes=settings.UNDO_RECEIVED_WINDOW_MINUTES)


# Quote tokens

def issue_quote_token(purchase):
    purchase.quote_confirmation_token = generate_token()
    purchase.quote_token_expires_at = token_expiry()
    return purchase.quote_confirmation_token


def validate_quote_token(token):
    """
    The purchase behind a public quote link, or None when the token is
    missing, unknown or expired. Check purchase.already_responded to see
    whether the client has accepted or declined.
    """
    if not token:
        return None
    purchase = PendingPurchase.objects.filter(quote_confirmation_token=token).first()
    if purchase is None:
        return None
    if not purchase.quote_token_expires_at or purchase.quote_token_expires_at <= timezone.now():
        return None
    return purchase


def invalidate_quote_token(purchase):
    purchase.quote_confirmation_token = None
    purchase.quote_token_expires_at = None
    purchase.save(update_fields=['quote_confirmation_token', 'quote_token_expires_at', 'updated_at'])


def ensure_quote_token(purchase):
    """Issue a fresh token unless the current one is still valid"""
    if not purchase.has_valid_quote_token:
        issue_quote_token(purchase)
    return purchase.quote_confirmation_token


# Creation

def create_purchase(data, items, user=None):
    """
    Create a purchase (status PENDING_REVIEW) with its quoted items and a
    quote token. The proposed price defaults to the bot's estimate.
    """
    with transaction.atomic():
        purchase = PendingPurchase(
            customer_name=data['customer_name'],
            customer_phone=data['customer_phone'],
            customer_email=data.get('customer_email') or None,
            whatsapp_conversation_id=data.get('whatsapp_conversation_id') or None,
            total_quote_amount=data.get('total_quote_amount') or Decimal('0.00'),
            bot_quote_accepted_at=data.get('bot_quote_accepted_at') or timezone.now(),
            bot_conversation_data=data.get('bot_conversation_data') or {},
            notes=data.get('notes', ''),
            status=PendingPurchase.STATUS_PENDING_REVIEW,
        )
        issue_quote_token(purchase)
        purchase.save()

        PendingItem.objects.bulk_create([
            PendingItem(purchase=purchase, **_item_values(item)) for item in items
        ])
    logger.info(f"Created purchase {purchase.id} for {purchase.customer_name} with {len(items)} item(s)")
    return purchase


def _item_values(item):
    values = {field: item[field] for field in ITEM_FIELDS if item.get(field) is not None}
    if values.get('proposed_price') is None and values.get('bot_estimated_price') is not None:
        values['proposed_price'] = values['bot_estimated_price']
    return values


def create_walk_in(data, user):
    """A client who brought gear to the counter: received and inspecting straight away"""
    client, created = find_or_create_client(
        first_name=data['first_name'],
        surname=data['surname'],
        phone=data['phone'],
        email=data.get('email') or None,
    )
    name = f"{data['first_name']} {data['surname']}".strip()
    now = timezone.now()
    with transaction.atomic():
        purchase = PendingPurchase(
            customer_name=name,
            customer_phone=data['phone'],
            customer_email=data.get('email') or None,
            client=client,
            notes=data.get('notes', ''),
            status=PendingPurchase.STATUS_INSPECTION_IN_PROGRESS,
            gear_received_at=now,
            gear_received_by=user,
            client_notified_at=now,
        )
        issue_quote_token(purchase)
        purchase.save()
        session = create_session(f"Walk-in: {name}", user=user, purchase=purchase, items=data.get('items') or [])
    return purchase, session, created


# Staff review

def review_purchase(purchase, action, user, rejected_reason=''):
    now = timezone.now()
    if action == 'review':
        purchase.reviewed_by = user
        purchase.reviewed_at = now
    elif action == 'approve':
        purchase.reviewed_by = purchase.reviewed_by or user
        purchase.reviewed_at = purchase.reviewed_at or now
        purchase.approved_by = user
        purchase.approved_at = now
        purchase.status = PendingPurchase.STATUS_APPROVED
    elif action == 'reject':
        purchase.reviewed_by = purchase.reviewed_by or user
        purchase.reviewed_at = purchase.reviewed_at or now
        purchase.rejected_reason = rejected_reason or ''
        purchase.status = PendingPurchase.STATUS_REJECTED
    else:
        raise WorkflowError('Invalid action')
    purchase.save()
    return purchase


def send_quote(purchase, customer_email=None):
    """
    Issue the client's quote link. The token created at intake only counts as
    sent once quote_confirmed_at is set.
    """
    if purchase.status not in (PendingPurchase.STATUS_APPROVED, PendingPurchase.STATUS_PENDING_REVIEW):
        raise WorkflowError('Purchase must be approved before sending quote')
    if purchase.has_valid_quote_token and purchase.quote_confirmed_at:
        raise WorkflowError(
            'Quote already sent and still valid',
            extra={'token': purchase.quote_confirmation_token, 'expires_at': purchase.quote_token_expires_at},
        )
    if customer_email:
        purchase.customer_email = customer_email
    if not purchase.customer_email:
        raise WorkflowError('Customer email is required')
    issue_quote_token(purchase)
    purchase.quote_confirmed_at = timezone.now()
    purchase.status = PendingPurchase.STATUS_QUOTE_SENT
    purchase.save()
    return purchase.quote_confirmation_token


# Receiving

def _session_items(purchase):
    return [
        {
            'client_name': item.name,
            'client_brand': item.brand,
            'client_model': item.model,
            'client_description': item.description,
            'client_condition': item.condition,
            'client_serial_number': item.serial_number,
            'client_images': item.image_urls or [],
        }
        for item in purchase.items.exclude(status=PendingItem.STATUS_REJECTED)
    ]


def _open_session(purchase, user):
    name = f"Quote from {purchase.customer_name} - {timezone.localdate().strftime('%Y-%m-%d')}"
    return create_session(name, user=user, purchase=purchase, items=_session_items(purchase))


def mark_received(purchase, user):
    """Gear arrived. Opens the inspection session when there is none yet"""
    if purchase.gear_received_at:
        raise WorkflowError('Gear has already been marked as received')
    now = timezone.now()
    with transaction.atomic():
        purchase.gear_received_at = now
        purchase.gear_received_by = user
        purchase.client_notified_at = None
        purchase.status = PendingPurchase.STATUS_INSPECTION_IN_PROGRESS
        purchase.save()
        session = related_or_none(purchase, 'inspection_session')
        if session is None and purchase.items.exists():
            session = _open_session(purchase, user)
    return session, now + undo_window()


def undo_received(purchase):
    if not purchase.gear_received_at:
        raise WorkflowError('Gear has not been marked as received')
    if purchase.client_notified_at:
        raise WorkflowError('Client has already been notified; receipt can no longer be undone')
    if timezone.now() > purchase.gear_received_at + undo_window():
        raise WorkflowError('Undo window has expired')
    with transaction.atomic():
        session = related_or_none(purchase, 'inspection_session')
        if session is not None:
            session.delete()
        purchase.gear_received_at = None
        purchase.gear_received_by = None
        purchase.client_notified_at = None
        purchase.status = PendingPurchase.STATUS_AWAITING_DELIVERY
        purchase.save()
    return purchase


def notify_client(purchase):
    if not purchase.gear_received_at:
        raise WorkflowError('Gear has not been marked as received')
    if purchase.client_notified_at:
        raise WorkflowError('Client has already been notified')
    if timezone.now() < purchase.gear_received_at + undo_window():
        raise WorkflowError('Client can be notified once the undo window has passed')
    purchase.client_notified_at = timezone.now()
    purchase.save(update_fields=['client_notified_at', 'updated_at'])
    return purchase


def start_inspection(purchase, user):
    if purchase.status != PendingPurchase.STATUS_INSPECTION_IN_PROGRESS:
        raise WorkflowError('Purchase must be in INSPECTION_IN_PROGRESS status')
    if not purchase.gear_received_at:
        raise WorkflowError('Gear has not been marked as received')
    if related_or_none(purchase, 'inspection_session') is not None:
        raise WorkflowError('Inspection session already exists')
    if not purchase.items.exists():
        raise WorkflowError('Purchase has no items to inspect')
    return _open_session(purchase, user)


# Final quote and payment

def send_final_quote(purchase):
    if not purchase.customer_email:
        raise WorkflowError('Customer email is required to send the final quote')
    session = related_or_none(purchase, 'inspection_session')
    if session is None:
        raise WorkflowError('Purchase has no inspection session')
    if purchase.status == PendingPurchase.STATUS_FINAL_QUOTE_SENT:
        raise WorkflowError('Final quote has already been sent')

    statuses = list(session.incoming_items.values_list('status', flat=True))
    done = (IncomingGearItem.STATUS_APPROVED, IncomingGearItem.STATUS_REJECTED)
    pending = [s for s in statuses if s not in done]
    if pending:
        raise WorkflowError(
            'All items must be approved or rejected before sending the final quote',
            extra={'pending_items': len(pending)}
        )
    if IncomingGearItem.STATUS_APPROVED not in statuses:
        raise WorkflowError('At least one item must be approved')

    now = timezone.now()
    with transaction.atomic():
        ensure_quote_token(purchase)
        purchase.status = PendingPurchase.STATUS_FINAL_QUOTE_SENT
        purchase.final_quote_sent_at = now
        purchase.save()
        session.status = InspectionSession.STATUS_COMPLETED
        session.completed_at = now
        session.save(update_fields=['status', 'completed_at', 'updated_at'])
    return purchase


def approved_incoming_items(purchase):
    session = related_or_none(purchase, 'inspection_session')
    if session is None:
        return None
    return list(
        session.incoming_items.filter(status=IncomingGearItem.STATUS_APPROVED, not_interested=False)
        .select_related('verified_item__pricing_snapshot', 'verified_item__price_override')
    )


def incoming_item_price(item):
    """What we pay for an approved incoming item given the client's choice"""
    verified = related_or_none(item, 'verified_item')
    if verified is None:
        return Decimal('0')
    prices = item_prices(verified)
    if item.client_selection == IncomingGearItem.SELECTION_CONSIGNMENT:
        price = prices['final_consign_price']
    else:
        price = prices['final_buy_price']
    return Decimal(price) if price is not None else Decimal('0')


def invoice_lines(purchase):
    """(name, price) for everything on the supplier invoice"""
    incoming = approved_incoming_items(purchase)
    if incoming is not None:
        return [(item.client_name, incoming_item_price(item)) for item in incoming]
    return [
        (item.name, Decimal(item.effective_price or 0))
        for item in purchase.items.filter(status__in=PRICED_ITEM_STATUSES)
    ]


def approve_for_payment(purchase, user):
    blocked = (
        PendingPurchase.STATUS_REJECTED, PendingPurchase.STATUS_CLIENT_DECLINED,
        PendingPurchase.STATUS_PAYMENT_RECEIVED, PendingPurchase.STATUS_COMPLETED,
    )
    if purchase.status in blocked:
        raise WorkflowError(f'Cannot approve a purchase in status {purchase.status} for payment')
    lines = invoice_lines(purchase)
    if not lines:
        raise WorkflowError('No approved items')

    with transaction.atomic():
        if not purchase.invoice_number:
            purchase.invoice_number = PendingPurchase.next_invoice_number()
        purchase.invoice_total = sum((price for _, price in lines), Decimal('0'))
        purchase.invoice_accept_token = generate_token()
        purchase.invoice_created_at = timezone.now()
        purchase.approved_by = user
        purchase.approved_at = timezone.now()
        purchase.status = PendingPurchase.STATUS_AWAITING_PAYMENT
        purchase.save()
    return purchase, lines


def mark_paid(purchase, user):
    """Record payment and move the approved items into stock"""
    from gearops.inventory.conversion import create_equipment_from_inspection

    if purchase.status != PendingPurchase.STATUS_AWAITING_PAYMENT:
        raise WorkflowError('Purchase must be awaiting payment')

    session = related_or_none(purchase, 'inspection_session')
    with transaction.atomic():
        purchase.status = PendingPurchase.STATUS_PAYMENT_RECEIVED
        purchase.payment_received_at = timezone.now()
        purchase.payment_received_by = user
        purchase.save()
        if session is not None:
            created, errors = create_equipment_from_inspection(purchase, user)
        else:
            created, errors = [], []

    repair_count = 0
    if session is not None:
        repair_count = session.incoming_items.filter(
            status=IncomingGearItem.STATUS_APPROVED,
            verified_item__requires_repair=True,
        ).count()
    return created, errors, repair_count


def approve_to_inventory(purchase, user):
    """
    Older path without an inspection: approved or price-adjusted items go
    straight into stock.
    """
    from gearops.inventory.models import Equipment
    from gearops.inventory.sku import generate_sku

    items = list(purchase.items.filter(status__in=PRICED_ITEM_STATUSES))
    if not items:
        raise WorkflowError('No approved items')
    created = []
    with transaction.atomic():
        for item in items:
            price = Decimal(item.effective_price or 0)
            selling = item.suggested_sell_price
            if selling is None:
                selling = (price * Decimal('1.3')).quantize(Decimal('0.01'))
            equipment = Equipment.objects.create(
                sku=generate_sku(item.brand, item.serial_number),
                name=item.name,
                brand=item.brand or 'Unknown',
                model=item.model,
                description=item.description,
                serial_number=item.serial_number,
                acquisition_type=Equipment.ACQUISITION_PURCHASED,
                client=purchase.client,
                purchase_price=price,
                cost_price=price,
                selling_price=selling,
                images=item.image_urls or [],
                created_by=user,
            )
            item.status = PendingItem.STATUS_ADDED_TO_INVENTORY
            item.save(update_fields=['status', 'updated_at'])
            created.append(equipment)
        purchase.status = PendingPurchase.STATUS_APPROVED
        purchase.approved_by = user
        purchase.approved_at = timezone.now()
        purchase.save()
    return created


# Client responses (public quote link)

def accept_quote(purchase):
    if purchase.already_responded:
        raise WorkflowError('Quote already responded to')
    purchase.client_accepted_at = timezone.now()
    purchase.status = PendingPurchase.STATUS_CLIENT_ACCEPTED
    purchase.save()
    return purchase


def decline_quote(purchase, reason=''):
    if purchase.already_responded:
        raise WorkflowError('Quote already responded to')
    purchase.client_declined_at = timezone.now()
    purchase.client_decline_reason = reason or ''
    purchase.status = PendingPurchase.STATUS_CLIENT_DECLINED
    purchase.quote_confirmation_token = None
    purchase.quote_token_expires_at = None
    purchase.save()
    return purchase


def book_delivery(purchase, data):
    method = data['delivery_method']
    booking_status = (
        DeliveryBooking.STATUS_PENDING if method == DeliveryBooking.METHOD_SELF_DELIVER
        else DeliveryBooking.STATUS_CONFIRMED
    )
    with transaction.atomic():
        booking = DeliveryBooking.objects.create(
            delivery_method=method,
            requested_date=data.get('requested_date'),
            requested_time=data.get('requested_time') or '',
            courier_name=data.get('courier_name') or '',
            status=booking_status,
            confirmed_at=timezone.now() if booking_status == DeliveryBooking.STATUS_CONFIRMED else None,
        )
        purchase.delivery_booking = booking
        purchase.status = PendingPurchase.STATUS_AWAITING_DELIVERY
        purchase.save()
    return booking


def submit_tracking(purchase, courier_company, tracking_number):
    with transaction.atomic():
        purchase.courier_company = courier_company
        purchase.tracking_number = tracking_number
        purchase.status = PendingPurchase.STATUS_AWAITING_DELIVERY
        purchase.save()
        booking = purchase.delivery_booking
        if booking is not None:
            booking.tracking_number = tracking_number
            booking.courier_name = booking.courier_name or courier_company
            booking.save(update_fields=['tracking_number', 'courier_name', 'updated_at'])
    return purchase


def select_products(purchase, selections):
    """Apply the client's BUY / CONSIGNMENT / NOT_INTERESTED choices to the session items"""
    session = related_or_none(purchase, 'inspection_session')
    if session is None:
        raise WorkflowError('No inspection results to select from')
    items = {item.id: item for item in session.incoming_items.all()}
    unknown = [s['item_id'] for s in selections if s['item_id'] not in items]
    if unknown:
        raise WorkflowError('Unknown item(s) in selection', extra={'item_ids': unknown})

    with transaction.atomic():
        for selection in selections:
            item = items[selection['item_id']]
            if selection['selection'] == 'NOT_INTERESTED':
                item.not_interested = True
                item.client_selection = None
            else:
                item.not_interested = False
                item.client_selection = selection['selection']
            item.save(update_fields=['not_interested', 'client_selection', 'updated_at'])
    return list(items.values())


def submit_client_details(purchase, data, ip_address=None, user_agent=''):
    """
    Store the client's details, link (or create) the client record and move
    the purchase to AWAITING_PAYMENT. The quote link stops working afterwards.
    """
    if not purchase.client_accepted_at:
        raise WorkflowError('Please accept the quote first')
    if related_or_none(purchase, 'client_details') is not None:
        raise WorkflowError('Details already submitted')

    id_number = data.get('id_number') or None
    passport_number = data.get('passport_number') or None
    ok, error = validate_client_identity(id_number, passport_number)
    if not ok:
        raise WorkflowError(error)
    ok, error = validate_phone_number(data['phone'])
    if not ok:
        raise WorkflowError(error)

    date_of_birth = extract_dob_from_sa_id(id_number) if id_number else data.get('date_of_birth')
    bank = {
        'bank_name': data.get('bank_name') or '',
        'account_number': data.get('account_number') or '',
        'branch_code': data.get('branch_code') or '',
        'account_type': data.get('account_type') or '',
        'account_holder': data.get('account_holder') or '',
    }

    with transaction.atomic():
        client, _ = find_or_create_client(
            first_name=data['full_name'],
            surname=data['surname'],
            phone=data['phone'],
            email=data['email'],
        )
        updated = []
        for field, value in (
            ('id_number', id_number), ('passport_number', passport_number),
            ('date_of_birth', date_of_birth), ('physical_address', data['physical_address']),
            ('postal_address', data.get('postal_address')), *bank.items(),
        ):
            if value and not getattr(client, field):
                setattr(client, field, value)
                updated.append(field)
        if updated:
            client.save(update_fields=updated + ['updated_at'])

        details = ClientDetails.objects.create(
            purchase=purchase,
            client=client,
            full_name=data['full_name'],
            surname=data['surname'],
            id_number=id_number,
            passport_number=passport_number,
            date_of_birth=date_of_birth,
            email=data['email'],
            phone=data['phone'],
            physical_address=data['physical_address'],
            postal_address=data.get('postal_address') or '',
            ip_address=ip_address,
            user_agent=user_agent or '',
            **bank
        )
        purchase.client = client
        purchase.status = PendingPurchase.STATUS_AWAITING_PAYMENT
        purchase.quote_confirmation_token = None
        purchase.quote_token_expires_at = None
        purchase.save()
    return details


def update_invoice_bank_details(purchase, data):
    """Bank details the client confirms on the invoice link"""
    fields = ['bank_name', 'account_number', 'branch_code', 'account_type', 'account_holder']
    values = {field: data[field] for field in fields if data.get(field) is not None}
    if not values:
        raise WorkflowError('No bank details supplied')
    with transaction.atomic():
        client = purchase.client
        if client is not None:
            for field, value in values.items():
                setattr(client, field, value)
            client.save(update_fields=list(values) + ['updated_at'])
        details = related_or_none(purchase, 'client_details')
        if details is not None:
            for field, value in values.items():
                setattr(details, field, value)
            details.save(update_fields=list(values) + ['updated_at'])
    return values
