import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from gearops.core.permissions import IsAuthenticatedOrApiKey
from gearops.core.utils import WorkflowError, create_activity_log, error_response, get_client_ip, paginate
from gearops.inspections.pricing import format_price
from gearops.inspections.serializers import InspectionSessionSerializer
from gearops.inspections.services import item_prices, related_or_none
from .models import PendingPurchase, PendingItem
from .serializers import (
    PendingPurchaseSerializer, PendingPurchaseListSerializer, PendingPurchaseCreateSerializer,
    PendingItemSerializer, PendingItemUpdateSerializer, PurchaseUpdateSerializer, SendQuoteSerializer,
    WalkInSerializer, DeclineQuoteSerializer, DeliveryRequestSerializer, TrackingSerializer,
    SelectProductsSerializer, ClientDetailsInputSerializer, BankDetailsSerializer,
)
from . import services

logger = logging.getLogger(__name__)

INVALID_LINK = 'Invalid or expired quote link'


def _load_purchase(pk):
    return get_object_or_404(
        PendingPurchase.objects.select_related('client', 'delivery_booking').prefetch_related('items'),
        pk=pk
    )


def _log(request, action, purchase, **details):
    create_activity_log(
        request=request,
        action=action,
        entity_type='PENDING_PURCHASE',
        entity_id=purchase.id,
        details={'customer_name': purchase.customer_name, **details}
    )


# Staff endpoints

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrApiKey])
def incoming_gear_list_create(request):
    """
    GET: purchases newest first, optional ?status= (ALL for every status).
    POST: create a purchase with its items. Also accepts X-API-Key.
    """
    if request.method == 'GET':
        if not request.user or not request.user.is_authenticated:
            return error_response('Authentication credentials were not provided.', status.HTTP_401_UNAUTHORIZED)
        queryset = PendingPurchase.objects.annotate(item_count=Count('items')).order_by('-created_at')
        status_filter = request.query_params.get('status')
        if status_filter and status_filter != 'ALL':
            queryset = queryset.filter(status=status_filter)
        return paginate(request, queryset, PendingPurchaseListSerializer)

    serializer = PendingPurchaseCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = dict(serializer.validated_data)
    items = data.pop('items')
    purchase = services.create_purchase(data, items, user=request.user)
    _log(request, 'PURCHASE_CREATED', purchase, items=len(items), source='dashboard')
    return Response(PendingPurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def incoming_gear_detail(request, pk):
    """Purchase detail, or review / approve / reject it"""
    purchase = _load_purchase(pk)
    if request.method == 'GET':
        return Response(PendingPurchaseSerializer(purchase).data)

    serializer = PurchaseUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    action = data.get('action')
    if action:
        services.review_purchase(purchase, action, request.user, data.get('rejected_reason', ''))
        log_action = {
            'review': 'PURCHASE_REVIEWED',
            'approve': 'PURCHASE_APPROVED',
            'reject': 'PURCHASE_REJECTED',
        }[action]
        _log(request, log_action, purchase, status=purchase.status)
    if 'status' in data:
        purchase.status = data['status']
    if 'notes' in data:
        purchase.notes = data['notes']
    if 'status' in data or 'notes' in data:
        purchase.save()
    return Response(PendingPurchaseSerializer(_load_purchase(pk)).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def incoming_gear_item_detail(request, pk):
    """Adjust prices or status of a quoted item"""
    item = get_object_or_404(PendingItem, pk=pk)
    serializer = PendingItemUpdateSerializer(item, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.save()
    return Response(PendingItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_quote(request, pk):
    purchase = _load_purchase(pk)
    serializer = SendQuoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        token = services.send_quote(purchase, serializer.validated_data.get('customer_email'))
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'QUOTE_SENT', purchase, email=purchase.customer_email)
    return Response({
        'success': True,
        'message': 'Quote sent',
        'token': token,
        'expires_at': purchase.quote_token_expires_at,
        'purchase': PendingPurchaseSerializer(purchase).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_received(request, pk):
    """Gear has arrived; opens the inspection session"""
    purchase = _load_purchase(pk)
    try:
        session, undo_expires_at = services.mark_received(purchase, request.user)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'GEAR_RECEIVED', purchase, session_id=session.id if session else None)
    return Response({
        'success': True,
        'message': 'Gear marked as received',
        'can_undo': True,
        'undo_expires_at': undo_expires_at,
        'inspection_session_id': session.id if session else None,
        'purchase': PendingPurchaseSerializer(purchase).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def undo_received(request, pk):
    purchase = _load_purchase(pk)
    try:
        services.undo_received(purchase)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'GEAR_RECEIVED_UNDONE', purchase)
    return Response({
        'success': True,
        'message': 'Gear receipt undone',
        'purchase': PendingPurchaseSerializer(purchase).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notify_client(request, pk):
    purchase = _load_purchase(pk)
    try:
        services.notify_client(purchase)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'CLIENT_NOTIFIED', purchase)
    return Response({'success': True, 'client_notified_at': purchase.client_notified_at})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def start_inspection(request, pk):
    purchase = _load_purchase(pk)
    try:
        session = services.start_inspection(purchase, request.user)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'INSPECTION_STARTED', purchase, session_id=session.id)
    return Response(InspectionSessionSerializer(session).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_final_quote(request, pk):
    purchase = _load_purchase(pk)
    try:
        services.send_final_quote(purchase)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'FINAL_QUOTE_SENT', purchase)
    return Response({
        'success': True,
        'message': 'Final quote sent',
        'token': purchase.quote_confirmation_token,
        'purchase': PendingPurchaseSerializer(purchase).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def approve_purchase(request, pk):
    """Add approved items straight to stock (purchases that skip inspection)"""
    purchase = _load_purchase(pk)
    try:
        created = services.approve_to_inventory(purchase, request.user)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'PURCHASE_APPROVED', purchase, equipment_ids=[e.id for e in created])
    return Response({
        'success': True,
        'equipment_ids': [e.id for e in created],
        'purchase': PendingPurchaseSerializer(_load_purchase(pk)).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def approve_for_payment(request, pk):
    """Generate the supplier invoice"""
    purchase = _load_purchase(pk)
    try:
        purchase, lines = services.approve_for_payment(purchase, request.user)
    except WorkflowError as e:
        return e.to_response()
    _log(
        request, 'INVOICE_CREATED', purchase,
        invoice_number=purchase.invoice_number,
        total=str(purchase.invoice_total),
        item_count=len(lines),
    )
    return Response({
        'success': True,
        'invoice_number': purchase.invoice_number,
        'invoice_total': purchase.invoice_total,
        'invoice_accept_token': purchase.invoice_accept_token,
        'lines': [{'name': name, 'price': price} for name, price in lines],
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_paid(request, pk):
    purchase = _load_purchase(pk)
    try:
        created, errors, repair_count = services.mark_paid(purchase, request.user)
    except WorkflowError as e:
        return e.to_response()
    _log(
        request, 'PAYMENT_RECEIVED', purchase,
        equipment_ids=[e.id for e in created],
        errors=len(errors),
        items_requiring_repair=repair_count,
    )
    if repair_count:
        logger.info(f"Purchase {purchase.id}: {repair_count} item(s) need repair")
    return Response({
        'success': True,
        'message': 'Purchase marked as paid',
        'equipment_ids': [e.id for e in created],
        'errors': errors,
        'items_requiring_repair': repair_count,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_walk_in(request):
    serializer = WalkInSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    purchase, session, client_created = services.create_walk_in(serializer.validated_data, request.user)
    _log(request, 'WALK_IN_CREATED', purchase, session_id=session.id, client_created=client_created)
    return Response({
        'purchase': PendingPurchaseSerializer(purchase).data,
        'inspection_session': InspectionSessionSerializer(session).data,
        'client_created': client_created,
    }, status=status.HTTP_201_CREATED)


# Public quote link endpoints

def _valid_purchase(token):
    return services.validate_quote_token(token)


@api_view(['GET'])
@permission_classes([AllowAny])
def quote_view(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    if purchase.already_responded:
        return error_response(
            'Quote already responded to',
            accepted=purchase.client_accepted_at is not None,
            declined=purchase.client_declined_at is not None,
        )
    return Response({
        'success': True,
        'quote': {
            'id': purchase.id,
            'customer_name': purchase.customer_name,
            'items': [
                {
                    'name': item.name,
                    'brand': item.brand,
                    'model': item.model,
                    'condition': item.condition,
                    'description': item.description,
                    'price': item.effective_price,
                    'image_urls': item.image_urls,
                }
                for item in purchase.items.exclude(status=PendingItem.STATUS_REJECTED)
            ],
            'total_amount': purchase.total_quote_amount,
            'created_at': purchase.created_at,
            'expires_at': purchase.quote_token_expires_at,
        }
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def quote_inspection(request, token):
    """Inspected items with prices, for the client's product selection"""
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    session = related_or_none(purchase, 'inspection_session')
    if session is None:
        return error_response('No inspection data found for this quote', status.HTTP_404_NOT_FOUND)

    items = []
    for item in session.incoming_items.select_related('verified_item__product'):
        verified = related_or_none(item, 'verified_item')
        if verified is None or verified.approved_at is None:
            continue
        prices = item_prices(verified)
        items.append({
            'id': item.id,
            'product_name': verified.product.name,
            'condition': verified.condition,
            'serial_number': verified.serial_number,
            'general_notes': verified.general_notes,
            'buy_price': prices['final_buy_price'],
            'consign_price': prices['final_consign_price'],
            'buy_price_display': format_price(prices['final_buy_price']),
            'consign_price_display': format_price(prices['final_consign_price']),
            'images': item.client_images,
            'client_selection': item.client_selection,
            'not_interested': item.not_interested,
        })
    return Response({
        'success': True,
        'purchase': {'id': purchase.id, 'customer_name': purchase.customer_name, 'status': purchase.status},
        'inspection': {'session_name': session.session_name, 'status': session.status, 'completed_at': session.completed_at},
        'items': items,
        'expires_at': purchase.quote_token_expires_at,
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def quote_accept(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    try:
        services.accept_quote(purchase)
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'QUOTE_ACCEPTED', purchase)
    return Response({'success': True, 'message': 'Quote accepted', 'status': purchase.status})


@api_view(['POST'])
@permission_classes([AllowAny])
def quote_decline(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    serializer = DeclineQuoteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        services.decline_quote(purchase, serializer.validated_data.get('reason', ''))
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'QUOTE_DECLINED', purchase, reason=purchase.client_decline_reason)
    return Response({'success': True, 'message': 'Quote declined', 'status': purchase.status})


@api_view(['POST'])
@permission_classes([AllowAny])
def quote_delivery(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    serializer = DeliveryRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    booking = services.book_delivery(purchase, serializer.validated_data)
    _log(request, 'DELIVERY_BOOKED', purchase, booking_id=booking.id, method=booking.delivery_method)
    return Response({
        'success': True,
        'booking_id': booking.id,
        'booking_status': booking.status,
        'status': purchase.status,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def quote_tracking(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    serializer = TrackingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    services.submit_tracking(purchase, data['courier_company'], data['tracking_number'])
    _log(request, 'TRACKING_SUBMITTED', purchase, tracking_number=purchase.tracking_number)
    return Response({'success': True, 'status': purchase.status})


@api_view(['POST'])
@permission_classes([AllowAny])
def quote_select_products(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    serializer = SelectProductsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        items = services.select_products(purchase, serializer.validated_data['selections'])
    except WorkflowError as e:
        return e.to_response()
    return Response({
        'success': True,
        'items': [
            {'id': item.id, 'client_selection': item.client_selection, 'not_interested': item.not_interested}
            for item in items
        ],
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def quote_submit_details(request, token):
    purchase = _valid_purchase(token)
    if purchase is None:
        return error_response(INVALID_LINK, status.HTTP_404_NOT_FOUND)
    serializer = ClientDetailsInputSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        details = services.submit_client_details(
            purchase,
            serializer.validated_data,
            ip_address=get_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )
    except WorkflowError as e:
        return e.to_response()
    _log(request, 'CLIENT_DETAILS_SUBMITTED', purchase, client_id=details.client_id)
    return Response({
        'success': True,
        'message': 'Details submitted successfully. You will be contacted shortly regarding payment.',
    })


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def invoice_view(request, invoice_token):
    """Supplier invoice summary; POST confirms the bank details to pay into"""
    purchase = PendingPurchase.objects.filter(invoice_accept_token=invoice_token).first() if invoice_token else None
    if purchase is None:
        return error_response('Invoice not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        lines = services.invoice_lines(purchase)
        return Response({
            'invoice_number': purchase.invoice_number,
            'invoice_total': purchase.invoice_total,
            'invoice_total_display': format_price(purchase.invoice_total),
            'customer_name': purchase.customer_name,
            'status': purchase.status,
            'created_at': purchase.invoice_created_at,
            'lines': [{'name': name, 'price': price} for name, price in lines],
        })

    if purchase.status != PendingPurchase.STATUS_AWAITING_PAYMENT:
        return error_response('Invoice is no longer awaiting payment')
    serializer = BankDetailsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        services.update_invoice_bank_details(purchase, serializer.validated_data)
    except WorkflowError as e:
        return e.to_response()
    logger.info(f"Bank details confirmed for invoice {purchase.invoice_number} at {timezone.now().isoformat()}")
    return Response({'success': True, 'message': 'Bank details saved'})
