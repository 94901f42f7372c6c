from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count
from django.shortcuts import get_object_or_404
from gearops.catalog.models import Product
from gearops.core.permissions import get_user_role, ADMIN
from gearops.core.utils import WorkflowError, create_activity_log, error_response
from .models import InspectionSession, IncomingGearItem
from .serializers import (
    InspectionSessionSerializer, InspectionSessionListSerializer, InspectionSessionCreateSerializer,
    IncomingGearItemSerializer, IncomingGearItemInputSerializer, ItemActionSerializer,
    IdentifySerializer, PriceOverrideSerializer,
)
from . import services


def _load_item(pk):
    return get_object_or_404(
        IncomingGearItem.objects.select_related('session', 'verified_item__product'),
        pk=pk
    )


def _item_response(item, **extra):
    item = _load_item(item.pk)
    return Response({**extra, 'item': IncomingGearItemSerializer(item).data})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def session_list_create(request):
    """List inspection sessions or open a new one"""
    if request.method == 'GET':
        queryset = InspectionSession.objects.annotate(item_count=Count('incoming_items')).order_by('-created_at')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response(InspectionSessionListSerializer(queryset, many=True).data)

    serializer = InspectionSessionCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    session = services.create_session(
        session_name=data['session_name'],
        user=request.user,
        notes=data.get('notes', ''),
        items=data.get('items', []),
    )
    create_activity_log(
        request=request,
        action='INSPECTION_STARTED',
        entity_type='INSPECTION_SESSION',
        entity_id=session.id,
        details={'session_number': session.session_number, 'items': session.incoming_items.count()}
    )
    return Response(InspectionSessionSerializer(session).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def session_detail(request, pk):
    session = get_object_or_404(
        InspectionSession.objects.prefetch_related(
            'incoming_items__verified_item__answers',
            'incoming_items__verified_item__accessories',
        ),
        pk=pk
    )
    return Response(InspectionSessionSerializer(session).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def session_add_item(request, pk):
    """Add an item to an open session (walk-ins, extra gear in the box)"""
    session = get_object_or_404(InspectionSession, pk=pk)
    if session.status == InspectionSession.STATUS_COMPLETED:
        return error_response('Session is completed')
    serializer = IncomingGearItemInputSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    item = services.add_incoming_item(session, serializer.validated_data)
    return Response(IncomingGearItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def item_detail(request, pk):
    """
    GET an incoming item with its verification.
    PATCH runs an action: verify, approve, reopen or reject.
    """
    item = _load_item(pk)
    if request.method == 'GET':
        return Response(IncomingGearItemSerializer(item).data)

    serializer = ItemActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    action = data['action']
    if action not in ItemActionSerializer.ACTIONS:
        return error_response('Invalid action')

    is_admin = get_user_role(request.user) == ADMIN
    verified = services.related_or_none(item, 'verified_item')

    if action == 'reject' and verified is None:
        services.reject_item(item)
        return _item_response(item, success=True, message='Item rejected')
    if verified is None:
        return error_response('Verified item not found', status.HTTP_404_NOT_FOUND)
    if verified.locked and action != 'reopen' and not is_admin:
        return error_response('Item is locked. Only admins can modify.', status.HTTP_403_FORBIDDEN)

    try:
        if action == 'verify':
            verified, snapshot = services.verify_item(item, data, request.user)
            log_action, message = 'ITEM_VERIFIED', 'Item verified'
            details = {'condition': verified.condition, 'priced': snapshot is not None}
        elif action == 'approve':
            services.approve_item(item, request.user)
            log_action, message, details = 'ITEM_APPROVED', 'Item approved', {}
        elif action == 'reopen':
            if not is_admin:
                return error_response('Only admins can reopen items', status.HTTP_403_FORBIDDEN)
            services.reopen_item(item, request.user, data.get('reason', ''))
            log_action, message, details = 'ITEM_REOPENED', 'Item reopened', {'reason': data.get('reason')}
        else:
            services.reject_item(item)
            log_action, message, details = 'ITEM_REJECTED', 'Item rejected', {}
    except WorkflowError as e:
        return e.to_response()

    create_activity_log(
        request=request,
        action=log_action,
        entity_type='VERIFIED_GEAR_ITEM',
        entity_id=verified.id,
        details=details,
    )
    return _item_response(item, success=True, message=message)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def item_identify(request, pk):
    """Identify (or re-identify) the catalog product for an incoming item"""
    item = _load_item(pk)
    serializer = IdentifySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    product = Product.objects.filter(pk=serializer.validated_data['product_id']).first()
    if product is None:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    existing = services.related_or_none(item, 'verified_item')
    if existing is not None and existing.locked and get_user_role(request.user) != ADMIN:
        return error_response('Item is locked. Only admins can modify.', status.HTTP_403_FORBIDDEN)

    old_product_id = existing.product_id if existing else None
    verified, reidentified = services.identify_item(item, product)
    create_activity_log(
        request=request,
        action='ITEM_IDENTIFIED',
        entity_type='VERIFIED_GEAR_ITEM',
        entity_id=verified.id,
        details={
            'product_id': product.id,
            'product_name': product.name,
            'old_product_id': old_product_id,
            'reidentified': reidentified,
        }
    )
    return _item_response(item, reidentified=reidentified)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def item_price_override(request, pk):
    """Set or remove a manual price override"""
    item = _load_item(pk)
    verified = services.related_or_none(item, 'verified_item')
    if verified is None:
        return error_response('Verified item not found', status.HTTP_404_NOT_FOUND)
    if verified.locked and get_user_role(request.user) != ADMIN:
        return error_response('Item is locked. Only admins can override prices.', status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        removed = services.remove_price_override(verified)
        if removed:
            create_activity_log(
                request=request,
                action='PRICE_OVERRIDE_REMOVED',
                entity_type='VERIFIED_GEAR_ITEM',
                entity_id=verified.id,
            )
        return _item_response(item, success=True, message='Reverted to automatic pricing')

    serializer = PriceOverrideSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    override = services.set_price_override(verified, serializer.validated_data, request.user)
    create_activity_log(
        request=request,
        action='PRICE_OVERRIDDEN',
        entity_type='VERIFIED_GEAR_ITEM',
        entity_id=verified.id,
        details={
            'override_buy_price': str(override.override_buy_price) if override.override_buy_price is not None else None,
            'override_consign_price': str(override.override_consign_price) if override.override_consign_price is not None else None,
            'reason': override.override_reason,
        }
    )
    return _item_response(item, success=True, message='Price override saved')
