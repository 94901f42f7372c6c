import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from gearops.core.permissions import IsAdminRole
from gearops.core.utils import WorkflowError, check_admin_credentials, create_activity_log, error_response, paginate
from gearops.inspections.models import VerifiedGearItem
from gearops.purchasing.models import PendingPurchase
from . import bundles
from .filters import EquipmentFilter
from .models import Bundle, Equipment, PriceHistory, RepairLog
from .recommendation import get_price_recommendation
from .serializers import (
    EquipmentSerializer, EquipmentListSerializer, PriceUpdateSerializer,
    CompleteIntakeSerializer, RepairLogSerializer, BundleSerializer, BundleCreateSerializer,
    BundleRemoveItemSerializer,
)
from .sku import generate_sku, validate_sku

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def equipment_list_create(request):
    """List equipment (filtered, paginated) or add an item"""
    if request.method == 'GET':
        queryset = Equipment.objects.select_related('vendor', 'client')
        filterset = EquipmentFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return paginate(request, filterset.qs.order_by('-created_at'), EquipmentListSerializer)

    serializer = EquipmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    sku = data.get('sku') or generate_sku(data.get('brand'), data.get('serial_number'))
    equipment = serializer.save(sku=sku, created_by=request.user)
    create_activity_log(
        request=request,
        action='CREATED_EQUIPMENT',
        entity_type='EQUIPMENT',
        entity_id=equipment.id,
        details={'sku': equipment.sku, 'name': equipment.name}
    )
    return Response(EquipmentSerializer(equipment).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def equipment_detail(request, pk):
    """Retrieve, update or delete (admin) an equipment item"""
    equipment = get_object_or_404(
        Equipment.objects.select_related('vendor', 'client').prefetch_related('price_history', 'repairs'),
        pk=pk
    )

    if request.method == 'GET':
        return Response(EquipmentSerializer(equipment).data)
    elif request.method == 'PATCH':
        serializer = EquipmentSerializer(equipment, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        if serializer.validated_data.get('status') == Equipment.STATUS_SOLD and not equipment.sold_at:
            equipment = serializer.save(sold_at=timezone.now())
        else:
            equipment = serializer.save()
        create_activity_log(
            request=request,
            action='UPDATED_EQUIPMENT',
            entity_type='EQUIPMENT',
            entity_id=equipment.id,
            details={'fields': sorted(serializer.validated_data.keys())}
        )
        return Response(EquipmentSerializer(equipment).data)
    else:  # DELETE
        if not IsAdminRole().has_permission(request, None):
            return error_response('Admin access required', status.HTTP_403_FORBIDDEN)
        equipment_id, sku = equipment.id, equipment.sku
        equipment.delete()
        create_activity_log(
            request=request,
            action='DELETED_EQUIPMENT',
            entity_type='EQUIPMENT',
            entity_id=equipment_id,
            details={'sku': sku}
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def equipment_update_price(request, pk):
    """Change the selling price, keeping a price history entry"""
    equipment = get_object_or_404(Equipment, pk=pk)
    serializer = PriceUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    new_price = serializer.validated_data['price']
    reason = serializer.validated_data.get('reason') or 'Manual price update'
    old_price = equipment.selling_price
    with transaction.atomic():
        PriceHistory.objects.create(
            equipment=equipment,
            old_price=old_price,
            new_price=new_price,
            reason=reason,
            changed_by=request.user,
        )
        equipment.selling_price = new_price
        equipment.save(update_fields=['selling_price', 'updated_at'])

    create_activity_log(
        request=request,
        action='PRICE_UPDATED',
        entity_type='EQUIPMENT',
        entity_id=equipment.id,
        details={
            'old_price': str(old_price) if old_price is not None else None,
            'new_price': str(new_price),
            'reason': reason,
        }
    )
    return Response(EquipmentSerializer(equipment).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def equipment_complete_intake(request, pk):
    """
    Put an item on the shelf. Needs an admin's id and password, a unique SKU,
    a shelf location and a selling price.
    """
    equipment = get_object_or_404(Equipment, pk=pk)
    serializer = CompleteIntakeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    admin = check_admin_credentials(data['admin_id'], data['admin_password'])
    if admin is None:
        return error_response('Invalid admin credentials', status.HTTP_403_FORBIDDEN)

    sku = (data.get('sku') or equipment.sku or '').strip().upper()
    shelf_location = (data.get('shelf_location') or equipment.shelf_location or '').strip()
    selling_price = data.get('selling_price')
    if selling_price is None:
        selling_price = equipment.selling_price

    if not sku:
        return error_response('SKU is required')
    if not shelf_location:
        return error_response('Shelf location is required')
    if selling_price is None or selling_price <= 0:
        return error_response('Selling price must be greater than zero')
    if not validate_sku(sku, exclude_id=equipment.id):
        return error_response('SKU already exists')

    equipment.sku = sku
    equipment.shelf_location = shelf_location
    equipment.selling_price = selling_price
    equipment.intake_status = Equipment.INTAKE_COMPLETE
    equipment.status = Equipment.STATUS_READY_FOR_SALE
    equipment.save()

    create_activity_log(
        request=request,
        action='INTAKE_COMPLETED',
        entity_type='EQUIPMENT',
        entity_id=equipment.id,
        details={
            'sku': sku,
            'shelf_location': shelf_location,
            'selling_price': str(selling_price),
            'approved_by_admin': admin.id,
        }
    )
    return Response(EquipmentSerializer(equipment).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def equipment_validate_sku(request):
    sku = (request.query_params.get('sku') or '').strip().upper()
    if not sku:
        return error_response('sku is required')
    exclude_id = request.query_params.get('exclude_id')
    try:
        exclude_id = int(exclude_id) if exclude_id else None
    except ValueError:
        return error_response('exclude_id must be an integer')
    available = validate_sku(sku, exclude_id=exclude_id)
    return Response({'sku': sku, 'available': available, 'valid': available})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def equipment_recommend_price(request):
    """Suggested selling price from past sales"""
    params = request.query_params
    product_id = params.get('product_id')
    brand = params.get('brand', '').strip()
    model = params.get('model', '').strip()
    if not product_id and not brand and not model:
        return error_response('product_id or brand/model is required')
    try:
        product_id = int(product_id) if product_id else None
    except ValueError:
        return error_response('product_id must be an integer')
    recommendation = get_price_recommendation(
        product_id=product_id,
        brand=brand,
        model=model,
        condition=params.get('condition'),
    )
    return Response(recommendation)


def _items_awaiting_repair():
    """Verified items flagged for repair on paid purchases"""
    items = VerifiedGearItem.objects.filter(
        requires_repair=True,
        incoming_item__session__purchase__status=PendingPurchase.STATUS_PAYMENT_RECEIVED,
    ).select_related('product', 'incoming_item__session__purchase')
    results = []
    for verified in items:
        purchase = verified.incoming_item.session.purchase
        results.append({
            'verified_item_id': verified.id,
            'product_name': verified.product.name,
            'serial_number': verified.serial_number,
            'repair_notes': verified.repair_notes,
            'purchase_id': purchase.id,
            'customer_name': purchase.customer_name,
        })
    return results


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def repair_list_create(request):
    """Repair logs plus items flagged for repair at inspection"""
    if request.method == 'GET':
        queryset = RepairLog.objects.select_related('equipment')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response({
            'repairs': RepairLogSerializer(queryset, many=True).data,
            'items_requiring_repair': _items_awaiting_repair(),
        })

    serializer = RepairLogSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        repair = serializer.save()
        equipment = repair.equipment
        equipment.in_repair = True
        equipment.status = Equipment.STATUS_IN_REPAIR
        equipment.save(update_fields=['in_repair', 'status', 'updated_at'])
    create_activity_log(
        request=request,
        action='REPAIR_LOGGED',
        entity_type='REPAIR_LOG',
        entity_id=repair.id,
        details={'equipment_id': equipment.id, 'technician_name': repair.technician_name}
    )
    return Response(RepairLogSerializer(repair).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def repair_detail(request, pk):
    repair = get_object_or_404(RepairLog.objects.select_related('equipment'), pk=pk)
    if request.method == 'GET':
        return Response(RepairLogSerializer(repair).data)

    serializer = RepairLogSerializer(repair, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_status = serializer.validated_data.get('status')
    now = timezone.now()

    with transaction.atomic():
        extra = {}
        if new_status == RepairLog.STATUS_COMPLETED and not repair.completed_at:
            extra['completed_at'] = now
        elif new_status == RepairLog.STATUS_RETURNED and not repair.returned_at:
            extra['returned_at'] = now
        repair = serializer.save(**extra)

        equipment = repair.equipment
        if new_status in (RepairLog.STATUS_COMPLETED, RepairLog.STATUS_RETURNED):
            equipment.in_repair = False
            equipment.status = Equipment.STATUS_REPAIR_COMPLETED
            equipment.save(update_fields=['in_repair', 'status', 'updated_at'])
        elif new_status == RepairLog.STATUS_IN_PROGRESS:
            equipment.in_repair = True
            equipment.status = Equipment.STATUS_IN_REPAIR
            equipment.save(update_fields=['in_repair', 'status', 'updated_at'])

    create_activity_log(
        request=request,
        action='REPAIR_UPDATED',
        entity_type='REPAIR_LOG',
        entity_id=repair.id,
        details={'status': repair.status, 'equipment_id': repair.equipment_id}
    )
    return Response(RepairLogSerializer(repair).data)


def _bundle_queryset():
    return Bundle.objects.select_related('created_by', 'admin_approved_by').prefetch_related(
        'items__equipment__vendor', 'items__equipment__client'
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bundle_list_create(request):
    """
    GET lists bundles (active ones unless ?status= says otherwise).
    POST groups shelf items into a bundle; needs an admin's id and password.
    """
    if request.method == 'GET':
        status_filter = request.query_params.get('status', Bundle.STATUS_ACTIVE).upper()
        queryset = _bundle_queryset()
        if status_filter != 'ALL':
            if status_filter not in dict(Bundle.STATUS_CHOICES):
                return error_response(f'Invalid status: {status_filter}')
            queryset = queryset.filter(status=status_filter)
        return paginate(request, queryset.order_by('-created_at'), BundleSerializer)

    serializer = BundleCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    admin = check_admin_credentials(data['admin_id'], data['admin_password'])
    if admin is None:
        return error_response('Invalid admin credentials', status.HTTP_403_FORBIDDEN)

    try:
        bundle = bundles.create_bundle(
            title=data['title'],
            description=data['description'],
            selling_price=data['selling_price'],
            equipment_ids=data['equipment_ids'],
            admin=admin,
            user=request.user,
        )
    except WorkflowError as e:
        return e.to_response()
    return Response(
        {'success': True, 'bundle': BundleSerializer(_bundle_queryset().get(pk=bundle.pk)).data},
        status=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def bundle_detail(request, pk):
    """Retrieve, edit the listing of, or dissolve a bundle"""
    bundle = get_object_or_404(_bundle_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(BundleSerializer(bundle).data)
    elif request.method == 'PATCH':
        if bundle.status != Bundle.STATUS_ACTIVE:
            return error_response('Bundle is not active', status=bundle.status)
        serializer = BundleSerializer(bundle, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        bundle = serializer.save()
        create_activity_log(
            request=request,
            action='UPDATED_BUNDLE',
            entity_type='BUNDLE',
            entity_id=bundle.id,
            details={'fields': sorted(serializer.validated_data.keys())}
        )
        return Response(BundleSerializer(bundle).data)
    else:  # DELETE
        try:
            bundles.dissolve_bundle(bundle, request.user)
        except WorkflowError as e:
            return e.to_response()
        return Response({'success': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def bundle_remove_item(request, pk):
    bundle = get_object_or_404(Bundle, pk=pk)
    serializer = BundleRemoveItemSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        bundle = bundles.remove_bundle_item(bundle, serializer.validated_data['equipment_id'], request.user)
    except WorkflowError as e:
        return e.to_response()
    return Response({'success': True, 'bundle': BundleSerializer(_bundle_queryset().get(pk=bundle.pk)).data})
