from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q, Count
from django.shortcuts import get_object_or_404
from gearops.core.permissions import IsAdminRole, get_user_role, has_permission, ADMIN, MANAGER
from gearops.core.utils import create_activity_log, error_response, paginate
from .models import Vendor, Client
from .serializers import VendorSerializer, ClientSerializer, ClientListSerializer, ClientMergeSerializer
from .services import ClientMergeError, clients_with_counts, client_with_history, merge_clients


# Vendor views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def vendor_list_create(request):
    """List vendors with their equipment counts or create a vendor"""
    if request.method == 'GET':
        queryset = Vendor.objects.annotate(equipment_count=Count('equipment')).order_by('name')
        search = request.query_params.get('q')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(email__icontains=search) | Q(phone__icontains=search)
            )
        active = request.query_params.get('is_active')
        if active is not None:
            queryset = queryset.filter(is_active=active.lower() in ('true', '1'))
        serializer = VendorSerializer(queryset, many=True)
        return Response(serializer.data)

    if not has_permission(get_user_role(request.user), MANAGER):
        return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
    serializer = VendorSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def vendor_detail(request, pk):
    """Retrieve, update or delete a vendor"""
    vendor = get_object_or_404(Vendor.objects.annotate(equipment_count=Count('equipment')), pk=pk)
    role = get_user_role(request.user)

    if request.method == 'GET':
        return Response(VendorSerializer(vendor).data)
    elif request.method in ('PUT', 'PATCH'):
        if not has_permission(role, MANAGER):
            return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
        serializer = VendorSerializer(vendor, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if role != ADMIN:
            return error_response('Admin access required', status.HTTP_403_FORBIDDEN)
        if vendor.equipment_count:
            return error_response(
                f'Vendor has {vendor.equipment_count} equipment item(s); deactivate it instead'
            )
        vendor.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_list_create(request):
    """List clients with equipment totals or create a client"""
    if request.method == 'GET':
        queryset = clients_with_counts()
        search = request.query_params.get('q')
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search) | Q(surname__icontains=search) |
                Q(email__icontains=search) | Q(phone__icontains=search)
            )
        return paginate(request, queryset.order_by('-created_at'), ClientListSerializer, default_limit=50)

    serializer = ClientSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def client_detail(request, pk):
    """Client with equipment history, or a partial update"""
    from gearops.inventory.serializers import EquipmentListSerializer

    if request.method == 'GET':
        client, equipment = client_with_history(pk)
        if client is None:
            return error_response('Client not found', status.HTTP_404_NOT_FOUND)
        data = ClientSerializer(client).data
        data['equipment'] = EquipmentListSerializer(equipment, many=True).data
        return Response(data)

    client = get_object_or_404(Client, pk=pk)
    serializer = ClientSerializer(client, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def client_merge(request):
    """Merge a duplicate client into another"""
    serializer = ClientMergeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    source_id = serializer.validated_data['source_id']
    target_id = serializer.validated_data['target_id']
    try:
        result = merge_clients(source_id, target_id)
    except ClientMergeError as e:
        return error_response(str(e))

    create_activity_log(
        request=request,
        action='CLIENTS_MERGED',
        entity_type='CLIENT',
        entity_id=target_id,
        details={
            'source_id': source_id,
            'moved_equipment': result['moved_equipment'],
            'moved_purchases': result['moved_purchases'],
            'filled_fields': result['filled_fields'],
        }
    )
    return Response({
        'success': True,
        'client': ClientSerializer(result['target']).data,
        'moved_equipment': result['moved_equipment'],
        'moved_purchases': result['moved_purchases'],
    })
