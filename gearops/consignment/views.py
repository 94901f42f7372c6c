from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.shortcuts import get_object_or_404
from gearops.core.permissions import IsManagerOrAdmin
from gearops.core.utils import WorkflowError, check_admin_credentials, error_response, paginate
from gearops.inventory.models import Equipment
from .models import ConsignmentChangeRequest
from .serializers import (
    ConsignmentChangeRequestSerializer, ConsignmentChangeRequestCreateSerializer,
    PublicChangeRequestSerializer, ConfirmChangeSerializer, DeclineChangeSerializer,
)
from . import services


@api_view(['GET', 'POST'])
@permission_classes([IsManagerOrAdmin])
def change_request_list_create(request):
    """Payout change requests; creating one needs an admin's id and password"""
    if request.method == 'GET':
        queryset = ConsignmentChangeRequest.objects.select_related('equipment', 'client')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        equipment_id = request.query_params.get('equipment')
        if equipment_id:
            queryset = queryset.filter(equipment_id=equipment_id)
        return paginate(request, queryset, ConsignmentChangeRequestSerializer)

    serializer = ConsignmentChangeRequestCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    admin = check_admin_credentials(data['admin_id'], data['admin_password'])
    if admin is None:
        return error_response('Invalid admin credentials', status.HTTP_403_FORBIDDEN)

    equipment = get_object_or_404(Equipment.objects.select_related('client'), pk=data['equipment_id'])
    try:
        change = services.request_change(
            equipment,
            data['proposed_payout'],
            admin=admin,
            user=request.user,
            proposed_selling_price=data.get('proposed_selling_price'),
            reason=data.get('reason', ''),
        )
    except WorkflowError as e:
        return e.to_response()
    return Response(ConsignmentChangeRequestSerializer(change).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def change_request_detail(request, pk):
    change = get_object_or_404(ConsignmentChangeRequest.objects.select_related('equipment', 'client'), pk=pk)
    return Response(ConsignmentChangeRequestSerializer(change).data)


def _by_token(token):
    return get_object_or_404(ConsignmentChangeRequest.objects.select_related('equipment', 'client'), token=token)


@api_view(['GET'])
@permission_classes([AllowAny])
def review_change(request, token):
    return Response(PublicChangeRequestSerializer(_by_token(token)).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def confirm_change(request, token):
    change = _by_token(token)
    serializer = ConfirmChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        change = services.confirm_change(change, serializer.validated_data.get('adjusted_payout'))
    except WorkflowError as e:
        return e.to_response()
    return Response(PublicChangeRequestSerializer(change).data)


@api_view(['POST'])
@permission_classes([AllowAny])
def decline_change(request, token):
    change = _by_token(token)
    serializer = DeclineChangeSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        change = services.decline_change(change, serializer.validated_data.get('reason', ''))
    except WorkflowError as e:
        return e.to_response()
    return Response(PublicChangeRequestSerializer(change).data)
