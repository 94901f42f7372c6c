from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from gearops.core.permissions import get_user_role, has_permission, MANAGER
from gearops.core.utils import error_response
from .models import DeliveryBooking, CalendarAvailability
from .serializers import DeliveryBookingSerializer, CalendarAvailabilitySerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def delivery_booking_list_create(request):
    """List delivery bookings (?status=) or book one, optionally for a purchase"""
    from gearops.purchasing.models import PendingPurchase

    if request.method == 'GET':
        queryset = DeliveryBooking.objects.prefetch_related('purchases').order_by('-created_at')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if request.query_params.get('flagged') == 'true':
            queryset = queryset.filter(flagged_for_follow_up=True)
        return Response(DeliveryBookingSerializer(queryset, many=True).data)

    serializer = DeliveryBookingSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    purchase_id = serializer.validated_data.pop('purchase_id', None)
    purchase = None
    if purchase_id is not None:
        purchase = PendingPurchase.objects.filter(pk=purchase_id).first()
        if purchase is None:
            return error_response('Purchase not found', status.HTTP_404_NOT_FOUND)

    with transaction.atomic():
        booking = serializer.save()
        if purchase is not None:
            purchase.delivery_booking = booking
            purchase.save(update_fields=['delivery_booking', 'updated_at'])
    return Response(DeliveryBookingSerializer(booking).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def delivery_booking_detail(request, pk):
    """Confirm, decline or update a booking"""
    booking = get_object_or_404(DeliveryBooking, pk=pk)
    if request.method == 'GET':
        return Response(DeliveryBookingSerializer(booking).data)

    serializer = DeliveryBookingSerializer(booking, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    serializer.validated_data.pop('purchase_id', None)
    new_status = serializer.validated_data.get('status')
    extra = {}
    if new_status == DeliveryBooking.STATUS_CONFIRMED and booking.status != DeliveryBooking.STATUS_CONFIRMED:
        extra.update(confirmed_at=timezone.now(), confirmed_by=request.user)
    elif new_status == DeliveryBooking.STATUS_DECLINED and booking.status != DeliveryBooking.STATUS_DECLINED:
        extra['declined_at'] = timezone.now()
    booking = serializer.save(**extra)
    return Response(DeliveryBookingSerializer(booking).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def availability_list_create(request):
    """Drop-off availability rules; managers maintain them"""
    if request.method == 'GET':
        queryset = CalendarAvailability.objects.all()
        day = request.query_params.get('day_of_week')
        specific_date = request.query_params.get('specific_date')
        if day is not None and day != '':
            try:
                queryset = queryset.filter(day_of_week=int(day))
            except ValueError:
                return error_response('day_of_week must be 0-6')
        if specific_date:
            queryset = queryset.filter(specific_date=specific_date)
        return Response(CalendarAvailabilitySerializer(queryset, many=True).data)

    if not has_permission(get_user_role(request.user), MANAGER):
        return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
    serializer = CalendarAvailabilitySerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(created_by=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def availability_detail(request, pk):
    if not has_permission(get_user_role(request.user), MANAGER):
        return error_response('Manager or admin access required', status.HTTP_403_FORBIDDEN)
    slot = get_object_or_404(CalendarAvailability, pk=pk)

    if request.method == 'PATCH':
        serializer = CalendarAvailabilitySerializer(slot, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    slot.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
