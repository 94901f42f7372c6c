import logging
from datetime import timedelta
from decimal import Decimal

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Q
from django.utils import timezone

from gearops.consignment.models import ConsignmentChangeRequest
from gearops.core.cache_utils import (
    cached_query, DASHBOARD_STATS_CACHE_TTL, NOTIFICATION_COUNTS_CACHE_TTL,
)
from gearops.core.models import ActivityLog
from gearops.core.serializers import ActivityLogSerializer
from gearops.inventory.models import Equipment
from gearops.logistics.models import DeliveryBooking
from gearops.parties.models import Vendor
from gearops.purchasing.models import PendingPurchase

logger = logging.getLogger('gearops.reports')

VALUED_STATUSES = [
    Equipment.STATUS_READY_FOR_SALE,
    Equipment.STATUS_RESERVED,
    Equipment.STATUS_PENDING_INSPECTION,
    Equipment.STATUS_INSPECTED,
]


@cached_query(cache_ttl=DASHBOARD_STATS_CACHE_TTL, key_prefix='dashboard_stats')
def get_dashboard_stats():
    equipment = Equipment.objects.all()
    total_value = equipment.filter(status__in=VALUED_STATUSES).aggregate(
        total=Sum('selling_price')
    )['total'] or Decimal('0.00')
    recent = ActivityLog.objects.select_related('user').order_by('-created_at')[:10]
    return {
        'totalInventory': equipment.count(),
        'pendingInspection': equipment.filter(status=Equipment.STATUS_PENDING_INSPECTION).count(),
        'inRepair': equipment.filter(status=Equipment.STATUS_IN_REPAIR).count(),
        'readyForSale': equipment.filter(status=Equipment.STATUS_READY_FOR_SALE).count(),
        'totalValue': str(total_value),
        'activeVendors': Vendor.objects.filter(is_active=True).count(),
        'recentActivity': list(ActivityLogSerializer(recent, many=True).data),
    }


@cached_query(cache_ttl=NOTIFICATION_COUNTS_CACHE_TTL, key_prefix='notification_counts')
def get_notification_counts():
    """Badge counts for the sidebar"""
    flagged_bookings = DeliveryBooking.objects.filter(
        delivery_method=DeliveryBooking.METHOD_COURIER, flagged_for_follow_up=True
    ).count()
    incoming = PendingPurchase.objects.filter(status__in=[
        PendingPurchase.STATUS_INSPECTION_IN_PROGRESS, PendingPurchase.STATUS_AWAITING_DELIVERY,
    ]).count()
    day_ago = timezone.now() - timedelta(hours=24)
    consignment = ConsignmentChangeRequest.objects.filter(
        Q(status=ConsignmentChangeRequest.STATUS_PENDING_CLIENT)
        | Q(status=ConsignmentChangeRequest.STATUS_CONFIRMED, client_confirmed_at__gte=day_ago)
    ).count()
    return {
        'calendar': DeliveryBooking.objects.filter(status=DeliveryBooking.STATUS_PENDING).count(),
        'incomingGear': incoming + flagged_bookings,
        'awaitingPayment': PendingPurchase.objects.filter(status=PendingPurchase.STATUS_AWAITING_PAYMENT).count(),
        'uploadingStock': Equipment.objects.filter(intake_status=Equipment.INTAKE_PENDING).count(),
        'inventory': 0,
        'consignment': consignment,
        'repairs': Equipment.objects.filter(Q(in_repair=True) | Q(status=Equipment.STATUS_IN_REPAIR)).count(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    return Response(get_dashboard_stats())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_counts(request):
    return Response(get_notification_counts())
