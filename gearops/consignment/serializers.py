from decimal import Decimal

from rest_framework import serializers
from .models import ConsignmentChangeRequest


class ConsignmentChangeRequestSerializer(serializers.ModelSerializer):
    equipment_sku = serializers.CharField(source='equipment.sku', read_only=True)
    equipment_name = serializers.CharField(source='equipment.name', read_only=True)
    client_name = serializers.SerializerMethodField()

    class Meta:
        model = ConsignmentChangeRequest
        fields = [
            'id', 'equipment', 'equipment_sku', 'equipment_name', 'client', 'client_name',
            'current_payout', 'proposed_payout', 'proposed_selling_price', 'reason', 'status',
            'token', 'requested_by', 'approved_by_admin', 'client_adjusted_payout',
            'client_confirmed_at', 'client_declined_at', 'decline_reason', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_client_name(self, obj):
        return obj.client.full_name if obj.client else None


class ConsignmentChangeRequestCreateSerializer(serializers.Serializer):
    equipment_id = serializers.IntegerField()
    proposed_payout = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    proposed_selling_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    admin_id = serializers.IntegerField()
    admin_password = serializers.CharField(write_only=True)


class PublicChangeRequestSerializer(serializers.ModelSerializer):
    """What the consignor sees on the review link"""
    equipment_name = serializers.CharField(source='equipment.name', read_only=True)
    brand = serializers.CharField(source='equipment.brand', read_only=True)
    model = serializers.CharField(source='equipment.model', read_only=True)

    class Meta:
        model = ConsignmentChangeRequest
        fields = [
            'id', 'equipment_name', 'brand', 'model', 'current_payout', 'proposed_payout',
            'proposed_selling_price', 'reason', 'status', 'client_adjusted_payout',
            'client_confirmed_at', 'client_declined_at', 'created_at'
        ]
        read_only_fields = fields


class ConfirmChangeSerializer(serializers.Serializer):
    adjusted_payout = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )


class DeclineChangeSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')
