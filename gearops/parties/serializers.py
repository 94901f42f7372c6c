from rest_framework import serializers
from .models import Vendor, Client


class VendorSerializer(serializers.ModelSerializer):
    equipment_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Vendor
        fields = ['id', 'name', 'email', 'phone', 'address', 'notes', 'is_active',
                  'equipment_count', 'created_at', 'updated_at']


class ClientSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Client
        fields = [
            'id', 'first_name', 'surname', 'full_name', 'email', 'phone', 'id_number',
            'passport_number', 'date_of_birth', 'physical_address', 'postal_address',
            'bank_name', 'account_number', 'branch_code', 'account_type', 'account_holder',
            'notes', 'merged_into', 'created_at', 'updated_at'
        ]
        read_only_fields = ['merged_into', 'created_at', 'updated_at']


class ClientListSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    buy_items_count = serializers.IntegerField(read_only=True)
    consignment_items_count = serializers.IntegerField(read_only=True)
    total_paid = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Client
        fields = [
            'id', 'first_name', 'surname', 'full_name', 'email', 'phone',
            'item_count', 'buy_items_count', 'consignment_items_count', 'total_paid', 'created_at'
        ]


class ClientMergeSerializer(serializers.Serializer):
    source_id = serializers.IntegerField()
    target_id = serializers.IntegerField()
