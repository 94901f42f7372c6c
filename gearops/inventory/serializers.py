from rest_framework import serializers
from .models import Bundle, BundleItem, Equipment, PriceHistory, RepairLog


class EquipmentListSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source='vendor.name', read_only=True, default=None)
    client_name = serializers.CharField(source='client.full_name', read_only=True, default=None)

    class Meta:
        model = Equipment
        fields = [
            'id', 'sku', 'name', 'brand', 'model', 'category', 'condition', 'status',
            'intake_status', 'acquisition_type', 'vendor', 'vendor_name', 'client', 'client_name',
            'purchase_price', 'selling_price', 'shelf_location', 'in_repair', 'created_at'
        ]


class PriceHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source='changed_by.username', read_only=True, default=None)

    class Meta:
        model = PriceHistory
        fields = ['id', 'old_price', 'new_price', 'reason', 'changed_by', 'changed_by_name', 'changed_at']


class RepairLogSerializer(serializers.ModelSerializer):
    equipment_sku = serializers.CharField(source='equipment.sku', read_only=True)
    equipment_name = serializers.CharField(source='equipment.name', read_only=True)

    class Meta:
        model = RepairLog
        fields = [
            'id', 'equipment', 'equipment_sku', 'equipment_name', 'technician_name',
            'issue_description', 'repair_notes', 'estimated_cost', 'actual_cost', 'status',
            'sent_at', 'completed_at', 'returned_at', 'updated_at'
        ]
        read_only_fields = ['sent_at', 'completed_at', 'returned_at', 'updated_at']

    def validate(self, attrs):
        for field in ('estimated_cost', 'actual_cost'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'Cost cannot be negative'})
        return attrs


class EquipmentSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(max_length=50, required=False)
    vendor_name = serializers.CharField(source='vendor.name', read_only=True, default=None)
    client_name = serializers.CharField(source='client.full_name', read_only=True, default=None)
    price_history = PriceHistorySerializer(many=True, read_only=True)
    repairs = RepairLogSerializer(many=True, read_only=True)

    class Meta:
        model = Equipment
        fields = [
            'id', 'sku', 'name', 'brand', 'model', 'category', 'condition', 'description',
            'serial_number', 'status', 'intake_status', 'acquisition_type', 'vendor', 'vendor_name',
            'client', 'client_name', 'purchase_price', 'cost_price', 'selling_price',
            'consignment_rate', 'consignment_start_date', 'consignment_end_date', 'shelf_location',
            'images', 'in_repair', 'repair_notes', 'source_verified_item', 'created_by',
            'created_at', 'updated_at', 'sold_at', 'price_history', 'repairs'
        ]
        read_only_fields = ['source_verified_item', 'created_by', 'created_at', 'updated_at']

    def validate_sku(self, value):
        value = value.strip().upper()
        queryset = Equipment.objects.filter(sku=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('SKU already exists')
        return value

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
            raise serializers.ValidationError('images must be a list of URLs')
        return value

    def validate(self, attrs):
        for field in ('purchase_price', 'cost_price', 'selling_price'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'Price cannot be negative'})
        rate = attrs.get('consignment_rate')
        if rate is not None and not 0 <= rate <= 100:
            raise serializers.ValidationError({'consignment_rate': 'Rate must be between 0 and 100'})
        return attrs


class PriceUpdateSerializer(serializers.Serializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('Price cannot be negative')
        return value


class CompleteIntakeSerializer(serializers.Serializer):
    admin_id = serializers.IntegerField()
    admin_password = serializers.CharField(trim_whitespace=False)
    sku = serializers.CharField(max_length=50, required=False, allow_blank=True)
    shelf_location = serializers.CharField(max_length=50, required=False, allow_blank=True)
    selling_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)


class BundleItemSerializer(serializers.ModelSerializer):
    equipment = EquipmentListSerializer(read_only=True)

    class Meta:
        model = BundleItem
        fields = ['id', 'equipment', 'added_at']


class BundleSerializer(serializers.ModelSerializer):
    items = BundleItemSerializer(many=True, read_only=True)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)
    admin_approved_by_name = serializers.CharField(source='admin_approved_by.username', read_only=True, default=None)

    class Meta:
        model = Bundle
        fields = [
            'id', 'title', 'description', 'selling_price', 'cost_price', 'status', 'items',
            'created_by', 'created_by_name', 'admin_approved_by', 'admin_approved_by_name',
            'admin_approved_at', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'cost_price', 'status', 'created_by', 'admin_approved_by', 'admin_approved_at',
            'created_at', 'updated_at'
        ]

    def validate_selling_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Selling price must be greater than zero')
        return value


class BundleCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    selling_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    equipment_ids = serializers.ListField(child=serializers.IntegerField(), min_length=2)
    admin_id = serializers.IntegerField()
    admin_password = serializers.CharField(trim_whitespace=False)

    def validate_selling_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Selling price must be greater than zero')
        return value


class BundleRemoveItemSerializer(serializers.Serializer):
    equipment_id = serializers.IntegerField()
