from rest_framework import serializers
from .models import (
    InspectionSession, IncomingGearItem, VerifiedGearItem, VerifiedAnswer,
    VerifiedAccessory, PricingSnapshot, PriceOverride, VERIFIED_CONDITION_CHOICES,
)
from .pricing import format_price
from .services import item_prices, related_or_none


class VerifiedAnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = VerifiedAnswer
        fields = ['id', 'question_text', 'answer', 'notes']


class VerifiedAccessorySerializer(serializers.ModelSerializer):
    class Meta:
        model = VerifiedAccessory
        fields = ['id', 'accessory_name', 'is_present', 'notes']


class PricingSnapshotSerializer(serializers.ModelSerializer):
    class Meta:
        model = PricingSnapshot
        fields = [
            'base_buy_min', 'base_buy_max', 'base_consign_min', 'base_consign_max',
            'condition_multiplier', 'computed_buy_price', 'computed_consign_price',
            'accessory_penalty', 'final_buy_price', 'final_consign_price', 'updated_at'
        ]


class PriceOverrideSerializer(serializers.ModelSerializer):
    overridden_by_name = serializers.CharField(source='overridden_by.username', read_only=True, default=None)

    class Meta:
        model = PriceOverride
        fields = [
            'override_buy_price', 'override_consign_price', 'override_reason', 'notes',
            'overridden_by', 'overridden_by_name', 'overridden_at'
        ]
        read_only_fields = ['overridden_by', 'overridden_at']

    def validate(self, attrs):
        buy = attrs.get('override_buy_price')
        consign = attrs.get('override_consign_price')
        if buy is None and consign is None:
            raise serializers.ValidationError('At least one override price is required')
        for field, value in (('override_buy_price', buy), ('override_consign_price', consign)):
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'Price cannot be negative'})
        if attrs.get('override_reason') == 'OTHER' and not (attrs.get('notes') or '').strip():
            raise serializers.ValidationError({'notes': 'Notes are required when the reason is OTHER'})
        return attrs


class VerifiedGearItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    answers = VerifiedAnswerSerializer(many=True, read_only=True)
    accessories = VerifiedAccessorySerializer(many=True, read_only=True)
    pricing_snapshot = serializers.SerializerMethodField()
    price_override = serializers.SerializerMethodField()
    final_prices = serializers.SerializerMethodField()

    class Meta:
        model = VerifiedGearItem
        fields = [
            'id', 'product', 'product_name', 'serial_number', 'condition', 'general_notes',
            'requires_repair', 'repair_notes', 'verified_at', 'verified_by', 'approved_at',
            'approved_by', 'locked', 'reopened_at', 'reopened_by', 'reopen_reason',
            'answers', 'accessories', 'pricing_snapshot', 'price_override', 'final_prices'
        ]

    def get_pricing_snapshot(self, obj):
        snapshot = related_or_none(obj, 'pricing_snapshot')
        return PricingSnapshotSerializer(snapshot).data if snapshot else None

    def get_price_override(self, obj):
        override = related_or_none(obj, 'price_override')
        return PriceOverrideSerializer(override).data if override else None

    def get_final_prices(self, obj):
        prices = item_prices(obj)
        prices['final_buy_price_display'] = format_price(prices['final_buy_price'])
        prices['final_consign_price_display'] = format_price(prices['final_consign_price'])
        return prices


class IncomingGearItemSerializer(serializers.ModelSerializer):
    verified_item = serializers.SerializerMethodField()

    class Meta:
        model = IncomingGearItem
        fields = [
            'id', 'session', 'client_name', 'client_brand', 'client_model', 'client_description',
            'client_condition', 'client_serial_number', 'client_images', 'status',
            'client_selection', 'not_interested', 'verified_item', 'created_at', 'updated_at'
        ]
        read_only_fields = ['session', 'status', 'client_selection', 'not_interested']

    def get_verified_item(self, obj):
        verified = related_or_none(obj, 'verified_item')
        return VerifiedGearItemSerializer(verified).data if verified else None


class IncomingGearItemInputSerializer(serializers.ModelSerializer):
    class Meta:
        model = IncomingGearItem
        fields = [
            'client_name', 'client_brand', 'client_model', 'client_description',
            'client_condition', 'client_serial_number', 'client_images'
        ]


class InspectionSessionSerializer(serializers.ModelSerializer):
    incoming_items = IncomingGearItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = InspectionSession
        fields = [
            'id', 'session_number', 'session_name', 'purchase', 'status', 'notes', 'created_by',
            'completed_at', 'item_count', 'incoming_items', 'created_at', 'updated_at'
        ]

    def get_item_count(self, obj):
        return len(obj.incoming_items.all())


class InspectionSessionListSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = InspectionSession
        fields = [
            'id', 'session_number', 'session_name', 'purchase', 'status',
            'item_count', 'completed_at', 'created_at'
        ]


class InspectionSessionCreateSerializer(serializers.Serializer):
    session_name = serializers.CharField(max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = IncomingGearItemInputSerializer(many=True, required=False)


class AnswerInputSerializer(serializers.Serializer):
    question_text = serializers.CharField(max_length=500)
    answer = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class AccessoryInputSerializer(serializers.Serializer):
    accessory_name = serializers.CharField(max_length=150)
    is_present = serializers.BooleanField(default=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class ItemActionSerializer(serializers.Serializer):
    ACTIONS = ['verify', 'approve', 'reopen', 'reject']

    action = serializers.CharField()
    serial_number = serializers.CharField(required=False, allow_blank=True)
    condition = serializers.ChoiceField(choices=VERIFIED_CONDITION_CHOICES, required=False, allow_null=True)
    general_notes = serializers.CharField(required=False, allow_blank=True)
    requires_repair = serializers.BooleanField(required=False)
    repair_notes = serializers.CharField(required=False, allow_blank=True)
    answers = AnswerInputSerializer(many=True, required=False)
    accessories = AccessoryInputSerializer(many=True, required=False)
    reason = serializers.CharField(required=False, allow_blank=True)


class IdentifySerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
