from rest_framework import serializers
from .models import Product, AccessoryTemplate


class AccessoryTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccessoryTemplate
        fields = ['id', 'product', 'accessory_name', 'accessory_order', 'is_required', 'penalty_amount']
        read_only_fields = ['product']

    def validate_penalty_amount(self, value):
        if value < 0:
            raise serializers.ValidationError('Penalty cannot be negative')
        return value


class ProductSerializer(serializers.ModelSerializer):
    accessories = AccessoryTemplateSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'brand', 'model', 'product_type', 'description',
            'buy_price_min', 'buy_price_max', 'consign_price_min', 'consign_price_max',
            'is_active', 'accessories', 'created_at', 'updated_at'
        ]

    def validate(self, attrs):
        for low, high in (('buy_price_min', 'buy_price_max'), ('consign_price_min', 'consign_price_max')):
            low_value = attrs.get(low, getattr(self.instance, low, None))
            high_value = attrs.get(high, getattr(self.instance, high, None))
            if low_value is not None and low_value < 0:
                raise serializers.ValidationError({low: 'Price cannot be negative'})
            if low_value is not None and high_value is not None and high_value < low_value:
                raise serializers.ValidationError({high: 'Maximum must not be below minimum'})
        return attrs


class ProductListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            'id', 'name', 'brand', 'model', 'product_type',
            'buy_price_min', 'buy_price_max', 'consign_price_min', 'consign_price_max', 'is_active'
        ]
