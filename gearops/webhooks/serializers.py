from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rest_framework import serializers
from .models import WebhookEventLog

EVENT_QUOTE_ACCEPTED = 'quote_accepted'
EVENT_QUOTE_DECLINED = 'quote_declined'
EVENT_TYPES = [EVENT_QUOTE_ACCEPTED, EVENT_QUOTE_DECLINED]


class RandField(serializers.DecimalField):
    """Rand amount from the bot, rounded to cents rather than rejected for extra places"""

    def to_internal_value(self, data):
        try:
            value = Decimal(str(data).strip())
            if value.is_finite():
                value = value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            self.fail('invalid')
        return super().to_internal_value(value)


class WebhookEnvelopeSerializer(serializers.Serializer):
    """Every webhook body: an id for idempotency, a type, a payload version"""
    event_id = serializers.UUIDField()
    event_type = serializers.ChoiceField(choices=EVENT_TYPES)
    version = serializers.RegexField(r'^\d+\.\d+$', max_length=10)
    timestamp = serializers.DateTimeField()
    payload = serializers.JSONField(required=False)


class QuoteItemPayloadSerializer(serializers.Serializer):
    # OCR fields are for matching only and never shown to users
    ocrText = serializers.CharField(source='ocr_text', required=False, allow_blank=True)
    ocrBrand = serializers.CharField(source='ocr_brand', required=False, allow_blank=True)
    ocrModel = serializers.CharField(source='ocr_model', required=False, allow_blank=True)

    name = serializers.CharField(min_length=1, max_length=255)
    brand = serializers.CharField(required=False, allow_blank=True, max_length=100)
    model = serializers.CharField(required=False, allow_blank=True, max_length=150)
    category = serializers.CharField(required=False, allow_blank=True, max_length=50)
    condition = serializers.CharField(required=False, allow_blank=True, max_length=50)
    description = serializers.CharField(required=False, allow_blank=True)
    serialNumber = serializers.CharField(source='serial_number', required=False, allow_blank=True, max_length=100)

    botEstimatedPrice = RandField(
        source='bot_estimated_price', max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False
    )
    proposedPrice = RandField(
        source='proposed_price', max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False
    )
    suggestedSellPrice = RandField(
        source='suggested_sell_price', max_digits=10, decimal_places=2, required=False
    )

    imageUrls = serializers.ListField(source='image_urls', child=serializers.URLField(), required=False)

    def validate_suggestedSellPrice(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError('Must be greater than zero')
        return value


class QuoteAcceptedPayloadV1Serializer(serializers.Serializer):
    customerName = serializers.CharField(source='customer_name', min_length=1, max_length=200)
    customerPhone = serializers.CharField(source='customer_phone', min_length=7, max_length=30)
    customerEmail = serializers.EmailField(source='customer_email', required=False)
    whatsappConversationId = serializers.CharField(source='whatsapp_conversation_id', required=False, max_length=100)
    totalQuoteAmount = RandField(
        source='total_quote_amount', max_digits=12, decimal_places=2, required=False
    )
    botQuoteAcceptedAt = serializers.DateTimeField(source='bot_quote_accepted_at', required=False)
    botConversationData = serializers.DictField(source='bot_conversation_data', required=False)
    items = QuoteItemPayloadSerializer(many=True, allow_empty=False)

    def validate_totalQuoteAmount(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError('Must be greater than zero')
        return value


class QuoteDeclinedPayloadSerializer(serializers.Serializer):
    customerPhone = serializers.CharField(source='customer_phone', min_length=7, max_length=30)
    whatsappConversationId = serializers.CharField(source='whatsapp_conversation_id', required=False, max_length=100)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


# (event_type, version) -> payload serializer
PAYLOAD_SERIALIZERS = {
    (EVENT_QUOTE_ACCEPTED, '1.0'): QuoteAcceptedPayloadV1Serializer,
    (EVENT_QUOTE_DECLINED, '1.0'): QuoteDeclinedPayloadSerializer,
}


class WebhookEventListSerializer(serializers.ModelSerializer):
    ignored_by_username = serializers.CharField(source='ignored_by.username', read_only=True, default=None)

    class Meta:
        model = WebhookEventLog
        fields = [
            'id', 'event_id', 'event_type', 'version', 'status', 'received_at', 'processed_at',
            'signature_valid', 'error_message', 'retry_count', 'last_retried_at', 'ignored_at',
            'ignored_by', 'ignored_by_username', 'related_entity_id', 'related_entity_type'
        ]


class WebhookEventSerializer(WebhookEventListSerializer):
    class Meta(WebhookEventListSerializer.Meta):
        fields = WebhookEventListSerializer.Meta.fields + [
            'raw_payload', 'source_ip', 'signature_provided', 'signature_computed', 'ignore_note'
        ]


class IgnoreEventSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=2000)

    def validate_note(self, value):
        if not value.strip():
            raise serializers.ValidationError('A note is required')
        return value.strip()


class ReplayEventSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=['safe', 'force'], default='safe')
    note = serializers.CharField(required=False, allow_blank=True)
