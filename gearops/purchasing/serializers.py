from rest_framework import serializers
from gearops.inspections.serializers import IncomingGearItemInputSerializer
from gearops.inspections.services import related_or_none
from gearops.logistics.models import DeliveryBooking
from .models import PendingPurchase, PendingItem, ClientDetails


class PendingItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PendingItem
        fields = [
            'id', 'purchase', 'name', 'brand', 'model', 'category', 'condition', 'description',
            'serial_number', 'ocr_text', 'ocr_brand', 'ocr_model', 'bot_estimated_price',
            'proposed_price', 'final_price', 'suggested_sell_price', 'image_urls', 'status',
            'review_notes', 'created_at', 'updated_at'
        ]
        read_only_fields = ['purchase', 'created_at', 'updated_at']


class PendingItemInputSerializer(serializers.ModelSerializer):
    class Meta:
        model = PendingItem
        fields = [
            'name', 'brand', 'model', 'category', 'condition', 'description', 'serial_number',
            'ocr_text', 'ocr_brand', 'ocr_model', 'bot_estimated_price', 'proposed_price',
            'final_price', 'suggested_sell_price', 'image_urls'
        ]


class PendingItemUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PendingItem
        fields = ['proposed_price', 'final_price', 'suggested_sell_price', 'status', 'review_notes']

    def validate(self, attrs):
        for field in ('proposed_price', 'final_price', 'suggested_sell_price'):
            value = attrs.get(field)
            if value is not None and value < 0:
                raise serializers.ValidationError({field: 'Price cannot be negative'})
        return attrs


class ClientDetailsSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClientDetails
        fields = [
            'id', 'client', 'full_name', 'surname', 'id_number', 'passport_number', 'date_of_birth',
            'email', 'phone', 'physical_address', 'postal_address', 'bank_name', 'account_number',
            'branch_code', 'account_type', 'account_holder', 'ip_address', 'submitted_at'
        ]


class PendingPurchaseListSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = PendingPurchase
        fields = [
            'id', 'customer_name', 'customer_phone', 'customer_email', 'total_quote_amount',
            'status', 'item_count', 'client', 'invoice_number', 'gear_received_at',
            'client_accepted_at', 'created_at', 'updated_at'
        ]


class PendingPurchaseSerializer(serializers.ModelSerializer):
    items = PendingItemSerializer(many=True, read_only=True)
    client_details = serializers.SerializerMethodField()
    inspection_session_id = serializers.SerializerMethodField()
    delivery_method = serializers.CharField(source='delivery_booking.delivery_method', read_only=True, default=None)
    client_name = serializers.CharField(source='client.full_name', read_only=True, default=None)

    class Meta:
        model = PendingPurchase
        fields = [
            'id', 'customer_name', 'customer_phone', 'customer_email', 'whatsapp_conversation_id',
            'total_quote_amount', 'bot_quote_accepted_at', 'bot_conversation_data', 'status',
            'quote_token_expires_at', 'quote_confirmed_at', 'client_accepted_at',
            'client_declined_at', 'client_decline_reason', 'client', 'client_name',
            'delivery_booking', 'delivery_method', 'courier_company', 'tracking_number',
            'gear_received_at', 'gear_received_by', 'client_notified_at', 'final_quote_sent_at',
            'invoice_number', 'invoice_total', 'invoice_created_at', 'payment_received_at',
            'payment_received_by', 'reviewed_by', 'reviewed_at', 'approved_by', 'approved_at',
            'rejected_reason', 'notes', 'items', 'client_details', 'inspection_session_id',
            'created_at', 'updated_at'
        ]

    def get_client_details(self, obj):
        details = related_or_none(obj, 'client_details')
        return ClientDetailsSerializer(details).data if details else None

    def get_inspection_session_id(self, obj):
        session = related_or_none(obj, 'inspection_session')
        return session.id if session else None


class PendingPurchaseCreateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=200)
    customer_phone = serializers.CharField(max_length=30, min_length=7)
    customer_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    whatsapp_conversation_id = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    total_quote_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    bot_conversation_data = serializers.DictField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = PendingItemInputSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one item is required')
        return value


class PurchaseUpdateSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['review', 'approve', 'reject'], required=False)
    status = serializers.ChoiceField(choices=PendingPurchase.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    rejected_reason = serializers.CharField(required=False, allow_blank=True)


class SendQuoteSerializer(serializers.Serializer):
    customer_email = serializers.EmailField(required=False, allow_blank=True)


class WalkInSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    surname = serializers.CharField(max_length=100)
    phone = serializers.CharField(max_length=30)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = IncomingGearItemInputSerializer(many=True, required=False)


# Public quote link payloads (camelCase, as posted by the client-facing pages)

class DeclineQuoteSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class DeliveryRequestSerializer(serializers.Serializer):
    deliveryMethod = serializers.ChoiceField(choices=DeliveryBooking.METHOD_CHOICES, source='delivery_method')
    requestedDate = serializers.DateField(required=False, allow_null=True, source='requested_date')
    requestedTime = serializers.CharField(required=False, allow_blank=True, max_length=20, source='requested_time')
    courierName = serializers.CharField(required=False, allow_blank=True, max_length=100, source='courier_name')

    def validate(self, attrs):
        if attrs['delivery_method'] == DeliveryBooking.METHOD_SELF_DELIVER and not attrs.get('requested_date'):
            raise serializers.ValidationError({'requestedDate': 'A drop-off date is required'})
        return attrs


class TrackingSerializer(serializers.Serializer):
    courierCompany = serializers.CharField(max_length=100, source='courier_company')
    trackingNumber = serializers.CharField(max_length=100, source='tracking_number')


class ProductSelectionSerializer(serializers.Serializer):
    SELECTIONS = ['BUY', 'CONSIGNMENT', 'NOT_INTERESTED']

    itemId = serializers.IntegerField(source='item_id')
    selection = serializers.ChoiceField(choices=SELECTIONS)


class SelectProductsSerializer(serializers.Serializer):
    selections = ProductSelectionSerializer(many=True)

    def validate_selections(self, value):
        if not value:
            raise serializers.ValidationError('At least one selection is required')
        return value


class ClientDetailsInputSerializer(serializers.Serializer):
    fullName = serializers.CharField(max_length=200, source='full_name')
    surname = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30)
    physicalAddress = serializers.CharField(source='physical_address')
    postalAddress = serializers.CharField(required=False, allow_blank=True, source='postal_address')
    idNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20, source='id_number')
    passportNumber = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=20, source='passport_number')
    dateOfBirth = serializers.DateField(required=False, allow_null=True, source='date_of_birth')
    bankName = serializers.CharField(required=False, allow_blank=True, max_length=100, source='bank_name')
    accountNumber = serializers.CharField(required=False, allow_blank=True, max_length=50, source='account_number')
    branchCode = serializers.CharField(required=False, allow_blank=True, max_length=20, source='branch_code')
    accountType = serializers.CharField(required=False, allow_blank=True, max_length=20, source='account_type')
    accountHolderName = serializers.CharField(required=False, allow_blank=True, max_length=200, source='account_holder')


class BankDetailsSerializer(serializers.Serializer):
    bankName = serializers.CharField(max_length=100, source='bank_name')
    accountNumber = serializers.CharField(max_length=50, source='account_number')
    branchCode = serializers.CharField(required=False, allow_blank=True, max_length=20, source='branch_code')
    accountType = serializers.CharField(required=False, allow_blank=True, max_length=20, source='account_type')
    accountHolderName = serializers.CharField(required=False, allow_blank=True, max_length=200, source='account_holder')
