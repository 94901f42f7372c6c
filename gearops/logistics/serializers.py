from rest_framework import serializers
from .models import DeliveryBooking, CalendarAvailability


class DeliveryBookingSerializer(serializers.ModelSerializer):
    purchase_id = serializers.IntegerField(write_only=True, required=False, allow_null=True)
    purchases = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryBooking
        fields = [
            'id', 'delivery_method', 'requested_date', 'requested_time', 'courier_name',
            'tracking_number', 'status', 'confirmed_at', 'confirmed_by', 'declined_at',
            'decline_reason', 'reminders_sent', 'last_reminder_at', 'flagged_for_follow_up',
            'purchase_id', 'purchases', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'confirmed_at', 'confirmed_by', 'declined_at', 'reminders_sent', 'last_reminder_at',
            'created_at', 'updated_at'
        ]

    def get_purchases(self, obj):
        return [
            {'id': p.id, 'customer_name': p.customer_name, 'status': p.status}
            for p in obj.purchases.all()
        ]


class CalendarAvailabilitySerializer(serializers.ModelSerializer):
    class Meta:
        model = CalendarAvailability
        fields = [
            'id', 'day_of_week', 'start_time', 'end_time', 'is_available', 'specific_date',
            'block_reason', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start and end and end <= start:
            raise serializers.ValidationError({'end_time': 'End time must be after start time'})
        day = attrs.get('day_of_week', getattr(self.instance, 'day_of_week', None))
        specific_date = attrs.get('specific_date', getattr(self.instance, 'specific_date', None))
        if day is None and specific_date is None:
            raise serializers.ValidationError('Either day_of_week or specific_date is required')
        return attrs
