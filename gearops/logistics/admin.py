from django.contrib import admin
from .models import DeliveryBooking, CalendarAvailability


@admin.register(DeliveryBooking)
class DeliveryBookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'delivery_method', 'status', 'requested_date', 'tracking_number', 'reminders_sent', 'flagged_for_follow_up', 'created_at']
    list_filter = ['delivery_method', 'status', 'flagged_for_follow_up']
    search_fields = ['tracking_number', 'courier_name']


@admin.register(CalendarAvailability)
class CalendarAvailabilityAdmin(admin.ModelAdmin):
    list_display = ['day_of_week', 'specific_date', 'start_time', 'end_time', 'is_available', 'block_reason']
    list_filter = ['is_available', 'day_of_week']
