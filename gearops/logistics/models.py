from django.db import models
from gearops.core.models import User


class DeliveryBooking(models.Model):
    """How a client gets their gear to us"""
    METHOD_COURIER = 'COURIER'
    METHOD_SELF_DELIVER = 'SELF_DELIVER'
    METHOD_COLLECTION = 'COLLECTION'
    METHOD_CHOICES = [
        (METHOD_COURIER, 'Courier'),
        (METHOD_SELF_DELIVER, 'Self Deliver'),
        (METHOD_COLLECTION, 'Collection'),
    ]
    STATUS_PENDING = 'PENDING'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_DECLINED = 'DECLINED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_DECLINED, 'Declined'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    delivery_method = models.CharField(max_length=20, choices=METHOD_CHOICES)
    requested_date = models.DateField(null=True, blank=True)
    requested_time = models.CharField(max_length=20, blank=True)
    courier_name = models.CharField(max_length=100, blank=True)
    tracking_number = models.CharField(max_length=100, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    confirmed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    declined_at = models.DateTimeField(null=True, blank=True)
    decline_reason = models.TextField(blank=True)
    reminders_sent = models.PositiveIntegerField(default=0)
    last_reminder_at = models.DateTimeField(null=True, blank=True)
    flagged_for_follow_up = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_delivery_method_display()} booking #{self.pk}"

    class Meta:
        db_table = 'delivery_bookings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_booking_status'),
            models.Index(fields=['delivery_method', 'flagged_for_follow_up'], name='idx_booking_method_flag'),
        ]


class CalendarAvailability(models.Model):
    """Drop-off slots: weekly rules, or a dated rule (e.g. a blocked public holiday)"""
    DAY_CHOICES = [
        (0, 'Monday'),
        (1, 'Tuesday'),
        (2, 'Wednesday'),
        (3, 'Thursday'),
        (4, 'Friday'),
        (5, 'Saturday'),
        (6, 'Sunday'),
    ]

    day_of_week = models.PositiveSmallIntegerField(choices=DAY_CHOICES, null=True, blank=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_available = models.BooleanField(default=True)
    specific_date = models.DateField(null=True, blank=True)
    block_reason = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'calendar_availability'
        ordering = ['specific_date', 'day_of_week', 'start_time']
        verbose_name_plural = 'calendar availability'
