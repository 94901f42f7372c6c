from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Dashboard user; the role comes from group membership"""
    phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def role(self):
        from .permissions import get_user_role
        return get_user_role(self)

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class ActivityLog(models.Model):
    """Business activity trail (who did what to which record)"""
    ACTION_CHOICES = [
        ('CREATED_EQUIPMENT', 'Equipment Created'),
        ('CREATED_EQUIPMENT_FROM_INSPECTION', 'Equipment Created From Inspection'),
        ('UPDATED_EQUIPMENT', 'Equipment Updated'),
        ('DELETED_EQUIPMENT', 'Equipment Deleted'),
        ('PRICE_UPDATED', 'Price Updated'),
        ('INTAKE_COMPLETED', 'Intake Completed'),
        ('REPAIR_LOGGED', 'Repair Logged'),
        ('REPAIR_UPDATED', 'Repair Updated'),
        ('PURCHASE_CREATED', 'Incoming Gear Created'),
        ('PURCHASE_REVIEWED', 'Incoming Gear Reviewed'),
        ('PURCHASE_APPROVED', 'Incoming Gear Approved'),
        ('PURCHASE_REJECTED', 'Incoming Gear Rejected'),
        ('QUOTE_SENT', 'Quote Sent'),
        ('QUOTE_ACCEPTED', 'Quote Accepted'),
        ('QUOTE_DECLINED', 'Quote Declined'),
        ('DELIVERY_BOOKED', 'Delivery Booked'),
        ('TRACKING_SUBMITTED', 'Tracking Submitted'),
        ('GEAR_RECEIVED', 'Gear Received'),
        ('GEAR_RECEIVED_UNDONE', 'Gear Received Undone'),
        ('CLIENT_NOTIFIED', 'Client Notified'),
        ('INSPECTION_STARTED', 'Inspection Started'),
        ('ITEM_IDENTIFIED', 'Item Identified'),
        ('ITEM_VERIFIED', 'Item Verified'),
        ('ITEM_APPROVED', 'Item Approved'),
        ('ITEM_REOPENED', 'Item Reopened'),
        ('ITEM_REJECTED', 'Item Rejected'),
        ('PRICE_OVERRIDDEN', 'Price Overridden'),
        ('PRICE_OVERRIDE_REMOVED', 'Price Override Removed'),
        ('FINAL_QUOTE_SENT', 'Final Quote Sent'),
        ('CLIENT_DETAILS_SUBMITTED', 'Client Details Submitted'),
        ('INVOICE_CREATED', 'Invoice Created'),
        ('PAYMENT_RECEIVED', 'Payment Received'),
        ('WALK_IN_CREATED', 'Walk-in Created'),
        ('CLIENTS_MERGED', 'Clients Merged'),
        ('CONSIGNMENT_CHANGE_REQUESTED', 'Consignment Change Requested'),
        ('CONSIGNMENT_CHANGE_CONFIRMED', 'Consignment Change Confirmed'),
        ('CONSIGNMENT_CHANGE_DECLINED', 'Consignment Change Declined'),
        ('WEBHOOK_IGNORED', 'Webhook Ignored'),
        ('WEBHOOK_REPLAYED', 'Webhook Replayed'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='activity_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=100)
    details = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"

    class Meta:
        db_table = 'activity_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='idx_activity_created'),
            models.Index(fields=['action'], name='idx_activity_action'),
            models.Index(fields=['entity_type', 'entity_id'], name='idx_activity_entity'),
        ]
