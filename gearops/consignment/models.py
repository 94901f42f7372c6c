from django.db import models
from gearops.core.models import User
from gearops.inventory.models import Equipment
from gearops.parties.models import Client


class ConsignmentChangeRequest(models.Model):
    """A proposed change to what a consignor is paid for an item; the client confirms it by link"""
    STATUS_PENDING_CLIENT = 'PENDING_CLIENT'
    STATUS_CONFIRMED = 'CONFIRMED'
    STATUS_DECLINED = 'DECLINED'
    STATUS_CHOICES = [
        (STATUS_PENDING_CLIENT, 'Pending Client'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_DECLINED, 'Declined'),
    ]

    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name='consignment_requests')
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='consignment_requests')
    current_payout = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    proposed_payout = models.DecimalField(max_digits=10, decimal_places=2)
    proposed_selling_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING_CLIENT)
    token = models.CharField(max_length=64, unique=True)
    requested_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    approved_by_admin = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    client_adjusted_payout = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    client_confirmed_at = models.DateTimeField(null=True, blank=True)
    client_declined_at = models.DateTimeField(null=True, blank=True)
    decline_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.equipment.sku}: {self.current_payout} -> {self.proposed_payout} ({self.status})"

    @property
    def final_payout(self):
        if self.client_adjusted_payout is not None:
            return self.client_adjusted_payout
        return self.proposed_payout

    class Meta:
        db_table = 'consignment_change_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_consign_req_status'),
        ]
