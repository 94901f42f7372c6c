from django.db import models
from decimal import Decimal
from gearops.catalog.models import Product
from gearops.core.models import User

VERIFIED_CONDITION_CHOICES = [
    ('LIKE_NEW', 'Like New'),
    ('EXCELLENT', 'Excellent'),
    ('VERY_GOOD', 'Very Good'),
    ('GOOD', 'Good'),
    ('WORN', 'Worn'),
]


class InspectionSession(models.Model):
    """A batch of incoming gear checked together (usually one client's delivery)"""
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    session_number = models.CharField(max_length=20, unique=True)
    session_name = models.CharField(max_length=255)
    purchase = models.OneToOneField(
        'purchasing.PendingPurchase', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='inspection_session'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_IN_PROGRESS)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='inspection_sessions')
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.session_number} {self.session_name}"

    @classmethod
    def next_session_number(cls):
        """INS-000001 style; skips numbers left behind by deleted sessions"""
        number = cls.objects.count() + 1
        while cls.objects.filter(session_number=f"INS-{number:06d}").exists():
            number += 1
        return f"INS-{number:06d}"

    class Meta:
        db_table = 'inspection_sessions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_session_status'),
        ]


class IncomingGearItem(models.Model):
    """An item as the client described it, before verification"""
    STATUS_UNVERIFIED = 'UNVERIFIED'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_VERIFIED = 'VERIFIED'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REOPENED = 'REOPENED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = [
        (STATUS_UNVERIFIED, 'Unverified'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_VERIFIED, 'Verified'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REOPENED, 'Reopened'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    SELECTION_BUY = 'BUY'
    SELECTION_CONSIGNMENT = 'CONSIGNMENT'
    SELECTION_CHOICES = [
        (SELECTION_BUY, 'Buy'),
        (SELECTION_CONSIGNMENT, 'Consignment'),
    ]

    session = models.ForeignKey(InspectionSession, on_delete=models.CASCADE, related_name='incoming_items')
    client_name = models.CharField(max_length=255)
    client_brand = models.CharField(max_length=100, blank=True)
    client_model = models.CharField(max_length=150, blank=True)
    client_description = models.TextField(blank=True)
    client_condition = models.CharField(max_length=50, blank=True)
    client_serial_number = models.CharField(max_length=100, blank=True)
    client_images = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_UNVERIFIED)
    client_selection = models.CharField(max_length=20, choices=SELECTION_CHOICES, null=True, blank=True)
    not_interested = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.client_name

    class Meta:
        db_table = 'incoming_gear_items'
        ordering = ['id']
        indexes = [
            models.Index(fields=['session', 'status'], name='idx_incoming_session_status'),
        ]


class VerifiedGearItem(models.Model):
    """Staff findings for an incoming item: identified product, condition, serial"""
    incoming_item = models.OneToOneField(IncomingGearItem, on_delete=models.CASCADE, related_name='verified_item')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='verified_items')
    serial_number = models.CharField(max_length=100, blank=True)
    condition = models.CharField(max_length=20, choices=VERIFIED_CONDITION_CHOICES, default='GOOD')
    general_notes = models.TextField(blank=True)
    requires_repair = models.BooleanField(default=False)
    repair_notes = models.TextField(blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    locked = models.BooleanField(default=False)
    reopened_at = models.DateTimeField(null=True, blank=True)
    reopened_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    reopen_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} ({self.condition})"

    class Meta:
        db_table = 'verified_gear_items'


class VerifiedAnswer(models.Model):
    verified_item = models.ForeignKey(VerifiedGearItem, on_delete=models.CASCADE, related_name='answers')
    question_text = models.CharField(max_length=500)
    answer = models.CharField(max_length=500, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'verified_answers'
        ordering = ['id']


class VerifiedAccessory(models.Model):
    verified_item = models.ForeignKey(VerifiedGearItem, on_delete=models.CASCADE, related_name='accessories')
    accessory_name = models.CharField(max_length=150)
    is_present = models.BooleanField(default=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'verified_accessories'
        ordering = ['id']


class PricingSnapshot(models.Model):
    """Computed prices at verification time"""
    verified_item = models.OneToOneField(VerifiedGearItem, on_delete=models.CASCADE, related_name='pricing_snapshot')
    base_buy_min = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    base_buy_max = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    base_consign_min = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    base_consign_max = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    condition_multiplier = models.DecimalField(max_digits=4, decimal_places=2)
    computed_buy_price = models.DecimalField(max_digits=10, decimal_places=2)
    computed_consign_price = models.DecimalField(max_digits=10, decimal_places=2)
    accessory_penalty = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    final_buy_price = models.DecimalField(max_digits=10, decimal_places=2)
    final_consign_price = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pricing_snapshots'


class PriceOverride(models.Model):
    REASON_CHOICES = [
        ('MARKET_CONDITION', 'Market condition'),
        ('CUSTOMER_NEGOTIATION', 'Customer negotiation'),
        ('DAMAGE_NOT_CAPTURED', 'Damage not captured'),
        ('RARE_ITEM', 'Rare item'),
        ('BULK_PURCHASE', 'Bulk purchase'),
        ('OTHER', 'Other'),
    ]

    verified_item = models.OneToOneField(VerifiedGearItem, on_delete=models.CASCADE, related_name='price_override')
    override_buy_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    override_consign_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    override_reason = models.CharField(max_length=30, choices=REASON_CHOICES)
    notes = models.TextField(blank=True)
    overridden_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    overridden_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'price_overrides'
