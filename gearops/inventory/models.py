from django.db import models
from gearops.core.models import User
from gearops.catalog.models import PRODUCT_TYPE_CHOICES
from gearops.parties.models import Vendor, Client


class Equipment(models.Model):
    """A single piece of camera gear in stock (every item is unique, tracked by SKU)"""
    CONDITION_CHOICES = [
        ('MINT', 'Mint'),
        ('EXCELLENT', 'Excellent'),
        ('GOOD', 'Good'),
        ('FAIR', 'Fair'),
        ('POOR', 'Poor'),
    ]
    STATUS_PENDING_INSPECTION = 'PENDING_INSPECTION'
    STATUS_INSPECTED = 'INSPECTED'
    STATUS_IN_REPAIR = 'IN_REPAIR'
    STATUS_REPAIR_COMPLETED = 'REPAIR_COMPLETED'
    STATUS_READY_FOR_SALE = 'READY_FOR_SALE'
    STATUS_RESERVED = 'RESERVED'
    STATUS_SOLD = 'SOLD'
    STATUS_CHOICES = [
        (STATUS_PENDING_INSPECTION, 'Pending Inspection'),
        (STATUS_INSPECTED, 'Inspected'),
        (STATUS_IN_REPAIR, 'In Repair'),
        (STATUS_REPAIR_COMPLETED, 'Repair Completed'),
        (STATUS_READY_FOR_SALE, 'Ready For Sale'),
        (STATUS_RESERVED, 'Reserved'),
        (STATUS_SOLD, 'Sold'),
    ]
    INTAKE_PENDING = 'PENDING_INTAKE'
    INTAKE_COMPLETE = 'INTAKE_COMPLETE'
    INTAKE_CHOICES = [
        (INTAKE_PENDING, 'Pending Intake'),
        (INTAKE_COMPLETE, 'Intake Complete'),
    ]
    ACQUISITION_PURCHASED = 'PURCHASED_OUTRIGHT'
    ACQUISITION_CONSIGNMENT = 'CONSIGNMENT'
    ACQUISITION_TRADE_IN = 'TRADE_IN'
    ACQUISITION_CHOICES = [
        (ACQUISITION_PURCHASED, 'Purchased Outright'),
        (ACQUISITION_CONSIGNMENT, 'Consignment'),
        (ACQUISITION_TRADE_IN, 'Trade In'),
    ]

    sku = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=150, blank=True)
    category = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES, default='OTHER')
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='GOOD')
    description = models.TextField(blank=True)
    serial_number = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING_INSPECTION)
    intake_status = models.CharField(max_length=20, choices=INTAKE_CHOICES, default=INTAKE_PENDING)
    acquisition_type = models.CharField(max_length=20, choices=ACQUISITION_CHOICES, default=ACQUISITION_PURCHASED)
    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, null=True, blank=True, related_name='equipment')
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='equipment')
    purchase_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    cost_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    selling_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    consignment_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    consignment_start_date = models.DateField(null=True, blank=True)
    consignment_end_date = models.DateField(null=True, blank=True)
    shelf_location = models.CharField(max_length=50, blank=True)
    images = models.JSONField(default=list, blank=True)
    in_repair = models.BooleanField(default=False)
    repair_notes = models.TextField(blank=True)
    source_verified_item = models.OneToOneField(
        'inspections.VerifiedGearItem', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='equipment'
    )
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    sold_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.sku} {self.name}"

    class Meta:
        db_table = 'equipment'
        ordering = ['-created_at']
        verbose_name_plural = 'equipment'
        indexes = [
            models.Index(fields=['status'], name='idx_equipment_status'),
            models.Index(fields=['intake_status'], name='idx_equipment_intake'),
            models.Index(fields=['acquisition_type'], name='idx_equipment_acquisition'),
            models.Index(fields=['brand', 'model'], name='idx_equipment_brand_model'),
        ]


class PriceHistory(models.Model):
    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name='price_history')
    old_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    new_price = models.DecimalField(max_digits=10, decimal_places=2)
    reason = models.CharField(max_length=255, blank=True)
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'price_history'
        ordering = ['-changed_at']
        verbose_name_plural = 'price history'


class RepairLog(models.Model):
    """Equipment sent out to a technician"""
    STATUS_SENT_TO_TECH = 'SENT_TO_TECH'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_RETURNED = 'RETURNED'
    STATUS_CHOICES = [
        (STATUS_SENT_TO_TECH, 'Sent To Tech'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_RETURNED, 'Returned'),
    ]

    equipment = models.ForeignKey(Equipment, on_delete=models.CASCADE, related_name='repairs')
    technician_name = models.CharField(max_length=150)
    issue_description = models.TextField()
    repair_notes = models.TextField(blank=True)
    estimated_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    actual_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SENT_TO_TECH)
    sent_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    returned_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Repair #{self.pk} {self.equipment.sku}"

    class Meta:
        db_table = 'repair_logs'
        ordering = ['-sent_at']


class Bundle(models.Model):
    """Two or more shelf items sold together at one price"""
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_DISSOLVED = 'DISSOLVED'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_DISSOLVED, 'Dissolved'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    selling_price = models.DecimalField(max_digits=10, decimal_places=2)
    cost_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    admin_approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    admin_approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'bundles'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_bundle_status'),
        ]


class BundleItem(models.Model):
    """Equipment can sit in at most one bundle"""
    bundle = models.ForeignKey(Bundle, on_delete=models.CASCADE, related_name='items')
    equipment = models.OneToOneField(Equipment, on_delete=models.CASCADE, related_name='bundle_item')
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bundle_items'
        ordering = ['id']
