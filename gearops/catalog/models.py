from django.db import models
from decimal import Decimal

PRODUCT_TYPE_CHOICES = [
    ('CAMERA_BODY', 'Camera Body'),
    ('LENS', 'Lens'),
    ('FLASH', 'Flash'),
    ('GIMBAL', 'Gimbal'),
    ('DRONE', 'Drone'),
    ('VIDEO_CAMERA', 'Video Camera'),
    ('ACCESSORY', 'Accessory'),
    ('OTHER', 'Other'),
]


class Product(models.Model):
    """Catalog model with the buy/consign price bands used at inspection"""
    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=150, blank=True)
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES, default='OTHER')
    description = models.TextField(blank=True)
    buy_price_min = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    buy_price_max = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    consign_price_min = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    consign_price_max = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'products'
        ordering = ['brand', 'name']
        indexes = [
            models.Index(fields=['brand', 'model'], name='idx_product_brand_model'),
            models.Index(fields=['product_type'], name='idx_product_type'),
            models.Index(fields=['is_active'], name='idx_product_active'),
        ]


class AccessoryTemplate(models.Model):
    """Accessory expected with a product; missing ones cost penalty_amount"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='accessories')
    accessory_name = models.CharField(max_length=150)
    accessory_order = models.PositiveIntegerField(default=0)
    is_required = models.BooleanField(default=False)
    penalty_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    def __str__(self):
        return f"{self.product.name} - {self.accessory_name}"

    class Meta:
        db_table = 'accessory_templates'
        ordering = ['product', 'accessory_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['product', 'accessory_name'], name='uniq_product_accessory'),
        ]
