from django.db import models
from django.utils import timezone
from decimal import Decimal
from gearops.core.models import User
from gearops.parties.models import Client
from gearops.logistics.models import DeliveryBooking


class PendingPurchase(models.Model):
    """Gear a client wants to sell or consign, from first quote to payment"""
    STATUS_PENDING_REVIEW = 'PENDING_REVIEW'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_QUOTE_SENT = 'QUOTE_SENT'
    STATUS_CLIENT_ACCEPTED = 'CLIENT_ACCEPTED'
    STATUS_CLIENT_DECLINED = 'CLIENT_DECLINED'
    STATUS_AWAITING_DELIVERY = 'AWAITING_DELIVERY'
    STATUS_INSPECTION_IN_PROGRESS = 'INSPECTION_IN_PROGRESS'
    STATUS_FINAL_QUOTE_SENT = 'FINAL_QUOTE_SENT'
    STATUS_AWAITING_PAYMENT = 'AWAITING_PAYMENT'
    STATUS_PAYMENT_RECEIVED = 'PAYMENT_RECEIVED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_PENDING_REVIEW, 'Pending Review'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_QUOTE_SENT, 'Quote Sent'),
        (STATUS_CLIENT_ACCEPTED, 'Client Accepted'),
        (STATUS_CLIENT_DECLINED, 'Client Declined'),
        (STATUS_AWAITING_DELIVERY, 'Awaiting Delivery'),
        (STATUS_INSPECTION_IN_PROGRESS, 'Inspection In Progress'),
        (STATUS_FINAL_QUOTE_SENT, 'Final Quote Sent'),
        (STATUS_AWAITING_PAYMENT, 'Awaiting Payment'),
        (STATUS_PAYMENT_RECEIVED, 'Payment Received'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=30)
    customer_email = models.EmailField(blank=True, null=True)
    whatsapp_conversation_id = models.CharField(max_length=100, blank=True, null=True)
    total_quote_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    bot_quote_accepted_at = models.DateTimeField(null=True, blank=True)
    bot_conversation_data = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING_REVIEW)

    quote_confirmation_token = models.CharField(max_length=64, unique=True, null=True, blank=True)
    quote_token_expires_at = models.DateTimeField(null=True, blank=True)
    quote_confirmed_at = models.DateTimeField(null=True, blank=True)
    client_accepted_at = models.DateTimeField(null=True, blank=True)
    client_declined_at = models.DateTimeField(null=True, blank=True)
    client_decline_reason = models.TextField(blank=True)
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases')

    delivery_booking = models.ForeignKey(DeliveryBooking, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases')
    courier_company = models.CharField(max_length=100, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    gear_received_at = models.DateTimeField(null=True, blank=True)
    gear_received_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    client_notified_at = models.DateTimeField(null=True, blank=True)
    final_quote_sent_at = models.DateTimeField(null=True, blank=True)

    invoice_number = models.CharField(max_length=20, unique=True, null=True, blank=True)
    invoice_total = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    invoice_accept_token = models.CharField(max_length=64, unique=True, null=True, blank=True)
    invoice_created_at = models.DateTimeField(null=True, blank=True)
    payment_received_at = models.DateTimeField(null=True, blank=True)
    payment_received_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')

    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.customer_name} ({self.get_status_display()})"

    @property
    def has_valid_quote_token(self):
        return bool(
            self.quote_confirmation_token
            and self.quote_token_expires_at
            and self.quote_token_expires_at > timezone.now()
        )

    @property
    def already_responded(self):
        return self.client_accepted_at is not None or self.client_declined_at is not None

    @classmethod
    def next_invoice_number(cls):
        number = cls.objects.exclude(invoice_number__isnull=True).count() + 1
        while cls.objects.filter(invoice_number=f"INV-{number:06d}").exists():
            number += 1
        return f"INV-{number:06d}"

    class Meta:
        db_table = 'pending_purchases'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='idx_purchase_status'),
            models.Index(fields=['customer_phone', 'whatsapp_conversation_id'], name='idx_purchase_phone_convo'),
            models.Index(fields=['-created_at'], name='idx_purchase_created'),
        ]


class PendingItem(models.Model):
    """An item as quoted by the bot or entered by staff"""
    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_PRICE_ADJUSTED = 'PRICE_ADJUSTED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_ADDED_TO_INVENTORY = 'ADDED_TO_INVENTORY'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_PRICE_ADJUSTED, 'Price Adjusted'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_ADDED_TO_INVENTORY, 'Added To Inventory'),
    ]

    purchase = models.ForeignKey(PendingPurchase, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=255)
    brand = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=150, blank=True)
    category = models.CharField(max_length=50, blank=True)
    condition = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)
    serial_number = models.CharField(max_length=100, blank=True)
    ocr_text = models.TextField(blank=True)
    ocr_brand = models.CharField(max_length=100, blank=True)
    ocr_model = models.CharField(max_length=150, blank=True)
    bot_estimated_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    proposed_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    final_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    suggested_sell_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    image_urls = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING)
    review_notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def effective_price(self):
        if self.final_price is not None:
            return self.final_price
        return self.proposed_price

    class Meta:
        db_table = 'pending_items'
        ordering = ['id']


class ClientDetails(models.Model):
    """What the client submitted on the public details form"""
    purchase = models.OneToOneField(PendingPurchase, on_delete=models.CASCADE, related_name='client_details')
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name='submitted_details')
    full_name = models.CharField(max_length=200)
    surname = models.CharField(max_length=100)
    id_number = models.CharField(max_length=20, blank=True, null=True)
    passport_number = models.CharField(max_length=20, blank=True, null=True)
    date_of_birth = models.DateField(null=True, blank=True)
    email = models.EmailField()
    phone = models.CharField(max_length=30)
    physical_address = models.TextField()
    postal_address = models.TextField(blank=True)
    bank_name = models.CharField(max_length=100, blank=True)
    account_number = models.CharField(max_length=50, blank=True)
    branch_code = models.CharField(max_length=20, blank=True)
    account_type = models.CharField(max_length=20, blank=True)
    account_holder = models.CharField(max_length=200, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.full_name} {self.surname}"

    class Meta:
        db_table = 'client_details'
        verbose_name_plural = 'client details'
