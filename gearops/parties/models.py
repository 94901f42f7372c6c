from django.db import models


class Vendor(models.Model):
    """Suppliers gear is bought from"""
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'vendors'
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='idx_vendor_name'),
        ]


class Client(models.Model):
    """Private sellers and consignors"""
    ACCOUNT_TYPE_CHOICES = [
        ('CHEQUE', 'Cheque'),
        ('SAVINGS', 'Savings'),
        ('TRANSMISSION', 'Transmission'),
        ('BUSINESS', 'Business'),
    ]

    first_name = models.CharField(max_length=100)
    surname = models.CharField(max_length=100, blank=True)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30)
    id_number = models.CharField(max_length=20, blank=True, null=True)
    passport_number = models.CharField(max_length=20, blank=True, null=True)
    date_of_birth = models.DateField(blank=True, null=True)
    physical_address = models.TextField(blank=True)
    postal_address = models.TextField(blank=True)
    bank_name = models.CharField(max_length=100, blank=True)
    account_number = models.CharField(max_length=50, blank=True)
    branch_code = models.CharField(max_length=20, blank=True)
    account_type = models.CharField(max_length=20, choices=ACCOUNT_TYPE_CHOICES, blank=True)
    account_holder = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)
    merged_into = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='merged_clients')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.surname}".strip()

    @property
    def is_merged(self):
        return self.merged_into_id is not None

    def __str__(self):
        return self.full_name

    class Meta:
        db_table = 'clients'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['phone'], name='idx_client_phone'),
            models.Index(fields=['email'], name='idx_client_email'),
        ]
