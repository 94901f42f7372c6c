import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('parties', '0001_initial'),
        ('logistics', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PendingPurchase',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('customer_name', models.CharField(max_length=200)),
                ('customer_phone', models.CharField(max_length=30)),
                ('customer_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('whatsapp_conversation_id', models.CharField(blank=True, max_length=100, null=True)),
                ('total_quote_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('bot_quote_accepted_at', models.DateTimeField(blank=True, null=True)),
                ('bot_conversation_data', models.JSONField(blank=True, default=dict)),
                ('status', models.CharField(choices=[('PENDING_REVIEW', 'Pending Review'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('QUOTE_SENT', 'Quote Sent'), ('CLIENT_ACCEPTED', 'Client Accepted'), ('CLIENT_DECLINED', 'Client Declined'), ('AWAITING_DELIVERY', 'Awaiting Delivery'), ('INSPECTION_IN_PROGRESS', 'Inspection In Progress'), ('FINAL_QUOTE_SENT', 'Final Quote Sent'), ('AWAITING_PAYMENT', 'Awaiting Payment'), ('PAYMENT_RECEIVED', 'Payment Received'), ('COMPLETED', 'Completed')], default='PENDING_REVIEW', max_length=30)),
                ('quote_confirmation_token', models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ('quote_token_expires_at', models.DateTimeField(blank=True, null=True)),
                ('quote_confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('client_accepted_at', models.DateTimeField(blank=True, null=True)),
                ('client_declined_at', models.DateTimeField(blank=True, null=True)),
                ('client_decline_reason', models.TextField(blank=True)),
                ('courier_company', models.CharField(blank=True, max_length=100)),
                ('tracking_number', models.CharField(blank=True, max_length=100)),
                ('gear_received_at', models.DateTimeField(blank=True, null=True)),
                ('client_notified_at', models.DateTimeField(blank=True, null=True)),
                ('final_quote_sent_at', models.DateTimeField(blank=True, null=True)),
                ('invoice_number', models.CharField(blank=True, max_length=20, null=True, unique=True)),
                ('invoice_total', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('invoice_accept_token', models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ('invoice_created_at', models.DateTimeField(blank=True, null=True)),
                ('payment_received_at', models.DateTimeField(blank=True, null=True)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_reason', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchases', to='parties.client')),
                ('delivery_booking', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchases', to='logistics.deliverybooking')),
                ('gear_received_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('payment_received_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'pending_purchases',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='idx_purchase_status'),
                    models.Index(fields=['customer_phone', 'whatsapp_conversation_id'], name='idx_purchase_phone_convo'),
                    models.Index(fields=['-created_at'], name='idx_purchase_created'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PendingItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('brand', models.CharField(blank=True, max_length=100)),
                ('model', models.CharField(blank=True, max_length=150)),
                ('category', models.CharField(blank=True, max_length=50)),
                ('condition', models.CharField(blank=True, max_length=50)),
                ('description', models.TextField(blank=True)),
                ('serial_number', models.CharField(blank=True, max_length=100)),
                ('ocr_text', models.TextField(blank=True)),
                ('ocr_brand', models.CharField(blank=True, max_length=100)),
                ('ocr_model', models.CharField(blank=True, max_length=150)),
                ('bot_estimated_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('proposed_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('final_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('suggested_sell_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('image_urls', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('PRICE_ADJUSTED', 'Price Adjusted'), ('REJECTED', 'Rejected'), ('ADDED_TO_INVENTORY', 'Added To Inventory')], default='PENDING', max_length=30)),
                ('review_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('purchase', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='purchasing.pendingpurchase')),
            ],
            options={
                'db_table': 'pending_items',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='ClientDetails',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(max_length=200)),
                ('surname', models.CharField(max_length=100)),
                ('id_number', models.CharField(blank=True, max_length=20, null=True)),
                ('passport_number', models.CharField(blank=True, max_length=20, null=True)),
                ('date_of_birth', models.DateField(blank=True, null=True)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=30)),
                ('physical_address', models.TextField()),
                ('postal_address', models.TextField(blank=True)),
                ('bank_name', models.CharField(blank=True, max_length=100)),
                ('account_number', models.CharField(blank=True, max_length=50)),
                ('branch_code', models.CharField(blank=True, max_length=20)),
                ('account_type', models.CharField(blank=True, max_length=20)),
                ('account_holder', models.CharField(blank=True, max_length=200)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True)),
                ('submitted_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='submitted_details', to='parties.client')),
                ('purchase', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='client_details', to='purchasing.pendingpurchase')),
            ],
            options={
                'db_table': 'client_details',
                'verbose_name_plural': 'client details',
            },
        ),
    ]
