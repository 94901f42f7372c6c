import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('purchasing', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InspectionSession',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('session_number', models.CharField(max_length=20, unique=True)),
                ('session_name', models.CharField(max_length=255)),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed')], default='IN_PROGRESS', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inspection_sessions', to=settings.AUTH_USER_MODEL)),
                ('purchase', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inspection_session', to='purchasing.pendingpurchase')),
            ],
            options={
                'db_table': 'inspection_sessions',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['status'], name='idx_session_status')],
            },
        ),
        migrations.CreateModel(
            name='IncomingGearItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('client_name', models.CharField(max_length=255)),
                ('client_brand', models.CharField(blank=True, max_length=100)),
                ('client_model', models.CharField(blank=True, max_length=150)),
                ('client_description', models.TextField(blank=True)),
                ('client_condition', models.CharField(blank=True, max_length=50)),
                ('client_serial_number', models.CharField(blank=True, max_length=100)),
                ('client_images', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('UNVERIFIED', 'Unverified'), ('IN_PROGRESS', 'In Progress'), ('VERIFIED', 'Verified'), ('APPROVED', 'Approved'), ('REOPENED', 'Reopened'), ('REJECTED', 'Rejected')], default='UNVERIFIED', max_length=20)),
                ('client_selection', models.CharField(blank=True, choices=[('BUY', 'Buy'), ('CONSIGNMENT', 'Consignment')], max_length=20, null=True)),
                ('not_interested', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='incoming_items', to='inspections.inspectionsession')),
            ],
            options={
                'db_table': 'incoming_gear_items',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['session', 'status'], name='idx_incoming_session_status')],
            },
        ),
        migrations.CreateModel(
            name='VerifiedGearItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('serial_number', models.CharField(blank=True, max_length=100)),
                ('condition', models.CharField(choices=[('LIKE_NEW', 'Like New'), ('EXCELLENT', 'Excellent'), ('VERY_GOOD', 'Very Good'), ('GOOD', 'Good'), ('WORN', 'Worn')], default='GOOD', max_length=20)),
                ('general_notes', models.TextField(blank=True)),
                ('requires_repair', models.BooleanField(default=False)),
                ('repair_notes', models.TextField(blank=True)),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('locked', models.BooleanField(default=False)),
                ('reopened_at', models.DateTimeField(blank=True, null=True)),
                ('reopen_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('incoming_item', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='verified_item', to='inspections.incominggearitem')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='verified_items', to='catalog.product')),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('reopened_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'verified_gear_items',
            },
        ),
        migrations.CreateModel(
            name='VerifiedAnswer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('question_text', models.CharField(max_length=500)),
                ('answer', models.CharField(blank=True, max_length=500)),
                ('notes', models.TextField(blank=True)),
                ('verified_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='inspections.verifiedgearitem')),
            ],
            options={
                'db_table': 'verified_answers',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='VerifiedAccessory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('accessory_name', models.CharField(max_length=150)),
                ('is_present', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True)),
                ('verified_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='accessories', to='inspections.verifiedgearitem')),
            ],
            options={
                'db_table': 'verified_accessories',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='PricingSnapshot',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('base_buy_min', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('base_buy_max', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('base_consign_min', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('base_consign_max', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('condition_multiplier', models.DecimalField(decimal_places=2, max_digits=4)),
                ('computed_buy_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('computed_consign_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('accessory_penalty', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('final_buy_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('final_consign_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('verified_item', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='pricing_snapshot', to='inspections.verifiedgearitem')),
            ],
            options={
                'db_table': 'pricing_snapshots',
            },
        ),
        migrations.CreateModel(
            name='PriceOverride',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('override_buy_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('override_consign_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('override_reason', models.CharField(choices=[('MARKET_CONDITION', 'Market condition'), ('CUSTOMER_NEGOTIATION', 'Customer negotiation'), ('DAMAGE_NOT_CAPTURED', 'Damage not captured'), ('RARE_ITEM', 'Rare item'), ('BULK_PURCHASE', 'Bulk purchase'), ('OTHER', 'Other')], max_length=30)),
                ('notes', models.TextField(blank=True)),
                ('overridden_at', models.DateTimeField(auto_now=True)),
                ('overridden_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('verified_item', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='price_override', to='inspections.verifiedgearitem')),
            ],
            options={
                'db_table': 'price_overrides',
            },
        ),
    ]
