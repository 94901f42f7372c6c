import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('parties', '0001_initial'),
        ('inspections', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Equipment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sku', models.CharField(max_length=50, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('brand', models.CharField(max_length=100)),
                ('model', models.CharField(blank=True, max_length=150)),
                ('category', models.CharField(choices=[('CAMERA_BODY', 'Camera Body'), ('LENS', 'Lens'), ('FLASH', 'Flash'), ('GIMBAL', 'Gimbal'), ('DRONE', 'Drone'), ('VIDEO_CAMERA', 'Video Camera'), ('ACCESSORY', 'Accessory'), ('OTHER', 'Other')], default='OTHER', max_length=20)),
                ('condition', models.CharField(choices=[('MINT', 'Mint'), ('EXCELLENT', 'Excellent'), ('GOOD', 'Good'), ('FAIR', 'Fair'), ('POOR', 'Poor')], default='GOOD', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('serial_number', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=[('PENDING_INSPECTION', 'Pending Inspection'), ('INSPECTED', 'Inspected'), ('IN_REPAIR', 'In Repair'), ('REPAIR_COMPLETED', 'Repair Completed'), ('READY_FOR_SALE', 'Ready For Sale'), ('RESERVED', 'Reserved'), ('SOLD', 'Sold')], default='PENDING_INSPECTION', max_length=30)),
                ('intake_status', models.CharField(choices=[('PENDING_INTAKE', 'Pending Intake'), ('INTAKE_COMPLETE', 'Intake Complete')], default='PENDING_INTAKE', max_length=20)),
                ('acquisition_type', models.CharField(choices=[('PURCHASED_OUTRIGHT', 'Purchased Outright'), ('CONSIGNMENT', 'Consignment'), ('TRADE_IN', 'Trade In')], default='PURCHASED_OUTRIGHT', max_length=20)),
                ('purchase_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('cost_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('selling_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('consignment_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('consignment_start_date', models.DateField(blank=True, null=True)),
                ('consignment_end_date', models.DateField(blank=True, null=True)),
                ('shelf_location', models.CharField(blank=True, max_length=50)),
                ('images', models.JSONField(blank=True, default=list)),
                ('in_repair', models.BooleanField(default=False)),
                ('repair_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('sold_at', models.DateTimeField(blank=True, null=True)),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='equipment', to='parties.client')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('source_verified_item', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='equipment', to='inspections.verifiedgearitem')),
                ('vendor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='equipment', to='parties.vendor')),
            ],
            options={
                'db_table': 'equipment',
                'ordering': ['-created_at'],
                'verbose_name_plural': 'equipment',
                'indexes': [
                    models.Index(fields=['status'], name='idx_equipment_status'),
                    models.Index(fields=['intake_status'], name='idx_equipment_intake'),
                    models.Index(fields=['acquisition_type'], name='idx_equipment_acquisition'),
                    models.Index(fields=['brand', 'model'], name='idx_equipment_brand_model'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PriceHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('new_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('changed_at', models.DateTimeField(auto_now_add=True)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('equipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='price_history', to='inventory.equipment')),
            ],
            options={
                'db_table': 'price_history',
                'ordering': ['-changed_at'],
                'verbose_name_plural': 'price history',
            },
        ),
        migrations.CreateModel(
            name='RepairLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('technician_name', models.CharField(max_length=150)),
                ('issue_description', models.TextField()),
                ('repair_notes', models.TextField(blank=True)),
                ('estimated_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('actual_cost', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('status', models.CharField(choices=[('SENT_TO_TECH', 'Sent To Tech'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('RETURNED', 'Returned')], default='SENT_TO_TECH', max_length=20)),
                ('sent_at', models.DateTimeField(auto_now_add=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('returned_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('equipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='repairs', to='inventory.equipment')),
            ],
            options={
                'db_table': 'repair_logs',
                'ordering': ['-sent_at'],
            },
        ),
    ]
