import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('brand', models.CharField(max_length=100)),
                ('model', models.CharField(blank=True, max_length=150)),
                ('product_type', models.CharField(choices=[('CAMERA_BODY', 'Camera Body'), ('LENS', 'Lens'), ('FLASH', 'Flash'), ('GIMBAL', 'Gimbal'), ('DRONE', 'Drone'), ('VIDEO_CAMERA', 'Video Camera'), ('ACCESSORY', 'Accessory'), ('OTHER', 'Other')], default='OTHER', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('buy_price_min', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('buy_price_max', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('consign_price_min', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('consign_price_max', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['brand', 'name'],
                'indexes': [
                    models.Index(fields=['brand', 'model'], name='idx_product_brand_model'),
                    models.Index(fields=['product_type'], name='idx_product_type'),
                    models.Index(fields=['is_active'], name='idx_product_active'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AccessoryTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('accessory_name', models.CharField(max_length=150)),
                ('accessory_order', models.PositiveIntegerField(default=0)),
                ('is_required', models.BooleanField(default=False)),
                ('penalty_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='accessories', to='catalog.product')),
            ],
            options={
                'db_table': 'accessory_templates',
                'ordering': ['product', 'accessory_order', 'id'],
                'constraints': [models.UniqueConstraint(fields=('product', 'accessory_name'), name='uniq_product_accessory')],
            },
        ),
    ]
