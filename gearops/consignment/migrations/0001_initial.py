import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('parties', '0001_initial'),
        ('inventory', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ConsignmentChangeRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('current_payout', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('proposed_payout', models.DecimalField(decimal_places=2, max_digits=10)),
                ('proposed_selling_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('reason', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('PENDING_CLIENT', 'Pending Client'), ('CONFIRMED', 'Confirmed'), ('DECLINED', 'Declined')], default='PENDING_CLIENT', max_length=20)),
                ('token', models.CharField(max_length=64, unique=True)),
                ('client_adjusted_payout', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('client_confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('client_declined_at', models.DateTimeField(blank=True, null=True)),
                ('decline_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('equipment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='consignment_requests', to='inventory.equipment')),
                ('client', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='consignment_requests', to='parties.client')),
                ('requested_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('approved_by_admin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'consignment_change_requests',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='idx_consign_req_status'),
                ],
            },
        ),
    ]
