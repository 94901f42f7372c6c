import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='WebhookEventLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_id', models.UUIDField(unique=True)),
                ('event_type', models.CharField(max_length=50)),
                ('version', models.CharField(max_length=10)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('PROCESSING', 'Processing'), ('PROCESSED', 'Processed'), ('FAILED', 'Failed')], default='PENDING', max_length=20)),
                ('raw_payload', models.JSONField(default=dict)),
                ('source_ip', models.GenericIPAddressField(blank=True, null=True)),
                ('signature_provided', models.CharField(blank=True, max_length=255, null=True)),
                ('signature_computed', models.CharField(blank=True, max_length=255, null=True)),
                ('signature_valid', models.BooleanField(default=False)),
                ('received_at', models.DateTimeField(auto_now_add=True)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('retry_count', models.PositiveIntegerField(default=0)),
                ('last_retried_at', models.DateTimeField(blank=True, null=True)),
                ('ignored_at', models.DateTimeField(blank=True, null=True)),
                ('ignore_note', models.TextField(blank=True)),
                ('related_entity_id', models.CharField(blank=True, max_length=100, null=True)),
                ('related_entity_type', models.CharField(blank=True, max_length=50, null=True)),
                ('ignored_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'webhook_event_logs',
                'ordering': ['-received_at'],
                'indexes': [
                    models.Index(fields=['status', 'received_at'], name='idx_webhook_status_received'),
                    models.Index(fields=['event_type'], name='idx_webhook_event_type'),
                ],
            },
        ),
    ]
