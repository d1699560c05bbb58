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
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('entity_type', models.CharField(choices=[('material_request', 'Material Request'), ('rfq', 'RFQ'), ('quote', 'Quote'), ('quote_pack', 'Quote Pack'), ('quote_approval', 'Quote Approval'), ('purchase_requisition', 'Purchase Requisition'), ('purchase_order', 'Purchase Order'), ('supplier', 'Supplier'), ('project', 'Project'), ('authorization_matrix', 'Authorization Matrix')], max_length=30)),
                ('entity_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('action', models.CharField(max_length=60)),
                ('actor_name', models.CharField(blank=True, default='', max_length=255)),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('before_data', models.JSONField(blank=True, null=True)),
                ('after_data', models.JSONField(blank=True, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.CharField(blank=True, default='', max_length=255)),
                ('actor', models.ForeignKey(blank=True, help_text='Null for system actions', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'audit_log',
                'ordering': ['-timestamp', '-id'],
                'indexes': [models.Index(fields=['entity_type', 'entity_id'], name='audit_log_entity__idx'), models.Index(fields=['action'], name='audit_log_action_idx')],
            },
        ),
    ]
