import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('material_requests', '0001_initial'),
        ('suppliers', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RFQ',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('rfq_number', models.CharField(editable=False, max_length=50, unique=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('quotes_received', 'Quotes Received'), ('comparison_ready', 'Comparison Ready'), ('quote_pack_sent', 'Quote Pack Sent'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='draft', max_length=20)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('terms', models.TextField(blank=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('comparison_summary', models.JSONField(blank=True, null=True)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rfq_rfq_created', to=settings.AUTH_USER_MODEL)),
                ('material_request', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rfqs', to='material_requests.materialrequest')),
            ],
            options={
                'db_table': 'rfq',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['status'], name='rfq_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='RFQSupplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('responded', 'Responded'), ('declined', 'Declined')], default='pending', max_length=20)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('responded_at', models.DateTimeField(blank=True, null=True)),
                ('portal_link', models.URLField(max_length=500)),
                ('email_tracking_id', models.CharField(blank=True, max_length=64)),
                ('rfq', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='suppliers', to='rfq.rfq')),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='rfq_invitations', to='suppliers.supplier')),
            ],
            options={
                'db_table': 'rfq_supplier',
                'ordering': ['id'],
                'constraints': [models.UniqueConstraint(fields=('rfq', 'supplier'), name='rfq_supplier_unique')],
            },
        ),
    ]
