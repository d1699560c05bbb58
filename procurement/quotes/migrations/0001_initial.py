import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('material_requests', '0001_initial'),
        ('rfq', '0001_initial'),
        ('suppliers', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Quote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('submitted', 'Submitted'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='submitted', max_length=20)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('valid_until', models.DateField()),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15)),
                ('currency', models.CharField(max_length=3)),
                ('terms_conditions', models.TextField(blank=True)),
                ('rfq', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quotes', to='rfq.rfq')),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='quotes', to='suppliers.supplier')),
            ],
            options={
                'db_table': 'quote',
                'ordering': ['total_amount', 'id'],
                'constraints': [models.UniqueConstraint(fields=('rfq', 'supplier'), name='quote_rfq_supplier_unique')],
            },
        ),
        migrations.CreateModel(
            name='QuoteLineItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=15)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=15)),
                ('total_price', models.DecimalField(decimal_places=2, max_digits=15)),
                ('lead_time_days', models.PositiveIntegerField(default=0)),
                ('remarks', models.TextField(blank=True)),
                ('mr_line_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='quote_lines', to='material_requests.mrlineitem')),
                ('quote', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='line_items', to='quotes.quote')),
            ],
            options={
                'db_table': 'quote_line_item',
                'ordering': ['id'],
                'constraints': [models.UniqueConstraint(fields=('quote', 'mr_line_item'), name='quote_line_unique')],
            },
        ),
        migrations.CreateModel(
            name='QuotePack',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='draft', max_length=20)),
                ('comparison_data', models.JSONField(blank=True, default=dict)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quote_packs_approved', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotes_quotepack_created', to=settings.AUTH_USER_MODEL)),
                ('rfq', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quote_packs', to='rfq.rfq')),
            ],
            options={
                'db_table': 'quote_pack',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='QuoteApproval',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('comments', models.TextField(blank=True)),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('comparison_summary', models.JSONField(blank=True, null=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quote_approvals_decided', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='quotes_quoteapproval_created', to=settings.AUTH_USER_MODEL)),
                ('quote_pack', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='approval', to='quotes.quotepack')),
            ],
            options={
                'db_table': 'quote_approval',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['status'], name='quote_approval_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='LineItemDecision',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('decision', models.CharField(choices=[('approved', 'Approved'), ('rejected', 'Rejected')], default='approved', max_length=10)),
                ('comments', models.TextField(blank=True)),
                ('mr_line_item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='decisions', to='material_requests.mrlineitem')),
                ('quote_approval', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='line_item_decisions', to='quotes.quoteapproval')),
                ('selected_quote', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='line_decisions', to='quotes.quote')),
            ],
            options={
                'db_table': 'quote_line_decision',
                'ordering': ['mr_line_item_id'],
                'constraints': [models.UniqueConstraint(fields=('quote_approval', 'mr_line_item'), name='line_decision_unique'),],
            },
        ),
    ]
