import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='MaterialRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last modified')),
                ('mrn', models.CharField(editable=False, max_length=50, unique=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('submitted', 'Submitted'), ('in_progress', 'In Progress'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='submitted', max_length=20)),
                ('remarks', models.TextField(blank=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='material_requests', to='projects.project')),
                ('requester', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='material_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'material_request',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['project', 'status'], name='mr_project_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='MRLineItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_code', models.CharField(max_length=100)),
                ('description', models.TextField()),
                ('uom', models.CharField(help_text='Unit of measure, e.g. EA, M, KG', max_length=20)),
                ('quantity', models.DecimalField(decimal_places=3, max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15)),
                ('remarks', models.TextField(blank=True)),
                ('location', models.CharField(blank=True, max_length=200)),
                ('brand_asset', models.CharField(blank=True, max_length=200)),
                ('serial_chassis_engine_no', models.CharField(blank=True, max_length=200)),
                ('model_year', models.CharField(blank=True, max_length=10)),
                ('material_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='line_items', to='material_requests.materialrequest')),
            ],
            options={
                'db_table': 'mr_line_item',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='MRAttachment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('filename', models.CharField(max_length=255)),
                ('url', models.URLField(max_length=500)),
                ('file_type', models.CharField(default='application/octet-stream', max_length=100)),
                ('file_size', models.PositiveBigIntegerField(default=0)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('material_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='material_requests.materialrequest')),
            ],
            options={
                'db_table': 'mr_attachment',
                'ordering': ['id'],
            },
        ),
    ]
