from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('audit', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='entity_type',
            field=models.CharField(choices=[('material_request', 'Material Request'), ('rfq', 'RFQ'), ('quote', 'Quote'), ('quote_pack', 'Quote Pack'), ('quote_approval', 'Quote Approval'), ('purchase_requisition', 'Purchase Requisition'), ('purchase_order', 'Purchase Order'), ('supplier', 'Supplier'), ('project', 'Project'), ('authorization_matrix', 'Authorization Matrix'), ('item', 'Item')], max_length=30),
        ),
    ]
