from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from procurement.material_requests.models import MaterialRequest, MRAttachment, MRLineItem
from procurement.projects.models import Project


# ============================================================================
# OUTPUT
# ============================================================================

class MRLineItemSerializer(serializers.ModelSerializer):

    class Meta:
        model = MRLineItem
        fields = [
            'id', 'item_code', 'description', 'uom', 'quantity', 'unit_price',
            'remarks', 'location', 'brand_asset', 'serial_chassis_engine_no', 'model_year',
        ]


class MRAttachmentSerializer(serializers.ModelSerializer):

    class Meta:
        model = MRAttachment
        fields = ['id', 'filename', 'url', 'file_type', 'file_size', 'uploaded_at']


class MaterialRequestListSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    requester_name = serializers.CharField(source='requester.name', read_only=True)
    line_item_count = serializers.IntegerField(source='line_items.count', read_only=True)

    class Meta:
        model = MaterialRequest
        fields = [
            'id', 'mrn', 'project', 'project_name', 'requester', 'requester_name',
            'status', 'line_item_count', 'created_at', 'updated_at',
        ]


class MaterialRequestDetailSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    requester_name = serializers.CharField(source='requester.name', read_only=True)
    line_items = MRLineItemSerializer(many=True, read_only=True)
    attachments = MRAttachmentSerializer(many=True, read_only=True)

    class Meta:
        model = MaterialRequest
        fields = [
            'id', 'mrn', 'project', 'project_name', 'requester', 'requester_name',
            'status', 'remarks', 'line_items', 'attachments', 'created_at', 'updated_at',
        ]


# ============================================================================
# INPUT
# ============================================================================

class MRLineItemCreateSerializer(serializers.Serializer):
    item_code = serializers.CharField(max_length=100)
    description = serializers.CharField()
    uom = serializers.CharField(max_length=20)
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=15, decimal_places=2, required=False, default=Decimal('0.00'))
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
    location = serializers.CharField(required=False, allow_blank=True, default='')
    brand_asset = serializers.CharField(required=False, allow_blank=True, default='')
    serial_chassis_engine_no = serializers.CharField(required=False, allow_blank=True, default='')
    model_year = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0")
        return value


class MRAttachmentCreateSerializer(serializers.Serializer):
    """Accepts either a plain file URL or the attachment metadata."""
    filename = serializers.CharField(max_length=255, required=False)
    url = serializers.URLField(max_length=500)
    file_type = serializers.CharField(max_length=100, required=False, default='application/octet-stream')
    file_size = serializers.IntegerField(min_value=0, required=False, default=0)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = {'url': data}
        attrs = super().to_internal_value(data)
        if not attrs.get('filename'):
            attrs['filename'] = attrs['url'].rstrip('/').split('/')[-1] or 'unknown'
        return attrs


class MaterialRequestCreateSerializer(serializers.Serializer):
    """
    Example Request Body:
    {
        "project_id": 1,
        "remarks": "Urgent for level 3 slab",
        "line_items": [
            {"item_code": "CEM-001", "description": "Portland cement", "uom": "BAG", "quantity": "200"}
        ],
        "attachments": ["https://files.example.com/drawing.pdf"]
    }
    """
    project_id = serializers.IntegerField()
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
    line_items = MRLineItemCreateSerializer(many=True, allow_empty=False)
    attachments = MRAttachmentCreateSerializer(many=True, required=False, default=list)

    def validate_project_id(self, value):
        if not Project.objects.filter(pk=value).exists():
            raise serializers.ValidationError(f"Project with ID {value} not found")
        return value

    @transaction.atomic
    def create(self, validated_data):
        request = self.context['request']
        material_request = MaterialRequest.objects.create(
            project_id=validated_data['project_id'],
            requester=request.user,
            remarks=validated_data.get('remarks', ''),
            status=MaterialRequest.STATUS_SUBMITTED,
        )
        MRLineItem.objects.bulk_create([
            MRLineItem(material_request=material_request, **line)
            for line in validated_data['line_items']
        ])
        MRAttachment.objects.bulk_create([
            MRAttachment(material_request=material_request, **attachment)
            for attachment in validated_data.get('attachments', [])
        ])
        return material_request
