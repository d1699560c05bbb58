from rest_framework import serializers

from procurement.material_requests.serializers import MRLineItemSerializer
from procurement.rfq.models import RFQ, RFQSupplier


class RFQSupplierSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    supplier_email = serializers.EmailField(source='supplier.email', read_only=True)

    class Meta:
        model = RFQSupplier
        fields = [
            'id', 'supplier', 'supplier_name', 'supplier_email', 'status',
            'sent_at', 'responded_at', 'portal_link', 'email_tracking_id',
        ]


class RFQListSerializer(serializers.ModelSerializer):
    mrn = serializers.CharField(source='material_request.mrn', read_only=True)
    project_id = serializers.IntegerField(source='material_request.project_id', read_only=True)
    project_name = serializers.CharField(source='material_request.project.name', read_only=True)
    supplier_count = serializers.IntegerField(source='suppliers.count', read_only=True)
    quote_count = serializers.IntegerField(source='quotes.count', read_only=True)

    class Meta:
        model = RFQ
        fields = [
            'id', 'rfq_number', 'material_request', 'mrn', 'project_id', 'project_name',
            'status', 'due_date', 'sent_at', 'supplier_count', 'quote_count', 'created_at',
        ]


class RFQDetailSerializer(serializers.ModelSerializer):
    mrn = serializers.CharField(source='material_request.mrn', read_only=True)
    project_id = serializers.IntegerField(source='material_request.project_id', read_only=True)
    project_name = serializers.CharField(source='material_request.project.name', read_only=True)
    line_items = MRLineItemSerializer(source='material_request.line_items', many=True, read_only=True)
    suppliers = RFQSupplierSerializer(many=True, read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    class Meta:
        model = RFQ
        fields = [
            'id', 'rfq_number', 'material_request', 'mrn', 'project_id', 'project_name',
            'status', 'due_date', 'terms', 'sent_at', 'comparison_summary', 'line_items',
            'suppliers', 'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]


class RFQCreateSerializer(serializers.Serializer):
    material_request_id = serializers.IntegerField()
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    terms = serializers.CharField(required=False, allow_blank=True, default='')
    supplier_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)


class RFQDispatchSerializer(serializers.Serializer):
    supplier_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)
    terms = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
