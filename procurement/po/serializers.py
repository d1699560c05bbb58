from rest_framework import serializers

from procurement.po.models import POLineItem, POStatusHistory, PurchaseOrder
from procurement.po.services import POAcknowledgeDTO, POUpdateDTO


class POLineItemSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source='mr_line_item.item_code', read_only=True)
    uom = serializers.CharField(source='mr_line_item.uom', read_only=True)

    class Meta:
        model = POLineItem
        fields = [
            'id', 'pr_line_item', 'mr_line_item', 'item_code', 'description', 'uom',
            'quantity', 'unit_price', 'total_price', 'delivery_date',
        ]


class POStatusHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.CharField(source='changed_by.name', read_only=True, default='SYSTEM')

    class Meta:
        model = POStatusHistory
        fields = ['id', 'status', 'previous_status', 'changed_at', 'changed_by', 'changed_by_name', 'comments']


class POListSerializer(serializers.ModelSerializer):
    pr_number = serializers.CharField(source='purchase_requisition.pr_number', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'po_number', 'purchase_requisition', 'pr_number', 'project', 'project_name',
            'supplier', 'supplier_name', 'status', 'total_value', 'currency', 'delivery_date', 'created_at',
        ]


class PODetailSerializer(serializers.ModelSerializer):
    pr_number = serializers.CharField(source='purchase_requisition.pr_number', read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    sent_by_name = serializers.CharField(source='sent_by.name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)
    line_items = POLineItemSerializer(many=True, read_only=True)
    status_history = POStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'po_number', 'purchase_requisition', 'pr_number', 'project', 'project_name',
            'supplier', 'supplier_name', 'status', 'total_value', 'currency', 'payment_terms',
            'delivery_address', 'delivery_date', 'comments', 'line_items', 'status_history',
            'sent_at', 'sent_by', 'sent_by_name', 'supplier_email',
            'acknowledged_at', 'acknowledged_by', 'acknowledgment_comments',
            'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]


class POGenerateSerializer(serializers.Serializer):
    """
    Example Request Body:
    {
        "pr_id": 7,
        "project_id": 1,
        "delivery_address": "Tower A site gate 2"
    }
    """
    pr_id = serializers.IntegerField()
    project_id = serializers.IntegerField()
    delivery_address = serializers.CharField(required=False, allow_blank=True, default='')


class POUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.STATUS_CHOICES, required=False)
    comments = serializers.CharField(required=False, allow_blank=True)
    delivery_date = serializers.DateField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide at least one of status, comments, delivery_date")
        return attrs

    def to_dto(self):
        return POUpdateDTO(**self.validated_data)


class POSendSerializer(serializers.Serializer):
    supplier_email = serializers.EmailField(required=False, allow_blank=True, default='')
    message = serializers.CharField(required=False, allow_blank=True, default='')


class POAcknowledgeSerializer(serializers.Serializer):
    """
    Example Request Body:
    {
        "acknowledged_by": "Ahmed (ABC Supplies)",
        "acknowledgment_date": "2025-02-01T09:30:00Z",
        "comments": "Delivery in two batches",
        "estimated_delivery_date": "2025-02-20"
    }
    """
    acknowledged_by = serializers.CharField(max_length=255)
    acknowledgment_date = serializers.DateTimeField()
    comments = serializers.CharField(required=False, allow_blank=True, default='')
    estimated_delivery_date = serializers.DateField(required=False, allow_null=True, default=None)

    def to_dto(self):
        return POAcknowledgeDTO(**self.validated_data)
