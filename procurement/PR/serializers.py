from rest_framework import serializers

from core.approval.models import ApprovalAction
from procurement.PR.models import PRLineItem, PurchaseRequisition


class PRLineItemSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source='mr_line_item.item_code', read_only=True)
    description = serializers.CharField(source='mr_line_item.description', read_only=True)
    uom = serializers.CharField(source='mr_line_item.uom', read_only=True)

    class Meta:
        model = PRLineItem
        fields = [
            'id', 'mr_line_item', 'item_code', 'description', 'uom', 'quote',
            'quantity', 'unit_price', 'total_price', 'lead_time_days',
        ]


class PRListSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)

    class Meta:
        model = PurchaseRequisition
        fields = [
            'id', 'pr_number', 'project', 'project_name', 'supplier', 'supplier_name',
            'status', 'total_value', 'currency', 'submitted_at', 'approved_at', 'created_at',
        ]


class PRDetailSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    supplier_email = serializers.CharField(source='supplier.email', read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.name', read_only=True, default=None)
    rejected_by_name = serializers.CharField(source='rejected_by.name', read_only=True, default=None)
    line_items = PRLineItemSerializer(many=True, read_only=True)
    workflow_status = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseRequisition
        fields = [
            'id', 'pr_number', 'project', 'project_name', 'supplier', 'supplier_name',
            'supplier_email', 'quote_approval', 'status', 'workflow_status', 'total_value',
            'currency', 'comments', 'line_items',
            'submitted_at', 'approved_at', 'approved_by', 'approved_by_name',
            'rejected_at', 'rejected_by', 'rejected_by_name', 'rejection_reason',
            'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]

    def get_workflow_status(self, obj):
        return obj.get_workflow_status()


class PRGenerateSerializer(serializers.Serializer):
    """
    Example Request Body:
    {
        "quote_approval_id": 4,
        "project_id": 1
    }
    """
    quote_approval_id = serializers.IntegerField()
    project_id = serializers.IntegerField()


class PRUpdateSerializer(serializers.Serializer):
    comments = serializers.CharField(allow_blank=True)


class PRApproveSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class PRRejectSerializer(serializers.Serializer):
    reason = serializers.CharField()


class ApprovalRecordSerializer(serializers.ModelSerializer):
    """One approval action on a PR, with the level it was taken on."""
    approval_level = serializers.IntegerField(source='stage_instance.approval_level', read_only=True)
    approver_id = serializers.IntegerField(source='user_id', read_only=True)
    approver_name = serializers.CharField(source='user.name', read_only=True, default='SYSTEM')
    approver_role = serializers.CharField(source='user.role', read_only=True, default=None)
    timestamp = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = ApprovalAction
        fields = [
            'id', 'approval_level', 'approver_id', 'approver_name', 'approver_role',
            'action', 'comment', 'timestamp',
        ]
