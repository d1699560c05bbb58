from rest_framework import serializers

from procurement.quotes.models import LineItemDecision, Quote, QuoteApproval, QuoteLineItem, QuotePack
from procurement.quotes.services import DecisionDTO, LineDecisionDTO, QuoteDTO, QuoteLineDTO


# ============================================================================
# QUOTES
# ============================================================================

class QuoteLineItemSerializer(serializers.ModelSerializer):
    item_code = serializers.CharField(source='mr_line_item.item_code', read_only=True)
    description = serializers.CharField(source='mr_line_item.description', read_only=True)

    class Meta:
        model = QuoteLineItem
        fields = [
            'id', 'mr_line_item', 'item_code', 'description', 'unit_price',
            'quantity', 'total_price', 'lead_time_days', 'remarks',
        ]


class QuoteSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    rfq_number = serializers.CharField(source='rfq.rfq_number', read_only=True)
    line_items = QuoteLineItemSerializer(many=True, read_only=True)

    class Meta:
        model = Quote
        fields = [
            'id', 'rfq', 'rfq_number', 'supplier', 'supplier_name', 'status',
            'submitted_at', 'valid_until', 'total_amount', 'currency',
            'terms_conditions', 'line_items', 'created_at', 'updated_at',
        ]


class QuoteLineCreateSerializer(serializers.Serializer):
    mr_line_item_id = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0)
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    lead_time_days = serializers.IntegerField(min_value=0)
    total_price = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=0, required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than 0")
        return value


class QuoteCreateSerializer(serializers.Serializer):
    """
    Example Request Body:
    {
        "rfq_id": 1,
        "supplier_id": 3,
        "valid_until": "2025-03-01",
        "terms_conditions": "50% advance",
        "line_items": [
            {"mr_line_item_id": 10, "unit_price": "450.00", "quantity": "10", "lead_time_days": 14}
        ]
    }
    """
    rfq_id = serializers.IntegerField()
    supplier_id = serializers.IntegerField()
    valid_until = serializers.DateField()
    terms_conditions = serializers.CharField(required=False, allow_blank=True, default='')
    line_items = QuoteLineCreateSerializer(many=True, allow_empty=False)

    def to_dto(self):
        data = self.validated_data
        return QuoteDTO(
            rfq_id=data['rfq_id'],
            supplier_id=data['supplier_id'],
            valid_until=data['valid_until'],
            terms_conditions=data['terms_conditions'],
            line_items=[QuoteLineDTO(**line) for line in data['line_items']],
        )


# ============================================================================
# QUOTE PACKS AND APPROVALS
# ============================================================================

class QuotePackSerializer(serializers.ModelSerializer):
    rfq_number = serializers.CharField(source='rfq.rfq_number', read_only=True)
    quotes = QuoteSerializer(many=True, read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    class Meta:
        model = QuotePack
        fields = [
            'id', 'rfq', 'rfq_number', 'status', 'comparison_data', 'quotes',
            'sent_at', 'approved_at', 'approved_by', 'created_by', 'created_by_name', 'created_at',
        ]


class QuotePackListSerializer(serializers.ModelSerializer):
    rfq_number = serializers.CharField(source='rfq.rfq_number', read_only=True)

    class Meta:
        model = QuotePack
        fields = ['id', 'rfq', 'rfq_number', 'status', 'sent_at', 'approved_at', 'created_at']


class LineItemDecisionSerializer(serializers.ModelSerializer):
    mr_line_item_id = serializers.IntegerField(read_only=True)
    item_code = serializers.CharField(source='mr_line_item.item_code', read_only=True)
    selected_quote_id = serializers.IntegerField(read_only=True)
    supplier_id = serializers.IntegerField(source='selected_quote.supplier_id', read_only=True, default=None)
    supplier_name = serializers.CharField(source='selected_quote.supplier.name', read_only=True, default=None)

    class Meta:
        model = LineItemDecision
        fields = [
            'id', 'mr_line_item_id', 'item_code', 'selected_quote_id',
            'supplier_id', 'supplier_name', 'decision', 'comments',
        ]


class QuoteApprovalListSerializer(serializers.ModelSerializer):
    rfq_id = serializers.IntegerField(source='quote_pack.rfq_id', read_only=True)
    rfq_number = serializers.CharField(source='quote_pack.rfq.rfq_number', read_only=True)
    project_name = serializers.CharField(source='quote_pack.rfq.material_request.project.name', read_only=True)

    class Meta:
        model = QuoteApproval
        fields = ['id', 'quote_pack', 'rfq_id', 'rfq_number', 'project_name', 'status', 'approved_at', 'created_at']


class QuoteApprovalDetailSerializer(serializers.ModelSerializer):
    quote_pack = QuotePackSerializer(read_only=True)
    line_item_decisions = LineItemDecisionSerializer(many=True, read_only=True)
    approved_by_name = serializers.CharField(source='approved_by.name', read_only=True, default=None)

    class Meta:
        model = QuoteApproval
        fields = [
            'id', 'quote_pack', 'status', 'comments', 'line_item_decisions',
            'comparison_summary', 'approved_at', 'approved_by', 'approved_by_name',
            'created_at', 'updated_at',
        ]


class RFQReferenceSerializer(serializers.Serializer):
    rfq_id = serializers.IntegerField(error_messages={'required': 'rfq_id is required'})


class LineDecisionInputSerializer(serializers.Serializer):
    mr_line_item_id = serializers.IntegerField()
    selected_quote_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    decision = serializers.ChoiceField(
        choices=LineItemDecision.DECISION_CHOICES,
        required=False,
        default=LineItemDecision.DECISION_APPROVED
    )
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class QuoteApprovalUpdateSerializer(serializers.Serializer):
    line_item_decisions = LineDecisionInputSerializer(many=True, required=False)
    comments = serializers.CharField(required=False, allow_blank=True)

    def decisions(self):
        entries = self.validated_data.get('line_item_decisions')
        if entries is None:
            return None
        return [LineDecisionDTO(**entry) for entry in entries]


class QuoteApprovalDecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(
        choices=[QuoteApproval.STATUS_APPROVED, QuoteApproval.STATUS_REJECTED],
        error_messages={'required': 'Decision is required.'}
    )
    line_item_decisions = LineDecisionInputSerializer(many=True, required=False, default=list)
    comments = serializers.CharField(required=False, allow_blank=True, default='')

    def to_dto(self):
        data = self.validated_data
        return DecisionDTO(
            decision=data['decision'],
            line_item_decisions=[LineDecisionDTO(**entry) for entry in data['line_item_decisions']],
            comments=data['comments'],
        )
