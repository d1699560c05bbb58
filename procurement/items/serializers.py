from rest_framework import serializers

from procurement.items.models import Item, ItemSupplier, UnitOfMeasure
from procurement.suppliers.models import Supplier


class UnitOfMeasureSerializer(serializers.ModelSerializer):

    class Meta:
        model = UnitOfMeasure
        fields = ['id', 'code', 'name', 'uom_type', 'is_active']
        read_only_fields = ['id']

    def validate_code(self, value):
        value = value.strip().upper()
        queryset = UnitOfMeasure.objects.filter(code=value)
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A unit of measure with this code already exists.")
        return value


class ItemListSerializer(serializers.ModelSerializer):
    uom_code = serializers.CharField(source='uom.code', read_only=True)
    supplier_count = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = [
            'id', 'item_code', 'description', 'category', 'uom', 'uom_code',
            'brand', 'model', 'approval_status', 'is_active', 'supplier_count', 'created_at',
        ]

    def get_supplier_count(self, obj):
        return obj.supplier_links.count()


class ItemSupplierSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    supplier_status = serializers.CharField(source='supplier.status', read_only=True)

    class Meta:
        model = ItemSupplier
        fields = [
            'id', 'supplier', 'supplier_name', 'supplier_status',
            'is_primary_supplier', 'capability_rating', 'notes', 'created_at',
        ]
        read_only_fields = ['id', 'created_at']


class ItemDetailSerializer(serializers.ModelSerializer):
    uom_detail = UnitOfMeasureSerializer(source='uom', read_only=True)
    suppliers = ItemSupplierSerializer(source='supplier_links', many=True, read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.name', read_only=True, default=None)

    class Meta:
        model = Item
        fields = [
            'id', 'item_code', 'description', 'category', 'uom', 'uom_detail',
            'brand', 'model', 'specifications', 'approval_status', 'approved_by',
            'approved_by_name', 'approval_date', 'approval_notes', 'is_active',
            'suppliers', 'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]


class ItemCreateSerializer(serializers.ModelSerializer):
    """item_code is optional; a blank code gets the next ITM- number."""
    item_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    uom = serializers.PrimaryKeyRelatedField(queryset=UnitOfMeasure.objects.filter(is_active=True))

    class Meta:
        model = Item
        fields = ['item_code', 'description', 'category', 'uom', 'brand', 'model', 'specifications']

    def validate_item_code(self, value):
        value = value.strip().upper()
        if value and Item.objects.filter(item_code=value).exists():
            raise serializers.ValidationError("An item with this code already exists.")
        return value


class ItemUpdateSerializer(serializers.ModelSerializer):
    uom = serializers.PrimaryKeyRelatedField(queryset=UnitOfMeasure.objects.filter(is_active=True))

    class Meta:
        model = Item
        fields = ['description', 'category', 'uom', 'brand', 'model', 'specifications', 'is_active']


class ItemApproveSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[Item.APPROVAL_APPROVED, Item.APPROVAL_REJECTED])
    approval_notes = serializers.CharField(required=False, allow_blank=True, default='')


class ItemSupplierCreateSerializer(serializers.ModelSerializer):
    supplier = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.filter(is_active=True))

    class Meta:
        model = ItemSupplier
        fields = ['supplier', 'is_primary_supplier', 'capability_rating', 'notes']


class PriceHistorySerializer(serializers.Serializer):
    """One submitted quote line read as a price point."""
    quote_id = serializers.IntegerField(source='quote.id')
    rfq_number = serializers.CharField(source='quote.rfq.rfq_number')
    supplier_id = serializers.IntegerField(source='quote.supplier_id')
    supplier_name = serializers.CharField(source='quote.supplier.name')
    unit_price = serializers.DecimalField(max_digits=15, decimal_places=2)
    quantity = serializers.DecimalField(max_digits=15, decimal_places=3)
    currency = serializers.CharField(source='quote.currency')
    lead_time_days = serializers.IntegerField()
    quote_status = serializers.CharField(source='quote.status')
    submitted_at = serializers.DateTimeField(source='quote.submitted_at')
