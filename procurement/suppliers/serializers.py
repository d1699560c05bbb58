from rest_framework import serializers

from procurement.suppliers.models import ComplianceDocument, Supplier, SupplierContact


class SupplierContactSerializer(serializers.ModelSerializer):
    name = serializers.CharField(error_messages={'required': 'Contact name and email are required'})
    email = serializers.EmailField(error_messages={'required': 'Contact name and email are required'})

    class Meta:
        model = SupplierContact
        fields = ['id', 'name', 'email', 'phone', 'position', 'is_primary']
        read_only_fields = ['id']


class ComplianceDocumentSerializer(serializers.ModelSerializer):
    is_valid = serializers.BooleanField(read_only=True)

    class Meta:
        model = ComplianceDocument
        fields = ['id', 'name', 'url', 'expiry_date', 'is_valid', 'created_at']
        read_only_fields = ['id', 'created_at']


class SupplierListSerializer(serializers.ModelSerializer):

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'email', 'phone', 'category', 'status', 'rating',
            'quote_count', 'avg_response_time', 'last_quote_date', 'is_active',
        ]


class SupplierDetailSerializer(serializers.ModelSerializer):
    contacts = SupplierContactSerializer(many=True, read_only=True)
    compliance_docs = ComplianceDocumentSerializer(source='compliance_documents', many=True, read_only=True)
    approved_by_name = serializers.CharField(source='approved_by.name', read_only=True, default=None)

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'email', 'phone', 'address', 'category', 'status',
            'rating', 'quote_count', 'avg_response_time', 'last_quote_date',
            'is_active', 'approved_by', 'approved_by_name', 'approval_date',
            'approval_notes', 'contacts', 'compliance_docs', 'created_at', 'updated_at',
        ]


class SupplierCreateSerializer(serializers.ModelSerializer):
    """name, email and category are required; statistics start at zero."""

    class Meta:
        model = Supplier
        fields = ['name', 'email', 'phone', 'address', 'category']

    def validate_email(self, value):
        if Supplier.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A supplier with this email already exists.")
        return value.lower()


class SupplierUpdateSerializer(serializers.ModelSerializer):

    class Meta:
        model = Supplier
        fields = ['name', 'email', 'phone', 'address', 'category', 'status', 'rating', 'is_active']

    def validate_email(self, value):
        if Supplier.objects.filter(email__iexact=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("A supplier with this email already exists.")
        return value.lower()


class SupplierApproveSerializer(serializers.Serializer):
    approval_notes = serializers.CharField(required=False, allow_blank=True, default='')


class SupplierContactsUpdateSerializer(serializers.Serializer):
    contacts = SupplierContactSerializer(many=True)

    def to_internal_value(self, data):
        if not isinstance(data, dict) or not isinstance(data.get('contacts'), list):
            raise serializers.ValidationError({'contacts': ["Contacts must be an array"]})
        return super().to_internal_value(data)
