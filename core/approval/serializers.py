from decimal import Decimal

from rest_framework import serializers

from core.approval.models import ApprovalAction, AuthorizationMatrix
from core.user_accounts.models import CustomUser, UserRole
from procurement.projects.models import Project


class AuthorizationMatrixSerializer(serializers.ModelSerializer):
    project_code = serializers.CharField(source='project.code', read_only=True, default=None)
    approver_user_name = serializers.CharField(source='approver_user.name', read_only=True, default=None)

    class Meta:
        model = AuthorizationMatrix
        fields = [
            'id', 'project', 'project_code', 'approval_level',
            'threshold_min', 'threshold_max',
            'approver_role', 'approver_user', 'approver_user_name',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class AuthorizationRuleInputSerializer(serializers.Serializer):
    """One rule of a PUT authorization-matrix payload"""
    approval_level = serializers.IntegerField(min_value=1)
    threshold_min = serializers.DecimalField(max_digits=15, decimal_places=2, min_value=Decimal('0'))
    threshold_max = serializers.DecimalField(
        max_digits=15, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    approver_role = serializers.ChoiceField(choices=UserRole.choices)
    approver_user_id = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)

    def validate_is_active(self, value):
        raw = self.initial_data.get('is_active') if isinstance(self.initial_data, dict) else None
        if raw is not None and not isinstance(raw, bool):
            raise serializers.ValidationError("is_active must be a boolean")
        return value

    def validate_approver_user_id(self, value):
        if value is not None and not CustomUser.objects.filter(pk=value, is_active=True).exists():
            raise serializers.ValidationError(f"User {value} not found")
        return value

    def validate(self, attrs):
        threshold_max = attrs.get('threshold_max')
        if threshold_max is not None and threshold_max <= attrs['threshold_min']:
            raise serializers.ValidationError(
                {"threshold_max": "threshold_max must be greater than threshold_min"}
            )
        return attrs


class AuthorizationMatrixUpdateSerializer(serializers.Serializer):
    """
    PUT body:
    {
        "project_id": 3,            # omit or null for the default rules
        "matrix": [
            {"approval_level": 1, "threshold_min": "0", "threshold_max": "5000",
             "approver_role": "procurement", "is_active": true},
            ...
        ]
    }
    """
    project_id = serializers.IntegerField(required=False, allow_null=True)
    matrix = serializers.ListField(child=serializers.DictField(), allow_empty=True)

    def validate_project_id(self, value):
        if value is None:
            return None
        try:
            return Project.objects.get(pk=value).pk
        except Project.DoesNotExist:
            raise serializers.ValidationError(f"Project {value} not found")

    def validate_matrix(self, value):
        cleaned = []
        errors = {}
        for index, rule in enumerate(value):
            rule_serializer = AuthorizationRuleInputSerializer(data=rule)
            if rule_serializer.is_valid():
                cleaned.append(rule_serializer.validated_data)
            else:
                errors[f"rule {index + 1}"] = rule_serializer.errors
        if errors:
            raise serializers.ValidationError(errors)
        return cleaned

    def to_internal_value(self, data):
        if isinstance(data, dict) and 'matrix' in data and not isinstance(data['matrix'], list):
            raise serializers.ValidationError({"matrix": ["Matrix must be an array"]})
        return super().to_internal_value(data)


class ApprovalActionSerializer(serializers.ModelSerializer):
    """An approval record: who decided what on which level"""
    approval_level = serializers.IntegerField(source='stage_instance.approval_level', read_only=True)
    approver_id = serializers.IntegerField(source='user.id', read_only=True, default=None)
    approver_name = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()

    class Meta:
        model = ApprovalAction
        fields = ['id', 'approval_level', 'approver_id', 'approver_name', 'action', 'status', 'comment', 'created_at']
        read_only_fields = fields

    def get_approver_name(self, obj):
        return obj.user.name if obj.user else 'SYSTEM'

    def get_status(self, obj):
        return {
            ApprovalAction.ACTION_APPROVE: 'approved',
            ApprovalAction.ACTION_REJECT: 'rejected',
        }.get(obj.action, 'commented')
