from django.contrib.auth import get_user_model
from rest_framework import serializers

from core.user_accounts.serializers import UserSummarySerializer
from procurement.projects.models import Project

User = get_user_model()


class ProjectSerializer(serializers.ModelSerializer):
    members = UserSummarySerializer(many=True, read_only=True)
    created_by_name = serializers.CharField(source='created_by.name', read_only=True, default=None)

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'code', 'description', 'status', 'members',
            'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'members', 'created_by', 'created_at', 'updated_at']

    def validate_code(self, value):
        value = value.strip()
        queryset = Project.objects.filter(code__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A project with this code already exists.")
        return value


class ProjectAssignSerializer(serializers.Serializer):
    user_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)

    def validate_user_ids(self, value):
        found = set(User.objects.filter(pk__in=value).values_list('pk', flat=True))
        missing = [user_id for user_id in value if user_id not in found]
        if missing:
            raise serializers.ValidationError(
                f"Unknown user ids: {', '.join(str(user_id) for user_id in missing)}"
            )
        return value
