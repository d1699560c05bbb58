from rest_framework import serializers

from core.audit.models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = AuditLog
        fields = [
            'id', 'entity_type', 'entity_id', 'action',
            'actor', 'actor_name', 'timestamp',
            'before_data', 'after_data', 'ip_address', 'user_agent',
        ]
        read_only_fields = fields
