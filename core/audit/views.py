from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.serializers import AuditLogSerializer
from core.audit.services import AuditService
from core.base.filters import filter_by_params
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@auto_paginate
def audit_log_list(request):
    """
    GET: Audit entries, newest first

    Query Parameters:
    - entity_type: e.g. purchase_requisition
    - entity_id: id of the entity
    - action: e.g. pr_approved
    - actor_id: user id
    """
    queryset = AuditLog.objects.select_related('actor').all()

    queryset = filter_by_params(queryset, request.query_params, (
        ('entity_type', 'entity_type'),
        ('entity_id', 'entity_id'),
        ('action', 'action'),
        ('actor_id', 'actor_id'),
    ))

    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def entity_history(request, entity_type, entity_id):
    """
    GET: Full audit trail of one document, oldest first
    e.g. /core/audit/history/purchase_order/12/
    """
    if entity_type not in dict(AuditLog.ENTITY_CHOICES):
        return error_response(
            message=f"Unknown entity type '{entity_type}'",
            status_code=status.HTTP_400_BAD_REQUEST
        )

    entries = AuditService.history(entity_type, entity_id).select_related('actor')
    return success_response(
        data=AuditLogSerializer(entries, many=True).data,
        message=f"Audit history for {entity_type} {entity_id}"
    )
