"""
Authorization matrix endpoints.

GET is open to every authenticated user so requesters can see which levels a
document will need; PUT is restricted to admins.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from core.approval.matrix import get_approvers_for_level, get_required_levels
from core.approval.models import AuthorizationMatrix
from core.approval.serializers import AuthorizationMatrixSerializer, AuthorizationMatrixUpdateSerializer
from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.filters import parse_id
from core.user_accounts.decorators import require_role_for
from core.user_accounts.models import UserRole
from procurement.projects.models import Project
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
@require_role_for(('PUT',), UserRole.ADMIN)
def authorization_matrix(request):
    """
    GET: Rules, optionally for one project (?project_id=, ?project_id=default)
    PUT: Replace the rules of one project (admin only)
    """
    if request.method == 'GET':
        queryset = AuthorizationMatrix.objects.select_related('project', 'approver_user').order_by(
            'project_id', 'approval_level', 'threshold_min'
        )
        project_id = request.query_params.get('project_id')
        if project_id == 'default':
            queryset = queryset.filter(project__isnull=True)
        elif project_id:
            queryset = queryset.filter(project_id=parse_id(project_id, 'project_id'))
        return success_response(
            data=AuthorizationMatrixSerializer(queryset, many=True).data,
            message="Authorization matrix retrieved successfully"
        )

    serializer = AuthorizationMatrixUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid authorization matrix",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    project_id = serializer.validated_data.get('project_id')
    rules = serializer.validated_data['matrix']

    with transaction.atomic():
        existing = AuthorizationMatrix.objects.filter(project_id=project_id)
        before = AuthorizationMatrixSerializer(existing, many=True).data
        existing.delete()
        created = [
            AuthorizationMatrix.objects.create(
                project_id=project_id,
                approval_level=rule['approval_level'],
                threshold_min=rule['threshold_min'],
                threshold_max=rule.get('threshold_max'),
                approver_role=rule['approver_role'],
                approver_user_id=rule.get('approver_user_id'),
                is_active=rule.get('is_active', True),
            )
            for rule in rules
        ]
        after = AuthorizationMatrixSerializer(created, many=True).data
        AuditService.record(
            AuditLog.ENTITY_AUTHORIZATION_MATRIX, project_id, 'authorization_matrix_updated',
            actor=request.user, before=before, after=after, request=request,
        )

    logger.info("Authorization matrix for project %s replaced by %s (%d rules)",
                project_id or 'default', request.user.email, len(created))
    return success_response(data=after, message="Authorization matrix updated successfully")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def approval_preview(request):
    """
    GET: Levels and approver roles an amount would need

    Query Parameters:
    - amount (required)
    - project_id (optional, default rules otherwise)
    """
    try:
        amount = Decimal(request.query_params.get('amount', ''))
    except InvalidOperation:
        return error_response(message="amount must be a number", status_code=status.HTTP_400_BAD_REQUEST)

    project = None
    project_id = request.query_params.get('project_id')
    if project_id:
        project = Project.objects.filter(pk=parse_id(project_id, 'project_id')).first()
        if project is None:
            return error_response(message="Project not found", status_code=status.HTTP_404_NOT_FOUND)

    required = get_required_levels(project, amount)
    max_level = max(required) if required else 0
    levels = []
    for level in range(1, max_level + 1):
        roles, user_ids = get_approvers_for_level(project, level)
        levels.append({'approval_level': level, 'approver_roles': roles, 'approver_user_ids': user_ids})

    return success_response(
        data={'amount': str(amount), 'levels': levels},
        message="Approval chain resolved"
    )
