"""
Project endpoints.
"""
import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.user_accounts.decorators import require_role_for
from core.user_accounts.models import UserRole
from procurement.projects.models import Project
from procurement.projects.serializers import ProjectAssignSerializer, ProjectSerializer
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def project_list(request):
    """
    GET: List projects
    POST: Create a project (procurement or admin)

    Query Parameters for GET:
    - status: active, inactive, completed
    - search: name or code
    """
    if request.method == 'GET':
        queryset = Project.objects.select_related('created_by').prefetch_related('members')

        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(code__icontains=search))

        serializer = ProjectSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = ProjectSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    project = serializer.save(created_by=request.user)
    AuditService.record(
        AuditLog.ENTITY_PROJECT, project.pk, 'project_created',
        actor=request.user, after=ProjectSerializer(project).data, request=request,
    )
    logger.info("Project %s created by %s", project.code, request.user.email)
    return success_response(
        data=ProjectSerializer(project).data,
        message="Project created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
@require_role_for(('PUT', 'PATCH'), UserRole.PROCUREMENT)
def project_detail(request, pk):
    """
    GET: Retrieve a project
    PUT/PATCH: Update name, code, description or status
    """
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        return success_response(data=ProjectSerializer(project).data, message="Project retrieved successfully")

    before = ProjectSerializer(project).data
    serializer = ProjectSerializer(project, data=request.data, partial=True)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    project = serializer.save()
    after = ProjectSerializer(project).data
    AuditService.record(
        AuditLog.ENTITY_PROJECT, project.pk, 'project_updated',
        actor=request.user, before=before, after=after, request=request,
    )
    return success_response(data=after, message="Project updated successfully")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
def project_assign(request, pk):
    """
    POST: Add members to a project

    Expected data: {"user_ids": [1, 2]}
    """
    project = get_object_or_404(Project, pk=pk)

    serializer = ProjectAssignSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    user_ids = serializer.validated_data['user_ids']
    before = sorted(project.members.values_list('pk', flat=True))
    project.members.add(*user_ids)
    after = sorted(project.members.values_list('pk', flat=True))

    AuditService.record(
        AuditLog.ENTITY_PROJECT, project.pk, 'project_members_assigned',
        actor=request.user, before={'member_ids': before}, after={'member_ids': after}, request=request,
    )
    logger.info("Users %s assigned to project %s", user_ids, project.code)
    return success_response(data=ProjectSerializer(project).data, message="Users assigned successfully")
