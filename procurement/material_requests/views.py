"""
Material request endpoints.
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.filters import filter_by_params
from procurement.material_requests.models import MaterialRequest
from procurement.material_requests.serializers import (
    MaterialRequestCreateSerializer,
    MaterialRequestDetailSerializer,
    MaterialRequestListSerializer,
)
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@auto_paginate
def mr_list(request):
    """
    GET: List material requests
    POST: Raise a material request (status submitted)

    Query Parameters for GET:
    - project_id
    - status
    - requester_id
    """
    if request.method == 'GET':
        queryset = MaterialRequest.objects.select_related('project', 'requester').prefetch_related('line_items')

        queryset = filter_by_params(queryset, request.query_params, (
            ('project_id', 'project_id'),
            ('status', 'status'),
            ('requester_id', 'requester_id'),
        ))

        serializer = MaterialRequestListSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = MaterialRequestCreateSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    material_request = serializer.save()
    data = MaterialRequestDetailSerializer(material_request).data
    AuditService.record(
        AuditLog.ENTITY_MATERIAL_REQUEST, material_request.pk, 'mr_created',
        actor=request.user, after=data, request=request,
    )
    logger.info("Material request %s raised by %s", material_request.mrn, request.user.email)

    return success_response(
        data=data,
        message="Material Request created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def mr_detail(request, pk):
    """
    GET: Material request with line items and attachments
    """
    material_request = get_object_or_404(
        MaterialRequest.objects.select_related('project', 'requester')
        .prefetch_related('line_items', 'attachments'),
        pk=pk
    )
    return success_response(
        data=MaterialRequestDetailSerializer(material_request).data,
        message="Material Request retrieved successfully"
    )
