"""
Purchase Order API views.
"""
import logging

from django.core.exceptions import ValidationError
from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.filters import filter_by_params
from core.notifications.services import NotificationService
from core.user_accounts.decorators import require_role, require_role_for
from core.user_accounts.models import UserRole
from procurement.PR.models import PurchaseRequisition
from procurement.po.models import PurchaseOrder
from procurement.po.serializers import (
    POAcknowledgeSerializer,
    PODetailSerializer,
    POGenerateSerializer,
    POListSerializer,
    POSendSerializer,
    POStatusHistorySerializer,
    POUpdateSerializer,
)
from procurement.po.services import POGenerationService, POService
from procurement.projects.models import Project
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)


def _get_po(pk):
    return get_object_or_404(
        PurchaseOrder.objects.select_related('purchase_requisition', 'project', 'supplier', 'created_by'),
        pk=pk
    )


# ============================================================================
# PO CRUD Operations
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def po_list(request):
    """
    GET: List purchase orders
    POST: Generate POs from an approved PR

    Query Parameters for GET:
    - status
    - supplier_id
    - project_id
    - pr_id
    """
    if request.method == 'GET':
        queryset = PurchaseOrder.objects.select_related('purchase_requisition', 'project', 'supplier')

        queryset = filter_by_params(queryset, request.query_params, (
            ('status', 'status'),
            ('supplier_id', 'supplier_id'),
            ('project_id', 'project_id'),
            ('pr_id', 'purchase_requisition_id'),
        ))

        serializer = POListSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = POGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="pr_id and project_id are required",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    pr = PurchaseRequisition.objects.filter(pk=serializer.validated_data['pr_id']).first()
    if pr is None:
        return error_response(message="Purchase Requisition not found", status_code=status.HTTP_404_NOT_FOUND)

    project = Project.objects.filter(pk=serializer.validated_data['project_id']).first()
    if project is None:
        return error_response(message="Project not found", status_code=status.HTTP_404_NOT_FOUND)

    try:
        pos = POGenerationService.generate_from_pr(
            pr, project, request.user,
            delivery_address=serializer.validated_data['delivery_address'],
            request=request,
        )
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    return success_response(
        data=PODetailSerializer(pos, many=True).data,
        message=f"{len(pos)} purchase order(s) created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
@require_role_for(('PUT', 'PATCH'), UserRole.PROCUREMENT)
def po_detail(request, pk):
    """
    GET: PO with its lines and status history
    PUT/PATCH: Update status, comments and delivery_date
    """
    po = _get_po(pk)

    if request.method == 'GET':
        return success_response(data=PODetailSerializer(po).data, message="Purchase order retrieved successfully")

    serializer = POUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    before = {'status': po.status, 'comments': po.comments, 'delivery_date': po.delivery_date}
    try:
        old_status = POService.update(po, serializer.to_dto(), request.user)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_ORDER, po.pk, 'po_updated',
        actor=request.user,
        before=before,
        after={'status': po.status, 'comments': po.comments, 'delivery_date': po.delivery_date},
        request=request,
    )
    if po.status != old_status:
        NotificationService.send_po_status_change(po, old_status)

    return success_response(data=PODetailSerializer(po).data, message="Purchase order updated successfully")


# ============================================================================
# PO Workflow Actions
# ============================================================================

@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT)
def po_send(request, pk):
    """
    POST: Send the PO to its supplier

    Expected data:
    {
        "supplier_email": "orders@supplier.com",
        "message": "Please confirm the delivery schedule"
    }
    """
    po = _get_po(pk)
    serializer = POSendSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )
    message = serializer.validated_data['message']

    try:
        old_status = POService.send_to_supplier(
            po, request.user, serializer.validated_data['supplier_email'], message
        )
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_ORDER, po.pk, 'po_sent_to_supplier',
        actor=request.user,
        before={'status': old_status},
        after={'status': po.status, 'sent_at': po.sent_at, 'supplier_email': po.supplier_email},
        request=request,
    )
    NotificationService.send_po_sent_to_supplier(po, message)

    return success_response(data=PODetailSerializer(po).data, message="PO sent to supplier successfully")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT)
def po_acknowledge(request, pk):
    """
    POST: Record the supplier's acknowledgment of a sent PO
    """
    po = _get_po(pk)
    serializer = POAcknowledgeSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="acknowledged_by and acknowledgment_date are required",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        old_status = POService.acknowledge(po, serializer.to_dto(), request.user)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_ORDER, po.pk, 'po_acknowledged_by_supplier',
        actor=request.user,
        before={'status': old_status},
        after={
            'status': po.status,
            'acknowledged_by': po.acknowledged_by,
            'acknowledged_at': po.acknowledged_at,
            'delivery_date': po.delivery_date,
        },
        request=request,
    )
    NotificationService.send_po_acknowledged(po)

    return success_response(data=PODetailSerializer(po).data, message="PO acknowledgment recorded successfully")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def po_history(request, pk):
    """
    GET: Status history of a PO, oldest first
    """
    po = _get_po(pk)
    serializer = POStatusHistorySerializer(po.status_history.select_related('changed_by'), many=True)
    return success_response(data=serializer.data, message="PO status history retrieved successfully")


# ============================================================================
# Reporting
# ============================================================================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def po_by_status(request):
    """
    GET: PO count grouped by status
    """
    status_counts = PurchaseOrder.objects.values('status').annotate(
        count=Count('id')
    ).order_by('status')

    return success_response(
        data=list(status_counts),
        message="PO status summary retrieved successfully"
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def po_by_supplier(request):
    """
    GET: PO statistics grouped by supplier

    Query Parameters:
    - date_from: created on or after
    - date_to: created on or before
    """
    queryset = PurchaseOrder.objects.exclude(status=PurchaseOrder.CANCELLED)

    date_from = request.query_params.get('date_from')
    date_to = request.query_params.get('date_to')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    supplier_stats = queryset.values(
        'supplier_id',
        'supplier__name'
    ).annotate(
        po_count=Count('id'),
        total_value=Sum('total_value')
    ).order_by('-total_value')

    return success_response(
        data=list(supplier_stats),
        message="Supplier statistics retrieved successfully"
    )
