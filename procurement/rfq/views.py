"""
RFQ endpoints: raise, dispatch, comparison events and the comparison matrix.
"""
import logging

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.filters import filter_by_params
from core.user_accounts.decorators import require_role, require_role_for
from core.user_accounts.models import UserRole
from procurement.material_requests.models import MaterialRequest
from procurement.quotes.services import QuoteComparisonService
from procurement.rfq.models import RFQ
from procurement.rfq.serializers import (
    RFQCreateSerializer,
    RFQDetailSerializer,
    RFQDispatchSerializer,
    RFQListSerializer,
    RFQSupplierSerializer,
)
from procurement.rfq.services import RFQCreateDTO, RFQDispatchDTO, RFQService
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)

COMPARISON_EVENTS = ('selection_saved', 'selection_changed', 'exported')


def _get_rfq(pk):
    return get_object_or_404(
        RFQ.objects.select_related('material_request__project', 'created_by'),
        pk=pk
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def rfq_list(request):
    """
    GET: List RFQs
    POST: Raise an RFQ from a material request

    Query Parameters for GET:
    - status
    - project_id
    - material_request_id
    """
    if request.method == 'GET':
        queryset = RFQ.objects.select_related('material_request__project')

        queryset = filter_by_params(queryset, request.query_params, (
            ('status', 'status'),
            ('project_id', 'material_request__project_id'),
            ('material_request_id', 'material_request_id'),
        ))

        serializer = RFQListSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = RFQCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        rfq = RFQService.create_rfq(RFQCreateDTO(**serializer.validated_data), request.user)
    except MaterialRequest.DoesNotExist:
        return error_response(message="Material Request not found", status_code=status.HTTP_404_NOT_FOUND)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    data = RFQDetailSerializer(rfq).data
    AuditService.record(
        AuditLog.ENTITY_RFQ, rfq.pk, 'rfq_created',
        actor=request.user, after=data, request=request,
    )
    return success_response(data=data, message="RFQ created successfully", status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def rfq_detail(request, pk):
    """
    GET: RFQ with its material request lines and invited suppliers
    """
    rfq = _get_rfq(pk)
    return success_response(data=RFQDetailSerializer(rfq).data, message="RFQ retrieved successfully")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT)
def rfq_dispatch(request, pk):
    """
    POST: Send the RFQ to suppliers

    Expected data: {"supplier_ids": [1, 2], "due_date": "2025-02-01", "terms": "..."}
    """
    rfq = _get_rfq(pk)

    serializer = RFQDispatchSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    before = {'status': rfq.status, 'sent_at': rfq.sent_at}
    try:
        rfq, invitations = RFQService.dispatch(rfq, RFQDispatchDTO(**serializer.validated_data))
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_RFQ, rfq.pk, 'rfq_dispatched',
        actor=request.user, before=before,
        after={
            'status': rfq.status,
            'sent_at': rfq.sent_at,
            'supplier_ids': [invitation.supplier_id for invitation in invitations],
        },
        request=request,
    )
    return success_response(
        data={
            'rfq': RFQDetailSerializer(rfq).data,
            'dispatched': RFQSupplierSerializer(invitations, many=True).data,
        },
        message=f"RFQ dispatched to {len(invitations)} supplier(s)"
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT)
def rfq_compare(request, pk):
    """
    POST: Record a comparison event from the comparison screen

    Expected data:
    - {"event": "selection_changed", "payload": {"line_item_id": 1, "supplier_id": 2}}
    - {"event": "selection_saved" | "exported", "summary": {...}}
    """
    rfq = _get_rfq(pk)

    event = request.data.get('event')
    if not event:
        return error_response(message="Event type is required.", status_code=status.HTTP_400_BAD_REQUEST)
    if event not in COMPARISON_EVENTS:
        return error_response(
            message=f"Unknown event '{event}'. Expected one of: {', '.join(COMPARISON_EVENTS)}",
            status_code=status.HTTP_400_BAD_REQUEST
        )

    if event == 'selection_changed':
        payload = request.data.get('payload')
        if not isinstance(payload, dict) or not payload.get('line_item_id') or not payload.get('supplier_id'):
            return error_response(message="Selection change payload incomplete.", status_code=status.HTTP_400_BAD_REQUEST)
        AuditService.record(
            AuditLog.ENTITY_RFQ, rfq.pk, f'comparison_{event}',
            actor=request.user, after=payload, request=request,
        )
        return success_response(data={'ok': True}, message="Selection change recorded")

    summary = request.data.get('summary')
    if not isinstance(summary, dict) or not summary:
        return error_response(
            message="Summary data is required for this event.",
            status_code=status.HTTP_400_BAD_REQUEST
        )

    rfq.comparison_summary = summary
    rfq.save(update_fields=['comparison_summary', 'updated_at'])
    if rfq.status == RFQ.STATUS_QUOTES_RECEIVED:
        rfq.set_status(RFQ.STATUS_COMPARISON_READY)

    AuditService.record(
        AuditLog.ENTITY_RFQ, rfq.pk, f'comparison_{event}',
        actor=request.user, after=summary, request=request,
    )
    return success_response(data={'summary': summary, 'status': rfq.status}, message="Comparison summary saved")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def rfq_comparison(request, pk):
    """
    GET: Comparison matrix of the quotes received for an RFQ
    """
    rfq = _get_rfq(pk)
    return success_response(
        data=QuoteComparisonService.build_line_comparison(rfq),
        message="Comparison retrieved successfully"
    )
