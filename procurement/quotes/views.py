"""
Quote, quote pack and quote approval endpoints.
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
from core.base.config import procurement_setting
from core.base.filters import filter_by_params
from core.user_accounts.decorators import require_role, require_role_for
from core.user_accounts.models import UserRole
from procurement.PR.serializers import PRListSerializer
from procurement.PR.services import PRGenerationService
from procurement.quotes.models import Quote, QuoteApproval, QuotePack
from procurement.quotes.serializers import (
    QuoteApprovalDecisionSerializer,
    QuoteApprovalDetailSerializer,
    QuoteApprovalListSerializer,
    QuoteApprovalUpdateSerializer,
    QuoteCreateSerializer,
    QuotePackListSerializer,
    QuotePackSerializer,
    QuoteSerializer,
    RFQReferenceSerializer,
)
from procurement.quotes.services import QuoteApprovalService, QuoteService
from procurement.rfq.models import RFQ
from procurement.suppliers.models import Supplier
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)

# End users decide on quote packs; procurement prepares them
DECISION_ROLES = (UserRole.REQUESTER, UserRole.APPROVER)


def _rfq_reference(request):
    """(rfq, error_response) from a {"rfq_id": ...} body."""
    serializer = RFQReferenceSerializer(data=request.data)
    if not serializer.is_valid():
        return None, error_response(
            message="rfq_id is required",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )
    rfq = RFQ.objects.select_related('material_request__project').filter(
        pk=serializer.validated_data['rfq_id']
    ).first()
    if rfq is None:
        return None, error_response(message="RFQ not found", status_code=status.HTTP_404_NOT_FOUND)
    return rfq, None


# ============================================================================
# QUOTES
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def quote_list(request):
    """
    GET: List quotes
    POST: Record a supplier quote for an RFQ

    Query Parameters for GET:
    - rfq_id
    - supplier_id
    - status
    """
    if request.method == 'GET':
        queryset = Quote.objects.select_related('rfq', 'supplier').prefetch_related('line_items__mr_line_item')

        queryset = filter_by_params(queryset, request.query_params, (
            ('rfq_id', 'rfq_id'),
            ('supplier_id', 'supplier_id'),
            ('status', 'status'),
        ))

        serializer = QuoteSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = QuoteCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        quote = QuoteService.submit_quote(serializer.to_dto())
    except RFQ.DoesNotExist:
        return error_response(message="RFQ not found", status_code=status.HTTP_404_NOT_FOUND)
    except Supplier.DoesNotExist:
        return error_response(message="Supplier not found", status_code=status.HTTP_404_NOT_FOUND)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    data = QuoteSerializer(quote).data
    AuditService.record(
        AuditLog.ENTITY_QUOTE, quote.pk, 'quote_submitted',
        actor=request.user, after=data, request=request,
    )
    return success_response(data=data, message="Quote submitted successfully", status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quote_detail(request, pk):
    quote = get_object_or_404(Quote.objects.select_related('rfq', 'supplier'), pk=pk)
    return success_response(data=QuoteSerializer(quote).data, message="Quote retrieved successfully")


# ============================================================================
# QUOTE PACKS
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def quote_pack_list(request):
    """
    GET: List quote packs (?rfq_id=, ?status=)
    POST: Build a quote pack for an RFQ {"rfq_id": 1}
    """
    if request.method == 'GET':
        queryset = QuotePack.objects.select_related('rfq')

        queryset = filter_by_params(queryset, request.query_params, (
            ('rfq_id', 'rfq_id'),
            ('status', 'status'),
        ))

        serializer = QuotePackListSerializer(queryset, many=True)
        return Response(serializer.data)

    rfq, failure = _rfq_reference(request)
    if failure is not None:
        return failure

    try:
        pack = QuoteService.create_quote_pack(rfq, request.user)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_QUOTE_PACK, pack.pk, 'quote_pack_created',
        actor=request.user,
        after={'rfq_id': rfq.pk, 'risk_assessment': pack.comparison_data.get('risk_assessment')},
        request=request,
    )
    return success_response(
        data=QuotePackSerializer(pack).data,
        message="Quote pack created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def quote_pack_detail(request, pk):
    pack = get_object_or_404(QuotePack.objects.select_related('rfq'), pk=pk)
    return success_response(data=QuotePackSerializer(pack).data, message="Quote pack retrieved successfully")


# ============================================================================
# QUOTE APPROVALS
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def quote_approval_list(request):
    """
    GET: List quote approvals (?status=)
    POST: Send the RFQ's quote pack for end-user approval {"rfq_id": 1}
    """
    if request.method == 'GET':
        queryset = QuoteApproval.objects.select_related('quote_pack__rfq__material_request__project')

        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        serializer = QuoteApprovalListSerializer(queryset, many=True)
        return Response(serializer.data)

    rfq, failure = _rfq_reference(request)
    if failure is not None:
        return failure

    try:
        approval = QuoteApprovalService.create_approval(rfq, request.user)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_QUOTE_APPROVAL, approval.pk, 'approval_created',
        actor=request.user,
        after={'rfq_id': rfq.pk, 'quote_pack_id': approval.quote_pack_id, 'status': approval.status},
        request=request,
    )
    return success_response(
        data=QuoteApprovalDetailSerializer(approval).data,
        message="Quote approval created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
@require_role_for(('PUT',), *DECISION_ROLES)
def quote_approval_detail(request, pk):
    """
    GET: Quote approval with its pack, quotes and line decisions
    PUT: Save draft line decisions and comments while pending
    """
    approval = get_object_or_404(QuoteApproval.objects.select_related('quote_pack__rfq'), pk=pk)

    if request.method == 'GET':
        return success_response(
            data=QuoteApprovalDetailSerializer(approval).data,
            message="Quote approval retrieved successfully"
        )

    serializer = QuoteApprovalUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        approval = QuoteApprovalService.save_draft(
            approval,
            line_item_decisions=serializer.decisions(),
            comments=serializer.validated_data.get('comments'),
        )
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_QUOTE_APPROVAL, approval.pk, 'approval_updated',
        actor=request.user,
        after={'line_item_decisions': approval.line_item_decisions.count(), 'comments': approval.comments},
        request=request,
    )
    return success_response(
        data=QuoteApprovalDetailSerializer(approval).data,
        message="Quote approval updated successfully"
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(*DECISION_ROLES)
def quote_approval_decision(request, pk):
    """
    POST: Approve or reject the quote pack

    Expected data:
    {
        "decision": "approved",
        "comments": "Go with the cheapest on every line",
        "line_item_decisions": [{"mr_line_item_id": 10, "selected_quote_id": 4}]
    }
    """
    approval = get_object_or_404(QuoteApproval.objects.select_related('quote_pack__rfq'), pk=pk)

    if not request.data.get('decision'):
        return error_response(message="Decision is required.", status_code=status.HTTP_400_BAD_REQUEST)

    serializer = QuoteApprovalDecisionSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    dto = serializer.to_dto()
    try:
        approval = QuoteApprovalService.decide(approval, dto, request.user)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_QUOTE_APPROVAL, approval.pk, f'approval_{dto.decision}',
        actor=request.user,
        after={
            'status': approval.status,
            'line_item_decisions': approval.line_item_decisions.count(),
            'comments': 'provided' if approval.comments else 'none',
        },
        request=request,
    )

    data = QuoteApprovalDetailSerializer(approval).data
    if approval.status != QuoteApproval.STATUS_APPROVED:
        return success_response(data=data, message="Quote pack rejected")

    AuditService.record(
        AuditLog.ENTITY_QUOTE_APPROVAL, approval.pk, 'pr_creation_triggered',
        after={'approved_items': approval.line_item_decisions.count()},
    )

    if procurement_setting('AUTO_GENERATE_PR_ON_QUOTE_APPROVAL'):
        project = approval.rfq.material_request.project
        try:
            prs = PRGenerationService.generate_from_quote_approval(
                approval, project, request.user, request=request
            )
        except ValidationError as e:
            logger.warning("Automatic PR generation for quote approval %s failed: %s", approval.pk, e)
        else:
            data['purchase_requisitions'] = PRListSerializer(prs, many=True).data

    return success_response(data=data, message="Quote pack approved")
