"""
Purchase Requisition API views.

PRs are generated from approved quote approvals and approved level by level
through the authorization matrix of their project.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.approval.managers import ApprovalManager
from core.approval.matrix import get_required_levels
from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.config import procurement_setting
from core.base.filters import filter_by_params
from core.notifications.services import NotificationService
from core.user_accounts.decorators import require_role, require_role_for
from core.user_accounts.models import UserRole
from procurement.PR.models import PurchaseRequisition
from procurement.PR.serializers import (
    ApprovalRecordSerializer,
    PRApproveSerializer,
    PRDetailSerializer,
    PRGenerateSerializer,
    PRListSerializer,
    PRRejectSerializer,
    PRUpdateSerializer,
)
from procurement.PR.services import PRApprovalService, PRGenerationService
from procurement.po.serializers import POListSerializer
from procurement.po.services import POGenerationService
from procurement.projects.models import Project
from procurement.quotes.models import QuoteApproval
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)


def _get_pr(pk):
    return get_object_or_404(
        PurchaseRequisition.objects.select_related('project', 'supplier', 'created_by'),
        pk=pk
    )


def _notify_pending_level(pr):
    """Tell the approvers of the open level, if any, that the PR waits for them."""
    stage = ApprovalManager.get_active_stage(pr)
    if stage is None:
        return
    users = list(get_user_model().objects.filter(pk__in=stage.approver_user_ids, is_active=True))
    NotificationService.send_pr_approval_required(
        pr, stage.approval_level, stage.required_roles or [UserRole.ADMIN], users
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(('POST',), UserRole.PROCUREMENT)
@auto_paginate
def pr_list(request):
    """
    GET: List purchase requisitions
    POST: Generate PRs from an approved quote approval

    Query Parameters for GET:
    - project_id
    - supplier_id
    - status

    Expected data for POST:
    {
        "quote_approval_id": 4,
        "project_id": 1
    }
    """
    if request.method == 'GET':
        queryset = PurchaseRequisition.objects.select_related('project', 'supplier')

        queryset = filter_by_params(queryset, request.query_params, (
            ('project_id', 'project_id'),
            ('supplier_id', 'supplier_id'),
            ('status', 'status'),
        ))

        serializer = PRListSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = PRGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="quote_approval_id and project_id are required",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    approval = QuoteApproval.objects.select_related('quote_pack__rfq__material_request').filter(
        pk=serializer.validated_data['quote_approval_id']
    ).first()
    if approval is None:
        return error_response(message="Quote approval not found", status_code=status.HTTP_404_NOT_FOUND)

    project = Project.objects.filter(pk=serializer.validated_data['project_id']).first()
    if project is None:
        return error_response(message="Project not found", status_code=status.HTTP_404_NOT_FOUND)

    try:
        prs = PRGenerationService.generate_from_quote_approval(
            approval, project, request.user, request=request
        )
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    return success_response(
        data=PRDetailSerializer(prs, many=True).data,
        message=f"{len(prs)} purchase requisition(s) created successfully",
        status_code=status.HTTP_201_CREATED
    )


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
@require_role_for(('PUT', 'PATCH'), UserRole.PROCUREMENT)
def pr_detail(request, pk):
    """
    GET: PR with its lines and approval status
    PUT/PATCH: Update the PR comments {"comments": "..."}
    """
    pr = _get_pr(pk)

    if request.method == 'GET':
        return success_response(data=PRDetailSerializer(pr).data, message="Purchase requisition retrieved successfully")

    serializer = PRUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    before = {'comments': pr.comments}
    pr.comments = serializer.validated_data['comments']
    pr.save(update_fields=['comments', 'updated_at'])

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'pr_updated',
        actor=request.user, before=before, after={'comments': pr.comments}, request=request,
    )
    return success_response(data=PRDetailSerializer(pr).data, message="Purchase requisition updated successfully")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT)
def pr_submit(request, pk):
    """
    POST: Submit a draft PR for approval
    """
    pr = _get_pr(pk)

    try:
        pr = PRApprovalService.submit(pr)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'pr_submitted',
        actor=request.user,
        before={'status': PurchaseRequisition.DRAFT},
        after={'status': pr.status, 'next_level': ApprovalManager.get_next_level(pr)},
        request=request,
    )
    _notify_pending_level(pr)

    return success_response(data=PRDetailSerializer(pr).data, message="Purchase requisition submitted for approval")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pr_approve(request, pk):
    """
    POST: Approve the pending level of a PR

    Expected data:
    {
        "comments": "Within budget"
    }
    """
    pr = _get_pr(pk)
    serializer = PRApproveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    comments = serializer.validated_data['comments']
    old_status = pr.status

    try:
        pr = PRApprovalService.approve(pr, request.user, comments)
    except PermissionDenied as e:
        return error_response(message=str(e), status_code=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    fully_approved = pr.status == PurchaseRequisition.APPROVED
    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'pr_approved',
        actor=request.user,
        before={'status': old_status},
        after={
            'status': pr.status,
            'next_level': ApprovalManager.get_next_level(pr),
            'comments': comments,
        },
        request=request,
    )
    NotificationService.send_pr_approval_decision(pr, 'approved', request.user, comments)

    data = PRDetailSerializer(pr).data
    if not fully_approved:
        _notify_pending_level(pr)
        return success_response(data=data, message="Approval level recorded, PR is under review")

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'po_generation_triggered',
        after={'total_value': pr.total_value, 'supplier_id': pr.supplier_id},
    )

    if procurement_setting('AUTO_GENERATE_PO_ON_PR_APPROVAL'):
        try:
            pos = POGenerationService.generate_from_pr(pr, pr.project, request.user, request=request)
        except ValidationError as e:
            logger.warning("Automatic PO generation for PR %s failed: %s", pr.pr_number, e)
        else:
            data['purchase_orders'] = POListSerializer(pos, many=True).data

    return success_response(data=data, message="Purchase requisition fully approved")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def pr_reject(request, pk):
    """
    POST: Reject a PR and return it to procurement

    Expected data:
    {
        "reason": "Prices above budget"
    }
    """
    pr = _get_pr(pk)
    serializer = PRRejectSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Rejection reason is required",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )
    reason = serializer.validated_data['reason']
    old_status = pr.status

    try:
        pr = PRApprovalService.reject(pr, request.user, reason)
    except PermissionDenied as e:
        return error_response(message=str(e), status_code=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return error_response(message="; ".join(e.messages), status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'pr_rejected',
        actor=request.user,
        before={'status': old_status},
        after={'status': pr.status, 'rejection_reason': reason},
        request=request,
    )
    AuditService.record(
        AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'returned_to_procurement',
        after={'rejection_reason': reason},
    )
    NotificationService.send_pr_approval_decision(pr, 'rejected', request.user, reason)

    return success_response(data=PRDetailSerializer(pr).data, message="Purchase requisition rejected")


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pr_approvals(request, pk):
    """
    GET: Approval records of a PR with the next level to approve
    """
    pr = _get_pr(pk)

    workflow = pr.get_latest_workflow()
    if workflow is not None:
        required_levels = workflow.required_levels
    else:
        highest = max(get_required_levels(pr.project, pr.total_value), default=0)
        required_levels = list(range(1, highest + 1))

    return success_response(
        data={
            'pr_id': pr.pk,
            'pr_number': pr.pr_number,
            'status': pr.status,
            'approvals': ApprovalRecordSerializer(pr.get_approval_history(), many=True).data,
            'next_level': ApprovalManager.get_next_level(pr),
            'required_levels': required_levels,
        },
        message="Approval history retrieved successfully"
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@auto_paginate
def pr_pending_approvals(request):
    """
    GET: PRs whose pending level the current user can approve
    """
    queryset = ApprovalManager.get_pending_approvals(request.user, PurchaseRequisition).select_related(
        'project', 'supplier'
    )
    serializer = PRListSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pr_by_status(request):
    """
    GET: PR count grouped by status
    """
    status_counts = PurchaseRequisition.objects.values('status').annotate(
        count=Count('id')
    ).order_by('status')

    return success_response(
        data=list(status_counts),
        message="PR status summary retrieved successfully"
    )
