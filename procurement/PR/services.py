"""
Purchase Requisition Service Layer

PRs are generated from an approved quote approval: the approved line
decisions are grouped by the supplier of the selected quote and each group
becomes one draft PR. Approval afterwards runs through core.approval.
"""
import logging
from collections import OrderedDict
from decimal import Decimal

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from core.approval.managers import ApprovalManager
from core.approval.models import ApprovalAction
from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.config import procurement_setting
from core.notifications.services import NotificationService
from core.user_accounts.models import UserRole
from procurement.PR.models import PRLineItem, PurchaseRequisition
from procurement.quotes.models import LineItemDecision, QuoteApproval

logger = logging.getLogger(__name__)


class PRGenerationService:

    @staticmethod
    def _approved_selections(approval):
        """(decision, quote line) pairs for every approved line, grouped by supplier id."""
        decisions = approval.line_item_decisions.filter(
            decision=LineItemDecision.DECISION_APPROVED,
            selected_quote__isnull=False,
        ).select_related('mr_line_item', 'selected_quote__supplier').order_by('mr_line_item_id')

        grouped = OrderedDict()
        for decision in decisions:
            quote_line = decision.selected_line
            if quote_line is None:
                raise ValidationError(
                    f"Selected quote {decision.selected_quote_id} has no offer for line "
                    f"{decision.mr_line_item.item_code}"
                )
            grouped.setdefault(decision.selected_quote.supplier_id, []).append((decision, quote_line))
        return grouped

    @classmethod
    @transaction.atomic
    def generate_from_quote_approval(cls, approval, project, user, request=None):
        """
        Create one draft PR per supplier selected in ``approval``, audit each
        one and send the PR created notification.

        Raises:
            ValidationError: approval not approved, project mismatch, PRs
                already generated, or no approved selections
        """
        if approval.status != QuoteApproval.STATUS_APPROVED:
            raise ValidationError("Quote approval must be approved before generating PRs")

        material_request = approval.rfq.material_request
        if material_request.project_id != project.pk:
            raise ValidationError("Project does not match the material request of this quote approval")

        if approval.purchase_requisitions.exists():
            raise ValidationError("Purchase requisitions already generated for this quote approval")

        grouped = cls._approved_selections(approval)
        if not grouped:
            raise ValidationError("Quote approval has no approved line selections")

        currency = procurement_setting('DEFAULT_CURRENCY')
        created = []
        for supplier_id, selections in grouped.items():
            first_decision = selections[0][0]
            pr = PurchaseRequisition.objects.create(
                project=project,
                supplier=first_decision.selected_quote.supplier,
                quote_approval=approval,
                currency=first_decision.selected_quote.currency or currency,
                comments=approval.comments,
                created_by=user,
            )

            total = Decimal('0.00')
            for decision, quote_line in selections:
                mr_line = decision.mr_line_item
                PRLineItem.objects.create(
                    purchase_requisition=pr,
                    mr_line_item=mr_line,
                    quote=decision.selected_quote,
                    quantity=mr_line.quantity,
                    unit_price=quote_line.unit_price,
                    total_price=quote_line.total_price,
                    lead_time_days=quote_line.lead_time_days,
                )
                total += quote_line.total_price

            pr.total_value = total
            pr.save(update_fields=['total_value', 'updated_at'])
            created.append(pr)
            logger.info("PR %s generated for supplier %s (%s %s)", pr.pr_number, supplier_id, total, pr.currency)

        for pr in created:
            AuditService.record(
                AuditLog.ENTITY_PURCHASE_REQUISITION, pr.pk, 'pr_created',
                actor=user,
                after={
                    'pr_number': pr.pr_number,
                    'supplier_id': pr.supplier_id,
                    'total_value': pr.total_value,
                    'quote_approval_id': approval.pk,
                },
                request=request,
            )
            NotificationService.send_pr_created(pr)

        return created


class PRApprovalService:
    """
    Matrix approval of a PR.

    Every method runs in one transaction, so a failed implicit submit (for
    example a 403 on the first level) leaves the PR in draft.
    """

    @staticmethod
    @transaction.atomic
    def submit(pr):
        if pr.status != PurchaseRequisition.DRAFT:
            raise ValidationError(f"Only draft PRs can be submitted, {pr.pr_number} is {pr.status}")
        ApprovalManager.start_workflow(pr)
        pr.refresh_from_db()
        return pr

    @classmethod
    @transaction.atomic
    def approve(cls, pr, user, comments=''):
        """
        Approve the pending level of ``pr`` as ``user``; a draft is submitted first.

        Raises:
            ValidationError: no level is waiting for approval
            PermissionDenied: user cannot approve the pending level
        """
        if pr.status == PurchaseRequisition.DRAFT:
            pr = cls.submit(pr)
            if pr.status == PurchaseRequisition.APPROVED:
                # No level required: the submit completed the approval
                pr.approved_by = user
                pr.save(update_fields=['approved_by', 'updated_at'])
                return pr

        ApprovalManager.process_action(pr, user, ApprovalAction.ACTION_APPROVE, comments)
        pr.refresh_from_db()
        return pr

    @staticmethod
    @transaction.atomic
    def reject(pr, user, reason):
        """
        Reject ``pr``. A running workflow is rejected through its pending
        level; a draft is rejected directly by procurement or an approver.
        """
        if pr.status not in PurchaseRequisition.REJECTABLE_STATUSES:
            raise ValidationError(f"Cannot reject a PR with status {pr.status}")

        if ApprovalManager.get_workflow_instance(pr):
            ApprovalManager.process_action(pr, user, ApprovalAction.ACTION_REJECT, reason)
        elif pr.status == PurchaseRequisition.DRAFT:
            if not user.has_role(UserRole.PROCUREMENT, UserRole.APPROVER):
                raise PermissionDenied(f"User {user.email} ({user.role}) cannot reject {pr.pr_number}")
            pr.reject_directly(user, reason)
        else:
            raise ValidationError(f"No approval in progress for {pr.pr_number}")

        pr.refresh_from_db()
        logger.info("PR %s rejected by %s", pr.pr_number, user.email)
        return pr
