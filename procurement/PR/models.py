"""
Purchase Requisition models.

A PR is generated per supplier from an approved quote approval and goes
through the authorization matrix of its project:

    draft -> submitted -> under_review -> approved
      |          |             |
      +----------+-------------+--> rejected
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.approval.mixins import ApprovableMixin
from core.approval.models import ApprovalAction
from core.base.models import AuditMixin, generate_document_number

logger = logging.getLogger(__name__)


class PurchaseRequisition(ApprovableMixin, AuditMixin):

    DRAFT = 'draft'
    SUBMITTED = 'submitted'
    UNDER_REVIEW = 'under_review'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (DRAFT, 'Draft'),
        (SUBMITTED, 'Submitted'),
        (UNDER_REVIEW, 'Under Review'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    REJECTABLE_STATUSES = [DRAFT, SUBMITTED, UNDER_REVIEW]

    pr_number = models.CharField(max_length=50, unique=True, editable=False)
    project = models.ForeignKey('projects.Project', on_delete=models.PROTECT, related_name='purchase_requisitions')
    supplier = models.ForeignKey('suppliers.Supplier', on_delete=models.PROTECT, related_name='purchase_requisitions')
    quote_approval = models.ForeignKey(
        'quotes.QuoteApproval',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='purchase_requisitions'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=DRAFT)
    total_value = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3)
    comments = models.TextField(blank=True)

    # Workflow
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='prs_approved'
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='prs_rejected'
    )
    rejection_reason = models.TextField(blank=True)

    class Meta:
        db_table = 'purchase_requisition'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='pr_status_idx'),
            models.Index(fields=['project', 'supplier'], name='pr_project_supplier_idx'),
        ]

    def __str__(self):
        return f"{self.pr_number} - {self.supplier.name} - {self.get_status_display()}"

    def save(self, *args, **kwargs):
        if not self.pr_number:
            self.pr_number = generate_document_number(PurchaseRequisition, 'pr_number', 'PR')
        super().save(*args, **kwargs)

    # ==================== CALCULATION FUNCTIONS ====================

    def recalculate_total(self):
        self.total_value = sum((line.total_price for line in self.line_items.all()), Decimal('0.00'))
        self.save(update_fields=['total_value', 'updated_at'])
        return self.total_value

    # ==================== STATUS CHANGES ====================

    def reject_directly(self, user, reason):
        """Reject a PR that never entered approval (draft)."""
        if self.status != self.DRAFT:
            raise ValidationError("Only draft PRs can be rejected without an approval workflow")
        self._mark_rejected(user, reason)

    def _mark_rejected(self, user, reason):
        self.status = self.REJECTED
        self.rejected_at = timezone.now()
        self.rejected_by = user
        self.rejection_reason = reason or ''
        self.save(update_fields=['status', 'rejected_at', 'rejected_by', 'rejection_reason', 'updated_at'])

    # ==================== APPROVAL WORKFLOW INTERFACE METHODS ====================

    def get_approval_project(self):
        return self.project

    def get_approval_amount(self):
        return self.total_value

    def on_approval_started(self, workflow_instance):
        self.status = self.SUBMITTED
        self.submitted_at = timezone.now()
        self.save(update_fields=['status', 'submitted_at', 'updated_at'])

    def on_stage_approved(self, stage_instance):
        self.status = self.UNDER_REVIEW
        self.save(update_fields=['status', 'updated_at'])

    def on_fully_approved(self, workflow_instance):
        last_approval = ApprovalAction.objects.filter(
            stage_instance__workflow_instance=workflow_instance,
            action=ApprovalAction.ACTION_APPROVE,
        ).select_related('user').order_by('-created_at', '-id').first()

        self.status = self.APPROVED
        self.approved_at = timezone.now()
        self.approved_by = last_approval.user if last_approval else None
        self.save(update_fields=['status', 'approved_at', 'approved_by', 'updated_at'])
        logger.info("PR %s fully approved", self.pr_number)

    def on_rejected(self, workflow_instance, stage_instance=None):
        rejection = None
        if stage_instance is not None:
            rejection = stage_instance.actions.filter(
                action=ApprovalAction.ACTION_REJECT
            ).select_related('user').order_by('-created_at', '-id').first()
        self._mark_rejected(
            rejection.user if rejection else None,
            rejection.comment if rejection else '',
        )

    def on_cancelled(self, workflow_instance, reason=None):
        self.status = self.DRAFT
        self.submitted_at = None
        self.save(update_fields=['status', 'submitted_at', 'updated_at'])


class PRLineItem(models.Model):
    purchase_requisition = models.ForeignKey(PurchaseRequisition, on_delete=models.CASCADE, related_name='line_items')
    mr_line_item = models.ForeignKey(
        'material_requests.MRLineItem',
        on_delete=models.PROTECT,
        related_name='pr_lines'
    )
    quote = models.ForeignKey('quotes.Quote', on_delete=models.PROTECT, related_name='pr_lines')
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit_price = models.DecimalField(max_digits=15, decimal_places=2)
    total_price = models.DecimalField(max_digits=15, decimal_places=2)
    lead_time_days = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'pr_line_item'
        ordering = ['id']

    def __str__(self):
        return f"{self.mr_line_item.item_code} x {self.quantity}"
