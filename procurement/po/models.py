"""
Purchase Order models.

One PO is generated per supplier from an approved PR. Status moves along
PurchaseOrder.TRANSITIONS and every change is kept in POStatusHistory:

    draft -> approved -> sent -> acknowledged -> in_progress -> delivered -> invoiced -> paid

    draft, approved, sent, acknowledged and in_progress may also move to cancelled.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.base.models import AuditMixin, TimestampMixin, generate_document_number

logger = logging.getLogger(__name__)


class PurchaseOrder(AuditMixin):

    DRAFT = 'draft'
    APPROVED = 'approved'
    SENT = 'sent'
    ACKNOWLEDGED = 'acknowledged'
    IN_PROGRESS = 'in_progress'
    DELIVERED = 'delivered'
    INVOICED = 'invoiced'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    STATUS_CHOICES = [
        (DRAFT, 'Draft'),
        (APPROVED, 'Approved'),
        (SENT, 'Sent'),
        (ACKNOWLEDGED, 'Acknowledged'),
        (IN_PROGRESS, 'In Progress'),
        (DELIVERED, 'Delivered'),
        (INVOICED, 'Invoiced'),
        (PAID, 'Paid'),
        (CANCELLED, 'Cancelled'),
    ]

    TRANSITIONS = {
        DRAFT: [APPROVED, SENT, CANCELLED],
        APPROVED: [SENT, CANCELLED],
        SENT: [ACKNOWLEDGED, CANCELLED],
        ACKNOWLEDGED: [IN_PROGRESS, DELIVERED, CANCELLED],
        IN_PROGRESS: [DELIVERED, CANCELLED],
        DELIVERED: [INVOICED],
        INVOICED: [PAID],
        PAID: [],
        CANCELLED: [],
    }
    SENDABLE_STATUSES = [DRAFT, APPROVED]

    po_number = models.CharField(max_length=50, unique=True, editable=False)
    purchase_requisition = models.ForeignKey(
        'PR.PurchaseRequisition',
        on_delete=models.PROTECT,
        related_name='purchase_orders'
    )
    project = models.ForeignKey('projects.Project', on_delete=models.PROTECT, related_name='purchase_orders')
    supplier = models.ForeignKey('suppliers.Supplier', on_delete=models.PROTECT, related_name='purchase_orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=DRAFT)
    total_value = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3)
    payment_terms = models.CharField(max_length=100)
    delivery_address = models.TextField()
    delivery_date = models.DateField(null=True, blank=True)
    comments = models.TextField(blank=True)

    # Dispatch to supplier
    sent_at = models.DateTimeField(null=True, blank=True)
    sent_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='pos_sent'
    )
    supplier_email = models.EmailField(blank=True)

    # Supplier acknowledgment (recorded on the supplier's behalf)
    acknowledged_at = models.DateTimeField(null=True, blank=True)
    acknowledged_by = models.CharField(max_length=255, blank=True, help_text="Supplier representative")
    acknowledgment_comments = models.TextField(blank=True)

    class Meta:
        db_table = 'purchase_order'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='po_status_idx'),
            models.Index(fields=['supplier', 'status'], name='po_supplier_status_idx'),
        ]

    def __str__(self):
        return f"{self.po_number} - {self.supplier.name} - {self.get_status_display()}"

    def save(self, *args, **kwargs):
        if not self.po_number:
            self.po_number = generate_document_number(PurchaseOrder, 'po_number', 'PO')
        super().save(*args, **kwargs)

    # ==================== STATUS CHANGES ====================

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, [])

    def transition_to(self, new_status, user=None, comments=''):
        """
        Move to ``new_status`` and record it in the history.

        Raises:
            ValidationError: the transition is not allowed
        """
        if new_status not in dict(self.STATUS_CHOICES):
            raise ValidationError(f"Invalid status: {new_status}")
        if not self.can_transition_to(new_status):
            raise ValidationError(f"Cannot change PO status from {self.status} to {new_status}")

        previous = self.status
        self.status = new_status
        self.save(update_fields=['status', 'updated_at'])
        self.record_history(previous, user, comments)
        logger.info("PO %s: %s -> %s", self.po_number, previous, new_status)
        return previous

    def mark_sent(self, user, supplier_email='', message=''):
        if self.status not in self.SENDABLE_STATUSES:
            raise ValidationError(f"Only draft or approved POs can be sent, {self.po_number} is {self.status}")

        previous = self.status
        self.status = self.SENT
        self.sent_at = timezone.now()
        self.sent_by = user
        self.supplier_email = supplier_email or self.supplier.email
        self.save(update_fields=['status', 'sent_at', 'sent_by', 'supplier_email', 'updated_at'])
        self.record_history(previous, user, message or f"Sent to {self.supplier_email}")
        return previous

    def acknowledge(self, acknowledged_by, acknowledged_at, comments='', estimated_delivery_date=None, user=None):
        if self.status != self.SENT:
            raise ValidationError(f"Only sent POs can be acknowledged, {self.po_number} is {self.status}")

        previous = self.status
        self.status = self.ACKNOWLEDGED
        self.acknowledged_by = acknowledged_by
        self.acknowledged_at = acknowledged_at
        self.acknowledgment_comments = comments or ''
        if estimated_delivery_date:
            self.delivery_date = estimated_delivery_date
        self.save(update_fields=[
            'status', 'acknowledged_by', 'acknowledged_at', 'acknowledgment_comments', 'delivery_date', 'updated_at'
        ])
        self.record_history(previous, user, f"Acknowledged by {acknowledged_by}" + (f": {comments}" if comments else ''))
        return previous

    def record_history(self, previous_status, user=None, comments=''):
        return POStatusHistory.objects.create(
            purchase_order=self,
            status=self.status,
            previous_status=previous_status or '',
            changed_by=user,
            comments=comments or '',
        )


class POLineItem(models.Model):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='line_items')
    pr_line_item = models.ForeignKey('PR.PRLineItem', on_delete=models.PROTECT, related_name='po_lines')
    mr_line_item = models.ForeignKey(
        'material_requests.MRLineItem',
        on_delete=models.PROTECT,
        related_name='po_lines'
    )
    description = models.TextField()
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    unit_price = models.DecimalField(max_digits=15, decimal_places=2)
    total_price = models.DecimalField(max_digits=15, decimal_places=2)
    delivery_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'po_line_item'
        ordering = ['id']

    def __str__(self):
        return f"{self.purchase_order.po_number} / {self.mr_line_item.item_code}"


class POStatusHistory(TimestampMixin):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name='status_history')
    status = models.CharField(max_length=20, choices=PurchaseOrder.STATUS_CHOICES)
    previous_status = models.CharField(max_length=20, blank=True)
    changed_at = models.DateTimeField(default=timezone.now)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='po_status_changes'
    )
    comments = models.TextField(blank=True)

    class Meta:
        db_table = 'po_status_history'
        ordering = ['changed_at', 'id']
        verbose_name_plural = 'PO status history'

    def __str__(self):
        return f"{self.purchase_order.po_number}: {self.previous_status or '-'} -> {self.status}"
