"""
Supplier quotes, the quote pack that compares them and the end-user approval
of the pack with one supplier decision per material request line.
"""
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.base.models import AuditMixin, TimestampMixin


class Quote(TimestampMixin):

    STATUS_DRAFT = 'draft'
    STATUS_SUBMITTED = 'submitted'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_SUBMITTED, 'Submitted'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    rfq = models.ForeignKey('rfq.RFQ', on_delete=models.CASCADE, related_name='quotes')
    supplier = models.ForeignKey('suppliers.Supplier', on_delete=models.PROTECT, related_name='quotes')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED)
    submitted_at = models.DateTimeField(null=True, blank=True)
    valid_until = models.DateField()
    total_amount = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3)
    terms_conditions = models.TextField(blank=True)

    class Meta:
        db_table = 'quote'
        ordering = ['total_amount', 'id']
        constraints = [
            models.UniqueConstraint(fields=['rfq', 'supplier'], name='quote_rfq_supplier_unique'),
        ]

    def __str__(self):
        return f"{self.rfq.rfq_number} / {self.supplier.name}"

    def recalculate_total(self):
        self.total_amount = sum((line.total_price for line in self.line_items.all()), Decimal('0.00'))
        self.save(update_fields=['total_amount', 'updated_at'])
        return self.total_amount


class QuoteLineItem(models.Model):
    quote = models.ForeignKey(Quote, on_delete=models.CASCADE, related_name='line_items')
    mr_line_item = models.ForeignKey(
        'material_requests.MRLineItem',
        on_delete=models.PROTECT,
        related_name='quote_lines'
    )
    unit_price = models.DecimalField(max_digits=15, decimal_places=2)
    quantity = models.DecimalField(max_digits=15, decimal_places=3)
    total_price = models.DecimalField(max_digits=15, decimal_places=2)
    lead_time_days = models.PositiveIntegerField(default=0)
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = 'quote_line_item'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['quote', 'mr_line_item'], name='quote_line_unique'),
        ]

    def __str__(self):
        return f"{self.mr_line_item.item_code} @ {self.unit_price}"


class QuotePack(AuditMixin):
    """Side-by-side comparison of the quotes received for an RFQ."""

    STATUS_DRAFT = 'draft'
    STATUS_SENT = 'sent'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_SENT, 'Sent'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    # Packs still open for a decision
    OPEN_STATUSES = [STATUS_DRAFT, STATUS_SENT]

    rfq = models.ForeignKey('rfq.RFQ', on_delete=models.CASCADE, related_name='quote_packs')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    comparison_data = models.JSONField(default=dict, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='quote_packs_approved'
    )

    class Meta:
        db_table = 'quote_pack'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Quote pack {self.pk} for {self.rfq.rfq_number}"

    @property
    def quotes(self):
        return self.rfq.quotes.exclude(status=Quote.STATUS_DRAFT)

    def mark_sent(self):
        self.status = self.STATUS_SENT
        self.sent_at = timezone.now()
        self.save(update_fields=['status', 'sent_at', 'updated_at'])


class QuoteApproval(AuditMixin):

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    quote_pack = models.OneToOneField(QuotePack, on_delete=models.CASCADE, related_name='approval')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    comments = models.TextField(blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='quote_approvals_decided'
    )
    comparison_summary = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'quote_approval'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='quote_approval_status_idx'),
        ]

    def __str__(self):
        return f"Approval {self.pk} ({self.status})"

    @property
    def rfq(self):
        return self.quote_pack.rfq

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING


class LineItemDecision(models.Model):
    """Supplier selected for one material request line."""

    DECISION_APPROVED = 'approved'
    DECISION_REJECTED = 'rejected'
    DECISION_CHOICES = [
        (DECISION_APPROVED, 'Approved'),
        (DECISION_REJECTED, 'Rejected'),
    ]

    quote_approval = models.ForeignKey(QuoteApproval, on_delete=models.CASCADE, related_name='line_item_decisions')
    mr_line_item = models.ForeignKey(
        'material_requests.MRLineItem',
        on_delete=models.PROTECT,
        related_name='decisions'
    )
    selected_quote = models.ForeignKey(
        Quote,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='line_decisions'
    )
    decision = models.CharField(max_length=10, choices=DECISION_CHOICES, default=DECISION_APPROVED)
    comments = models.TextField(blank=True)

    class Meta:
        db_table = 'quote_line_decision'
        ordering = ['mr_line_item_id']
        constraints = [
            models.UniqueConstraint(fields=['quote_approval', 'mr_line_item'], name='line_decision_unique'),
        ]

    def __str__(self):
        return f"{self.mr_line_item.item_code}: {self.decision}"

    @property
    def selected_line(self):
        """The selected quote's offer for this line, or None."""
        if self.selected_quote is None:
            return None
        return self.selected_quote.line_items.filter(mr_line_item=self.mr_line_item).first()
