"""
Request for Quotation raised from a material request and sent to suppliers.

Status flow:

    draft -> sent -> quotes_received -> comparison_ready -> quote_pack_sent -> approved
                                              ^                     |
                                              +--- pack rejected ---+
"""
import secrets
import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.base.config import procurement_setting
from core.base.models import AuditMixin, generate_document_number


class RFQ(AuditMixin):

    STATUS_DRAFT = 'draft'
    STATUS_SENT = 'sent'
    STATUS_QUOTES_RECEIVED = 'quotes_received'
    STATUS_COMPARISON_READY = 'comparison_ready'
    STATUS_QUOTE_PACK_SENT = 'quote_pack_sent'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_SENT, 'Sent'),
        (STATUS_QUOTES_RECEIVED, 'Quotes Received'),
        (STATUS_COMPARISON_READY, 'Comparison Ready'),
        (STATUS_QUOTE_PACK_SENT, 'Quote Pack Sent'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    # Quotes are not accepted in these statuses
    QUOTE_CLOSED_STATUSES = [STATUS_DRAFT, STATUS_APPROVED, STATUS_REJECTED]

    rfq_number = models.CharField(max_length=50, unique=True, editable=False)
    material_request = models.ForeignKey(
        'material_requests.MaterialRequest',
        on_delete=models.PROTECT,
        related_name='rfqs'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    due_date = models.DateField(null=True, blank=True)
    terms = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    comparison_summary = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = 'rfq'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['status'], name='rfq_status_idx'),
        ]

    def __str__(self):
        return self.rfq_number

    def save(self, *args, **kwargs):
        if not self.rfq_number:
            self.rfq_number = generate_document_number(RFQ, 'rfq_number', 'RFQ')
        super().save(*args, **kwargs)

    @property
    def project(self):
        return self.material_request.project

    @property
    def accepts_quotes(self):
        return self.status not in self.QUOTE_CLOSED_STATUSES

    def invite(self, supplier):
        """Create the invitation for ``supplier``; returns (invitation, created)."""
        existing = self.suppliers.filter(supplier=supplier).first()
        if existing:
            return existing, False
        token = secrets.token_urlsafe(16)
        base_url = procurement_setting('PORTAL_BASE_URL').rstrip('/')
        invitation = RFQSupplier.objects.create(
            rfq=self,
            supplier=supplier,
            portal_link=f"{base_url}/rfq/{self.rfq_number}/{token}",
            email_tracking_id=uuid.uuid4().hex,
        )
        return invitation, True

    def mark_sent(self):
        if self.status in (self.STATUS_APPROVED, self.STATUS_REJECTED):
            raise ValidationError(f"RFQ {self.rfq_number} is {self.status} and cannot be dispatched")
        if self.status == self.STATUS_DRAFT:
            self.status = self.STATUS_SENT
        self.sent_at = timezone.now()
        self.save(update_fields=['status', 'sent_at', 'updated_at'])

    def mark_quotes_received(self):
        if self.status == self.STATUS_SENT:
            self.status = self.STATUS_QUOTES_RECEIVED
            self.save(update_fields=['status', 'updated_at'])

    def mark_comparison_ready(self):
        if self.status in (self.STATUS_SENT, self.STATUS_QUOTES_RECEIVED):
            self.status = self.STATUS_COMPARISON_READY
            self.save(update_fields=['status', 'updated_at'])

    def set_status(self, new_status):
        self.status = new_status
        self.save(update_fields=['status', 'updated_at'])


class RFQSupplier(models.Model):
    """Invitation of one supplier to one RFQ."""

    STATUS_PENDING = 'pending'
    STATUS_RESPONDED = 'responded'
    STATUS_DECLINED = 'declined'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_RESPONDED, 'Responded'),
        (STATUS_DECLINED, 'Declined'),
    ]

    rfq = models.ForeignKey(RFQ, on_delete=models.CASCADE, related_name='suppliers')
    supplier = models.ForeignKey('suppliers.Supplier', on_delete=models.PROTECT, related_name='rfq_invitations')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    sent_at = models.DateTimeField(null=True, blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    portal_link = models.URLField(max_length=500)
    email_tracking_id = models.CharField(max_length=64, blank=True)

    class Meta:
        db_table = 'rfq_supplier'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['rfq', 'supplier'], name='rfq_supplier_unique'),
        ]

    def __str__(self):
        return f"{self.rfq.rfq_number} -> {self.supplier.name}"

    def mark_sent(self):
        self.sent_at = timezone.now()
        self.save(update_fields=['sent_at'])

    def mark_responded(self):
        self.status = self.STATUS_RESPONDED
        self.responded_at = timezone.now()
        self.save(update_fields=['status', 'responded_at'])
