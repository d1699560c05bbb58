"""
Supplier master data: suppliers, their contacts and compliance documents.

Suppliers are never deleted; deactivation keeps the quotes, PRs and POs
that reference them intact.
"""
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from core.base.managers import SoftDeleteManager
from core.base.models import AuditMixin, SoftDeleteMixin, TimestampMixin


class Supplier(SoftDeleteMixin, AuditMixin):

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_SUSPENDED = 'suspended'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_SUSPENDED, 'Suspended'),
    ]

    name = models.CharField(max_length=200)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    category = models.CharField(max_length=100)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Performance
    rating = models.DecimalField(
        max_digits=3, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(5)]
    )
    quote_count = models.PositiveIntegerField(default=0)
    avg_response_time = models.DecimalField(
        max_digits=8, decimal_places=2, default=Decimal('0.00'),
        help_text="Average hours between RFQ dispatch and quote submission"
    )
    last_quote_date = models.DateField(null=True, blank=True)

    # Approval
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='suppliers_approved'
    )
    approval_date = models.DateTimeField(null=True, blank=True)
    approval_notes = models.TextField(blank=True)

    objects = SoftDeleteManager()

    class Meta:
        db_table = 'supplier'
        ordering = ['name']
        indexes = [
            models.Index(fields=['status', 'is_active'], name='supplier_status_idx'),
            models.Index(fields=['category'], name='supplier_category_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def is_eligible_for_rfq(self):
        return self.is_active and self.status == self.STATUS_APPROVED

    def approve(self, user, notes=''):
        if self.status == self.STATUS_APPROVED:
            raise ValidationError("Supplier is already approved")
        self.status = self.STATUS_APPROVED
        self.approved_by = user
        self.approval_date = timezone.now()
        self.approval_notes = notes or ''
        self.save(update_fields=['status', 'approved_by', 'approval_date', 'approval_notes', 'updated_at'])

    def record_quote(self, submitted_at, response_hours=None):
        """Update the quote statistics after a quote is submitted."""
        if response_hours is not None:
            total = self.avg_response_time * self.quote_count + Decimal(str(response_hours))
            self.avg_response_time = (total / (self.quote_count + 1)).quantize(Decimal('0.01'))
        self.quote_count += 1
        self.last_quote_date = submitted_at.date()
        self.save(update_fields=['quote_count', 'avg_response_time', 'last_quote_date', 'updated_at'])


class SupplierContact(TimestampMixin):
    supplier = models.ForeignKey(Supplier, on_delete=models.CASCADE, related_name='contacts')
    name = models.CharField(max_length=200)
    email = models.EmailField()
    phone = models.CharField(max_length=50, blank=True)
    position = models.CharField(max_length=100, blank=True)
    is_primary = models.BooleanField(default=False)

    class Meta:
        db_table = 'supplier_contact'
        ordering = ['-is_primary', 'name']

    def __str__(self):
        return f"{self.name} ({self.supplier.name})"


class ComplianceDocumentQuerySet(models.QuerySet):

    def expiring_within(self, days, today=None):
        """Documents still valid today that expire in the next ``days`` days."""
        today = today or timezone.localdate()
        return self.filter(expiry_date__gte=today, expiry_date__lte=today + timedelta(days=days))


class ComplianceDocument(TimestampMixin):
    supplier = models.ForeignKey(Supplier, on_delete=models.CASCADE, related_name='compliance_documents')
    name = models.CharField(max_length=200)
    url = models.URLField(max_length=500)
    expiry_date = models.DateField()

    objects = ComplianceDocumentQuerySet.as_manager()

    class Meta:
        db_table = 'supplier_compliance_document'
        ordering = ['expiry_date']
        indexes = [
            models.Index(fields=['expiry_date'], name='compliance_expiry_idx'),
        ]

    def __str__(self):
        return f"{self.name} - {self.supplier.name}"

    @property
    def is_valid(self):
        return self.expiry_date >= timezone.localdate()
