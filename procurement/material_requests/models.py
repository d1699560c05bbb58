from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from core.base.models import TimestampMixin, generate_document_number


class MaterialRequest(TimestampMixin):
    """Site request for materials; the start of every procurement chain."""

    STATUS_DRAFT = 'draft'
    STATUS_SUBMITTED = 'submitted'
    STATUS_IN_PROGRESS = 'in_progress'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_SUBMITTED, 'Submitted'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    # Statuses an RFQ can be raised from
    RFQ_READY_STATUSES = [STATUS_SUBMITTED, STATUS_IN_PROGRESS]

    mrn = models.CharField(max_length=50, unique=True, editable=False)
    project = models.ForeignKey('projects.Project', on_delete=models.PROTECT, related_name='material_requests')
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='material_requests'
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED)
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = 'material_request'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['project', 'status'], name='mr_project_status_idx'),
        ]

    def __str__(self):
        return self.mrn

    def save(self, *args, **kwargs):
        if not self.mrn:
            self.mrn = generate_document_number(MaterialRequest, 'mrn', 'MR')
        super().save(*args, **kwargs)

    @property
    def can_raise_rfq(self):
        return self.status in self.RFQ_READY_STATUSES

    def mark_in_progress(self):
        if self.status == self.STATUS_SUBMITTED:
            self.status = self.STATUS_IN_PROGRESS
            self.save(update_fields=['status', 'updated_at'])

    def mark_approved(self):
        if self.status == self.STATUS_APPROVED:
            return
        if self.status not in self.RFQ_READY_STATUSES:
            raise ValidationError(f"Material request {self.mrn} cannot be approved from status {self.status}")
        self.status = self.STATUS_APPROVED
        self.save(update_fields=['status', 'updated_at'])


class MRLineItem(models.Model):
    material_request = models.ForeignKey(MaterialRequest, on_delete=models.CASCADE, related_name='line_items')
    item_code = models.CharField(max_length=100)
    description = models.TextField()
    uom = models.CharField(max_length=20, help_text="Unit of measure, e.g. EA, M, KG")
    quantity = models.DecimalField(
        max_digits=15, decimal_places=3,
        validators=[MinValueValidator(Decimal('0.001'))]
    )
    unit_price = models.DecimalField(max_digits=15, decimal_places=2, default=Decimal('0.00'))
    remarks = models.TextField(blank=True)
    location = models.CharField(max_length=200, blank=True)
    brand_asset = models.CharField(max_length=200, blank=True)
    serial_chassis_engine_no = models.CharField(max_length=200, blank=True)
    model_year = models.CharField(max_length=10, blank=True)

    class Meta:
        db_table = 'mr_line_item'
        ordering = ['id']

    def __str__(self):
        return f"{self.item_code} x {self.quantity} {self.uom}"


class MRAttachment(models.Model):
    material_request = models.ForeignKey(MaterialRequest, on_delete=models.CASCADE, related_name='attachments')
    filename = models.CharField(max_length=255)
    url = models.URLField(max_length=500)
    file_type = models.CharField(max_length=100, default='application/octet-stream')
    file_size = models.PositiveBigIntegerField(default=0)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'mr_attachment'
        ordering = ['id']

    def __str__(self):
        return self.filename
