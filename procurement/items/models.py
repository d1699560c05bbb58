"""
Item master: units of measure, catalogue items and the suppliers able to
deliver them.

Material request lines carry a free-text item_code; an Item with the same
code (case-insensitive) links those lines, and the quotes received for
them, to the catalogue.
"""
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import IntegerField, Max
from django.db.models.functions import Cast, Substr
from django.utils import timezone

from core.base.managers import SoftDeleteManager
from core.base.models import AuditMixin, SoftDeleteMixin, TimestampMixin
from procurement.quotes.models import Quote, QuoteLineItem


class UnitOfMeasure(TimestampMixin):
    """
    Examples: PCS, KG, M, M3, BAG, TON
    """
    UOM_TYPES = [
        ('QUANTITY', 'Quantity'),
        ('WEIGHT', 'Weight'),
        ('LENGTH', 'Length'),
        ('AREA', 'Area'),
        ('VOLUME', 'Volume'),
    ]

    code = models.CharField(max_length=10, unique=True, help_text="UoM code (e.g., PCS, KG)")
    name = models.CharField(max_length=50, help_text="Full name (e.g., Pieces, Kilograms)")
    uom_type = models.CharField(max_length=20, choices=UOM_TYPES, default='QUANTITY')
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'unit_of_measure'
        ordering = ['code']
        verbose_name = 'Unit of Measure'
        verbose_name_plural = 'Units of Measure'

    def __str__(self):
        return f"{self.code} - {self.name}"

    def save(self, *args, **kwargs):
        self.code = self.code.upper()
        super().save(*args, **kwargs)


class Item(SoftDeleteMixin, AuditMixin):

    APPROVAL_PENDING = 'pending'
    APPROVAL_APPROVED = 'approved'
    APPROVAL_REJECTED = 'rejected'
    APPROVAL_CHOICES = [
        (APPROVAL_PENDING, 'Pending'),
        (APPROVAL_APPROVED, 'Approved'),
        (APPROVAL_REJECTED, 'Rejected'),
    ]

    CODE_PREFIX = 'ITM-'

    item_code = models.CharField(max_length=50, unique=True)
    description = models.TextField()
    category = models.CharField(max_length=100)
    uom = models.ForeignKey(UnitOfMeasure, on_delete=models.PROTECT, related_name='items')
    brand = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, blank=True)
    specifications = models.JSONField(default=dict, blank=True)

    approval_status = models.CharField(max_length=20, choices=APPROVAL_CHOICES, default=APPROVAL_PENDING)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items_approved'
    )
    approval_date = models.DateTimeField(null=True, blank=True)
    approval_notes = models.TextField(blank=True)

    objects = SoftDeleteManager()

    class Meta:
        db_table = 'item'
        ordering = ['item_code']
        indexes = [
            models.Index(fields=['category'], name='item_category_idx'),
            models.Index(fields=['approval_status', 'is_active'], name='item_approval_idx'),
        ]

    def __str__(self):
        return f"{self.item_code} - {self.get_short_description()}"

    def save(self, *args, **kwargs):
        self.item_code = (self.item_code or '').strip().upper() or self.next_item_code()
        super().save(*args, **kwargs)

    @classmethod
    def next_item_code(cls):
        """ITM-001, ITM-002, ... continuing from the highest generated code."""
        highest = cls.objects.filter(item_code__regex=r'^ITM-[0-9]+$').aggregate(
            highest=Max(Cast(Substr('item_code', len(cls.CODE_PREFIX) + 1), IntegerField()))
        )['highest']
        return f"{cls.CODE_PREFIX}{(highest or 0) + 1:03d}"

    def get_short_description(self, max_length=60):
        if len(self.description) <= max_length:
            return self.description
        return f"{self.description[:max_length]}..."

    @property
    def is_approved(self):
        return self.approval_status == self.APPROVAL_APPROVED

    def review(self, user, decision, notes=''):
        if decision not in (self.APPROVAL_APPROVED, self.APPROVAL_REJECTED):
            raise ValidationError("Decision must be 'approved' or 'rejected'")
        if self.is_approved:
            raise ValidationError("Item is already approved")
        self.approval_status = decision
        self.approved_by = user
        self.approval_date = timezone.now()
        self.approval_notes = notes or ''
        self.save(update_fields=['approval_status', 'approved_by', 'approval_date', 'approval_notes', 'updated_at'])

    def quote_lines(self):
        """Submitted quote lines for MR lines carrying this item code."""
        return QuoteLineItem.objects.filter(
            mr_line_item__item_code__iexact=self.item_code,
            quote__submitted_at__isnull=False,
        ).exclude(quote__status=Quote.STATUS_DRAFT)


class ItemSupplier(TimestampMixin):
    """A supplier able to deliver an item; at most one primary supplier per item."""

    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name='supplier_links')
    supplier = models.ForeignKey('suppliers.Supplier', on_delete=models.PROTECT, related_name='item_links')
    is_primary_supplier = models.BooleanField(default=False)
    capability_rating = models.DecimalField(
        max_digits=3, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(0), MaxValueValidator(5)]
    )
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'item_supplier'
        ordering = ['-is_primary_supplier', '-capability_rating', 'id']
        constraints = [
            models.UniqueConstraint(fields=['item', 'supplier'], name='item_supplier_unique'),
        ]

    def __str__(self):
        return f"{self.item.item_code} - {self.supplier.name}"
