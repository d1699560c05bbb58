"""Audit trail of every mutation on procurement documents."""

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """One row per action on one entity, with optional before/after snapshots."""

    ENTITY_MATERIAL_REQUEST = 'material_request'
    ENTITY_RFQ = 'rfq'
    ENTITY_QUOTE = 'quote'
    ENTITY_QUOTE_PACK = 'quote_pack'
    ENTITY_QUOTE_APPROVAL = 'quote_approval'
    ENTITY_PURCHASE_REQUISITION = 'purchase_requisition'
    ENTITY_PURCHASE_ORDER = 'purchase_order'
    ENTITY_SUPPLIER = 'supplier'
    ENTITY_PROJECT = 'project'
    ENTITY_AUTHORIZATION_MATRIX = 'authorization_matrix'
    ENTITY_ITEM = 'item'
    ENTITY_CHOICES = [
        (ENTITY_MATERIAL_REQUEST, 'Material Request'),
        (ENTITY_RFQ, 'RFQ'),
        (ENTITY_QUOTE, 'Quote'),
        (ENTITY_QUOTE_PACK, 'Quote Pack'),
        (ENTITY_QUOTE_APPROVAL, 'Quote Approval'),
        (ENTITY_PURCHASE_REQUISITION, 'Purchase Requisition'),
        (ENTITY_PURCHASE_ORDER, 'Purchase Order'),
        (ENTITY_SUPPLIER, 'Supplier'),
        (ENTITY_PROJECT, 'Project'),
        (ENTITY_AUTHORIZATION_MATRIX, 'Authorization Matrix'),
        (ENTITY_ITEM, 'Item'),
    ]

    entity_type = models.CharField(max_length=30, choices=ENTITY_CHOICES)
    entity_id = models.PositiveBigIntegerField(null=True, blank=True)
    action = models.CharField(max_length=60)

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="Null for system actions"
    )
    actor_name = models.CharField(max_length=255, blank=True, default='')

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    before_data = models.JSONField(null=True, blank=True)
    after_data = models.JSONField(null=True, blank=True)

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        db_table = 'audit_log'
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id']),
            models.Index(fields=['action']),
        ]

    def __str__(self):
        return f"{self.action} on {self.entity_type} #{self.entity_id} by {self.actor_name or 'SYSTEM'}"
