"""
Purchase Order Service Layer

Generation groups the lines of an approved PR by supplier and creates one
draft PO per group. Updates and supplier hand-off go through the model's
status methods so every change lands in POStatusHistory.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.config import procurement_setting
from core.notifications.services import NotificationService
from procurement.PR.models import PurchaseRequisition
from procurement.po.models import POLineItem, PurchaseOrder

logger = logging.getLogger(__name__)


# ==================== DTOs (Data Transfer Objects) ====================

@dataclass
class POUpdateDTO:
    status: Optional[str] = None
    comments: Optional[str] = None
    delivery_date: Optional[date] = None


@dataclass
class POAcknowledgeDTO:
    acknowledged_by: str
    acknowledgment_date: datetime
    comments: str = ''
    estimated_delivery_date: Optional[date] = None


class POGenerationService:

    @staticmethod
    @transaction.atomic
    def generate_from_pr(pr, project, user, delivery_address=None, request=None):
        """
        Create one draft PO per supplier of the lines of ``pr``, audit each
        one and send the PO created notification.

        Raises:
            ValidationError: PR not approved, project mismatch or POs already exist
        """
        if pr.status != PurchaseRequisition.APPROVED:
            raise ValidationError("Purchase requisition must be approved before generating POs")
        if pr.project_id != project.pk:
            raise ValidationError("Project does not match the purchase requisition")
        if pr.purchase_orders.exists():
            raise ValidationError(f"Purchase orders already generated for {pr.pr_number}")

        lines = list(pr.line_items.select_related('quote__supplier', 'mr_line_item').order_by('id'))
        if not lines:
            raise ValidationError(f"{pr.pr_number} has no line items")

        grouped = OrderedDict()
        for line in lines:
            grouped.setdefault(line.quote.supplier, []).append(line)

        today = timezone.localdate()
        created = []
        for supplier, supplier_lines in grouped.items():
            po = PurchaseOrder.objects.create(
                purchase_requisition=pr,
                project=project,
                supplier=supplier,
                currency=pr.currency,
                payment_terms=procurement_setting('DEFAULT_PAYMENT_TERMS'),
                delivery_address=delivery_address or procurement_setting('DEFAULT_DELIVERY_ADDRESS'),
                comments=pr.comments,
                created_by=user,
            )

            total = Decimal('0.00')
            latest_delivery = None
            for line in supplier_lines:
                delivery_date = today + timedelta(days=line.lead_time_days)
                POLineItem.objects.create(
                    purchase_order=po,
                    pr_line_item=line,
                    mr_line_item=line.mr_line_item,
                    description=line.mr_line_item.description,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                    delivery_date=delivery_date,
                )
                total += line.total_price
                if latest_delivery is None or delivery_date > latest_delivery:
                    latest_delivery = delivery_date

            po.total_value = total
            po.delivery_date = latest_delivery
            po.save(update_fields=['total_value', 'delivery_date', 'updated_at'])
            po.record_history(None, user, f"Generated from {pr.pr_number}")

            created.append(po)
            logger.info("PO %s generated from %s for %s (%s %s)",
                        po.po_number, pr.pr_number, supplier.name, total, po.currency)

            AuditService.record(
                AuditLog.ENTITY_PURCHASE_ORDER, po.pk, 'po_created',
                actor=user,
                after={
                    'po_number': po.po_number,
                    'pr_id': pr.pk,
                    'supplier_id': po.supplier_id,
                    'total_value': po.total_value,
                },
                request=request,
            )
            NotificationService.send_po_created(po)

        return created


class POService:

    @staticmethod
    @transaction.atomic
    def update(po, dto: POUpdateDTO, user):
        """Apply a status change, comments and delivery date. Returns the previous status."""
        previous = po.status

        fields = []
        if dto.comments is not None:
            po.comments = dto.comments
            fields.append('comments')
        if dto.delivery_date is not None:
            po.delivery_date = dto.delivery_date
            fields.append('delivery_date')
        if fields:
            po.save(update_fields=fields + ['updated_at'])

        if dto.status and dto.status != previous:
            po.transition_to(dto.status, user, dto.comments or '')

        return previous

    @staticmethod
    @transaction.atomic
    def send_to_supplier(po, user, supplier_email='', message=''):
        return po.mark_sent(user, supplier_email, message)

    @staticmethod
    @transaction.atomic
    def acknowledge(po, dto: POAcknowledgeDTO, user):
        return po.acknowledge(
            dto.acknowledged_by,
            dto.acknowledgment_date,
            comments=dto.comments,
            estimated_delivery_date=dto.estimated_delivery_date,
            user=user,
        )
