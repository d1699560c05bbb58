"""
RFQ Service Layer - raising RFQs from material requests and dispatching them
to suppliers.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from core.notifications.services import NotificationService
from procurement.material_requests.models import MaterialRequest
from procurement.rfq.models import RFQ
from procurement.suppliers.models import Supplier

logger = logging.getLogger(__name__)


@dataclass
class RFQCreateDTO:
    material_request_id: int
    due_date: Optional[date] = None
    terms: str = ''
    supplier_ids: List[int] = field(default_factory=list)


@dataclass
class RFQDispatchDTO:
    supplier_ids: List[int] = field(default_factory=list)
    due_date: Optional[date] = None
    terms: Optional[str] = None


class RFQService:

    @staticmethod
    def eligible_suppliers(supplier_ids):
        """
        Suppliers for the given ids, which must exist and be active and approved.

        Raises:
            ValidationError: unknown or ineligible suppliers
        """
        suppliers = {supplier.id: supplier for supplier in Supplier.objects.filter(pk__in=supplier_ids)}
        missing = [str(pk) for pk in supplier_ids if pk not in suppliers]
        if missing:
            raise ValidationError(f"Unknown supplier ids: {', '.join(missing)}")

        ineligible = [supplier.name for supplier in suppliers.values() if not supplier.is_eligible_for_rfq]
        if ineligible:
            raise ValidationError(
                f"Suppliers must be active and approved before receiving RFQs: {', '.join(sorted(ineligible))}"
            )
        return [suppliers[pk] for pk in dict.fromkeys(supplier_ids)]

    @staticmethod
    @transaction.atomic
    def create_rfq(dto: RFQCreateDTO, user) -> RFQ:
        """
        Raise an RFQ (status draft) and move the material request to in_progress.

        Raises:
            MaterialRequest.DoesNotExist: unknown material request
            ValidationError: material request not ready, ineligible suppliers
        """
        material_request = MaterialRequest.objects.select_for_update().get(pk=dto.material_request_id)
        if not material_request.can_raise_rfq:
            raise ValidationError(
                f"Material request {material_request.mrn} is {material_request.status}; "
                f"RFQs can only be raised for submitted or in-progress requests"
            )

        suppliers = RFQService.eligible_suppliers(dto.supplier_ids) if dto.supplier_ids else []

        rfq = RFQ.objects.create(
            material_request=material_request,
            due_date=dto.due_date,
            terms=dto.terms,
            created_by=user,
        )
        for supplier in suppliers:
            rfq.invite(supplier)

        material_request.mark_in_progress()
        logger.info("RFQ %s raised for %s by %s", rfq.rfq_number, material_request.mrn, user.email)
        return rfq

    @staticmethod
    @transaction.atomic
    def dispatch(rfq, dto: RFQDispatchDTO):
        """
        Email the RFQ to the listed suppliers and to invited suppliers that
        have not received it yet. Suppliers that already received it are
        skipped. Returns the invitations sent.
        """
        rfq = RFQ.objects.select_for_update().get(pk=rfq.pk)

        if dto.due_date is not None:
            rfq.due_date = dto.due_date
        if dto.terms is not None:
            rfq.terms = dto.terms
        rfq.save(update_fields=['due_date', 'terms', 'updated_at'])

        for supplier in RFQService.eligible_suppliers(dto.supplier_ids):
            rfq.invite(supplier)

        unsent = list(rfq.suppliers.filter(sent_at__isnull=True).select_related('supplier'))
        if not unsent:
            raise ValidationError(f"RFQ {rfq.rfq_number} has no suppliers left to dispatch to")

        ineligible = [invitation.supplier.name for invitation in unsent if not invitation.supplier.is_eligible_for_rfq]
        if ineligible:
            raise ValidationError(
                f"Suppliers must be active and approved before receiving RFQs: {', '.join(sorted(ineligible))}"
            )

        rfq.mark_sent()
        for invitation in unsent:
            invitation.mark_sent()
            NotificationService.send_rfq_dispatch(rfq, invitation)

        logger.info("RFQ %s dispatched to %d supplier(s)", rfq.rfq_number, len(unsent))
        return rfq, unsent
