"""
Builders for the procurement chain:

    supplier -> material request -> RFQ -> quotes -> quote approval -> PR -> PO

Each step goes through the service layer so the objects are in the state
the API would leave them in.
"""
import itertools
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from core.base.test_utils import create_project, create_user
from core.user_accounts.models import UserRole
from procurement.material_requests.models import MaterialRequest, MRLineItem
from procurement.po.services import POGenerationService
from procurement.PR.services import PRApprovalService, PRGenerationService
from procurement.quotes.models import LineItemDecision
from procurement.quotes.services import (
    DecisionDTO,
    LineDecisionDTO,
    QuoteApprovalService,
    QuoteDTO,
    QuoteLineDTO,
    QuoteService,
)
from procurement.rfq.services import RFQCreateDTO, RFQDispatchDTO, RFQService
from procurement.suppliers.models import Supplier

_supplier_sequence = itertools.count(1)


def create_supplier(name=None, category='Steel', approved=True, is_active=True, email=None):
    """Create a supplier, approved and active by default"""
    number = next(_supplier_sequence)
    supplier = Supplier.objects.create(
        name=name or f'Supplier {number}',
        email=email or f'supplier{number}@example.com',
        category=category,
        status=Supplier.STATUS_APPROVED if approved else Supplier.STATUS_PENDING,
    )
    if not is_active:
        supplier.deactivate()
    return supplier


def create_material_request(project=None, requester=None, lines=None, status=MaterialRequest.STATUS_SUBMITTED):
    """
    Material request with the given lines as (item_code, quantity) pairs,
    two lines by default.
    """
    project = project or create_project()
    requester = requester or create_user(role=UserRole.REQUESTER)
    material_request = MaterialRequest.objects.create(project=project, requester=requester, status=status)
    for item_code, quantity in lines or [('STEEL-12', '10'), ('CEMENT-50', '20')]:
        MRLineItem.objects.create(
            material_request=material_request,
            item_code=item_code,
            description=f'{item_code} description',
            uom='EA',
            quantity=Decimal(quantity),
        )
    return material_request


def create_dispatched_rfq(material_request=None, suppliers=None, user=None):
    material_request = material_request or create_material_request()
    user = user or create_user(role=UserRole.PROCUREMENT)
    suppliers = suppliers or [create_supplier(), create_supplier()]
    rfq = RFQService.create_rfq(
        RFQCreateDTO(
            material_request_id=material_request.pk,
            due_date=timezone.localdate() + timedelta(days=7),
            supplier_ids=[supplier.pk for supplier in suppliers],
        ),
        user,
    )
    rfq, _ = RFQService.dispatch(rfq, RFQDispatchDTO())
    return rfq


def submit_quote(rfq, supplier, prices, lead_time_days=7):
    """
    Quote every MR line of ``rfq`` at the unit price given in ``prices``
    (one entry per line, in line order).
    """
    lines = list(rfq.material_request.line_items.order_by('id'))
    return QuoteService.submit_quote(QuoteDTO(
        rfq_id=rfq.pk,
        supplier_id=supplier.pk,
        valid_until=timezone.localdate() + timedelta(days=30),
        line_items=[
            QuoteLineDTO(
                mr_line_item_id=line.pk,
                unit_price=Decimal(price),
                quantity=line.quantity,
                lead_time_days=lead_time_days,
            )
            for line, price in zip(lines, prices)
        ],
    ))


def approve_quote_pack(rfq, selections, user=None, comments='Approved'):
    """
    Create the quote approval for ``rfq`` and approve it.

    ``selections`` maps MR line id to the selected quote.
    """
    approval = QuoteApprovalService.create_approval(rfq, create_user(role=UserRole.PROCUREMENT))
    return QuoteApprovalService.decide(
        approval,
        DecisionDTO(
            decision='approved',
            comments=comments,
            line_item_decisions=[
                LineDecisionDTO(
                    mr_line_item_id=line_id,
                    selected_quote_id=quote.pk,
                    decision=LineItemDecision.DECISION_APPROVED,
                )
                for line_id, quote in selections.items()
            ],
        ),
        user or create_user(role=UserRole.REQUESTER),
    )


def create_approved_quote_approval(project=None, split_suppliers=False, lines=None):
    """
    Two suppliers quote a two-line MR; the cheaper one wins every line, or
    each supplier wins one line with ``split_suppliers``.

    Returns (approval, quotes) with quotes ordered [cheap, expensive].
    """
    material_request = create_material_request(project=project, lines=lines)
    cheap, expensive = create_supplier(name='Cheap Steel'), create_supplier(name='Premium Steel')
    rfq = create_dispatched_rfq(material_request, [cheap, expensive])
    cheap_quote = submit_quote(rfq, cheap, ['100.00', '50.00'], lead_time_days=5)
    expensive_quote = submit_quote(rfq, expensive, ['120.00', '60.00'], lead_time_days=10)

    first, second = material_request.line_items.order_by('id')
    selections = {first.pk: cheap_quote, second.pk: expensive_quote if split_suppliers else cheap_quote}
    approval = approve_quote_pack(rfq, selections)
    return approval, [cheap_quote, expensive_quote]


def create_draft_prs(project=None, split_suppliers=False, user=None, lines=None):
    approval, _ = create_approved_quote_approval(project=project, split_suppliers=split_suppliers, lines=lines)
    project = approval.rfq.material_request.project
    return PRGenerationService.generate_from_quote_approval(
        approval, project, user or create_user(role=UserRole.PROCUREMENT)
    )


def create_approved_pr(project=None):
    """
    Draft PR approved with no matrix rules in place (auto-approval).

    Cheap supplier wins both lines: 10 x 100 + 20 x 50 = 2,000.00
    """
    pr = create_draft_prs(project=project)[0]
    return PRApprovalService.approve(pr, create_user(role=UserRole.APPROVER), 'OK')


def create_draft_po(project=None, delivery_address=None):
    pr = create_approved_pr(project=project)
    return POGenerationService.generate_from_pr(
        pr, pr.project, create_user(role=UserRole.PROCUREMENT), delivery_address=delivery_address
    )[0]
