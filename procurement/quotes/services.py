"""
Quote Service Layer - quote intake, comparison and end-user approval

Architecture:
- DTOs describe the validated request payloads
- QuoteComparisonService builds the comparison matrix shared by the RFQ
  comparison endpoint and quote packs
- QuoteService / QuoteApprovalService hold the state changes; views record
  the audit trail around them

Money values inside comparison JSON are strings with two decimals, the same
representation the API uses for Decimal fields.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.base.config import procurement_setting
from procurement.material_requests.models import MRLineItem
from procurement.quotes.models import LineItemDecision, Quote, QuoteApproval, QuoteLineItem, QuotePack
from procurement.rfq.models import RFQ, RFQSupplier
from procurement.suppliers.models import Supplier

logger = logging.getLogger(__name__)

# Lines whose price spread exceeds this percentage are listed as key differences
KEY_DIFFERENCE_THRESHOLD = Decimal('10')

RISK_LOW = 'Low'
RISK_MEDIUM = 'Medium'
RISK_HIGH = 'High'

TWO_PLACES = Decimal('0.01')


def _amount(value):
    return str(Decimal(value).quantize(TWO_PLACES))


# ==================== DTOs (Data Transfer Objects) ====================

@dataclass
class QuoteLineDTO:
    mr_line_item_id: int
    unit_price: Decimal
    quantity: Decimal
    lead_time_days: int
    total_price: Optional[Decimal] = None
    remarks: str = ''

    @property
    def line_total(self):
        if self.total_price is not None:
            return self.total_price
        return (self.unit_price * self.quantity).quantize(TWO_PLACES)


@dataclass
class QuoteDTO:
    rfq_id: int
    supplier_id: int
    valid_until: date
    line_items: List[QuoteLineDTO]
    terms_conditions: str = ''


@dataclass
class LineDecisionDTO:
    mr_line_item_id: int
    selected_quote_id: Optional[int] = None
    decision: str = LineItemDecision.DECISION_APPROVED
    comments: str = ''


@dataclass
class DecisionDTO:
    decision: str
    line_item_decisions: List[LineDecisionDTO] = field(default_factory=list)
    comments: str = ''


# ==================== COMPARISON ====================

class QuoteComparisonService:

    @staticmethod
    def submitted_quotes(rfq):
        return list(
            rfq.quotes.exclude(status=Quote.STATUS_DRAFT)
            .select_related('supplier')
            .prefetch_related('line_items')
            .order_by('id')
        )

    @classmethod
    def build_line_comparison(cls, rfq):
        """
        Per MR line every supplier's offer sorted by price, the lowest offer
        and the saving of the lowest against the highest; totals per supplier.
        """
        quotes = cls.submitted_quotes(rfq)
        offers_by_line = {}
        for quote in quotes:
            for line in quote.line_items.all():
                offers_by_line.setdefault(line.mr_line_item_id, []).append((quote, line))

        lines = []
        total_savings = Decimal('0.00')
        for mr_line in rfq.material_request.line_items.all():
            offers = sorted(offers_by_line.get(mr_line.id, []), key=lambda entry: (entry[1].total_price, entry[0].id))
            lowest = offers[0] if offers else None
            highest = offers[-1] if offers else None
            savings = highest[1].total_price - lowest[1].total_price if offers else Decimal('0.00')
            total_savings += savings

            spread = Decimal('0')
            if offers and lowest[1].total_price > 0:
                spread = (savings / lowest[1].total_price * 100).quantize(TWO_PLACES)
            elif offers and savings > 0:
                spread = Decimal('100')

            lines.append({
                'line_item_id': mr_line.id,
                'item_code': mr_line.item_code,
                'description': mr_line.description,
                'uom': mr_line.uom,
                'quantity': str(mr_line.quantity),
                'offers': [
                    {
                        'quote_id': quote.id,
                        'supplier_id': quote.supplier_id,
                        'supplier_name': quote.supplier.name,
                        'unit_price': _amount(line.unit_price),
                        'total_price': _amount(line.total_price),
                        'lead_time_days': line.lead_time_days,
                    }
                    for quote, line in offers
                ],
                'quote_count': len(offers),
                'lowest': {
                    'quote_id': lowest[0].id,
                    'supplier_id': lowest[0].supplier_id,
                    'supplier_name': lowest[0].supplier.name,
                    'total_price': _amount(lowest[1].total_price),
                } if lowest else None,
                'highest_total': _amount(highest[1].total_price) if highest else None,
                'savings': _amount(savings),
                'spread_percent': str(spread),
            })

        supplier_totals = [
            {
                'quote_id': quote.id,
                'supplier_id': quote.supplier_id,
                'supplier_name': quote.supplier.name,
                'total_amount': _amount(quote.total_amount),
                'currency': quote.currency,
                'lines_quoted': quote.line_items.count(),
                'valid_until': quote.valid_until.isoformat(),
            }
            for quote in sorted(quotes, key=lambda q: (q.total_amount, q.id))
        ]

        return {
            'rfq_id': rfq.id,
            'rfq_number': rfq.rfq_number,
            'lines': lines,
            'supplier_totals': supplier_totals,
            'total_savings': _amount(total_savings),
        }

    @classmethod
    def build_pack_comparison_data(cls, rfq):
        """Line comparison plus recommendations, key differences and risk."""
        comparison = cls.build_line_comparison(rfq)

        recommended = []
        for line in comparison['lines']:
            if line['lowest'] and line['lowest']['supplier_id'] not in recommended:
                recommended.append(line['lowest']['supplier_id'])

        key_differences = [
            f"{line['item_code']}: {line['spread_percent']}% spread between "
            f"{line['offers'][0]['supplier_name']} and {line['offers'][-1]['supplier_name']}"
            for line in comparison['lines']
            if line['quote_count'] > 1 and Decimal(line['spread_percent']) > KEY_DIFFERENCE_THRESHOLD
        ]

        quote_counts = [line['quote_count'] for line in comparison['lines']]
        if any(count == 0 for count in quote_counts):
            risk = RISK_HIGH
        elif any(count == 1 for count in quote_counts):
            risk = RISK_MEDIUM
        else:
            risk = RISK_LOW

        comparison.update({
            'recommended_suppliers': recommended,
            'key_differences': key_differences,
            'risk_assessment': risk,
        })
        return comparison


# ==================== QUOTES AND PACKS ====================

class QuoteService:

    @staticmethod
    @transaction.atomic
    def submit_quote(dto: QuoteDTO) -> Quote:
        """
        Record a supplier quote against an RFQ.

        Raises:
            RFQ.DoesNotExist / Supplier.DoesNotExist: unknown ids
            ValidationError: business rule violations
        """
        rfq = RFQ.objects.select_for_update().select_related('material_request').get(pk=dto.rfq_id)
        supplier = Supplier.objects.get(pk=dto.supplier_id)

        if not rfq.accepts_quotes:
            raise ValidationError(f"RFQ {rfq.rfq_number} is {rfq.status} and does not accept quotes")

        if Quote.objects.filter(rfq=rfq, supplier=supplier).exists():
            raise ValidationError(f"{supplier.name} has already submitted a quote for {rfq.rfq_number}")

        if not dto.line_items:
            raise ValidationError("At least one line item is required")

        mr_lines = {line.id: line for line in rfq.material_request.line_items.all()}
        seen = set()
        for line in dto.line_items:
            if line.mr_line_item_id not in mr_lines:
                raise ValidationError(
                    f"Line item {line.mr_line_item_id} does not belong to material request "
                    f"{rfq.material_request.mrn}"
                )
            if line.mr_line_item_id in seen:
                raise ValidationError(f"Line item {line.mr_line_item_id} is quoted more than once")
            seen.add(line.mr_line_item_id)

        now = timezone.now()
        quote = Quote.objects.create(
            rfq=rfq,
            supplier=supplier,
            status=Quote.STATUS_SUBMITTED,
            submitted_at=now,
            valid_until=dto.valid_until,
            currency=procurement_setting('DEFAULT_CURRENCY'),
            terms_conditions=dto.terms_conditions,
        )
        QuoteLineItem.objects.bulk_create([
            QuoteLineItem(
                quote=quote,
                mr_line_item=mr_lines[line.mr_line_item_id],
                unit_price=line.unit_price,
                quantity=line.quantity,
                total_price=line.line_total,
                lead_time_days=line.lead_time_days,
                remarks=line.remarks,
            )
            for line in dto.line_items
        ])
        quote.recalculate_total()

        response_hours = None
        invitation = RFQSupplier.objects.filter(rfq=rfq, supplier=supplier).first()
        if invitation is not None:
            if invitation.sent_at:
                response_hours = round((now - invitation.sent_at).total_seconds() / 3600, 2)
            invitation.mark_responded()

        supplier.record_quote(now, response_hours)
        rfq.mark_quotes_received()

        logger.info("Quote %s from %s recorded for %s (%s %s)",
                    quote.pk, supplier.name, rfq.rfq_number, quote.total_amount, quote.currency)
        return quote

    @staticmethod
    @transaction.atomic
    def create_quote_pack(rfq, user) -> QuotePack:
        quotes = QuoteComparisonService.submitted_quotes(rfq)
        if not quotes:
            raise ValidationError(f"RFQ {rfq.rfq_number} has no quotes to compare")

        pack = QuotePack.objects.create(
            rfq=rfq,
            created_by=user,
            comparison_data=QuoteComparisonService.build_pack_comparison_data(rfq),
        )
        rfq.mark_comparison_ready()
        logger.info("Quote pack %s built for %s with %d quotes", pack.pk, rfq.rfq_number, len(quotes))
        return pack


# ==================== END-USER APPROVAL ====================

class QuoteApprovalService:

    @staticmethod
    @transaction.atomic
    def create_approval(rfq, user) -> QuoteApproval:
        """Send the open quote pack of ``rfq`` for approval, building one if needed."""
        if rfq.status in (RFQ.STATUS_APPROVED, RFQ.STATUS_REJECTED):
            raise ValidationError(f"RFQ {rfq.rfq_number} is already {rfq.status}")

        pack = rfq.quote_packs.filter(status__in=QuotePack.OPEN_STATUSES).order_by('-created_at', '-id').first()
        if pack is not None and QuoteApproval.objects.filter(quote_pack=pack).exists():
            raise ValidationError(f"Quote pack for {rfq.rfq_number} is already awaiting approval")
        if pack is None:
            pack = QuoteService.create_quote_pack(rfq, user)

        pack.mark_sent()
        approval = QuoteApproval.objects.create(
            quote_pack=pack,
            status=QuoteApproval.STATUS_PENDING,
            created_by=user,
        )
        rfq.set_status(RFQ.STATUS_QUOTE_PACK_SENT)
        logger.info("Quote approval %s created for %s", approval.pk, rfq.rfq_number)
        return approval

    @staticmethod
    def _build_decisions(approval, entries):
        """Resolve and check decision payloads against the approval's RFQ."""
        rfq = approval.rfq
        mr_lines = {line.id: line for line in rfq.material_request.line_items.all()}
        quotes = {quote.id: quote for quote in QuoteComparisonService.submitted_quotes(rfq)}

        resolved = []
        seen = set()
        for entry in entries:
            mr_line = mr_lines.get(entry.mr_line_item_id)
            if mr_line is None:
                raise ValidationError(
                    f"Line item {entry.mr_line_item_id} does not belong to material request "
                    f"{rfq.material_request.mrn}"
                )
            if entry.mr_line_item_id in seen:
                raise ValidationError(f"Line item {entry.mr_line_item_id} has more than one decision")
            seen.add(entry.mr_line_item_id)

            quote = None
            if entry.selected_quote_id is not None:
                quote = quotes.get(entry.selected_quote_id)
                if quote is None:
                    raise ValidationError(f"Quote {entry.selected_quote_id} does not belong to {rfq.rfq_number}")
                if not any(line.mr_line_item_id == mr_line.id for line in quote.line_items.all()):
                    raise ValidationError(
                        f"Quote {quote.id} from {quote.supplier.name} does not quote line {mr_line.item_code}"
                    )
            elif entry.decision == LineItemDecision.DECISION_APPROVED:
                raise ValidationError(f"Line {mr_line.item_code} needs a selected quote to be approved")

            resolved.append((mr_line, quote, entry))
        return resolved

    @staticmethod
    def _replace_decisions(approval, resolved):
        approval.line_item_decisions.all().delete()
        return [
            LineItemDecision.objects.create(
                quote_approval=approval,
                mr_line_item=mr_line,
                selected_quote=quote,
                decision=entry.decision,
                comments=entry.comments,
            )
            for mr_line, quote, entry in resolved
        ]

    @classmethod
    @transaction.atomic
    def save_draft(cls, approval, line_item_decisions=None, comments=None) -> QuoteApproval:
        """Store in-progress selections while the approval is pending."""
        if not approval.is_pending:
            raise ValidationError(f"Quote approval {approval.pk} is already {approval.status}")

        if line_item_decisions is not None:
            cls._replace_decisions(approval, cls._build_decisions(approval, line_item_decisions))
        if comments is not None:
            approval.comments = comments
            approval.save(update_fields=['comments', 'updated_at'])
        return approval

    @staticmethod
    def line_savings(comparison_line, selected_total):
        """Lowest quoted total minus the selected total: 0 when the cheapest was chosen."""
        if not comparison_line or not comparison_line['lowest']:
            return Decimal('0.00')
        return Decimal(comparison_line['lowest']['total_price']) - selected_total

    @classmethod
    def build_comparison_summary(cls, approval, decisions):
        rfq = approval.rfq
        comparison = {line['line_item_id']: line for line in QuoteComparisonService.build_line_comparison(rfq)['lines']}

        selections = []
        recommended = []
        total_savings = Decimal('0.00')
        for decision in decisions:
            if decision.decision != LineItemDecision.DECISION_APPROVED:
                continue
            offer = decision.selected_line
            selected_total = offer.total_price if offer else Decimal('0.00')
            savings = cls.line_savings(comparison.get(decision.mr_line_item_id), selected_total)
            total_savings += savings
            supplier = decision.selected_quote.supplier
            if supplier.id not in recommended:
                recommended.append(supplier.id)
            selections.append({
                'line_item_id': decision.mr_line_item_id,
                'line_description': decision.mr_line_item.description,
                'quote_id': decision.selected_quote_id,
                'supplier_id': supplier.id,
                'supplier_name': supplier.name,
                'unit_price': _amount(offer.unit_price if offer else 0),
                'total_price': _amount(selected_total),
                'savings': _amount(savings),
            })

        material_request = rfq.material_request
        return {
            'rfq_id': rfq.id,
            'rfq_number': rfq.rfq_number,
            'material_request': {
                'id': material_request.id,
                'mrn': material_request.mrn,
                'project_name': material_request.project.name,
            },
            'selections': selections,
            'recommended_suppliers': recommended,
            'total_savings': _amount(total_savings),
            'generated_at': timezone.now().isoformat(),
        }

    @classmethod
    @transaction.atomic
    def decide(cls, approval, dto: DecisionDTO, user) -> QuoteApproval:
        """
        Approve or reject a quote pack.

        Approval needs an approved selection for every MR line that received
        at least one quote. Selected quotes are approved, the others rejected;
        the pack, RFQ and MR become approved. A rejection sends the RFQ back
        to comparison_ready.
        """
        if dto.decision not in (QuoteApproval.STATUS_APPROVED, QuoteApproval.STATUS_REJECTED):
            raise ValidationError("Decision must be 'approved' or 'rejected'.")

        approval = QuoteApproval.objects.select_for_update().get(pk=approval.pk)
        if not approval.is_pending:
            raise ValidationError(f"Quote approval {approval.pk} is already {approval.status}")

        pack = approval.quote_pack
        rfq = pack.rfq
        now = timezone.now()

        if dto.decision == QuoteApproval.STATUS_REJECTED:
            approval.line_item_decisions.all().delete()
            approval.status = QuoteApproval.STATUS_REJECTED
            approval.comments = dto.comments
            approval.save(update_fields=['status', 'comments', 'updated_at'])

            pack.status = QuotePack.STATUS_REJECTED
            pack.save(update_fields=['status', 'updated_at'])
            rfq.set_status(RFQ.STATUS_COMPARISON_READY)

            logger.info("Quote approval %s rejected by %s", approval.pk, user.email)
            return approval

        resolved = cls._build_decisions(approval, dto.line_item_decisions)
        selected_lines = {
            mr_line.id for mr_line, quote, entry in resolved
            if entry.decision == LineItemDecision.DECISION_APPROVED and quote is not None
        }
        quoted_lines = set(
            QuoteLineItem.objects.filter(quote__in=pack.quotes).values_list('mr_line_item_id', flat=True)
        )
        missing = quoted_lines - selected_lines
        if missing:
            codes = MRLineItem.objects.filter(pk__in=missing).order_by('id').values_list('item_code', flat=True)
            raise ValidationError(
                "All lines with supplier quotes must have a selected supplier before approval. "
                f"Missing: {', '.join(codes)}"
            )

        decisions = cls._replace_decisions(approval, resolved)
        summary = cls.build_comparison_summary(approval, decisions)

        approval.status = QuoteApproval.STATUS_APPROVED
        approval.comments = dto.comments
        approval.approved_at = now
        approval.approved_by = user
        approval.comparison_summary = summary
        approval.save(update_fields=[
            'status', 'comments', 'approved_at', 'approved_by', 'comparison_summary', 'updated_at'
        ])

        comparison_data = dict(pack.comparison_data or {})
        comparison_data['recommended_suppliers'] = summary['recommended_suppliers']
        comparison_data['total_savings'] = summary['total_savings']
        pack.comparison_data = comparison_data
        pack.status = QuotePack.STATUS_APPROVED
        pack.approved_at = now
        pack.approved_by = user
        pack.save(update_fields=['comparison_data', 'status', 'approved_at', 'approved_by', 'updated_at'])

        selected_quote_ids = {decision.selected_quote_id for decision in decisions if decision.selected_quote_id}
        pack.quotes.filter(pk__in=selected_quote_ids).update(status=Quote.STATUS_APPROVED, updated_at=now)
        pack.quotes.exclude(pk__in=selected_quote_ids).update(status=Quote.STATUS_REJECTED, updated_at=now)

        rfq.comparison_summary = summary
        rfq.status = RFQ.STATUS_APPROVED
        rfq.save(update_fields=['comparison_summary', 'status', 'updated_at'])
        rfq.material_request.mark_approved()

        logger.info("Quote approval %s approved by %s (%d lines)", approval.pk, user.email, len(decisions))
        return approval
