"""
Item price history and trends.

Prices are not maintained by hand: every submitted quote line for an MR line
carrying the item's code is one price point, dated by the quote's
submission.
"""
import calendar
from collections import OrderedDict
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.utils import timezone

TREND_PERIODS = OrderedDict([
    ('1month', 1),
    ('3months', 3),
    ('6months', 6),
    ('1year', 12),
])
DEFAULT_TREND_PERIOD = '6months'

CENT = Decimal('0.01')


def _money(value):
    return str(value.quantize(CENT)) if value is not None else None


def months_before(day, months):
    """Same day ``months`` calendar months earlier, clamped to the month's end."""
    index = day.year * 12 + day.month - 1 - months
    year, month = divmod(index, 12)
    month += 1
    return day.replace(year=year, month=month, day=min(day.day, calendar.monthrange(year, month)[1]))


class ItemPriceService:

    @staticmethod
    def price_history(item, supplier_id=None, date_from=None, date_to=None):
        """Quote lines for ``item``, newest first."""
        queryset = item.quote_lines().select_related('quote__supplier', 'quote__rfq', 'mr_line_item')
        if supplier_id:
            queryset = queryset.filter(quote__supplier_id=supplier_id)
        if date_from:
            queryset = queryset.filter(quote__submitted_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(quote__submitted_at__date__lte=date_to)
        return queryset.order_by('-quote__submitted_at', '-id')

    @classmethod
    def price_trends(cls, item, period=DEFAULT_TREND_PERIOD, supplier_id=None, today=None):
        """
        Price points of the last ``period``, oldest first, with statistics
        and a per-supplier comparison.

        Raises:
            ValidationError: unknown period
        """
        if period not in TREND_PERIODS:
            raise ValidationError(f"period must be one of: {', '.join(TREND_PERIODS)}")

        today = today or timezone.localdate()
        start = months_before(today, TREND_PERIODS[period])
        lines = cls.price_history(item, supplier_id=supplier_id, date_from=start).order_by('quote__submitted_at', 'id')

        trends = []
        by_supplier = OrderedDict()
        for line in lines:
            quote = line.quote
            trends.append({
                'date': timezone.localtime(quote.submitted_at).date().isoformat(),
                'price': _money(line.unit_price),
                'supplier_id': quote.supplier_id,
                'supplier_name': quote.supplier.name,
                'rfq_number': quote.rfq.rfq_number,
                'currency': quote.currency,
            })
            entry = by_supplier.setdefault(quote.supplier_id, {'supplier_name': quote.supplier.name, 'prices': []})
            entry['prices'].append(line.unit_price)

        prices = [line.unit_price for line in lines]
        return {
            'item_code': item.item_code,
            'period': period,
            'start_date': start.isoformat(),
            'trends': trends,
            'statistics': cls._statistics(prices),
            'supplier_comparison': [
                {
                    'supplier_id': supplier_id,
                    'supplier_name': entry['supplier_name'],
                    'avg_price': _money(sum(entry['prices']) / len(entry['prices'])),
                    'latest_price': _money(entry['prices'][-1]),
                    'data_points': len(entry['prices']),
                }
                for supplier_id, entry in by_supplier.items()
            ],
        }

    @staticmethod
    def _statistics(prices):
        if not prices:
            return {
                'min_price': None,
                'max_price': None,
                'avg_price': None,
                'price_change_percent': None,
                'data_points': 0,
            }

        first, last = prices[0], prices[-1]
        change = ((last - first) / first * 100) if first else Decimal('0')
        return {
            'min_price': _money(min(prices)),
            'max_price': _money(max(prices)),
            'avg_price': _money(sum(prices) / len(prices)),
            'price_change_percent': _money(change),
            'data_points': len(prices),
        }
