"""Sales aggregation over completed orders.

All sums are kept at full precision here; rounding to two places happens in
the report serializers.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db.models import Avg, Count, DateField, Sum
from django.db.models.functions import Trunc
from django.utils import timezone

from orders.models import Order, OrderLine

ZERO = Decimal('0')

GROUP_BY_CHOICES = ('day', 'week', 'month')


def start_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def end_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.max))


def resolve_date_window(from_date=None, to_date=None, default_days=0):
    """Turn optional dates into an inclusive ``(start, end, from_date, to_date)`` window.

    Missing bounds default to today in the current time zone, with the start
    moved back ``default_days`` days.
    """
    today = timezone.localdate()
    to_date = to_date or today
    from_date = from_date or (today - timedelta(days=default_days))
    return start_of_day(from_date), end_of_day(to_date), from_date, to_date


def resolve_datetime_window(start=None, end=None):
    """Default either side of a datetime window to the bounds of today."""
    today = timezone.localdate()
    return start or start_of_day(today), end or end_of_day(today)


def completed_orders(owner, start, end, *, psg_only=False):
    qs = Order.objects.filter(
        owner=owner,
        status=Order.Status.COMPLETED,
        created_at__gte=start,
        created_at__lte=end,
    )
    if psg_only:
        qs = qs.filter(psg_marked=True)
    return qs


@dataclass
class OrderContribution:
    order_id: int
    order_number: str
    quantity: int
    amount: Decimal
    order_date: datetime


@dataclass
class ItemAggregate:
    """Running totals for one item across the lines in scope."""

    item_id: int
    item_name: str
    total_quantity: int = 0
    total_amount: Decimal = ZERO
    order_ids: set = field(default_factory=set)
    unit_price_sum: Decimal = ZERO
    line_count: int = 0
    orders: list = field(default_factory=list)

    @property
    def order_count(self):
        return len(self.order_ids)

    @property
    def average_price(self):
        # plain mean of line unit prices, not weighted by quantity
        if not self.line_count:
            return ZERO
        return self.unit_price_sum / self.line_count

    def add(self, line, *, track_orders=False):
        self.total_quantity += line.quantity
        self.total_amount += line.line_total
        self.order_ids.add(line.order_id)
        self.unit_price_sum += line.unit_price
        self.line_count += 1
        if track_orders:
            self.orders.append(OrderContribution(
                order_id=line.order_id,
                order_number=line.order.order_number,
                quantity=line.quantity,
                amount=line.line_total,
                order_date=line.order.created_at,
            ))


def _lines_in_scope(owner, start, end, *, completed_only=True, psg_only=False, item_id=None):
    qs = OrderLine.objects.filter(
        order__owner=owner,
        order__created_at__gte=start,
        order__created_at__lte=end,
    )
    if completed_only:
        qs = qs.filter(order__status=Order.Status.COMPLETED)
    if psg_only:
        qs = qs.filter(order__psg_marked=True)
    if item_id is not None:
        qs = qs.filter(item_id=item_id)
    return qs.select_related('item', 'order').order_by('order__created_at', 'order_id', 'id')


def _accumulate(lines, *, track_orders=False):
    by_item = {}
    for line in lines:
        aggregate = by_item.get(line.item_id)
        if aggregate is None:
            aggregate = by_item[line.item_id] = ItemAggregate(item_id=line.item_id, item_name=line.item.name)
        aggregate.add(line, track_orders=track_orders)
    # sorted() is stable, so ties keep first-seen order
    return sorted(by_item.values(), key=lambda a: a.total_quantity, reverse=True)


def aggregate_items(owner, start, end, completed_only=True, item_id=None):
    """Per-item quantity, amount, order count and mean unit price, best sellers first."""
    return _accumulate(_lines_in_scope(owner, start, end, completed_only=completed_only, item_id=item_id))


def summarize_items(aggregates):
    return {
        'total_items': len(aggregates),
        'total_quantity': sum(a.total_quantity for a in aggregates),
        'total_amount': sum((a.total_amount for a in aggregates), ZERO),
    }


def aggregate_psg(owner, start, end):
    """Item aggregation limited to PSG-marked completed orders.

    Each item also carries the orders it appeared in, oldest first.
    ``summary.total_orders`` counts every PSG order in the window.
    """
    items = _accumulate(_lines_in_scope(owner, start, end, psg_only=True), track_orders=True)
    summary = summarize_items(items)
    summary['total_orders'] = completed_orders(owner, start, end, psg_only=True).count()
    return {'items': items, 'summary': summary}


def top_selling_items(owner, start, end, limit=10):
    return aggregate_items(owner, start, end)[:limit]


def order_summary(orders):
    """Totals and per payment method breakdown for an order queryset."""
    totals = orders.aggregate(
        total_orders=Count('id'),
        total_amount=Sum('grand_total'),
        total_gst=Sum('gst_amount'),
        total_subtotal=Sum('subtotal'),
    )
    for key in ('total_amount', 'total_gst', 'total_subtotal'):
        totals[key] = totals[key] or ZERO

    breakdown = (
        orders.order_by()
        .values('payment_method')
        .annotate(count=Count('id'), amount=Sum('grand_total'))
        .order_by('payment_method')
    )
    return totals, list(breakdown)


def daily_totals(owner, start, end, group_by='day'):
    """Completed order totals bucketed by day, ISO week (Monday) or month."""
    if group_by not in GROUP_BY_CHOICES:
        raise ValueError(f"group_by must be one of {', '.join(GROUP_BY_CHOICES)}")

    return list(
        completed_orders(owner, start, end)
        .order_by()
        .annotate(period=Trunc('created_at', group_by, output_field=DateField()))
        .values('period')
        .annotate(
            order_count=Count('id'),
            total_amount=Sum('grand_total'),
            subtotal=Sum('subtotal'),
            gst_amount=Sum('gst_amount'),
            average_order_value=Avg('grand_total'),
        )
        .order_by('period')
    )


@dataclass
class PSGItemDetails:
    item: object
    total_quantity: int = 0
    total_amount: Decimal = ZERO
    order_count: int = 0
    orders: list = field(default_factory=list)

    @property
    def average_quantity(self):
        if not self.order_count:
            return ZERO
        return Decimal(self.total_quantity) / self.order_count


def psg_item_details(owner, item, start, end):
    """Statistics for one item within PSG orders, newest order first."""
    lines = (
        _lines_in_scope(owner, start, end, psg_only=True, item_id=item.id)
        .order_by('-order__created_at', '-order_id', 'id')
    )
    details = PSGItemDetails(item=item)
    order_ids = set()
    for line in lines:
        details.total_quantity += line.quantity
        details.total_amount += line.line_total
        order_ids.add(line.order_id)
        details.orders.append({
            'order_id': line.order_id,
            'order_number': line.order.order_number,
            'quantity': line.quantity,
            'unit_price': line.unit_price,
            'line_total': line.line_total,
            'order_date': line.order.created_at,
            'payment_method': line.order.payment_method,
        })
    details.order_count = len(order_ids)
    return details
