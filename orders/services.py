"""Order lifecycle: create, edit, delete and print-marking of bills.

Each operation validates its input, resolves the referenced items, prices the
lines and writes the order and its lines inside a single transaction, so a
failure at any step leaves nothing behind.
"""

import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from accounts.services import get_tax_rate
from items.services import resolve_items

from .exceptions import (
    AllocationExhausted,
    InvalidItemReference,
    InvalidStatusTransition,
    NotDeletable,
    OrderNotFound,
    PaymentMethodRequired,
)
from .models import Order, OrderLine
from .numbering import fallback_order_number, next_order_number
from .pricing import line_total, price_lines

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ('lines', 'customer_phone', 'payment_method', 'status', 'psg_marked')


def _positive_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
        return value if value >= 1 else None
    return None


def normalize_lines(lines):
    """Validate ``[{'item_id': .., 'quantity': ..}, ...]`` into ``[(item_id, qty)]``."""
    if not lines:
        raise ValidationError({'lines': ['At least one item is required.']})

    normalized = []
    errors = {}
    for index, line in enumerate(lines):
        if not isinstance(line, dict):
            errors[index] = ['Each line must be an object with item_id and quantity.']
            continue
        item_id = _positive_int(line.get('item_id'))
        quantity = _positive_int(line.get('quantity'))
        if item_id is None:
            errors[index] = ['Invalid item ID.']
        elif quantity is None:
            errors[index] = ['Quantity must be at least 1.']
        else:
            normalized.append((item_id, quantity))

    if errors:
        raise ValidationError({'lines': errors})
    return normalized


def _validate_status(value):
    if value not in Order.Status.values:
        raise ValidationError({'status': ['Status must be either draft or completed.']})


def _validate_payment_method(value):
    if value is not None and value not in Order.PaymentMethod.values:
        raise ValidationError({'payment_method': ['Payment method must be either cash or online.']})


def _require_payment_method(status, payment_method):
    if status == Order.Status.COMPLETED and not payment_method:
        raise PaymentMethodRequired()


def _build_lines(owner, lines):
    """Resolve items and snapshot their current prices into unsaved lines."""
    requested = [item_id for item_id, _ in lines]
    if len(set(requested)) != len(requested):
        raise InvalidItemReference(detail='Each item may appear only once per order.')

    items = resolve_items(owner, requested)
    missing = sorted({item_id for item_id, _ in lines} - items.keys())
    if missing:
        raise InvalidItemReference(
            detail=f"One or more items not found or inactive: {', '.join(str(i) for i in missing)}."
        )

    return [
        OrderLine(
            item=items[item_id],
            quantity=quantity,
            unit_price=items[item_id].price,
            line_total=line_total(items[item_id].price, quantity),
        )
        for item_id, quantity in lines
    ]


def _apply_pricing(order, order_lines, tax_rate):
    breakdown = price_lines(((line.unit_price, line.quantity) for line in order_lines), tax_rate)
    order.gst_rate = tax_rate
    order.subtotal = breakdown.subtotal
    order.gst_amount = breakdown.gst_amount
    order.cgst = breakdown.cgst
    order.sgst = breakdown.sgst
    order.grand_total = breakdown.grand_total


def _try_insert(order) -> bool:
    """Insert ``order``; return False only if its order number is already taken."""
    try:
        with transaction.atomic():
            order.save(force_insert=True)
    except IntegrityError:
        order.pk = None
        if not Order.objects.filter(order_number=order.order_number).exists():
            raise
        return False
    return True


def _insert_with_order_number(order):
    """Assign the next order number and insert, retrying on collisions.

    After ``ORDER_NUMBER_MAX_ATTEMPTS`` collisions a timestamp-derived number
    is tried once before giving up with :class:`AllocationExhausted`.
    """
    today = timezone.localdate()
    attempts = max(1, int(getattr(settings, 'ORDER_NUMBER_MAX_ATTEMPTS', 5)))

    for attempt in range(1, attempts + 1):
        order.order_number = next_order_number(today)
        if _try_insert(order):
            return
        logger.info('Order number %s already taken (attempt %d/%d)', order.order_number, attempt, attempts)

    order.order_number = fallback_order_number(today)
    logger.warning('Sequential order numbers kept colliding for %s; using fallback %s', today, order.order_number)
    if _try_insert(order):
        return

    logger.error('Could not allocate an order number for user %s', order.owner_id)
    raise AllocationExhausted()


def get_order(order_id, owner, *, for_update=False):
    """Load an order owned by ``owner`` or raise :class:`OrderNotFound`."""
    try:
        order_id = int(order_id)
    except (TypeError, ValueError):
        raise OrderNotFound()

    qs = Order.objects.filter(owner=owner)
    if for_update:
        qs = qs.select_for_update()
    order = qs.filter(pk=order_id).first()
    if order is None:
        raise OrderNotFound()
    return order


def create_order(owner, lines, customer_phone=None, payment_method=None,
                 status=Order.Status.DRAFT, psg_marked=False):
    """Create a draft or completed order with freshly priced lines."""
    normalized = normalize_lines(lines)
    _validate_status(status)
    _validate_payment_method(payment_method)
    if not isinstance(psg_marked, bool):
        raise ValidationError({'psg_marked': ['PSG marked must be a boolean.']})

    with transaction.atomic():
        order_lines = _build_lines(owner, normalized)
        _require_payment_method(status, payment_method)
        tax_rate = get_tax_rate(owner)

        order = Order(
            owner=owner,
            customer_phone=customer_phone or None,
            status=status,
            payment_method=payment_method or None,
            psg_marked=psg_marked,
        )
        _apply_pricing(order, order_lines, tax_rate)
        _insert_with_order_number(order)

        for line in order_lines:
            line.order = order
        OrderLine.objects.bulk_create(order_lines)

    logger.info('Order %s created (%s, %d lines, total %s)', order.order_number, order.status, len(order_lines), order.grand_total)
    return order


def update_order(order_id, owner, patch):
    """Apply a partial update to an order.

    Keys absent from ``patch`` are left untouched. When ``lines`` is present
    the old lines are deleted and the new ones inserted and re-priced at the
    owner's current GST rate. This applies to completed orders as well.
    """
    patch = dict(patch or {})
    unknown = sorted(set(patch) - set(PATCHABLE_FIELDS))
    if unknown:
        raise ValidationError({field: ['Unknown field.'] for field in unknown})

    new_lines = normalize_lines(patch['lines']) if 'lines' in patch else None
    if 'status' in patch:
        _validate_status(patch['status'])
    if 'payment_method' in patch:
        _validate_payment_method(patch['payment_method'])
    if 'psg_marked' in patch and not isinstance(patch['psg_marked'], bool):
        raise ValidationError({'psg_marked': ['PSG marked must be a boolean.']})

    with transaction.atomic():
        order = get_order(order_id, owner, for_update=True)

        status = patch.get('status', order.status)
        if order.is_completed and status != Order.Status.COMPLETED:
            raise InvalidStatusTransition()
        payment_method = patch['payment_method'] if 'payment_method' in patch else order.payment_method
        _require_payment_method(status, payment_method)

        if new_lines is not None:
            order_lines = _build_lines(owner, new_lines)
            _apply_pricing(order, order_lines, get_tax_rate(owner))
            order.lines.all().delete()
            for line in order_lines:
                line.order = order
            OrderLine.objects.bulk_create(order_lines)

        if 'customer_phone' in patch:
            order.customer_phone = patch['customer_phone'] or None
        if 'psg_marked' in patch:
            order.psg_marked = patch['psg_marked']
        order.payment_method = payment_method or None
        order.status = status
        order.save()

    logger.info('Order %s updated (%s)', order.order_number, ', '.join(sorted(patch)) or 'no changes')
    return order


def delete_order(order_id, owner):
    """Delete a draft order and its lines."""
    with transaction.atomic():
        order = get_order(order_id, owner, for_update=True)
        if not order.is_draft:
            raise NotDeletable()
        order_number = order.order_number
        order.lines.all().delete()
        order.delete()

    logger.info('Draft order %s deleted', order_number)


def mark_printed(order_id, owner):
    """Flag a completed order as printed. Repeated calls refresh ``printed_at``."""
    with transaction.atomic():
        order = get_order(order_id, owner, for_update=True)
        if not order.is_completed:
            raise OrderNotFound(detail='Completed order not found.')
        order.printed = True
        order.printed_at = timezone.now()
        order.save(update_fields=['printed', 'printed_at', 'updated_at'])

    logger.info('Order %s marked as printed', order.order_number)
    return order
