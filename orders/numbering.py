"""Human-readable, date-scoped order numbers: ``FN-YYYYMMDD-NNNNNN``.

The next number is derived from the highest number already stored for the
day, so uniqueness is ultimately enforced by the unique index on
``Order.order_number``; see :func:`orders.services.create_order` for the
retry loop around it.
"""

import secrets
import time

from django.conf import settings
from django.utils import timezone

from .models import Order

SEQUENCE_WIDTH = 6

# Matches only well-formed sequential numbers, never fallback ones.
_SEQUENTIAL_SUFFIX_RE = r'-[0-9]{8}-[0-9]{6}$'


def order_number_prefix(day) -> str:
    code = getattr(settings, 'ORDER_NUMBER_PREFIX', 'FN')
    return f"{code}-{day:%Y%m%d}-"


def format_order_number(day, sequence: int) -> str:
    return f"{order_number_prefix(day)}{sequence:0{SEQUENCE_WIDTH}d}"


def parse_sequence(order_number: str) -> int:
    return int(order_number.rsplit('-', 1)[1])


def last_order_number(day) -> str | None:
    # Fixed-width padding makes the lexicographic max the numeric max.
    return (
        Order.objects.filter(
            order_number__startswith=order_number_prefix(day),
            order_number__regex=_SEQUENTIAL_SUFFIX_RE,
        )
        .order_by('-order_number')
        .values_list('order_number', flat=True)
        .first()
    )


def next_order_number(day=None) -> str:
    """Return the next sequential number for ``day`` (server-local today by default)."""
    day = day or timezone.localdate()
    last = last_order_number(day)
    sequence = parse_sequence(last) + 1 if last else 1
    return format_order_number(day, sequence)


def fallback_order_number(day=None) -> str:
    """Timestamp-derived number used when sequential allocation keeps colliding.

    Not sequential, and longer than a sequential number so it is never
    picked up by :func:`last_order_number`.
    """
    day = day or timezone.localdate()
    millis = int(time.time() * 1000) % 10 ** SEQUENCE_WIDTH
    return f"{order_number_prefix(day)}{millis:0{SEQUENCE_WIDTH}d}{secrets.token_hex(2).upper()}"
