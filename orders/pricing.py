"""GST pricing for a set of order lines.

Pure functions: no database access and no rounding until the final values,
which are quantized to paise with ROUND_HALF_UP.

    >>> price_lines([(Decimal('25.00'), 2), (Decimal('45.00'), 2)], 12).grand_total
    Decimal('156.80')
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str() so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value) -> Decimal:
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return quantize_money(to_decimal(unit_price) * int(quantity))


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    gst_amount: Decimal
    cgst: Decimal
    sgst: Decimal
    grand_total: Decimal

    def as_dict(self):
        return asdict(self)


def price_lines(lines, tax_rate_percent=None) -> PriceBreakdown:
    """Price ``(unit_price, quantity)`` pairs at ``tax_rate_percent``.

    A missing or non-positive rate means no tax. The GST amount is split into
    two equal halves (CGST/SGST); each half is rounded on its own.
    """
    subtotal = ZERO
    for unit_price, quantity in lines:
        subtotal += to_decimal(unit_price) * int(quantity)

    rate = ZERO if tax_rate_percent is None else to_decimal(tax_rate_percent)
    if rate > ZERO:
        gst = subtotal * rate / HUNDRED
    else:
        gst = ZERO
    half = gst / 2
    subtotal_q = quantize_money(subtotal)
    gst_q = quantize_money(gst)

    return PriceBreakdown(
        subtotal=subtotal_q,
        gst_amount=gst_q,
        cgst=quantize_money(half),
        sgst=quantize_money(half),
        grand_total=subtotal_q + gst_q,
    )
