"""Money arithmetic.

Amounts are persisted as floats, but every sum and product is computed in
``Decimal`` and quantized to paise/cents so repeated additions never drift.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    # str() first so 0.1 becomes Decimal("0.1"), not its binary expansion
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    return (to_decimal(unit_price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def total(amounts) -> Decimal:
    return sum((to_decimal(a) for a in amounts), Decimal("0.00"))


def as_float(amount: Decimal) -> float:
    return float(amount.quantize(CENT, rounding=ROUND_HALF_UP))
