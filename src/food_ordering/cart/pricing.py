"""Monetary rounding for cart prices.

All amounts are rounded to cents with ROUND_HALF_UP. Protean stores them in
Float fields, so arithmetic goes through Decimal built from the string form
of the float to avoid binary representation artifacts (9.99 * 3 == 29.97).
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Convert an int, float, str or Decimal to a two-decimal Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary amount: {value!r}") from exc

    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")

    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(unit_price, quantity: int) -> Decimal:
    """Price of a line: round2(unit_price * quantity), half up."""
    unit = unit_price if isinstance(unit_price, Decimal) else Decimal(str(unit_price))
    return to_money(unit * quantity)


def money_sum(amounts) -> Decimal:
    return sum((to_money(amount) for amount in amounts), ZERO)
