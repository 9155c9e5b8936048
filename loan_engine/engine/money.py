"""Fixed-point helpers for currency and percentage arithmetic."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a feed value to ``Decimal`` without binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Decimal | int | float | str) -> Decimal:
    """Round to the currency minor unit, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent(part: Decimal | int, whole: Decimal | int) -> Decimal:
    """``part / whole * 100`` rounded to 2 places; 0 when ``whole`` is 0."""
    whole = to_decimal(whole)
    if whole == 0:
        return ZERO.quantize(CENT)
    return (to_decimal(part) / whole * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
