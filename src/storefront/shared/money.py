"""Currency rounding."""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def to_money(amount) -> float:
    """Round ``amount`` half-up to whole cents.

    >>> to_money(10.005)
    10.01
    """
    return float(Decimal(str(amount or 0)).quantize(_CENT, rounding=ROUND_HALF_UP))
