from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

FOUR_PLACES = Decimal("0.0001")
ZERO = Decimal("0")


def q4(x: Decimal) -> Decimal:
    """Round to exactly 4 fractional digits, half-up."""
    return x.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def to_decimal(x: Any) -> Optional[Decimal]:
    if x is None:
        return None
    if isinstance(x, Decimal):
        return x
    if isinstance(x, float):
        # go through str so 0.1 stays 0.1
        x = repr(x)
    try:
        return Decimal(str(x).strip())
    except (InvalidOperation, ValueError):
        return None


def decimal_sum(values) -> Decimal:
    return sum(values, ZERO)


def safe_div_q4(n: Decimal, d: Decimal) -> Decimal:
    """n / d rounded to 4 places, or 0 when d is not positive."""
    if d is None or d <= 0:
        return q4(ZERO)
    return q4(n / d)
