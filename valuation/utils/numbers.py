"""
Guarded Decimal arithmetic.

Every calculation in the engine goes through these helpers so that malformed
input (NaN, infinities, negative or zero denominators) degrades to a neutral
value instead of raising or leaking NaN into aggregates.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# ISO 4217 currencies whose minor unit is not two decimals.
CURRENCY_MINOR_UNITS: dict[str, int] = {
    "BHD": 3,
    "CLP": 0,
    "ISK": 0,
    "JOD": 3,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
    "VND": 0,
}


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a UI-supplied number to Decimal; ``None`` stays ``None``.

    Floats go through ``str`` so 0.1 becomes Decimal("0.1"), not its binary
    expansion. Unparseable input becomes Decimal("NaN").
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("NaN")


def is_usable(value: Decimal | None) -> bool:
    return value is not None and value.is_finite()


def non_negative(value: Decimal | None) -> Decimal:
    """Return ``value`` when finite and >= 0, otherwise zero."""
    if is_usable(value) and value >= 0:
        return value
    return ZERO


def safe_divide(numerator: Decimal, denominator: Decimal | None) -> Decimal:
    if not is_usable(numerator) or not is_usable(denominator) or denominator == 0:
        return ZERO
    return numerator / denominator


def safe_pct(part: Decimal, whole: Decimal | None) -> Decimal:
    """``part`` as a percentage of ``whole``; zero when ``whole`` is not positive."""
    if not is_usable(whole) or whole <= 0 or not is_usable(part):
        return ZERO
    return part / whole * HUNDRED


def pct_of(percent: Decimal, total: Decimal) -> Decimal:
    """Amount that ``percent`` (0-100 scale) represents of ``total``."""
    return percent * total / HUNDRED


def minor_unit(currency: str | None) -> int:
    return CURRENCY_MINOR_UNITS.get((currency or "").upper(), 2)


def round_money(value: Decimal, currency: str | None = None) -> Decimal:
    """Round to the currency's minor unit (half up)."""
    if not is_usable(value):
        return ZERO
    exponent = Decimal(1).scaleb(-minor_unit(currency))
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def round_percent(value: Decimal) -> Decimal:
    if not is_usable(value):
        return ZERO
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
