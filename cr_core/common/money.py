# cr_core/common/money.py
"""
Integer-cents arithmetic.

Every amount in the pricing pipeline is an int number of cents. Fractional
intermediate values (percentages, divisions) are rounded once, half-up, back
to a whole cent.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value) -> int:
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_of(amount_cents: int, percent) -> int:
    """round_half_up(amount * percent / 100)"""
    return round_half_up(Decimal(amount_cents) * to_decimal(percent) / HUNDRED)


def apply_percent(amount_cents: int, percent) -> int:
    """amount * (1 + percent / 100), rounded to a cent."""
    return round_half_up(Decimal(amount_cents) * (Decimal("1") + to_decimal(percent) / HUNDRED))


def divide(amount_cents: int, parts: int) -> int:
    return round_half_up(Decimal(amount_cents) / Decimal(parts))


def clamp(value: int, lower: int, upper: int | None = None) -> int:
    if value < lower:
        return lower
    if upper is not None and value > upper:
        return upper
    return value
