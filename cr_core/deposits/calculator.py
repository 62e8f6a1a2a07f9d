# cr_core/deposits/calculator.py
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from cr_core.common.api.exceptions import InvalidDepositConfig
from cr_core.common.money import clamp, divide, percent_of, to_decimal
from cr_core.deposits.models import DepositApplyTo, DepositRule


def validate_deposit_config(config) -> None:
    """Raises InvalidDepositConfig when the fields the rule relies on are missing or out of range."""
    rule = config.rule
    if rule not in DepositRule.values:
        raise InvalidDepositConfig(f"Unknown deposit rule '{rule}'.", rule=str(rule))
    if config.apply_to not in DepositApplyTo.values:
        raise InvalidDepositConfig(f"Unknown deposit base '{config.apply_to}'.", apply_to=str(config.apply_to))

    if rule == DepositRule.PERCENT:
        if config.percentage is None:
            raise InvalidDepositConfig("Percent deposit requires a percentage.", rule=str(rule))
        pct = to_decimal(config.percentage)
        if pct < 0 or pct > Decimal("100"):
            raise InvalidDepositConfig("Deposit percentage must be between 0 and 100.", percentage=str(pct))

    if rule == DepositRule.FLAT:
        if config.flat_cents is None:
            raise InvalidDepositConfig("Flat deposit requires flat_cents.", rule=str(rule))
        if int(config.flat_cents) < 0:
            raise InvalidDepositConfig("Flat deposit cannot be negative.", flat_cents=int(config.flat_cents))

    if config.min_cents is not None and config.max_cents is not None and config.max_cents < config.min_cents:
        raise InvalidDepositConfig(
            "Deposit max_cents must be >= min_cents.",
            min_cents=int(config.min_cents),
            max_cents=int(config.max_cents),
        )


def calculate_deposit(
    *,
    total_cents: int,
    config=None,
    first_night_cents: Optional[int] = None,
    lodging_cents: Optional[int] = None,
    nights: Optional[int] = None,
) -> int:
    """
    Deposit due at booking, always within [0, total_cents].

    With apply_to=lodging_only and a known lodging amount, percent deposits
    are taken from lodging alone and first_night is lodging spread evenly
    over the nights. Otherwise percent uses the grand total and first_night
    the first night's rate, falling back to 0 when that rate is unknown.
    """
    if config is None or config.rule == DepositRule.NONE:
        return 0

    validate_deposit_config(config)
    total = max(0, int(total_cents))
    lodging_base = config.apply_to == DepositApplyTo.LODGING_ONLY and lodging_cents is not None

    if config.rule == DepositRule.PERCENT:
        base = max(0, int(lodging_cents)) if lodging_base else total
        amount = percent_of(base, config.percentage)
    elif config.rule == DepositRule.FLAT:
        amount = int(config.flat_cents)
    elif lodging_base and nights:
        amount = divide(max(0, int(lodging_cents)), int(nights))
    else:
        amount = int(first_night_cents or 0)

    if config.min_cents is not None:
        amount = max(amount, int(config.min_cents))
    if config.max_cents is not None:
        amount = min(amount, int(config.max_cents))

    return clamp(amount, 0, total)
