# cr_core/pricing/engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional
from uuid import UUID

from django.conf import settings

from cr_core.common.money import apply_percent, percent_of, round_half_up, to_decimal
from cr_core.pricing.models import AdjustmentType, PricingTrigger, StackMode
from cr_core.pricing.selectors import active_pricing_rules

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS: Dict[str, Decimal] = {
    PricingTrigger.OCCUPANCY_HIGH.value: Decimal("80"),
    PricingTrigger.OCCUPANCY_LOW.value: Decimal("30"),
    PricingTrigger.DEMAND_SURGE.value: Decimal("75"),
    PricingTrigger.LAST_MINUTE.value: Decimal("7"),
    PricingTrigger.ADVANCE_BOOKING.value: Decimal("90"),
}

_SETTINGS_KEYS = {
    PricingTrigger.OCCUPANCY_HIGH.value: "OCCUPANCY_HIGH_PERCENT",
    PricingTrigger.OCCUPANCY_LOW.value: "OCCUPANCY_LOW_PERCENT",
    PricingTrigger.DEMAND_SURGE.value: "DEMAND_SURGE_SCORE",
    PricingTrigger.LAST_MINUTE.value: "LAST_MINUTE_DAYS",
    PricingTrigger.ADVANCE_BOOKING.value: "ADVANCE_BOOKING_DAYS",
}


@dataclass(frozen=True)
class BookingContext:
    occupancy_percent: Decimal = Decimal("0")
    lead_time_days: int = 0
    demand_score: int = 0
    arrival_date: Optional[date] = None
    site_class_id: Optional[UUID] = None
    nights: int = 1


@dataclass(frozen=True)
class AppliedAdjustment:
    rule_id: UUID
    name: str
    trigger: str
    adjustment_type: str
    adjustment_value: Decimal
    amount_cents: int

    def as_dict(self) -> dict:
        return {
            "rule_id": str(self.rule_id),
            "name": self.name,
            "trigger": str(self.trigger),
            "adjustment_type": str(self.adjustment_type),
            "adjustment_value": str(self.adjustment_value),
            "amount_cents": self.amount_cents,
        }


@dataclass(frozen=True)
class AdjustmentResult:
    base_total_cents: int
    adjusted_total_cents: int
    applied: tuple[AppliedAdjustment, ...]
    clamped: bool = False
    capped_at: Optional[str] = None

    @property
    def adjustments_cents(self) -> int:
        return self.adjusted_total_cents - self.base_total_cents


def default_thresholds() -> Dict[str, Decimal]:
    configured = getattr(settings, "CR_PRICING", {}) or {}
    out = dict(DEFAULT_THRESHOLDS)
    for trigger, key in _SETTINGS_KEYS.items():
        if key in configured:
            out[trigger] = to_decimal(configured[key])
    return out


def _threshold(rule, thresholds: Dict[str, Decimal]) -> Decimal:
    if rule.threshold is not None:
        return to_decimal(rule.threshold)
    return thresholds[str(rule.trigger)]


def trigger_matches(rule, context: BookingContext, thresholds: Dict[str, Decimal]) -> bool:
    trigger = rule.trigger
    if trigger == PricingTrigger.MANUAL:
        return True

    limit = _threshold(rule, thresholds)
    if trigger == PricingTrigger.OCCUPANCY_HIGH:
        return to_decimal(context.occupancy_percent) >= limit
    if trigger == PricingTrigger.OCCUPANCY_LOW:
        return to_decimal(context.occupancy_percent) <= limit
    if trigger == PricingTrigger.DEMAND_SURGE:
        return Decimal(context.demand_score) >= limit
    if trigger == PricingTrigger.LAST_MINUTE:
        return Decimal(context.lead_time_days) <= limit
    if trigger == PricingTrigger.ADVANCE_BOOKING:
        return Decimal(context.lead_time_days) >= limit
    return False


def rule_applies(rule, context: BookingContext, thresholds: Dict[str, Decimal]) -> bool:
    if not rule.is_active:
        return False
    if rule.site_class_id is not None and rule.site_class_id != context.site_class_id:
        return False
    if context.arrival_date is not None:
        if rule.starts_on is not None and context.arrival_date < rule.starts_on:
            return False
        if rule.ends_on is not None and context.arrival_date > rule.ends_on:
            return False
    return trigger_matches(rule, context, thresholds)


def order_rules(rules: Iterable) -> list:
    """Ascending priority; equal priorities fall back to ascending id."""
    return sorted(rules, key=lambda r: (r.priority, str(r.id)))


def _rule_amount(rule, base_total_cents: int) -> int:
    value = to_decimal(rule.adjustment_value)
    if rule.adjustment_type == AdjustmentType.PERCENT:
        return percent_of(base_total_cents, value)
    return round_half_up(value)


def stack_rules(rules: Iterable, base_total_cents: int) -> list:
    """
    Resolves stack modes over rules already in application order.

    Additive rules all count. Of the "max" rules only the one with the largest
    amount counts (first in order wins a tie). An "override" rule drops every
    rule collected before it and ends the walk.
    """
    counted: list = []
    best_max = None
    for rule in rules:
        mode = str(rule.stack_mode or StackMode.ADDITIVE)
        if mode == StackMode.OVERRIDE:
            return [rule]
        if mode == StackMode.MAX:
            if best_max is None or _rule_amount(rule, base_total_cents) > _rule_amount(best_max, base_total_cents):
                best_max = rule
            continue
        counted.append(rule)

    if best_max is not None:
        counted.append(best_max)
    return order_rules(counted)


def _rate_bounds(rules: Iterable, nights: int) -> tuple[Optional[int], Optional[int]]:
    floors = [r.min_rate_cents for r in rules if r.min_rate_cents is not None]
    ceilings = [r.max_rate_cents for r in rules if r.max_rate_cents is not None]
    nights = max(int(nights or 1), 1)
    floor = max(floors) * nights if floors else None
    ceiling = min(ceilings) * nights if ceilings else None
    return floor, ceiling


def apply_pricing_rules(
    *,
    base_total_cents: int,
    rules: Iterable,
    context: BookingContext,
    thresholds: Optional[Dict[str, Decimal]] = None,
) -> AdjustmentResult:
    """
    Composes every counted rule against the base total:

        adjusted = round_half_up(base * (1 + sum(percent) / 100)) + sum(flat)

    Rule order (priority, then id) decides stacking and the order of
    `applied`; it never changes the total of additive rules. Per-night rate
    caps of the counted rules are applied next, and a negative result is
    clamped to zero.
    """
    thresholds = thresholds or default_thresholds()
    base = int(base_total_cents)
    matching = [r for r in order_rules(rules) if rule_applies(r, context, thresholds)]
    counted = stack_rules(matching, base)

    percent_sum = Decimal("0")
    flat_sum = 0
    applied: list[AppliedAdjustment] = []
    for rule in counted:
        value = to_decimal(rule.adjustment_value)
        if rule.adjustment_type == AdjustmentType.PERCENT:
            percent_sum += value
        else:
            flat_sum += round_half_up(value)
        applied.append(
            AppliedAdjustment(
                rule_id=rule.id,
                name=rule.name,
                trigger=rule.trigger,
                adjustment_type=rule.adjustment_type,
                adjustment_value=value,
                amount_cents=_rule_amount(rule, base),
            )
        )

    total = apply_percent(base, percent_sum) + flat_sum

    capped_at = None
    floor, ceiling = _rate_bounds(counted, context.nights)
    if floor is not None and total < floor:
        total, capped_at = floor, "min"
    if ceiling is not None and total > ceiling:
        total, capped_at = ceiling, "max"

    clamped = total < 0
    if clamped:
        logger.warning(
            "Dynamic pricing produced a negative total (%s cents from base %s); clamping to 0. rules=%s",
            total,
            base_total_cents,
            [str(a.rule_id) for a in applied],
        )
        total = 0

    return AdjustmentResult(
        base_total_cents=base,
        adjusted_total_cents=total,
        applied=tuple(applied),
        clamped=clamped,
        capped_at=capped_at,
    )



class DynamicPricingAdjuster:
    @staticmethod
    def adjust(*, campground_id: UUID, base_total_cents: int, context: BookingContext) -> AdjustmentResult:
        return apply_pricing_rules(
            base_total_cents=base_total_cents,
            rules=active_pricing_rules(campground_id=campground_id),
            context=context,
        )
