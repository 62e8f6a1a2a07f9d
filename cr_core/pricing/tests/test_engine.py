# cr_core/pricing/tests/test_engine.py
import logging
import uuid
from datetime import date
from decimal import Decimal

import pytest

from cr_core.pricing.engine import BookingContext, apply_pricing_rules, default_thresholds, order_rules
from cr_core.pricing.models import AdjustmentType, PricingRule, PricingTrigger, StackMode


def _rule(
    *,
    trigger=PricingTrigger.MANUAL,
    adjustment_type=AdjustmentType.PERCENT,
    value="10",
    priority=100,
    rule_id=None,
    **extra,
):
    is_active = extra.pop("is_active", True)
    return PricingRule(
        id=rule_id or uuid.uuid4(),
        campground_id=uuid.uuid4(),
        name=f"{trigger} {value}",
        trigger=trigger,
        adjustment_type=adjustment_type,
        adjustment_value=Decimal(value),
        priority=priority,
        is_active=is_active,
        **extra,
    )


def test_occupancy_high_adds_ten_percent():
    rule = _rule(trigger=PricingTrigger.OCCUPANCY_HIGH, value="10")
    ctx = BookingContext(occupancy_percent=Decimal("85"))

    result = apply_pricing_rules(base_total_cents=15000, rules=[rule], context=ctx)

    assert result.adjusted_total_cents == 16500
    assert result.adjustments_cents == 1500
    assert [a.amount_cents for a in result.applied] == [1500]


def test_occupancy_high_below_threshold_does_not_apply():
    rule = _rule(trigger=PricingTrigger.OCCUPANCY_HIGH, value="10")

    result = apply_pricing_rules(
        base_total_cents=15000, rules=[rule], context=BookingContext(occupancy_percent=Decimal("40"))
    )

    assert result.adjusted_total_cents == 15000
    assert result.applied == ()


def test_rule_threshold_overrides_default():
    rule = _rule(trigger=PricingTrigger.OCCUPANCY_HIGH, value="10", threshold=Decimal("30"))

    result = apply_pricing_rules(
        base_total_cents=10000, rules=[rule], context=BookingContext(occupancy_percent=Decimal("40"))
    )

    assert result.adjusted_total_cents == 11000


@pytest.mark.parametrize(
    "trigger,ctx,expected",
    [
        (PricingTrigger.OCCUPANCY_LOW, BookingContext(occupancy_percent=Decimal("30")), True),
        (PricingTrigger.OCCUPANCY_LOW, BookingContext(occupancy_percent=Decimal("31")), False),
        (PricingTrigger.DEMAND_SURGE, BookingContext(demand_score=75), True),
        (PricingTrigger.DEMAND_SURGE, BookingContext(demand_score=74), False),
        (PricingTrigger.LAST_MINUTE, BookingContext(lead_time_days=7), True),
        (PricingTrigger.LAST_MINUTE, BookingContext(lead_time_days=8), False),
        (PricingTrigger.ADVANCE_BOOKING, BookingContext(lead_time_days=90), True),
        (PricingTrigger.ADVANCE_BOOKING, BookingContext(lead_time_days=89), False),
        (PricingTrigger.MANUAL, BookingContext(), True),
    ],
)
def test_trigger_boundaries(trigger, ctx, expected):
    rule = _rule(trigger=trigger, adjustment_type=AdjustmentType.FLAT, value="100")

    result = apply_pricing_rules(base_total_cents=1000, rules=[rule], context=ctx)

    assert (result.adjusted_total_cents == 1100) is expected


def test_percent_rules_sum_against_base_before_flat():
    flat = _rule(adjustment_type=AdjustmentType.FLAT, value="1000", priority=1)
    first = _rule(value="10", priority=2)
    second = _rule(value="10", priority=3)

    result = apply_pricing_rules(base_total_cents=10000, rules=[second, first, flat], context=BookingContext())

    # 10000 * (1 + 20/100) + 1000
    assert result.adjusted_total_cents == 13000
    assert [a.rule_id for a in result.applied] == [flat.id, first.id, second.id]
    assert [a.amount_cents for a in result.applied] == [1000, 1000, 1000]


def test_percent_sum_is_rounded_once():
    rules = [_rule(value="0.5", priority=1), _rule(value="0.5", priority=2)]

    # 101 * 1.01 = 102.01; rounding each 0.5% step separately would give 103
    result = apply_pricing_rules(base_total_cents=101, rules=rules, context=BookingContext())

    assert result.adjusted_total_cents == 102



def test_equal_priority_applies_lowest_id_first():
    a = _rule(value="50", rule_id=uuid.UUID("00000000-0000-0000-0000-000000000001"))
    b = _rule(adjustment_type=AdjustmentType.FLAT, value="1000", rule_id=uuid.UUID("00000000-0000-0000-0000-000000000002"))

    forward = apply_pricing_rules(base_total_cents=1000, rules=[a, b], context=BookingContext())
    backward = apply_pricing_rules(base_total_cents=1000, rules=[b, a], context=BookingContext())

    # percent first: 1000 * 1.5 + 1000
    assert forward.adjusted_total_cents == backward.adjusted_total_cents == 2500
    assert [r.id for r in order_rules([b, a])] == [a.id, b.id]


def test_percent_rounds_half_up():
    rule = _rule(value="5")
    result = apply_pricing_rules(base_total_cents=1010, rules=[rule], context=BookingContext())
    # 1010 * 1.05 = 1060.5
    assert result.adjusted_total_cents == 1061


def test_negative_total_is_clamped_with_warning(caplog):
    rule = _rule(adjustment_type=AdjustmentType.FLAT, value="-20000")

    with caplog.at_level(logging.WARNING, logger="cr_core.pricing.engine"):
        result = apply_pricing_rules(base_total_cents=15000, rules=[rule], context=BookingContext())

    assert result.adjusted_total_cents == 0
    assert result.clamped is True
    assert any("clamping to 0" in r.getMessage() for r in caplog.records)


def test_inactive_and_out_of_window_rules_are_skipped():
    class_id = uuid.uuid4()
    inactive = _rule(value="50", is_active=False)
    other_class = _rule(value="50", site_class_id=uuid.uuid4())
    expired = _rule(value="50", ends_on=date(2030, 6, 30))
    in_window = _rule(value="10", site_class_id=class_id, starts_on=date(2030, 7, 1), ends_on=date(2030, 7, 31))

    result = apply_pricing_rules(
        base_total_cents=10000,
        rules=[inactive, other_class, expired, in_window],
        context=BookingContext(arrival_date=date(2030, 7, 10), site_class_id=class_id),
    )

    assert [a.rule_id for a in result.applied] == [in_window.id]
    assert result.adjusted_total_cents == 11000


def test_default_thresholds_follow_settings(settings):
    settings.CR_PRICING = {"OCCUPANCY_HIGH_PERCENT": 95}

    thresholds = default_thresholds()

    assert thresholds["occupancy_high"] == Decimal("95")
    assert thresholds["last_minute"] == Decimal("7")


def test_min_rate_cap_raises_total():
    rule = _rule(adjustment_type=AdjustmentType.FLAT, value="-4000", min_rate_cents=3000)

    result = apply_pricing_rules(base_total_cents=5000, rules=[rule], context=BookingContext())

    assert result.adjusted_total_cents == 3000
    assert result.capped_at == "min"


def test_max_rate_cap_lowers_total():
    rule = _rule(adjustment_type=AdjustmentType.FLAT, value="10000", max_rate_cents=8000)

    result = apply_pricing_rules(base_total_cents=5000, rules=[rule], context=BookingContext())

    assert result.adjusted_total_cents == 8000
    assert result.capped_at == "max"


def test_rate_caps_are_per_night():
    rule = _rule(adjustment_type=AdjustmentType.FLAT, value="10000", max_rate_cents=8000)

    result = apply_pricing_rules(base_total_cents=15000, rules=[rule], context=BookingContext(nights=3))

    assert result.adjusted_total_cents == 24000
    assert result.capped_at is None


def test_max_stack_mode_keeps_largest_adjustment_only():
    small = _rule(adjustment_type=AdjustmentType.FLAT, value="500", priority=1, stack_mode=StackMode.MAX)
    large = _rule(adjustment_type=AdjustmentType.FLAT, value="1500", priority=2, stack_mode=StackMode.MAX)

    result = apply_pricing_rules(base_total_cents=5000, rules=[small, large], context=BookingContext())

    assert result.adjusted_total_cents == 6500
    assert [a.rule_id for a in result.applied] == [large.id]


def test_max_stack_mode_combines_with_additive_rules():
    additive = _rule(value="10", priority=1)
    small = _rule(adjustment_type=AdjustmentType.FLAT, value="500", priority=2, stack_mode=StackMode.MAX)
    large = _rule(value="20", priority=3, stack_mode=StackMode.MAX)

    result = apply_pricing_rules(base_total_cents=10000, rules=[additive, small, large], context=BookingContext())

    # 10000 * (1 + 30/100)
    assert result.adjusted_total_cents == 13000
    assert [a.rule_id for a in result.applied] == [additive.id, large.id]


def test_override_rule_stops_later_rules():
    earlier = _rule(value="50", priority=1)
    override = _rule(adjustment_type=AdjustmentType.FLAT, value="2000", priority=2, stack_mode=StackMode.OVERRIDE)
    later = _rule(adjustment_type=AdjustmentType.FLAT, value="-500", priority=3)

    result = apply_pricing_rules(base_total_cents=5000, rules=[later, override, earlier], context=BookingContext())

    assert result.adjusted_total_cents == 7000
    assert [a.rule_id for a in result.applied] == [override.id]
