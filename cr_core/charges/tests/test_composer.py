# cr_core/charges/tests/test_composer.py
import logging
import uuid
from decimal import Decimal

import pytest

from cr_core.campgrounds.models import Campground, PetFeeMode
from cr_core.charges.composer import LINE_TAX, Occupants, UpsellSelection, compose_fees_and_taxes
from cr_core.charges.models import TaxAppliesTo, TaxRule, TaxRuleKind, Upsell, UpsellPricingType
from cr_core.common.api.exceptions import TaxRuleMissing


def _campground(**fields):
    defaults = dict(
        id=uuid.uuid4(),
        name="Pine Lake",
        slug="pine-lake",
        included_adults=2,
        included_children=2,
        extra_adult_fee_cents=0,
        extra_child_fee_cents=0,
        pet_fee_cents=0,
        requires_tax=False,
    )
    defaults.update(fields)
    return Campground(**defaults)


def _tax(**fields):
    defaults = dict(
        id=uuid.uuid4(),
        campground_id=uuid.uuid4(),
        name="State lodging tax",
        kind=TaxRuleKind.PERCENTAGE,
        rate_percent=Decimal("10"),
        applies_to=TaxAppliesTo.ALL,
        is_active=True,
    )
    defaults.update(fields)
    return TaxRule(**defaults)


def _upsell(**fields):
    defaults = dict(
        id=uuid.uuid4(),
        campground_id=uuid.uuid4(),
        code="firewood",
        name="Firewood bundle",
        price_cents=800,
        pricing_type=UpsellPricingType.FLAT,
        is_active=True,
    )
    defaults.update(fields)
    return Upsell(**defaults)


def test_no_fees_no_tax_keeps_lodging_total():
    out = compose_fees_and_taxes(
        adjusted_total_cents=15000,
        nights=3,
        occupants=Occupants(adults=2),
        campground=_campground(),
    )

    assert out.subtotal_cents == 15000
    assert out.fees_cents == 0
    assert out.tax_cents == 0
    assert out.total_cents == 15000


def test_extra_people_and_per_night_pets():
    cg = _campground(
        extra_adult_fee_cents=1000,
        extra_child_fee_cents=500,
        pet_fee_cents=300,
        pet_fee_mode=PetFeeMode.PER_NIGHT,
    )

    out = compose_fees_and_taxes(
        adjusted_total_cents=15000,
        nights=3,
        occupants=Occupants(adults=4, children=3, pets=2),
        campground=cg,
    )

    # 2 extra adults, 1 extra child, 2 pets x 3 nights
    assert out.occupancy_fees_cents == 2 * 1000 + 500 + 2 * 300 * 3
    assert out.total_cents == 15000 + 4300


def test_pet_fee_per_stay_ignores_nights():
    cg = _campground(pet_fee_cents=1500, pet_fee_mode=PetFeeMode.PER_STAY)
    out = compose_fees_and_taxes(adjusted_total_cents=0, nights=5, occupants=Occupants(pets=1), campground=cg)
    assert out.fees_cents == 1500


def test_upsell_pricing_types():
    selections = [
        UpsellSelection(upsell=_upsell(code="wood", price_cents=800), quantity=2),
        UpsellSelection(upsell=_upsell(code="wifi", price_cents=300, pricing_type=UpsellPricingType.PER_NIGHT)),
        UpsellSelection(upsell=_upsell(code="kayak", price_cents=1000, pricing_type=UpsellPricingType.PER_PERSON)),
    ]

    out = compose_fees_and_taxes(
        adjusted_total_cents=10000,
        nights=3,
        occupants=Occupants(adults=2, children=1),
        campground=_campground(),
        upsells=selections,
    )

    assert out.upsells_cents == 1600 + 900 + 3000
    assert out.subtotal_cents == 10000 + 5500


def test_tax_is_exclusive_and_on_post_discount_subtotal():
    out = compose_fees_and_taxes(
        adjusted_total_cents=13500,
        nights=3,
        occupants=Occupants(),
        campground=_campground(requires_tax=True),
        tax_rules=[_tax(rate_percent=Decimal("8.25"))],
    )

    # 13500 * 8.25% = 1113.75
    assert out.tax_cents == 1114
    assert out.total_cents == 13500 + 1114
    assert [line.amount_cents for line in out.lines if line.kind == LINE_TAX] == [1114]


def test_tax_base_follows_applies_to():
    cg = _campground(pet_fee_cents=1000)
    rules = [
        _tax(name="a lodging", rate_percent=Decimal("10"), applies_to=TaxAppliesTo.LODGING),
        _tax(name="b fees", rate_percent=Decimal("50"), applies_to=TaxAppliesTo.FEES),
        _tax(name="c upsells", rate_percent=Decimal("100"), applies_to=TaxAppliesTo.UPSELLS),
        _tax(name="d flat", kind=TaxRuleKind.FLAT, rate_percent=None, amount_cents=250),
    ]

    out = compose_fees_and_taxes(
        adjusted_total_cents=10000,
        nights=2,
        occupants=Occupants(pets=1),
        campground=cg,
        upsells=[UpsellSelection(upsell=_upsell(price_cents=400))],
        tax_rules=rules,
    )

    assert out.tax_cents == 1000 + 500 + 400 + 250


def test_min_and_max_nights_limit_tax_rules():
    long_stay_exempt = _tax(max_nights=29)

    short = compose_fees_and_taxes(
        adjusted_total_cents=10000, nights=3, occupants=Occupants(), campground=_campground(), tax_rules=[long_stay_exempt]
    )
    long = compose_fees_and_taxes(
        adjusted_total_cents=10000, nights=30, occupants=Occupants(), campground=_campground(), tax_rules=[long_stay_exempt]
    )

    assert short.tax_cents == 1000
    assert long.tax_cents == 0


def test_required_tax_without_active_rules_raises(caplog):
    cg = _campground(requires_tax=True)

    with caplog.at_level(logging.WARNING, logger="cr_core.charges.composer"):
        with pytest.raises(TaxRuleMissing) as exc:
            compose_fees_and_taxes(
                adjusted_total_cents=15000,
                nights=3,
                occupants=Occupants(),
                campground=cg,
                tax_rules=[_tax(is_active=False)],
            )

    assert exc.value.status_code == 422
    assert exc.value.detail["campground_id"] == str(cg.id)
    assert any("requires tax" in r.getMessage() for r in caplog.records)


def test_inactive_rules_do_not_tax_when_tax_not_required():
    out = compose_fees_and_taxes(
        adjusted_total_cents=15000,
        nights=3,
        occupants=Occupants(),
        campground=_campground(),
        tax_rules=[_tax(is_active=False)],
    )
    assert out.tax_cents == 0
