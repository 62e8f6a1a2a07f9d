# cr_core/charges/composer.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence
from uuid import UUID

from rest_framework.exceptions import ValidationError

from cr_core.campgrounds.models import PetFeeMode
from cr_core.charges.models import TaxAppliesTo, TaxRuleKind, UpsellPricingType
from cr_core.charges.selectors import active_tax_rules, active_upsells_by_code
from cr_core.common.api.exceptions import TaxRuleMissing
from cr_core.common.money import percent_of, round_half_up

logger = logging.getLogger(__name__)

LINE_LODGING = "lodging"
LINE_FEE = "fee"
LINE_UPSELL = "upsell"
LINE_TAX = "tax"


@dataclass(frozen=True)
class Occupants:
    adults: int = 1
    children: int = 0
    pets: int = 0

    @property
    def guests(self) -> int:
        return self.adults + self.children


@dataclass(frozen=True)
class UpsellSelection:
    upsell: object
    quantity: int = 1


@dataclass(frozen=True)
class ChargeLine:
    kind: str
    code: str
    description: str
    amount_cents: int
    quantity: int = 1

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "code": self.code,
            "description": self.description,
            "quantity": self.quantity,
            "amount_cents": self.amount_cents,
        }


@dataclass(frozen=True)
class FeeBreakdown:
    lodging_cents: int
    occupancy_fees_cents: int
    upsells_cents: int
    subtotal_cents: int
    tax_cents: int
    total_cents: int
    lines: tuple[ChargeLine, ...] = field(default_factory=tuple)

    @property
    def fees_cents(self) -> int:
        return self.occupancy_fees_cents + self.upsells_cents


def occupancy_fee_lines(*, campground, nights: int, occupants: Occupants) -> list[ChargeLine]:
    lines: list[ChargeLine] = []

    extra_adults = max(0, occupants.adults - int(campground.included_adults))
    if extra_adults and campground.extra_adult_fee_cents:
        lines.append(
            ChargeLine(
                kind=LINE_FEE,
                code="extra_adult",
                description="Extra adult",
                quantity=extra_adults,
                amount_cents=extra_adults * int(campground.extra_adult_fee_cents),
            )
        )

    extra_children = max(0, occupants.children - int(campground.included_children))
    if extra_children and campground.extra_child_fee_cents:
        lines.append(
            ChargeLine(
                kind=LINE_FEE,
                code="extra_child",
                description="Extra child",
                quantity=extra_children,
                amount_cents=extra_children * int(campground.extra_child_fee_cents),
            )
        )

    if occupants.pets and campground.pet_fee_cents:
        per_pet = int(campground.pet_fee_cents)
        if campground.pet_fee_mode == PetFeeMode.PER_NIGHT:
            per_pet *= nights
        lines.append(
            ChargeLine(
                kind=LINE_FEE,
                code="pet",
                description="Pet fee",
                quantity=occupants.pets,
                amount_cents=occupants.pets * per_pet,
            )
        )

    return lines


def upsell_line(selection: UpsellSelection, *, nights: int, occupants: Occupants) -> ChargeLine:
    upsell = selection.upsell
    units = int(selection.quantity)
    if upsell.pricing_type == UpsellPricingType.PER_NIGHT:
        units *= nights
    elif upsell.pricing_type == UpsellPricingType.PER_PERSON:
        units *= occupants.guests

    return ChargeLine(
        kind=LINE_UPSELL,
        code=upsell.code,
        description=upsell.name,
        quantity=int(selection.quantity),
        amount_cents=units * int(upsell.price_cents),
    )


def _tax_base(applies_to: str, *, lodging: int, fees: int, upsells: int) -> int:
    if applies_to == TaxAppliesTo.LODGING:
        return lodging
    if applies_to == TaxAppliesTo.FEES:
        return fees
    if applies_to == TaxAppliesTo.UPSELLS:
        return upsells
    return lodging + fees + upsells


def compose_fees_and_taxes(
    *,
    adjusted_total_cents: int,
    nights: int,
    occupants: Occupants,
    campground,
    upsells: Sequence[UpsellSelection] = (),
    tax_rules: Iterable = (),
) -> FeeBreakdown:
    """
    Adds occupancy fees, upsells and exclusive taxes to the adjusted lodging total.

    Taxes are computed on the post-discount subtotal. A campground flagged
    requires_tax must have at least one active rule, even if none applies
    to this particular stay.
    """
    lodging = int(adjusted_total_cents)
    lines: list[ChargeLine] = [
        ChargeLine(kind=LINE_LODGING, code="lodging", description="Lodging", quantity=nights, amount_cents=lodging)
    ]

    fee_lines = occupancy_fee_lines(campground=campground, nights=nights, occupants=occupants)
    upsell_lines = [upsell_line(sel, nights=nights, occupants=occupants) for sel in upsells]
    fees = sum(line.amount_cents for line in fee_lines)
    upsell_total = sum(line.amount_cents for line in upsell_lines)
    lines.extend(fee_lines)
    lines.extend(upsell_lines)

    subtotal = lodging + fees + upsell_total

    active = [r for r in tax_rules if r.is_active]
    if campground.requires_tax and not active:
        logger.warning("Campground %s requires tax but has no active tax rules", campground.id)
        raise TaxRuleMissing(campground_id=str(campground.id))

    tax = 0
    for rule in sorted(active, key=lambda r: (r.name, str(r.id))):
        if not rule.applies_to_stay(nights):
            continue

        if rule.kind == TaxRuleKind.FLAT:
            amount = int(rule.amount_cents or 0)
        else:
            base = _tax_base(rule.applies_to, lodging=lodging, fees=fees, upsells=upsell_total)
            amount = percent_of(base, rule.rate_percent or 0)

        tax += amount
        lines.append(ChargeLine(kind=LINE_TAX, code=str(rule.id), description=rule.name, amount_cents=amount))

    return FeeBreakdown(
        lodging_cents=lodging,
        occupancy_fees_cents=fees,
        upsells_cents=upsell_total,
        subtotal_cents=subtotal,
        tax_cents=tax,
        total_cents=subtotal + tax,
        lines=tuple(lines),
    )


def _normalise_selections(raw: Iterable[dict]) -> dict[str, int]:
    # same code twice sums quantities
    out: dict[str, int] = {}
    for item in raw or ():
        code = item["code"]
        quantity = int(item.get("quantity", 1))
        if quantity < 1:
            raise ValidationError({"upsells": f"Quantity for '{code}' must be >= 1."})
        out[code] = out.get(code, 0) + quantity
    return out


class FeeTaxComposer:
    @staticmethod
    def compose(
        *,
        campground,
        adjusted_total_cents: int,
        nights: int,
        occupants: Occupants,
        upsell_selections: Optional[Iterable[dict]] = None,
    ) -> FeeBreakdown:
        campground_id: UUID = campground.id
        wanted = _normalise_selections(upsell_selections or ())

        catalogue = active_upsells_by_code(campground_id=campground_id, codes=wanted.keys())
        unknown = sorted(code for code in wanted if code not in catalogue)
        if unknown:
            raise ValidationError({"upsells": [f"Unknown or inactive upsell: {code}" for code in unknown]})

        selections = [UpsellSelection(upsell=catalogue[code], quantity=qty) for code, qty in wanted.items()]

        return compose_fees_and_taxes(
            adjusted_total_cents=adjusted_total_cents,
            nights=nights,
            occupants=occupants,
            campground=campground,
            upsells=selections,
            tax_rules=active_tax_rules(campground_id=campground_id),
        )
