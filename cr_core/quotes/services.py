# cr_core/quotes/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional
from uuid import UUID
from zoneinfo import ZoneInfo

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from cr_core.campgrounds.selectors import active_sites, campground_by_id, site_by_id
from cr_core.charges.composer import ChargeLine, FeeTaxComposer, Occupants
from cr_core.common.money import round_half_up
from cr_core.deposits.calculator import calculate_deposit
from cr_core.deposits.selectors import resolve_deposit_config
from cr_core.pricing.engine import AppliedAdjustment, BookingContext, DynamicPricingAdjuster
from cr_core.rates.resolver import NightlyRate, RateResolver, stay_nights
from cr_core.reservations.selectors import overlapping_reservations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    campground_id: UUID
    site_id: Optional[UUID]
    site_class_id: Optional[UUID]
    arrival: date
    departure: date
    nightly_rates: tuple[NightlyRate, ...]
    base_total_cents: int
    adjustments_cents: int
    applied_rules: tuple[AppliedAdjustment, ...]
    fees_cents: int
    subtotal_cents: int
    tax_cents: int
    total_cents: int
    deposit_cents: int
    lines: tuple[ChargeLine, ...] = field(default_factory=tuple)
    context: Optional[BookingContext] = None
    capped_at: Optional[str] = None

    @property
    def nights(self) -> int:
        return len(self.nightly_rates)

    @property
    def first_night_cents(self) -> int:
        return self.nightly_rates[0].rate_cents

    @property
    def rate_entry_ids(self) -> list[UUID]:
        return sorted({n.rate_entry_id for n in self.nightly_rates}, key=str)

    def as_dict(self) -> dict:
        return {
            "campground_id": str(self.campground_id),
            "site_id": str(self.site_id) if self.site_id else None,
            "site_class_id": str(self.site_class_id) if self.site_class_id else None,
            "arrival_date": self.arrival.isoformat(),
            "departure_date": self.departure.isoformat(),
            "nights": self.nights,
            "nightly_rates": [n.as_dict() for n in self.nightly_rates],
            "base_total_cents": self.base_total_cents,
            "adjustments_cents": self.adjustments_cents,
            "rate_capped_at": self.capped_at,
            "applied_rules": [a.as_dict() for a in self.applied_rules],
            "fees_cents": self.fees_cents,
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "deposit_cents": self.deposit_cents,
            "lines": [line.as_dict() for line in self.lines],
        }


def local_today(tz_name: str, now: Optional[datetime] = None) -> date:
    now = now or timezone.now()
    return now.astimezone(ZoneInfo(tz_name or "UTC")).date()


def measure_occupancy(
    *,
    campground_id: UUID,
    arrival: date,
    departure: date,
    site_class_id: Optional[UUID] = None,
) -> Decimal:
    """
    Booked site-nights over available site-nights for the stay, 0-100.
    Measured across the site class when one is known, else the whole campground.
    """
    nights = stay_nights(arrival, departure)
    site_ids = list(active_sites(campground_id=campground_id, site_class_id=site_class_id).values_list("id", flat=True))
    if not site_ids:
        return Decimal("0")

    booked = 0
    for res in overlapping_reservations(campground_id=campground_id, arrival=arrival, departure=departure).filter(
        site_id__in=site_ids
    ):
        start = max(res.arrival_date, arrival)
        end = min(res.departure_date, departure)
        booked += (end - start).days

    capacity = len(site_ids) * len(nights)
    return Decimal(round_half_up(Decimal(booked) * Decimal("10000") / Decimal(capacity))) / Decimal("100")


class QuoteService:
    @staticmethod
    def build_quote(
        *,
        campground_id: UUID,
        arrival: date,
        departure: date,
        site_id: UUID | None = None,
        site_class_id: UUID | None = None,
        adults: int = 1,
        children: int = 0,
        pets: int = 0,
        upsells: Iterable[dict] | None = None,
        demand_score: int = 0,
        occupancy_percent: Decimal | None = None,
        today: date | None = None,
    ) -> Quote:
        """
        Rate resolution -> dynamic pricing -> fees and taxes -> deposit.

        Read-only; nothing is persisted.
        """
        if site_id is None and site_class_id is None:
            raise ValidationError({"site": "Provide site or site_class."})

        campground = campground_by_id(campground_id=campground_id)

        if site_id is not None:
            site = site_by_id(campground_id=campground_id, site_id=site_id)
            if site_class_id is not None and site.site_class_id != site_class_id:
                raise ValidationError({"site_class": "Site does not belong to this site class."})
            site_class_id = site.site_class_id

        resolution = RateResolver.resolve(
            campground_id=campground_id,
            arrival=arrival,
            departure=departure,
            site_id=site_id,
            site_class_id=site_class_id,
        )

        if occupancy_percent is not None:
            occupancy = Decimal(str(occupancy_percent))
        else:
            occupancy = measure_occupancy(
                campground_id=campground_id,
                arrival=arrival,
                departure=departure,
                site_class_id=site_class_id,
            )

        today = today or local_today(campground.timezone)
        context = BookingContext(
            occupancy_percent=occupancy,
            lead_time_days=(arrival - today).days,
            demand_score=int(demand_score),
            arrival_date=arrival,
            site_class_id=site_class_id,
            nights=resolution.night_count,
        )

        adjustment = DynamicPricingAdjuster.adjust(
            campground_id=campground_id,
            base_total_cents=resolution.base_total_cents,
            context=context,
        )

        breakdown = FeeTaxComposer.compose(
            campground=campground,
            adjusted_total_cents=adjustment.adjusted_total_cents,
            nights=resolution.night_count,
            occupants=Occupants(adults=int(adults), children=int(children), pets=int(pets)),
            upsell_selections=upsells,
        )

        deposit = calculate_deposit(
            total_cents=breakdown.total_cents,
            config=resolve_deposit_config(campground_id=campground_id, site_class_id=site_class_id),
            first_night_cents=resolution.first_night_cents,
            lodging_cents=breakdown.lodging_cents,
            nights=resolution.night_count,
        )

        logger.debug(
            "Quote campground=%s site=%s %s..%s base=%s adjusted=%s total=%s deposit=%s",
            campground_id,
            site_id,
            arrival,
            departure,
            resolution.base_total_cents,
            adjustment.adjusted_total_cents,
            breakdown.total_cents,
            deposit,
        )

        return Quote(
            campground_id=campground_id,
            site_id=site_id,
            site_class_id=site_class_id,
            arrival=arrival,
            departure=departure,
            nightly_rates=resolution.nights,
            base_total_cents=resolution.base_total_cents,
            adjustments_cents=adjustment.adjustments_cents,
            applied_rules=adjustment.applied,
            capped_at=adjustment.capped_at,
            fees_cents=breakdown.fees_cents,
            subtotal_cents=breakdown.subtotal_cents,
            tax_cents=breakdown.tax_cents,
            total_cents=breakdown.total_cents,
            deposit_cents=deposit,
            lines=breakdown.lines,
            context=context,
        )
