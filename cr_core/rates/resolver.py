# cr_core/rates/resolver.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional
from uuid import UUID

from cr_core.common.api.exceptions import InvalidDateRange, NoRateConfigured
from cr_core.rates.selectors import rate_entries_for_stay

SOURCE_SITE = "site"
SOURCE_SITE_CLASS = "site_class"


@dataclass(frozen=True)
class NightlyRate:
    night: date
    rate_cents: int
    rate_entry_id: UUID
    source: str

    def as_dict(self) -> dict:
        return {
            "date": self.night.isoformat(),
            "rate_cents": self.rate_cents,
            "rate_entry_id": str(self.rate_entry_id),
            "source": self.source,
        }


@dataclass(frozen=True)
class RateResolution:
    nights: tuple[NightlyRate, ...]
    base_total_cents: int

    @property
    def night_count(self) -> int:
        return len(self.nights)

    @property
    def first_night_cents(self) -> int:
        return self.nights[0].rate_cents

    @property
    def rate_entry_ids(self) -> list[UUID]:
        return sorted({n.rate_entry_id for n in self.nights}, key=str)


def stay_nights(arrival: date, departure: date) -> list[date]:
    """Nights of the half-open stay [arrival, departure)."""
    if departure <= arrival:
        raise InvalidDateRange(arrival=arrival.isoformat(), departure=departure.isoformat())
    return [arrival + timedelta(days=i) for i in range((departure - arrival).days)]


def _precedence(entry, site_id: Optional[UUID]) -> tuple:
    # lower sorts first: site beats class, then narrowest span, latest start, lowest id
    level = 0 if (site_id is not None and entry.site_id == site_id) else 1
    span = (entry.end_date - entry.start_date).days
    return (level, span, -entry.start_date.toordinal(), str(entry.id))


def _applies_to_target(entry, site_id: Optional[UUID], site_class_id: Optional[UUID]) -> bool:
    if entry.site_id is not None:
        return site_id is not None and entry.site_id == site_id
    return site_class_id is not None and entry.site_class_id == site_class_id


def resolve_nightly_rates(
    *,
    entries: Iterable,
    arrival: date,
    departure: date,
    site_id: Optional[UUID] = None,
    site_class_id: Optional[UUID] = None,
) -> RateResolution:
    """
    Picks one rate per night from the given RateEntry rows.

    The result depends only on the set of entries, never on their order.
    Raises InvalidDateRange for empty/negative stays and NoRateConfigured
    listing every night without a covering entry.
    """
    nights = stay_nights(arrival, departure)
    candidates = sorted(
        (e for e in entries if _applies_to_target(e, site_id, site_class_id)),
        key=lambda e: _precedence(e, site_id),
    )

    resolved: list[NightlyRate] = []
    missing: list[str] = []
    for night in nights:
        entry = next((e for e in candidates if e.covers(night)), None)
        if entry is None:
            missing.append(night.isoformat())
            continue
        resolved.append(
            NightlyRate(
                night=night,
                rate_cents=int(entry.nightly_rate_cents),
                rate_entry_id=entry.id,
                source=SOURCE_SITE if entry.site_id is not None else SOURCE_SITE_CLASS,
            )
        )

    if missing:
        raise NoRateConfigured(missing_dates=missing)

    return RateResolution(
        nights=tuple(resolved),
        base_total_cents=sum(n.rate_cents for n in resolved),
    )


class RateResolver:
    @staticmethod
    def resolve(
        *,
        campground_id: UUID,
        arrival: date,
        departure: date,
        site_id: UUID | None = None,
        site_class_id: UUID | None = None,
    ) -> RateResolution:
        stay_nights(arrival, departure)

        entries = rate_entries_for_stay(
            campground_id=campground_id,
            arrival=arrival,
            departure=departure,
            site_id=site_id,
            site_class_id=site_class_id,
        )
        return resolve_nightly_rates(
            entries=entries,
            arrival=arrival,
            departure=departure,
            site_id=site_id,
            site_class_id=site_class_id,
        )
