# cr_core/rates/selectors.py
from __future__ import annotations

from datetime import date, timedelta
from uuid import UUID

from django.db.models import Q, QuerySet
from django.shortcuts import get_object_or_404

from cr_core.rates.models import RateEntry


def rate_entries_qs(*, campground_id: UUID) -> QuerySet[RateEntry]:
    return RateEntry.objects.filter(campground_id=campground_id)


def rate_entries_filtered(
    *,
    campground_id: UUID,
    site_id: UUID | None = None,
    site_class_id: UUID | None = None,
    on_date: date | None = None,
) -> QuerySet[RateEntry]:
    qs = rate_entries_qs(campground_id=campground_id).order_by("start_date", "id")

    if site_id:
        qs = qs.filter(site_id=site_id)
    if site_class_id:
        qs = qs.filter(site_class_id=site_class_id)
    if on_date:
        qs = qs.filter(start_date__lte=on_date, end_date__gte=on_date)

    return qs


def rate_entries_for_stay(
    *,
    campground_id: UUID,
    arrival: date,
    departure: date,
    site_id: UUID | None = None,
    site_class_id: UUID | None = None,
) -> list[RateEntry]:
    """Entries for the site or its class that overlap any night of the stay."""
    target = Q()
    if site_id:
        target |= Q(site_id=site_id)
    if site_class_id:
        target |= Q(site__isnull=True, site_class_id=site_class_id)
    if not target:
        return []

    last_night = departure - timedelta(days=1)
    return list(
        rate_entries_qs(campground_id=campground_id)
        .filter(target)
        .filter(start_date__lte=last_night, end_date__gte=arrival)
    )


def rate_entry_by_id(*, campground_id: UUID, rate_entry_id: UUID) -> RateEntry:
    return get_object_or_404(rate_entries_qs(campground_id=campground_id), id=rate_entry_id)
