# cr_core/reservations/selectors.py
from __future__ import annotations

from datetime import date
from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from cr_core.reservations.models import ACTIVE_STATUSES, Reservation


def reservations_qs(*, campground_id: UUID) -> QuerySet[Reservation]:
    return Reservation.objects.filter(campground_id=campground_id).select_related("site")


def reservations_filtered(
    *,
    campground_id: UUID,
    status: str | None = None,
    site_id: UUID | None = None,
    arriving_from: date | None = None,
    arriving_to: date | None = None,
) -> QuerySet[Reservation]:
    qs = reservations_qs(campground_id=campground_id).order_by("arrival_date", "created_at")

    if status:
        qs = qs.filter(status=status)
    if site_id:
        qs = qs.filter(site_id=site_id)
    if arriving_from:
        qs = qs.filter(arrival_date__gte=arriving_from)
    if arriving_to:
        qs = qs.filter(arrival_date__lte=arriving_to)

    return qs


def reservation_by_id(*, campground_id: UUID, reservation_id: UUID) -> Reservation:
    return get_object_or_404(reservations_qs(campground_id=campground_id), id=reservation_id)


def overlapping_reservations(
    *,
    campground_id: UUID,
    arrival: date,
    departure: date,
    site_id: UUID | None = None,
    exclude_id: UUID | None = None,
) -> QuerySet[Reservation]:
    """
    Active reservations sharing at least one night with [arrival, departure).
    Back-to-back stays (one departs the day the other arrives) do not overlap.
    """
    qs = Reservation.objects.filter(
        campground_id=campground_id,
        status__in=ACTIVE_STATUSES,
        arrival_date__lt=departure,
        departure_date__gt=arrival,
    )
    if site_id:
        qs = qs.filter(site_id=site_id)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)
    return qs
