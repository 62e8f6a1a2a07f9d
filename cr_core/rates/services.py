# cr_core/rates/services.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Iterable, Optional
from uuid import UUID

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from cr_core.audit.services import AuditService
from cr_core.campgrounds.selectors import site_by_id, site_class_by_id
from cr_core.common.api.exceptions import ConflictError
from cr_core.rates.models import RateEntry


@dataclass(frozen=True)
class RateEntryUpdate:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    nightly_rate_cents: Optional[int] = None
    label: Optional[str] = None


class RateEntryService:
    @staticmethod
    def _ensure_editable(entry: RateEntry) -> None:
        if entry.is_locked:
            raise ConflictError(
                "Rate entry is referenced by a booking and can no longer be changed.",
                rate_entry_id=str(entry.id),
            )

    @staticmethod
    def _validate_span(start_date: date, end_date: date) -> None:
        if end_date < start_date:
            raise ValidationError({"end_date": "Must be on or after start_date."})

    @staticmethod
    @transaction.atomic
    def create(
        *,
        campground_id: UUID,
        start_date: date,
        end_date: date,
        nightly_rate_cents: int,
        site_id: UUID | None = None,
        site_class_id: UUID | None = None,
        label: str = "",
        actor_user_id: int | None = None,
    ) -> RateEntry:
        if bool(site_id) == bool(site_class_id):
            raise ValidationError({"target": "Provide exactly one of site or site_class."})
        if nightly_rate_cents < 0:
            raise ValidationError({"nightly_rate_cents": "Must be >= 0."})
        RateEntryService._validate_span(start_date, end_date)

        site = site_by_id(campground_id=campground_id, site_id=site_id) if site_id else None
        site_class = (
            site_class_by_id(campground_id=campground_id, site_class_id=site_class_id) if site_class_id else None
        )

        entry = RateEntry.objects.create(
            campground_id=campground_id,
            site=site,
            site_class=site_class,
            start_date=start_date,
            end_date=end_date,
            nightly_rate_cents=nightly_rate_cents,
            label=label or "",
        )

        AuditService.log(
            event_code="rate_entry.created",
            entity_type="RateEntry",
            entity_id=entry.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={
                "site_id": site_id,
                "site_class_id": site_class_id,
                "start_date": start_date,
                "end_date": end_date,
                "nightly_rate_cents": nightly_rate_cents,
            },
        )
        return entry

    @staticmethod
    @transaction.atomic
    def update(
        *,
        campground_id: UUID,
        rate_entry_id: UUID,
        patch: RateEntryUpdate,
        actor_user_id: int | None = None,
    ) -> RateEntry:
        entry = get_object_or_404(RateEntry.objects.select_for_update(), id=rate_entry_id, campground_id=campground_id)
        RateEntryService._ensure_editable(entry)

        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        if changes.get("nightly_rate_cents", 0) < 0:
            raise ValidationError({"nightly_rate_cents": "Must be >= 0."})

        for field, value in changes.items():
            setattr(entry, field, value)
        RateEntryService._validate_span(entry.start_date, entry.end_date)
        entry.save()

        AuditService.log(
            event_code="rate_entry.updated",
            entity_type="RateEntry",
            entity_id=entry.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata=changes,
        )
        return entry

    @staticmethod
    @transaction.atomic
    def delete(*, campground_id: UUID, rate_entry_id: UUID, actor_user_id: int | None = None) -> None:
        entry = get_object_or_404(RateEntry.objects.select_for_update(), id=rate_entry_id, campground_id=campground_id)
        RateEntryService._ensure_editable(entry)
        entry.delete()

        AuditService.log(
            event_code="rate_entry.deleted",
            entity_type="RateEntry",
            entity_id=rate_entry_id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
        )

    @staticmethod
    def lock_entries(*, campground_id: UUID, rate_entry_ids: Iterable[UUID]) -> int:
        """
        Called inside the booking transaction. Entries already locked keep
        their original timestamp.
        """
        return RateEntry.objects.filter(
            campground_id=campground_id,
            id__in=list(rate_entry_ids),
            locked_at__isnull=True,
        ).update(locked_at=timezone.now())
