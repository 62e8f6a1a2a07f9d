# cr_core/campgrounds/services.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import time
from decimal import Decimal
from typing import Optional
from uuid import UUID
from zoneinfo import available_timezones

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from cr_core.audit.services import AuditService
from cr_core.campgrounds.models import Campground, CancellationFeeType, CancellationPolicyType, PetFeeMode
from cr_core.campgrounds.policies import PRESETS


@dataclass(frozen=True)
class PolicyUpdate:
    policy_type: Optional[str] = None
    window_hours: Optional[int] = None
    fee_type: Optional[str] = None
    fee_flat_cents: Optional[int] = None
    fee_percent: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class FeeUpdate:
    included_adults: Optional[int] = None
    included_children: Optional[int] = None
    extra_adult_fee_cents: Optional[int] = None
    extra_child_fee_cents: Optional[int] = None
    pet_fee_cents: Optional[int] = None
    pet_fee_mode: Optional[str] = None
    requires_tax: Optional[bool] = None
    timezone: Optional[str] = None
    check_in_time: Optional[time] = None


def _lock_campground(campground_id: UUID) -> Campground:
    cg = Campground.objects.select_for_update().filter(id=campground_id).first()
    if cg is None:
        raise NotFound("Campground not found.")
    return cg


class CampgroundService:
    @staticmethod
    def _validate_policy(cg: Campground) -> None:
        fee_type = cg.cancellation_fee_type
        if fee_type not in CancellationFeeType.values:
            raise ValidationError({"fee_type": "Invalid fee_type."})

        if fee_type == CancellationFeeType.FLAT and cg.cancellation_fee_flat_cents is None:
            raise ValidationError({"fee_flat_cents": "Required when fee_type is flat."})

        if fee_type == CancellationFeeType.PERCENT:
            pct = cg.cancellation_fee_percent
            if pct is None:
                raise ValidationError({"fee_percent": "Required when fee_type is percent."})
            if Decimal(str(pct)) < 0 or Decimal(str(pct)) > 100:
                raise ValidationError({"fee_percent": "Must be between 0 and 100."})

        if cg.cancellation_window_hours is None or int(cg.cancellation_window_hours) < 0:
            raise ValidationError({"window_hours": "Must be >= 0."})

    @staticmethod
    @transaction.atomic
    def update_policies(
        *,
        campground_id: UUID,
        patch: PolicyUpdate,
        actor_user_id: int | None = None,
    ) -> Campground:
        """
        Presets (flexible / moderate / strict) overwrite the window and fee fields.
        Editing window or fee fields without naming a preset turns the policy custom.
        """
        cg = _lock_campground(campground_id)

        if patch.policy_type is not None and patch.policy_type not in CancellationPolicyType.values:
            raise ValidationError({"policy_type": "Invalid policy_type."})

        explicit = {
            "cancellation_window_hours": patch.window_hours,
            "cancellation_fee_type": patch.fee_type,
            "cancellation_fee_flat_cents": patch.fee_flat_cents,
            "cancellation_fee_percent": patch.fee_percent,
        }
        touched = {k: v for k, v in explicit.items() if v is not None}

        if patch.policy_type in PRESETS:
            preset = PRESETS[patch.policy_type]
            cg.cancellation_policy_type = patch.policy_type
            cg.cancellation_window_hours = preset["window_hours"]
            cg.cancellation_fee_type = preset["fee_type"]
            cg.cancellation_fee_flat_cents = preset["fee_flat_cents"]
            cg.cancellation_fee_percent = preset["fee_percent"]
        elif patch.policy_type == CancellationPolicyType.CUSTOM or touched:
            cg.cancellation_policy_type = CancellationPolicyType.CUSTOM
            for field, value in touched.items():
                setattr(cg, field, value)

        if patch.notes is not None:
            cg.cancellation_notes = patch.notes

        CampgroundService._validate_policy(cg)
        cg.save()

        AuditService.log(
            event_code="campground.policies_updated",
            entity_type="Campground",
            entity_id=cg.id,
            campground_id=cg.id,
            actor_user_id=actor_user_id,
            metadata={k: v for k, v in asdict(patch).items() if v is not None},
        )
        return cg

    @staticmethod
    @transaction.atomic
    def update_fees(
        *,
        campground_id: UUID,
        patch: FeeUpdate,
        actor_user_id: int | None = None,
    ) -> Campground:
        cg = _lock_campground(campground_id)

        if patch.pet_fee_mode is not None and patch.pet_fee_mode not in PetFeeMode.values:
            raise ValidationError({"pet_fee_mode": "Invalid pet_fee_mode."})
        if patch.timezone is not None and patch.timezone not in available_timezones():
            raise ValidationError({"timezone": "Unknown timezone."})

        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        for field, value in changes.items():
            setattr(cg, field, value)
        cg.save()

        AuditService.log(
            event_code="campground.fees_updated",
            entity_type="Campground",
            entity_id=cg.id,
            campground_id=cg.id,
            actor_user_id=actor_user_id,
            metadata=changes,
        )
        return cg
