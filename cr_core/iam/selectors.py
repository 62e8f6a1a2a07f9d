# cr_core/iam/selectors.py
from __future__ import annotations

from uuid import UUID

from cr_core.iam.models import CampgroundMembership


def membership_roles(*, user_id: int, campground_id: UUID) -> set[str]:
    """
    Single source of truth used by permission checks.
    """
    return set(
        CampgroundMembership.objects.filter(
            user_id=user_id,
            campground_id=campground_id,
            is_active=True,
        ).values_list("role", flat=True)
    )


def campground_ids_for_user(*, user_id: int) -> list[UUID]:
    return list(
        CampgroundMembership.objects.filter(user_id=user_id, is_active=True).values_list("campground_id", flat=True)
    )
