# cr_core/deposits/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from cr_core.deposits.models import DepositConfig


def deposit_config_for(*, campground_id: UUID, site_class_id: UUID | None = None) -> Optional[DepositConfig]:
    """The row stored for exactly this target (site class, or the campground default), active or not."""
    qs = DepositConfig.objects.filter(campground_id=campground_id)
    if site_class_id is None:
        return qs.filter(site_class__isnull=True).first()
    return qs.filter(site_class_id=site_class_id).first()


def resolve_deposit_config(*, campground_id: UUID, site_class_id: UUID | None = None) -> Optional[DepositConfig]:
    """Active site-class policy first, then the active campground default."""
    active = DepositConfig.objects.filter(campground_id=campground_id, is_active=True)
    if site_class_id is not None:
        config = active.filter(site_class_id=site_class_id).first()
        if config is not None:
            return config
    return active.filter(site_class__isnull=True).first()
