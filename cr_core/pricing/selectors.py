# cr_core/pricing/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from cr_core.pricing.models import PricingRule


def pricing_rules_qs(*, campground_id: UUID) -> QuerySet[PricingRule]:
    return PricingRule.objects.filter(campground_id=campground_id)


def pricing_rules_filtered(
    *,
    campground_id: UUID,
    trigger: str | None = None,
    is_active: bool | None = None,
) -> QuerySet[PricingRule]:
    qs = pricing_rules_qs(campground_id=campground_id).order_by("priority", "id")

    if trigger:
        qs = qs.filter(trigger=trigger)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)

    return qs


def active_pricing_rules(*, campground_id: UUID) -> list[PricingRule]:
    return list(pricing_rules_filtered(campground_id=campground_id, is_active=True))


def pricing_rule_by_id(*, campground_id: UUID, rule_id: UUID) -> PricingRule:
    return get_object_or_404(pricing_rules_qs(campground_id=campground_id), id=rule_id)
