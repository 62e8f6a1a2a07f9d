# cr_core/charges/selectors.py
from __future__ import annotations

from typing import Iterable
from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from cr_core.charges.models import TaxRule, Upsell


def tax_rules_qs(*, campground_id: UUID) -> QuerySet[TaxRule]:
    return TaxRule.objects.filter(campground_id=campground_id)


def tax_rules_filtered(*, campground_id: UUID, is_active: bool | None = None) -> QuerySet[TaxRule]:
    qs = tax_rules_qs(campground_id=campground_id).order_by("name", "id")
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs


def active_tax_rules(*, campground_id: UUID) -> list[TaxRule]:
    return list(tax_rules_filtered(campground_id=campground_id, is_active=True))


def tax_rule_by_id(*, campground_id: UUID, tax_rule_id: UUID) -> TaxRule:
    return get_object_or_404(tax_rules_qs(campground_id=campground_id), id=tax_rule_id)


def upsells_qs(*, campground_id: UUID) -> QuerySet[Upsell]:
    return Upsell.objects.filter(campground_id=campground_id)


def upsells_filtered(*, campground_id: UUID, is_active: bool | None = None) -> QuerySet[Upsell]:
    qs = upsells_qs(campground_id=campground_id).order_by("code")
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs


def active_upsells_by_code(*, campground_id: UUID, codes: Iterable[str]) -> dict[str, Upsell]:
    qs = upsells_filtered(campground_id=campground_id, is_active=True).filter(code__in=list(codes))
    return {u.code: u for u in qs}


def upsell_by_id(*, campground_id: UUID, upsell_id: UUID) -> Upsell:
    return get_object_or_404(upsells_qs(campground_id=campground_id), id=upsell_id)
