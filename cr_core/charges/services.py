# cr_core/charges/services.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import ValidationError

from cr_core.audit.services import AuditService
from cr_core.charges.models import TaxAppliesTo, TaxRule, TaxRuleKind, Upsell, UpsellPricingType
from cr_core.common.api.exceptions import ConflictError


@dataclass(frozen=True)
class TaxRuleUpdate:
    name: Optional[str] = None
    kind: Optional[str] = None
    rate_percent: Optional[Decimal] = None
    amount_cents: Optional[int] = None
    applies_to: Optional[str] = None
    min_nights: Optional[int] = None
    max_nights: Optional[int] = None
    is_active: Optional[bool] = None


@dataclass(frozen=True)
class UpsellUpdate:
    name: Optional[str] = None
    price_cents: Optional[int] = None
    pricing_type: Optional[str] = None
    is_active: Optional[bool] = None


class TaxRuleService:
    @staticmethod
    def _validate(rule: TaxRule) -> None:
        if rule.kind not in TaxRuleKind.values:
            raise ValidationError({"kind": "Invalid kind."})
        if rule.applies_to not in TaxAppliesTo.values:
            raise ValidationError({"applies_to": "Invalid applies_to."})

        if rule.kind == TaxRuleKind.PERCENTAGE:
            if rule.rate_percent is None:
                raise ValidationError({"rate_percent": "Required for percentage tax rules."})
            rate = Decimal(str(rule.rate_percent))
            if rate < 0 or rate > 100:
                raise ValidationError({"rate_percent": "Must be between 0 and 100."})
        else:
            if rule.amount_cents is None:
                raise ValidationError({"amount_cents": "Required for flat tax rules."})

        if rule.min_nights is not None and rule.max_nights is not None and rule.max_nights < rule.min_nights:
            raise ValidationError({"max_nights": "Must be >= min_nights."})

    @staticmethod
    @transaction.atomic
    def create(
        *,
        campground_id: UUID,
        name: str,
        kind: str,
        rate_percent: Decimal | None = None,
        amount_cents: int | None = None,
        applies_to: str = TaxAppliesTo.ALL,
        min_nights: int | None = None,
        max_nights: int | None = None,
        is_active: bool = True,
        actor_user_id: int | None = None,
    ) -> TaxRule:
        rule = TaxRule(
            campground_id=campground_id,
            name=name,
            kind=kind,
            rate_percent=rate_percent,
            amount_cents=amount_cents,
            applies_to=applies_to,
            min_nights=min_nights,
            max_nights=max_nights,
            is_active=is_active,
        )
        TaxRuleService._validate(rule)
        rule.save()

        AuditService.log(
            event_code="tax_rule.created",
            entity_type="TaxRule",
            entity_id=rule.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={"name": name, "kind": kind, "rate_percent": rate_percent, "amount_cents": amount_cents},
        )
        return rule

    @staticmethod
    @transaction.atomic
    def update(
        *,
        campground_id: UUID,
        tax_rule_id: UUID,
        patch: TaxRuleUpdate,
        actor_user_id: int | None = None,
    ) -> TaxRule:
        rule = get_object_or_404(TaxRule.objects.select_for_update(), id=tax_rule_id, campground_id=campground_id)

        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        for field, value in changes.items():
            setattr(rule, field, value)
        TaxRuleService._validate(rule)
        rule.save()

        AuditService.log(
            event_code="tax_rule.updated",
            entity_type="TaxRule",
            entity_id=rule.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata=changes,
        )
        return rule

    @staticmethod
    @transaction.atomic
    def delete(*, campground_id: UUID, tax_rule_id: UUID, actor_user_id: int | None = None) -> None:
        rule = get_object_or_404(TaxRule.objects.select_for_update(), id=tax_rule_id, campground_id=campground_id)
        rule.delete()

        AuditService.log(
            event_code="tax_rule.deleted",
            entity_type="TaxRule",
            entity_id=tax_rule_id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
        )


class UpsellService:
    @staticmethod
    def _validate(upsell: Upsell) -> None:
        if upsell.pricing_type not in UpsellPricingType.values:
            raise ValidationError({"pricing_type": "Invalid pricing_type."})
        if upsell.price_cents is None or int(upsell.price_cents) < 0:
            raise ValidationError({"price_cents": "Must be >= 0."})

    @staticmethod
    @transaction.atomic
    def create(
        *,
        campground_id: UUID,
        code: str,
        name: str,
        price_cents: int,
        pricing_type: str = UpsellPricingType.FLAT,
        is_active: bool = True,
        actor_user_id: int | None = None,
    ) -> Upsell:
        upsell = Upsell(
            campground_id=campground_id,
            code=code,
            name=name,
            price_cents=price_cents,
            pricing_type=pricing_type,
            is_active=is_active,
        )
        UpsellService._validate(upsell)
        if Upsell.objects.filter(campground_id=campground_id, code=code).exists():
            raise ConflictError("An upsell with this code already exists.", code_value=code)
        upsell.save()

        AuditService.log(
            event_code="upsell.created",
            entity_type="Upsell",
            entity_id=upsell.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={"code": code, "price_cents": price_cents, "pricing_type": pricing_type},
        )
        return upsell

    @staticmethod
    @transaction.atomic
    def update(
        *,
        campground_id: UUID,
        upsell_id: UUID,
        patch: UpsellUpdate,
        actor_user_id: int | None = None,
    ) -> Upsell:
        upsell = get_object_or_404(Upsell.objects.select_for_update(), id=upsell_id, campground_id=campground_id)

        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        for field, value in changes.items():
            setattr(upsell, field, value)
        UpsellService._validate(upsell)
        upsell.save()

        AuditService.log(
            event_code="upsell.updated",
            entity_type="Upsell",
            entity_id=upsell.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata=changes,
        )
        return upsell

    @staticmethod
    @transaction.atomic
    def delete(*, campground_id: UUID, upsell_id: UUID, actor_user_id: int | None = None) -> None:
        upsell = get_object_or_404(Upsell.objects.select_for_update(), id=upsell_id, campground_id=campground_id)
        upsell.delete()

        AuditService.log(
            event_code="upsell.deleted",
            entity_type="Upsell",
            entity_id=upsell_id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
        )
