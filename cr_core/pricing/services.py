# cr_core/pricing/services.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework.exceptions import ValidationError

from cr_core.audit.services import AuditService
from cr_core.campgrounds.selectors import site_class_by_id
from cr_core.pricing.models import AdjustmentType, PricingRule, PricingTrigger, StackMode


@dataclass(frozen=True)
class PricingRuleUpdate:
    name: Optional[str] = None
    trigger: Optional[str] = None
    adjustment_type: Optional[str] = None
    adjustment_value: Optional[Decimal] = None
    threshold: Optional[Decimal] = None
    stack_mode: Optional[str] = None
    min_rate_cents: Optional[int] = None
    max_rate_cents: Optional[int] = None
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None


class PricingRuleService:
    @staticmethod
    def _validate(rule: PricingRule) -> None:
        if rule.trigger not in PricingTrigger.values:
            raise ValidationError({"trigger": "Invalid trigger."})
        if rule.adjustment_type not in AdjustmentType.values:
            raise ValidationError({"adjustment_type": "Invalid adjustment_type."})
        if rule.stack_mode not in StackMode.values:
            raise ValidationError({"stack_mode": "Invalid stack_mode."})

        value = Decimal(str(rule.adjustment_value))
        if rule.adjustment_type == AdjustmentType.PERCENT and value < Decimal("-100"):
            raise ValidationError({"adjustment_value": "Percent discount cannot exceed 100."})

        if rule.threshold is not None and Decimal(str(rule.threshold)) < 0:
            raise ValidationError({"threshold": "Must be >= 0."})
        if rule.starts_on and rule.ends_on and rule.ends_on < rule.starts_on:
            raise ValidationError({"ends_on": "Must be on or after starts_on."})

        for field in ("min_rate_cents", "max_rate_cents"):
            if getattr(rule, field) is not None and getattr(rule, field) < 0:
                raise ValidationError({field: "Must be >= 0."})
        if (
            rule.min_rate_cents is not None
            and rule.max_rate_cents is not None
            and rule.max_rate_cents < rule.min_rate_cents
        ):
            raise ValidationError({"max_rate_cents": "Must be >= min_rate_cents."})

    @staticmethod
    @transaction.atomic
    def create(
        *,
        campground_id: UUID,
        name: str,
        trigger: str,
        adjustment_type: str,
        adjustment_value: Decimal,
        priority: int = 100,
        is_active: bool = True,
        threshold: Decimal | None = None,
        stack_mode: str = StackMode.ADDITIVE,
        min_rate_cents: int | None = None,
        max_rate_cents: int | None = None,
        site_class_id: UUID | None = None,
        starts_on: date | None = None,
        ends_on: date | None = None,
        actor_user_id: int | None = None,
    ) -> PricingRule:
        site_class = (
            site_class_by_id(campground_id=campground_id, site_class_id=site_class_id) if site_class_id else None
        )
        rule = PricingRule(
            campground_id=campground_id,
            name=name,
            trigger=trigger,
            adjustment_type=adjustment_type,
            adjustment_value=adjustment_value,
            threshold=threshold,
            stack_mode=stack_mode,
            min_rate_cents=min_rate_cents,
            max_rate_cents=max_rate_cents,
            site_class=site_class,
            starts_on=starts_on,
            ends_on=ends_on,
            is_active=is_active,
            priority=priority,
        )
        PricingRuleService._validate(rule)
        rule.save()

        AuditService.log(
            event_code="pricing_rule.created",
            entity_type="PricingRule",
            entity_id=rule.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={
                "name": name,
                "trigger": trigger,
                "adjustment_type": adjustment_type,
                "adjustment_value": adjustment_value,
                "priority": priority,
                "stack_mode": stack_mode,
            },
        )
        return rule

    @staticmethod
    @transaction.atomic
    def update(
        *,
        campground_id: UUID,
        rule_id: UUID,
        patch: PricingRuleUpdate,
        actor_user_id: int | None = None,
    ) -> PricingRule:
        rule = get_object_or_404(PricingRule.objects.select_for_update(), id=rule_id, campground_id=campground_id)

        changes = {k: v for k, v in asdict(patch).items() if v is not None}
        for field, value in changes.items():
            setattr(rule, field, value)
        PricingRuleService._validate(rule)
        rule.save()

        AuditService.log(
            event_code="pricing_rule.updated",
            entity_type="PricingRule",
            entity_id=rule.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata=changes,
        )
        return rule

    @staticmethod
    @transaction.atomic
    def delete(*, campground_id: UUID, rule_id: UUID, actor_user_id: int | None = None) -> None:
        rule = get_object_or_404(PricingRule.objects.select_for_update(), id=rule_id, campground_id=campground_id)
        rule.delete()

        AuditService.log(
            event_code="pricing_rule.deleted",
            entity_type="PricingRule",
            entity_id=rule_id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
        )
