# cr_core/deposits/services.py
from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.db import transaction

from cr_core.audit.services import AuditService
from cr_core.campgrounds.selectors import site_class_by_id
from cr_core.deposits.calculator import validate_deposit_config
from cr_core.deposits.models import DepositApplyTo, DepositConfig, DepositRule


class DepositConfigService:
    @staticmethod
    @transaction.atomic
    def upsert(
        *,
        campground_id: UUID,
        rule: str,
        site_class_id: UUID | None = None,
        apply_to: str = DepositApplyTo.LODGING_PLUS_FEES,
        percentage: Decimal | None = None,
        flat_cents: int | None = None,
        min_cents: int | None = None,
        max_cents: int | None = None,
        is_active: bool = True,
        actor_user_id: int | None = None,
    ) -> DepositConfig:
        """
        PUT semantics for one target (a site class, or the campground default
        when site_class_id is None): every field is replaced and the field the
        rule does not use is cleared.
        """
        site_class = (
            site_class_by_id(campground_id=campground_id, site_class_id=site_class_id) if site_class_id else None
        )

        qs = DepositConfig.objects.select_for_update().filter(campground_id=campground_id)
        qs = qs.filter(site_class=site_class) if site_class else qs.filter(site_class__isnull=True)
        config = qs.first()
        created = config is None
        if created:
            config = DepositConfig(campground_id=campground_id, site_class=site_class)

        config.rule = rule
        config.apply_to = apply_to
        config.percentage = percentage if rule == DepositRule.PERCENT else None
        config.flat_cents = flat_cents if rule == DepositRule.FLAT else None
        config.min_cents = min_cents
        config.max_cents = max_cents
        config.is_active = is_active

        validate_deposit_config(config)
        config.save()

        AuditService.log(
            event_code="deposit_config.created" if created else "deposit_config.updated",
            entity_type="DepositConfig",
            entity_id=config.id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata={
                "site_class_id": site_class.id if site_class else None,
                "rule": rule,
                "apply_to": apply_to,
                "percentage": config.percentage,
                "flat_cents": config.flat_cents,
                "min_cents": min_cents,
                "max_cents": max_cents,
                "is_active": is_active,
            },
        )
        return config
