# cr_core/deposits/models.py
from __future__ import annotations

from django.db import models
from django.db.models import Q

from cr_core.campgrounds.models import SiteClass
from cr_core.common.models import ScopedModel


class DepositRule(models.TextChoices):
    NONE = "none", "No deposit"
    PERCENT = "percent", "Percent of total"
    FLAT = "flat", "Flat amount"
    FIRST_NIGHT = "first_night", "First night"


class DepositApplyTo(models.TextChoices):
    LODGING_PLUS_FEES = "lodging_plus_fees", "Lodging plus fees and taxes"
    LODGING_ONLY = "lodging_only", "Lodging only"


class DepositConfig(ScopedModel):
    """
    Deposit policy. At most one campground default (site_class empty) and one
    row per site class. A booking uses the active row for its site class,
    then the active default; with neither it takes no deposit.

    apply_to picks the base percent and first-night deposits are taken from.
    """
    site_class = models.ForeignKey(
        SiteClass, on_delete=models.CASCADE, related_name="deposit_configs", null=True, blank=True
    )
    rule = models.CharField(max_length=16, choices=DepositRule.choices, default=DepositRule.NONE)
    apply_to = models.CharField(
        max_length=24, choices=DepositApplyTo.choices, default=DepositApplyTo.LODGING_PLUS_FEES
    )
    percentage = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    flat_cents = models.IntegerField(null=True, blank=True)
    min_cents = models.PositiveIntegerField(null=True, blank=True)
    max_cents = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "deposits_deposit_config"
        constraints = [
            models.UniqueConstraint(
                fields=["campground_id"],
                condition=Q(site_class__isnull=True),
                name="uq_deposit_config_campground_default",
            ),
            models.UniqueConstraint(
                fields=["campground_id", "site_class"],
                condition=Q(site_class__isnull=False),
                name="uq_deposit_config_site_class",
            ),
        ]

    def __str__(self) -> str:
        target = self.site_class_id or "default"
        return f"{self.campground_id}/{target}: {self.rule}"
