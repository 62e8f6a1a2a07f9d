# cr_core/pricing/models.py
from __future__ import annotations

from decimal import Decimal

from django.db import models

from cr_core.campgrounds.models import SiteClass
from cr_core.common.models import ScopedModel


class PricingTrigger(models.TextChoices):
    OCCUPANCY_HIGH = "occupancy_high", "Occupancy high"
    OCCUPANCY_LOW = "occupancy_low", "Occupancy low"
    DEMAND_SURGE = "demand_surge", "Demand surge"
    LAST_MINUTE = "last_minute", "Last minute"
    ADVANCE_BOOKING = "advance_booking", "Advance booking"
    MANUAL = "manual", "Manual"


class AdjustmentType(models.TextChoices):
    PERCENT = "percent", "Percent"
    FLAT = "flat", "Flat (cents)"


class StackMode(models.TextChoices):
    ADDITIVE = "additive", "Additive"
    MAX = "max", "Largest only"
    OVERRIDE = "override", "Override"


class PricingRule(ScopedModel):
    """
    Dynamic pricing rule.

    adjustment_value is a percentage for percent rules and a signed amount in
    cents for flat rules. threshold overrides the default trigger threshold
    (percent occupancy, demand score 0-100, or lead-time days).

    stack_mode decides how the rule combines with the others that match:
    additive rules all count, only the largest "max" rule counts, and an
    "override" rule replaces everything matched before it and ends the walk.
    min_rate_cents / max_rate_cents bound the adjusted nightly average.
    """
    name = models.CharField(max_length=255)
    trigger = models.CharField(max_length=32, choices=PricingTrigger.choices, db_index=True)
    adjustment_type = models.CharField(max_length=16, choices=AdjustmentType.choices)
    adjustment_value = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    threshold = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    stack_mode = models.CharField(max_length=16, choices=StackMode.choices, default=StackMode.ADDITIVE)
    min_rate_cents = models.PositiveIntegerField(null=True, blank=True)
    max_rate_cents = models.PositiveIntegerField(null=True, blank=True)

    site_class = models.ForeignKey(
        SiteClass, on_delete=models.CASCADE, related_name="pricing_rules", null=True, blank=True
    )
    starts_on = models.DateField(null=True, blank=True)
    ends_on = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    priority = models.IntegerField(default=100)

    class Meta:
        db_table = "pricing_pricing_rule"
        indexes = [
            models.Index(fields=["campground_id", "is_active", "priority"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} [{self.trigger} {self.adjustment_type} {self.adjustment_value}]"
