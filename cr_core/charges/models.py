# cr_core/charges/models.py
from __future__ import annotations

from django.db import models

from cr_core.common.models import ScopedModel


class TaxRuleKind(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FLAT = "flat", "Flat amount per stay"


class TaxAppliesTo(models.TextChoices):
    ALL = "all", "Whole subtotal"
    LODGING = "lodging", "Lodging only"
    FEES = "fees", "Occupancy and pet fees"
    UPSELLS = "upsells", "Upsells"


class TaxRule(ScopedModel):
    """
    Exclusive tax, added on top of the post-discount subtotal.

    kind decides which of rate_percent / amount_cents is authoritative.
    min_nights / max_nights (inclusive) restrict the rule to stays of that length.
    """
    name = models.CharField(max_length=255)
    kind = models.CharField(max_length=16, choices=TaxRuleKind.choices, default=TaxRuleKind.PERCENTAGE)
    rate_percent = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    amount_cents = models.PositiveIntegerField(null=True, blank=True)
    applies_to = models.CharField(max_length=16, choices=TaxAppliesTo.choices, default=TaxAppliesTo.ALL)
    min_nights = models.PositiveIntegerField(null=True, blank=True)
    max_nights = models.PositiveIntegerField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "charges_tax_rule"
        indexes = [
            models.Index(fields=["campground_id", "is_active"]),
        ]

    def __str__(self) -> str:
        return self.name

    def applies_to_stay(self, nights: int) -> bool:
        if self.min_nights is not None and nights < self.min_nights:
            return False
        if self.max_nights is not None and nights > self.max_nights:
            return False
        return True


class UpsellPricingType(models.TextChoices):
    FLAT = "flat", "Flat per unit"
    PER_NIGHT = "per_night", "Per unit per night"
    PER_PERSON = "per_person", "Per unit per guest"


class Upsell(ScopedModel):
    code = models.SlugField(max_length=64)
    name = models.CharField(max_length=255)
    price_cents = models.PositiveIntegerField()
    pricing_type = models.CharField(max_length=16, choices=UpsellPricingType.choices, default=UpsellPricingType.FLAT)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "charges_upsell"
        constraints = [
            models.UniqueConstraint(fields=["campground_id", "code"], name="uq_upsell_scope_code"),
        ]

    def __str__(self) -> str:
        return self.code
