# cr_core/campgrounds/models.py
from __future__ import annotations

import uuid
from datetime import time

from django.db import models

from cr_core.common.models import ScopedModel, TimeStampedModel


class CancellationPolicyType(models.TextChoices):
    FLEXIBLE = "flexible", "Flexible"
    MODERATE = "moderate", "Moderate"
    STRICT = "strict", "Strict"
    CUSTOM = "custom", "Custom"


class CancellationFeeType(models.TextChoices):
    NONE = "none", "No fee"
    FLAT = "flat", "Flat amount"
    PERCENT = "percent", "Percent of total"
    FIRST_NIGHT = "first_night", "First night"


class PetFeeMode(models.TextChoices):
    PER_STAY = "per_stay", "Per pet per stay"
    PER_NIGHT = "per_night", "Per pet per night"


class Campground(TimeStampedModel):
    """
    The scope root. Every configuration table hangs off campground_id.

    The cancellation policy is embedded: cancellation_fee_type decides which of
    cancellation_fee_flat_cents / cancellation_fee_percent is authoritative.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=64, unique=True)
    timezone = models.CharField(max_length=64, default="UTC")
    check_in_time = models.TimeField(default=time(15, 0))
    is_active = models.BooleanField(default=True, db_index=True)

    # Cancellation policy
    cancellation_policy_type = models.CharField(
        max_length=16,
        choices=CancellationPolicyType.choices,
        default=CancellationPolicyType.CUSTOM,
    )
    cancellation_window_hours = models.PositiveIntegerField(default=48)
    cancellation_fee_type = models.CharField(
        max_length=16,
        choices=CancellationFeeType.choices,
        default=CancellationFeeType.NONE,
    )
    cancellation_fee_flat_cents = models.PositiveIntegerField(null=True, blank=True)
    cancellation_fee_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    cancellation_notes = models.TextField(blank=True, default="")

    # Occupancy fees
    included_adults = models.PositiveSmallIntegerField(default=2)
    included_children = models.PositiveSmallIntegerField(default=2)
    extra_adult_fee_cents = models.PositiveIntegerField(default=0)
    extra_child_fee_cents = models.PositiveIntegerField(default=0)
    pet_fee_cents = models.PositiveIntegerField(default=0)
    pet_fee_mode = models.CharField(max_length=16, choices=PetFeeMode.choices, default=PetFeeMode.PER_STAY)

    # Taxes
    requires_tax = models.BooleanField(default=False)

    class Meta:
        db_table = "campgrounds_campground"
        indexes = [
            models.Index(fields=["is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"


class SiteClass(ScopedModel):
    """
    A group of interchangeable sites (e.g. "30A full hookup").
    Rates and pricing rules can target a class instead of a single site.
    """
    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "campgrounds_site_class"
        constraints = [
            models.UniqueConstraint(fields=["campground_id", "code"], name="uq_site_class_scope_code"),
        ]

    def __str__(self) -> str:
        return self.code


class Site(ScopedModel):
    name = models.CharField(max_length=255)
    code = models.SlugField(max_length=64)
    site_class = models.ForeignKey(SiteClass, on_delete=models.PROTECT, related_name="sites")
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "campgrounds_site"
        constraints = [
            models.UniqueConstraint(fields=["campground_id", "code"], name="uq_site_scope_code"),
        ]
        indexes = [
            models.Index(fields=["campground_id", "site_class"]),
        ]

    def __str__(self) -> str:
        return self.code
