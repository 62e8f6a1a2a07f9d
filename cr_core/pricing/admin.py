# cr_core/pricing/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.pricing.models import PricingRule


@admin.register(PricingRule)
class PricingRuleAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "campground_id",
        "trigger",
        "adjustment_type",
        "adjustment_value",
        "threshold",
        "stack_mode",
        "priority",
        "is_active",
    )
    list_filter = ("trigger", "adjustment_type", "stack_mode", "is_active")
    search_fields = ("name",)
    ordering = ("campground_id", "priority", "id")
