# cr_core/charges/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.charges.models import TaxRule, Upsell


@admin.register(TaxRule)
class TaxRuleAdmin(admin.ModelAdmin):
    list_display = ("name", "campground_id", "kind", "rate_percent", "amount_cents", "applies_to", "is_active")
    list_filter = ("kind", "applies_to", "is_active")
    search_fields = ("name",)


@admin.register(Upsell)
class UpsellAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "campground_id", "price_cents", "pricing_type", "is_active")
    list_filter = ("pricing_type", "is_active")
    search_fields = ("code", "name")
