# cr_core/rates/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.rates.models import RateEntry


@admin.register(RateEntry)
class RateEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "campground_id",
        "site",
        "site_class",
        "start_date",
        "end_date",
        "nightly_rate_cents",
        "locked_at",
    )
    list_filter = ("site_class", "start_date")
    search_fields = ("id", "label", "site__code", "site_class__code")
    readonly_fields = ("locked_at", "created_at", "updated_at")
    ordering = ("campground_id", "start_date")
