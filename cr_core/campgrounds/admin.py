# cr_core/campgrounds/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.campgrounds.models import Campground, Site, SiteClass


@admin.register(Campground)
class CampgroundAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "slug",
        "timezone",
        "cancellation_policy_type",
        "cancellation_window_hours",
        "cancellation_fee_type",
        "requires_tax",
        "is_active",
    )
    list_filter = ("is_active", "cancellation_policy_type", "requires_tax", "timezone")
    search_fields = ("name", "slug")
    readonly_fields = ("id", "created_at", "updated_at")
    ordering = ("name",)


@admin.register(SiteClass)
class SiteClassAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "campground_id", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name")
    ordering = ("campground_id", "code")


@admin.register(Site)
class SiteAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "site_class", "campground_id", "is_active")
    list_filter = ("is_active", "site_class")
    search_fields = ("code", "name")
    autocomplete_fields = ("site_class",)
    ordering = ("campground_id", "code")
