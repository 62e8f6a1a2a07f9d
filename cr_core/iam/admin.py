# cr_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.iam.models import CampgroundMembership


@admin.register(CampgroundMembership)
class CampgroundMembershipAdmin(admin.ModelAdmin):
    list_display = ("campground", "user_id", "role", "is_active", "created_at")
    list_filter = ("role", "is_active", "campground")
    search_fields = ("campground__name", "campground__slug", "user_id")
    autocomplete_fields = ("campground",)
    ordering = ("campground", "role")
