# cr_core/deposits/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.deposits.models import DepositConfig


@admin.register(DepositConfig)
class DepositConfigAdmin(admin.ModelAdmin):
    list_display = (
        "campground_id",
        "site_class",
        "rule",
        "apply_to",
        "percentage",
        "flat_cents",
        "min_cents",
        "max_cents",
        "is_active",
    )
    list_filter = ("rule", "apply_to", "is_active")
