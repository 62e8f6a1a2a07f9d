# cr_core/reservations/admin.py
from __future__ import annotations

from django.contrib import admin

from cr_core.reservations.models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = (
        "guest_name",
        "site",
        "arrival_date",
        "departure_date",
        "status",
        "total_cents",
        "deposit_cents",
        "paid_amount_cents",
    )
    list_filter = ("status",)
    search_fields = ("guest_name", "guest_email")
    date_hierarchy = "arrival_date"
    readonly_fields = (
        "base_total_cents",
        "adjustments_cents",
        "fees_cents",
        "tax_cents",
        "total_cents",
        "deposit_cents",
        "nightly_rates",
        "first_night_rate_cents",
        "applied_rules",
        "charge_lines",
        "cancellation_policy_snapshot",
        "cancelled_at",
        "cancellation_fee_cents",
        "refund_cents",
    )
