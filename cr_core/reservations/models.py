# cr_core/reservations/models.py
from __future__ import annotations

from django.db import models
from django.db.models import Q

from cr_core.campgrounds.models import Site
from cr_core.common.models import ScopedModel


class ReservationStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CHECKED_IN = "checked_in", "Checked in"
    CHECKED_OUT = "checked_out", "Checked out"
    CANCELLED = "cancelled", "Cancelled"


# statuses that hold the site for their nights
ACTIVE_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
)

CANCELLABLE_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
)


class Reservation(ScopedModel):
    """
    A booked stay. Every price component is snapshotted at booking time,
    together with the cancellation policy that was in force.
    """
    site = models.ForeignKey(Site, on_delete=models.PROTECT, related_name="reservations")

    guest_name = models.CharField(max_length=255)
    guest_email = models.EmailField(blank=True, default="")

    arrival_date = models.DateField(db_index=True)
    departure_date = models.DateField(db_index=True)

    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    pets = models.PositiveSmallIntegerField(default=0)

    status = models.CharField(
        max_length=16,
        choices=ReservationStatus.choices,
        default=ReservationStatus.PENDING,
        db_index=True,
    )

    # Quote snapshot
    base_total_cents = models.IntegerField(default=0)
    adjustments_cents = models.IntegerField(default=0)
    fees_cents = models.IntegerField(default=0)
    tax_cents = models.IntegerField(default=0)
    total_cents = models.IntegerField(default=0)
    deposit_cents = models.IntegerField(default=0)
    nightly_rates = models.JSONField(default=list, blank=True)
    first_night_rate_cents = models.IntegerField(null=True, blank=True)
    applied_rules = models.JSONField(default=list, blank=True)
    charge_lines = models.JSONField(default=list, blank=True)
    cancellation_policy_snapshot = models.JSONField(default=dict, blank=True)

    # Money movement
    paid_amount_cents = models.IntegerField(default=0)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_fee_cents = models.IntegerField(null=True, blank=True)
    refund_cents = models.IntegerField(null=True, blank=True)

    created_by_user_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "reservations_reservation"
        indexes = [
            models.Index(fields=["campground_id", "status"]),
            models.Index(fields=["site", "arrival_date", "departure_date"]),
        ]
        constraints = [
            # last-line guard under the site row lock; full range overlap is checked in ReservationService
            models.UniqueConstraint(
                fields=["site", "arrival_date"],
                condition=Q(status__in=[s.value for s in ACTIVE_STATUSES]),
                name="uq_reservation_active_site_arrival",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.guest_name} {self.arrival_date}..{self.departure_date}"

    @property
    def nights(self) -> int:
        return (self.departure_date - self.arrival_date).days

    @property
    def balance_due_cents(self) -> int:
        return max(0, self.total_cents - self.paid_amount_cents)
