# cr_core/reservations/cancellation.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from cr_core.campgrounds.models import CancellationFeeType
from cr_core.campgrounds.policies import CancellationPolicy
from cr_core.common.api.exceptions import InvalidCancellationState
from cr_core.common.money import divide, percent_of
from cr_core.reservations.models import CANCELLABLE_STATUSES


@dataclass(frozen=True)
class CancellationSnapshot:
    """What the evaluator needs to know about a reservation, nothing more."""
    status: str
    arrival_date: date
    nights: int
    total_cents: int
    paid_amount_cents: int = 0
    first_night_rate_cents: Optional[int] = None

    @classmethod
    def from_reservation(cls, reservation) -> "CancellationSnapshot":
        return cls(
            status=reservation.status,
            arrival_date=reservation.arrival_date,
            nights=reservation.nights,
            total_cents=int(reservation.total_cents),
            paid_amount_cents=int(reservation.paid_amount_cents),
            first_night_rate_cents=reservation.first_night_rate_cents,
        )


@dataclass(frozen=True)
class CancellationOutcome:
    fee_cents: int
    refund_cents: int
    within_free_window: bool
    hours_until_arrival: Decimal
    evaluated_at: datetime

    def as_dict(self) -> dict:
        return {
            "fee_cents": self.fee_cents,
            "refund_cents": self.refund_cents,
            "within_free_window": self.within_free_window,
            "hours_until_arrival": str(self.hours_until_arrival),
            "evaluated_at": self.evaluated_at.isoformat(),
        }


def truncate_to_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


def _fee_for(policy: CancellationPolicy, snapshot: CancellationSnapshot) -> int:
    fee_type = policy.fee_type
    if fee_type == CancellationFeeType.FLAT:
        return int(policy.fee_flat_cents or 0)
    if fee_type == CancellationFeeType.PERCENT:
        return percent_of(snapshot.total_cents, policy.fee_percent or 0)
    if fee_type == CancellationFeeType.FIRST_NIGHT:
        if snapshot.first_night_rate_cents is not None:
            return int(snapshot.first_night_rate_cents)
        if snapshot.nights > 0:
            return divide(snapshot.total_cents, snapshot.nights)
    return 0


def evaluate_cancellation(
    *,
    snapshot: CancellationSnapshot,
    policy: CancellationPolicy,
    now: datetime,
) -> CancellationOutcome:
    """
    Fee and refund for cancelling at `now` under the booked policy.

    Cancelling at exactly window_hours before arrival is still free.
    Same inputs always give the same outcome; nothing is written.
    """
    if snapshot.status not in CANCELLABLE_STATUSES:
        raise InvalidCancellationState(status=str(snapshot.status))

    evaluated_at = truncate_to_minute(now)
    seconds = (policy.arrival_at(snapshot.arrival_date) - evaluated_at).total_seconds()
    hours_until_arrival = (Decimal(int(seconds)) / Decimal(3600)).quantize(Decimal("0.01"))

    within_free_window = int(seconds) >= int(policy.window_hours) * 3600
    if within_free_window:
        fee = 0
    else:
        fee = min(max(0, _fee_for(policy, snapshot)), max(0, snapshot.total_cents))

    return CancellationOutcome(
        fee_cents=fee,
        refund_cents=max(0, snapshot.paid_amount_cents - fee),
        within_free_window=within_free_window,
        hours_until_arrival=hours_until_arrival,
        evaluated_at=evaluated_at,
    )
