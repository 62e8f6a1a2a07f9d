# cr_core/campgrounds/policies.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from cr_core.campgrounds.models import CancellationFeeType, CancellationPolicyType

PRESETS: Dict[str, Dict[str, Any]] = {
    CancellationPolicyType.FLEXIBLE.value: {
        "window_hours": 24,
        "fee_type": CancellationFeeType.FIRST_NIGHT,
        "fee_flat_cents": None,
        "fee_percent": None,
    },
    CancellationPolicyType.MODERATE.value: {
        "window_hours": 168,
        "fee_type": CancellationFeeType.PERCENT,
        "fee_flat_cents": None,
        "fee_percent": Decimal("50.00"),
    },
    CancellationPolicyType.STRICT.value: {
        "window_hours": 720,
        "fee_type": CancellationFeeType.PERCENT,
        "fee_flat_cents": None,
        "fee_percent": Decimal("100.00"),
    },
}


@dataclass(frozen=True)
class CancellationPolicy:
    """
    Cancellation terms as they were when a reservation was booked.

    Stored as JSON on the reservation so later policy edits never change
    what an existing guest agreed to.
    """
    policy_type: str
    window_hours: int
    fee_type: str
    fee_flat_cents: Optional[int]
    fee_percent: Optional[Decimal]
    timezone: str = "UTC"
    check_in_time: time = time(15, 0)

    @classmethod
    def from_campground(cls, campground) -> "CancellationPolicy":
        return cls(
            policy_type=campground.cancellation_policy_type,
            window_hours=int(campground.cancellation_window_hours),
            fee_type=campground.cancellation_fee_type,
            fee_flat_cents=campground.cancellation_fee_flat_cents,
            fee_percent=(
                Decimal(str(campground.cancellation_fee_percent))
                if campground.cancellation_fee_percent is not None
                else None
            ),
            timezone=campground.timezone or "UTC",
            check_in_time=campground.check_in_time or time(15, 0),
        )

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "CancellationPolicy":
        raw_percent = data.get("fee_percent")
        raw_time = data.get("check_in_time") or "15:00"
        return cls(
            policy_type=data.get("policy_type") or CancellationPolicyType.CUSTOM,
            window_hours=int(data.get("window_hours") or 0),
            fee_type=data.get("fee_type") or CancellationFeeType.NONE,
            fee_flat_cents=data.get("fee_flat_cents"),
            fee_percent=Decimal(str(raw_percent)) if raw_percent is not None else None,
            timezone=data.get("timezone") or "UTC",
            check_in_time=time.fromisoformat(raw_time),
        )

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "policy_type": str(self.policy_type),
            "window_hours": self.window_hours,
            "fee_type": str(self.fee_type),
            "fee_flat_cents": self.fee_flat_cents,
            "fee_percent": str(self.fee_percent) if self.fee_percent is not None else None,
            "timezone": self.timezone,
            "check_in_time": self.check_in_time.strftime("%H:%M"),
        }

    def arrival_at(self, arrival_date: date) -> datetime:
        """Arrival moment: check-in time on the arrival date, campground-local."""
        return datetime.combine(arrival_date, self.check_in_time, tzinfo=ZoneInfo(self.timezone))
