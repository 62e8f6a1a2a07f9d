# cr_core/reservations/tests/test_cancellation.py
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from cr_core.campgrounds.models import CancellationFeeType, CancellationPolicyType
from cr_core.campgrounds.policies import CancellationPolicy
from cr_core.common.api.exceptions import InvalidCancellationState
from cr_core.reservations.cancellation import CancellationSnapshot, evaluate_cancellation
from cr_core.reservations.models import ReservationStatus

ARRIVAL = date(2030, 7, 10)
ARRIVAL_AT = datetime(2030, 7, 10, 15, 0, tzinfo=timezone.utc)


def _policy(fee_type=CancellationFeeType.FLAT, *, window=48, flat=2500, percent=None, tz="UTC"):
    return CancellationPolicy(
        policy_type=CancellationPolicyType.CUSTOM,
        window_hours=window,
        fee_type=fee_type,
        fee_flat_cents=flat,
        fee_percent=percent,
        timezone=tz,
        check_in_time=time(15, 0),
    )


def _snapshot(status=ReservationStatus.CONFIRMED, *, total=15000, paid=15000, first_night=5000, nights=3):
    return CancellationSnapshot(
        status=status,
        arrival_date=ARRIVAL,
        nights=nights,
        total_cents=total,
        paid_amount_cents=paid,
        first_night_rate_cents=first_night,
    )


def test_outside_window_is_free_and_refunds_everything():
    out = evaluate_cancellation(snapshot=_snapshot(), policy=_policy(), now=ARRIVAL_AT - timedelta(hours=72))

    assert out.fee_cents == 0
    assert out.refund_cents == 15000
    assert out.within_free_window is True
    assert out.hours_until_arrival == Decimal("72.00")


def test_inside_window_charges_flat_fee():
    out = evaluate_cancellation(snapshot=_snapshot(), policy=_policy(), now=ARRIVAL_AT - timedelta(hours=24))

    assert out.fee_cents == 2500
    assert out.refund_cents == 12500
    assert out.within_free_window is False


def test_exactly_on_the_window_boundary_is_free():
    out = evaluate_cancellation(snapshot=_snapshot(), policy=_policy(), now=ARRIVAL_AT - timedelta(hours=48))

    assert out.within_free_window is True
    assert out.fee_cents == 0


def test_seconds_are_ignored_when_evaluating():
    # 47h59m30s before arrival truncates to 47h59m -> inside the window
    now = ARRIVAL_AT - timedelta(hours=48) + timedelta(seconds=30)
    out = evaluate_cancellation(snapshot=_snapshot(), policy=_policy(), now=now)

    assert out.evaluated_at == ARRIVAL_AT - timedelta(hours=48)
    assert out.within_free_window is True


@pytest.mark.parametrize(
    "fee_type,kwargs,expected",
    [
        (CancellationFeeType.NONE, {}, 0),
        (CancellationFeeType.FLAT, {"flat": 2500}, 2500),
        (CancellationFeeType.PERCENT, {"percent": Decimal("50")}, 7500),
        (CancellationFeeType.FIRST_NIGHT, {}, 5000),
    ],
)
def test_fee_types_inside_window(fee_type, kwargs, expected):
    out = evaluate_cancellation(
        snapshot=_snapshot(),
        policy=_policy(fee_type, **kwargs),
        now=ARRIVAL_AT - timedelta(hours=1),
    )
    assert out.fee_cents == expected


@pytest.mark.parametrize(
    "fee_type,kwargs",
    [
        (CancellationFeeType.FLAT, {"flat": 2500}),
        (CancellationFeeType.PERCENT, {"percent": Decimal("100")}),
        (CancellationFeeType.FIRST_NIGHT, {}),
    ],
)
def test_free_window_means_no_fee_for_every_type(fee_type, kwargs):
    out = evaluate_cancellation(
        snapshot=_snapshot(),
        policy=_policy(fee_type, **kwargs),
        now=ARRIVAL_AT - timedelta(days=30),
    )
    assert out.fee_cents == 0


def test_first_night_falls_back_to_average_night():
    out = evaluate_cancellation(
        snapshot=_snapshot(first_night=None, total=10000, nights=3),
        policy=_policy(CancellationFeeType.FIRST_NIGHT),
        now=ARRIVAL_AT - timedelta(hours=1),
    )
    # 10000 / 3 = 3333.33
    assert out.fee_cents == 3333


def test_refund_never_negative_and_fee_capped_at_total():
    out = evaluate_cancellation(
        snapshot=_snapshot(total=2000, paid=1000),
        policy=_policy(flat=2500),
        now=ARRIVAL_AT - timedelta(hours=1),
    )
    assert out.fee_cents == 2000
    assert out.refund_cents == 0


def test_arrival_moment_uses_campground_timezone():
    # 15:00 in Denver on 2030-07-10 is 21:00 UTC (MDT, UTC-6)
    now = datetime(2030, 7, 8, 21, 0, tzinfo=timezone.utc)
    out = evaluate_cancellation(snapshot=_snapshot(), policy=_policy(tz="America/Denver"), now=now)

    assert out.hours_until_arrival == Decimal("48.00")
    assert out.within_free_window is True


@pytest.mark.parametrize(
    "status", [ReservationStatus.CHECKED_IN, ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED]
)
def test_rejects_non_cancellable_status(status):
    with pytest.raises(InvalidCancellationState):
        evaluate_cancellation(snapshot=_snapshot(status), policy=_policy(), now=ARRIVAL_AT - timedelta(days=5))


def test_evaluation_is_idempotent():
    snap, policy, now = _snapshot(), _policy(), ARRIVAL_AT - timedelta(hours=10, seconds=17)
    assert evaluate_cancellation(snapshot=snap, policy=policy, now=now) == evaluate_cancellation(
        snapshot=snap, policy=policy, now=now
    )


def test_policy_snapshot_round_trips_through_json():
    policy = _policy(CancellationFeeType.PERCENT, percent=Decimal("50.00"), tz="America/Denver")
    assert CancellationPolicy.from_snapshot(policy.to_snapshot()) == policy
