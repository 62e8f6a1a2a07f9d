# cr_core/reservations/tests/test_reservation_service.py
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from cr_core.audit.models import AuditEvent
from cr_core.campgrounds.models import CancellationFeeType
from cr_core.common.api.exceptions import ConflictError, InvalidCancellationState, NoRateConfigured
from cr_core.deposits.models import DepositConfig, DepositRule
from cr_core.rates.models import RateEntry
from cr_core.reservations.models import Reservation, ReservationStatus
from cr_core.reservations.services import ReservationService

pytestmark = pytest.mark.django_db

ARRIVAL = date(2030, 7, 10)
DEPARTURE = date(2030, 7, 13)
ARRIVAL_AT = datetime(2030, 7, 10, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def flat_fee_policy(campground):
    campground.cancellation_window_hours = 48
    campground.cancellation_fee_type = CancellationFeeType.FLAT
    campground.cancellation_fee_flat_cents = 2500
    campground.save()
    return campground


def _book(campground, site, *, arrival=ARRIVAL, departure=DEPARTURE, **kwargs):
    return ReservationService.create(
        campground_id=campground.id,
        site_id=site.id,
        guest_name="Ada Camper",
        arrival=arrival,
        departure=departure,
        adults=2,
        **kwargs,
    )


def test_booking_snapshots_quote_and_policy(campground, site, summer_rate, flat_fee_policy):
    DepositConfig.objects.create(campground_id=campground.id, rule=DepositRule.PERCENT, percentage=Decimal("25"))

    res = _book(campground, site, actor_user_id=7)

    assert res.status == ReservationStatus.PENDING
    assert res.base_total_cents == 15000
    assert res.total_cents == 15000
    assert res.deposit_cents == 3750
    assert res.first_night_rate_cents == 5000
    assert len(res.nightly_rates) == 3
    assert res.cancellation_policy_snapshot["fee_type"] == "flat"
    assert res.cancellation_policy_snapshot["fee_flat_cents"] == 2500

    summer_rate.refresh_from_db()
    assert summer_rate.is_locked
    assert AuditEvent.objects.filter(event_code="reservation.created", entity_id=res.id, actor_user_id=7).exists()


def test_overlapping_booking_conflicts(campground, site, summer_rate):
    first = _book(campground, site)

    with pytest.raises(ConflictError) as exc:
        _book(campground, site, arrival=date(2030, 7, 12), departure=date(2030, 7, 15))

    assert exc.value.detail["conflicting_reservation_ids"] == [str(first.id)]
    assert Reservation.objects.count() == 1


def test_database_rejects_second_active_stay_with_same_arrival(campground, site):
    Reservation.objects.create(
        campground_id=campground.id, site=site, guest_name="First", arrival_date=ARRIVAL, departure_date=DEPARTURE
    )

    with pytest.raises(IntegrityError), transaction.atomic():
        Reservation.objects.create(
            campground_id=campground.id,
            site=site,
            guest_name="Second",
            arrival_date=ARRIVAL,
            departure_date=date(2030, 7, 11),
            status=ReservationStatus.CONFIRMED,
        )

    Reservation.objects.create(
        campground_id=campground.id,
        site=site,
        guest_name="Cancelled",
        arrival_date=ARRIVAL,
        departure_date=DEPARTURE,
        status=ReservationStatus.CANCELLED,
    )
    assert Reservation.objects.filter(site=site).count() == 2


def test_constraint_violation_surfaces_as_conflict(campground, site, summer_rate, monkeypatch):
    _book(campground, site)
    # an overlap check that raced with another booking and saw nothing
    monkeypatch.setattr(
        "cr_core.reservations.services.overlapping_reservations", lambda **kwargs: Reservation.objects.none()
    )

    with pytest.raises(ConflictError) as exc:
        _book(campground, site)

    assert exc.value.detail["site_id"] == str(site.id)
    assert Reservation.objects.count() == 1


def test_back_to_back_stays_do_not_overlap(campground, site, summer_rate):
    _book(campground, site)
    second = _book(campground, site, arrival=DEPARTURE, departure=date(2030, 7, 15))
    assert second.status == ReservationStatus.PENDING


def test_cancelled_booking_frees_the_site(campground, site, summer_rate):
    first = _book(campground, site)
    ReservationService.cancel(campground_id=campground.id, reservation_id=first.id, now=ARRIVAL_AT - timedelta(days=10))

    again = _book(campground, site)
    assert again.id != first.id


def test_policy_changes_do_not_touch_existing_bookings(campground, site, summer_rate, flat_fee_policy):
    res = _book(campground, site)
    res.paid_amount_cents = 15000
    res.save()

    campground.cancellation_fee_flat_cents = 9999
    campground.save()

    outcome = ReservationService.preview_cancellation(
        campground_id=campground.id, reservation_id=res.id, now=ARRIVAL_AT - timedelta(hours=24)
    )
    assert outcome.fee_cents == 2500


def test_lifecycle_transitions(campground, site, summer_rate):
    res = _book(campground, site)

    res = ReservationService.confirm(campground_id=campground.id, reservation_id=res.id)
    assert res.status == ReservationStatus.CONFIRMED

    with pytest.raises(ConflictError):
        ReservationService.check_out(campground_id=campground.id, reservation_id=res.id)

    res = ReservationService.check_in(campground_id=campground.id, reservation_id=res.id)
    res = ReservationService.check_out(campground_id=campground.id, reservation_id=res.id)
    assert res.status == ReservationStatus.CHECKED_OUT


def test_payments_are_capped_at_total(campground, site, summer_rate):
    res = _book(campground, site)

    res = ReservationService.record_payment(campground_id=campground.id, reservation_id=res.id, amount_cents=10000)
    res = ReservationService.record_payment(campground_id=campground.id, reservation_id=res.id, amount_cents=10000)

    assert res.paid_amount_cents == 15000
    assert res.balance_due_cents == 0


@pytest.mark.parametrize(
    "hours_before,fee,refund",
    [
        (72, 0, 15000),
        (48, 0, 15000),
        (24, 2500, 12500),
    ],
)
def test_cancel_applies_policy(campground, site, summer_rate, flat_fee_policy, hours_before, fee, refund):
    res = _book(campground, site)
    ReservationService.record_payment(campground_id=campground.id, reservation_id=res.id, amount_cents=15000)

    res, outcome = ReservationService.cancel(
        campground_id=campground.id,
        reservation_id=res.id,
        now=ARRIVAL_AT - timedelta(hours=hours_before),
    )

    assert outcome.fee_cents == fee
    assert outcome.refund_cents == refund
    res.refresh_from_db()
    assert res.status == ReservationStatus.CANCELLED
    assert res.cancellation_fee_cents == fee
    assert res.refund_cents == refund
    assert res.cancelled_at == ARRIVAL_AT - timedelta(hours=hours_before)


def test_cannot_cancel_twice_or_after_check_in(campground, site, summer_rate):
    res = _book(campground, site)
    ReservationService.cancel(campground_id=campground.id, reservation_id=res.id, now=ARRIVAL_AT - timedelta(days=3))

    with pytest.raises(InvalidCancellationState):
        ReservationService.cancel(campground_id=campground.id, reservation_id=res.id, now=ARRIVAL_AT)

    other = _book(campground, site)
    ReservationService.confirm(campground_id=campground.id, reservation_id=other.id)
    ReservationService.check_in(campground_id=campground.id, reservation_id=other.id)

    with pytest.raises(InvalidCancellationState):
        ReservationService.preview_cancellation(campground_id=campground.id, reservation_id=other.id, now=ARRIVAL_AT)


def test_payment_rejected_on_cancelled_reservation(campground, site, summer_rate):
    res = _book(campground, site)
    ReservationService.cancel(campground_id=campground.id, reservation_id=res.id, now=ARRIVAL_AT - timedelta(days=3))

    with pytest.raises(ConflictError):
        ReservationService.record_payment(campground_id=campground.id, reservation_id=res.id, amount_cents=100)


def test_failed_booking_leaves_rates_unlocked(campground, site):
    RateEntry.objects.create(
        campground_id=campground.id,
        site=site,
        start_date=ARRIVAL,
        end_date=date(2030, 7, 11),
        nightly_rate_cents=5000,
    )

    with pytest.raises(NoRateConfigured):
        _book(campground, site)

    assert not RateEntry.objects.filter(locked_at__isnull=False).exists()
    assert not Reservation.objects.exists()
