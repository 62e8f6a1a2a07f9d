# cr_core/reservations/tests/test_reservations_api.py
import uuid

import pytest

from cr_core.conftest import scope_headers
from cr_core.iam.models import MembershipRole
from cr_core.reservations.models import Reservation, ReservationStatus

pytestmark = pytest.mark.django_db

URL = "/api/v1/reservations/"


def _payload(site, **overrides):
    body = {
        "site": str(site.id),
        "guest_name": "Ada Camper",
        "guest_email": "ada@example.com",
        "arrival_date": "2030-07-10",
        "departure_date": "2030-07-13",
        "adults": 2,
    }
    body.update(overrides)
    return body


def _create(client, campground, site, **overrides):
    return client.post(URL, _payload(site, **overrides), format="json", **scope_headers(campground))


def test_create_reservation_returns_quote_snapshot(api_client, campground, site, summer_rate):
    r = _create(api_client, campground, site)
    assert r.status_code == 201, r.content

    body = r.json()
    assert body["status"] == ReservationStatus.PENDING
    assert body["nights"] == 3
    assert body["total_cents"] == 15000
    assert body["balance_due_cents"] == 15000
    assert [n["rate_cents"] for n in body["nightly_rates"]] == [5000, 5000, 5000]
    assert body["cancellation_policy_snapshot"]["window_hours"] == 48


def test_idempotency_key_replays_create(api_client, campground, site, summer_rate):
    key = uuid.uuid4().hex
    h = {**scope_headers(campground), "HTTP_IDEMPOTENCY_KEY": key}

    r1 = api_client.post(URL, _payload(site), format="json", **h)
    r2 = api_client.post(URL, _payload(site), format="json", **h)

    assert r1.status_code == 201, r1.content
    assert r2.status_code == 201, r2.content
    assert r1.json()["id"] == r2.json()["id"]
    assert Reservation.objects.count() == 1


def test_double_booking_is_409(api_client, campground, site, summer_rate):
    first = _create(api_client, campground, site).json()

    r = _create(api_client, campground, site, arrival_date="2030-07-12", departure_date="2030-07-14")
    assert r.status_code == 409

    err = r.json()["error"]
    assert err["code"] == "conflict"
    assert err["details"]["conflicting_reservation_ids"] == [first["id"]]


def test_departure_before_arrival_is_400(api_client, campground, site, summer_rate):
    r = _create(api_client, campground, site, departure_date="2030-07-10")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "invalid_date_range"


def test_lifecycle_and_illegal_transition(api_client, campground, site, summer_rate):
    rid = _create(api_client, campground, site).json()["id"]
    h = scope_headers(campground)

    r = api_client.post(f"{URL}{rid}/check-out/", **h)
    assert r.status_code == 409

    assert api_client.post(f"{URL}{rid}/confirm/", **h).json()["status"] == ReservationStatus.CONFIRMED
    assert api_client.post(f"{URL}{rid}/check-in/", **h).json()["status"] == ReservationStatus.CHECKED_IN

    r = api_client.post(f"{URL}{rid}/cancel/", **h)
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "invalid_cancellation_state"


def test_payment_then_cancel_far_from_arrival_refunds_everything(api_client, campground, site, summer_rate):
    campground.cancellation_fee_type = "flat"
    campground.cancellation_fee_flat_cents = 2500
    campground.save()

    rid = _create(api_client, campground, site).json()["id"]
    h = scope_headers(campground)

    r = api_client.post(f"{URL}{rid}/payments/", {"amount_cents": 15000}, format="json", **h)
    assert r.status_code == 200, r.content
    assert r.json()["paid_amount_cents"] == 15000

    preview = api_client.get(f"{URL}{rid}/cancellation-preview/", **h)
    assert preview.status_code == 200
    assert preview.json()["fee_cents"] == 0
    assert preview.json()["within_free_window"] is True
    assert Reservation.objects.get(id=rid).status == ReservationStatus.PENDING

    r = api_client.post(f"{URL}{rid}/cancel/", **h)
    assert r.status_code == 200, r.content
    body = r.json()
    assert body["outcome"]["refund_cents"] == 15000
    assert body["reservation"]["status"] == ReservationStatus.CANCELLED
    assert body["reservation"]["refund_cents"] == 15000


def test_zero_payment_is_rejected(api_client, campground, site, summer_rate):
    rid = _create(api_client, campground, site).json()["id"]
    r = api_client.post(f"{URL}{rid}/payments/", {"amount_cents": 0}, format="json", **scope_headers(campground))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "validation_error"


def test_list_filters_by_status(api_client, campground, site, summer_rate):
    rid = _create(api_client, campground, site).json()["id"]
    _create(api_client, campground, site, arrival_date="2030-07-20", departure_date="2030-07-22")
    api_client.post(f"{URL}{rid}/confirm/", **scope_headers(campground))

    r = api_client.get(URL, {"status": "confirmed"}, **scope_headers(campground))
    assert r.status_code == 200
    assert [x["id"] for x in r.json()["results"]] == [rid]


def test_readonly_can_view_but_not_book(client_for, api_client, campground, site, summer_rate):
    rid = _create(api_client, campground, site).json()["id"]
    ro = client_for(MembershipRole.READONLY)

    assert ro.get(f"{URL}{rid}/", **scope_headers(campground)).status_code == 200
    assert ro.get(f"{URL}{rid}/cancellation-preview/", **scope_headers(campground)).status_code == 200
    assert _create(ro, campground, site, arrival_date="2030-08-01", departure_date="2030-08-02").status_code == 403


def test_front_desk_can_book(client_for, campground, site, summer_rate):
    desk = client_for(MembershipRole.FRONT_DESK)
    assert _create(desk, campground, site).status_code == 201


def test_reservation_in_other_campground_is_404(api_client, make_user, campground, other_campground, site, summer_rate):
    rid = _create(api_client, campground, site).json()["id"]
    api_client.force_authenticate(user=make_user(MembershipRole.ADMIN, at=other_campground))

    r = api_client.get(f"{URL}{rid}/", **scope_headers(other_campground))
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"
