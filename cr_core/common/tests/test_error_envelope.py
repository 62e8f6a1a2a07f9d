# cr_core/common/tests/test_error_envelope.py
import pytest
from rest_framework.test import APIClient

from cr_core.conftest import scope_headers

pytestmark = pytest.mark.django_db


def test_unauthenticated_request_uses_envelope(campground):
    r = APIClient().get("/api/v1/reservations/", **scope_headers(campground))
    assert r.status_code == 401
    err = r.json()["error"]
    assert err["code"] == "not_authenticated"
    assert err["request_id"]


def test_missing_scope_header_is_forbidden(api_client):
    r = api_client.get("/api/v1/reservations/")
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "permission_denied"


def test_malformed_scope_header_is_forbidden(api_client):
    r = api_client.get("/api/v1/reservations/", HTTP_X_CAMPGROUND_ID="not-a-uuid")
    assert r.status_code == 403


def test_user_without_membership_is_forbidden(api_client, other_campground):
    r = api_client.get("/api/v1/reservations/", **scope_headers(other_campground))
    assert r.status_code == 403


def test_validation_errors_carry_field_details(api_client, campground):
    r = api_client.post("/api/v1/reservations/", {}, format="json", **scope_headers(campground))
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "validation_error"
    assert err["message"] == "Request failed."
    assert "site" in err["details"]
    assert "guest_name" in err["details"]


def test_bad_uuid_in_path_is_400(api_client, campground):
    r = api_client.get("/api/v1/reservations/not-a-uuid/", **scope_headers(campground))
    assert r.status_code == 400
    assert r.json()["error"]["details"] == {"id": "Invalid UUID"}
