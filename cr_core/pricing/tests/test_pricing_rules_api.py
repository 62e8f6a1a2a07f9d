# cr_core/pricing/tests/test_pricing_rules_api.py
import pytest

from cr_core.audit.models import AuditEvent
from cr_core.conftest import scope_headers
from cr_core.iam.models import MembershipRole
from cr_core.pricing.models import PricingRule

pytestmark = pytest.mark.django_db

URL = "/api/v1/dynamic-pricing/rules/"


def _payload(**overrides):
    data = {
        "name": "High season surge",
        "trigger": "occupancy_high",
        "adjustment_type": "percent",
        "adjustment_value": "10.00",
        "priority": 10,
    }
    data.update(overrides)
    return data


def test_create_rule(api_client, campground):
    res = api_client.post(URL, _payload(), format="json", **scope_headers(campground))

    assert res.status_code == 201, res.data
    assert res.data["trigger"] == "occupancy_high"
    assert res.data["adjustment_value"] == "10.00"
    assert res.data["is_active"] is True

    rule = PricingRule.objects.get(id=res.data["id"])
    assert rule.campground_id == campground.id
    assert AuditEvent.objects.filter(event_code="pricing_rule.created", entity_id=rule.id).exists()


def test_create_rule_with_stack_mode_and_rate_caps(api_client, campground):
    res = api_client.post(
        URL,
        _payload(stack_mode="max", min_rate_cents=3000, max_rate_cents=8000),
        format="json",
        **scope_headers(campground),
    )

    assert res.status_code == 201, res.data
    assert res.data["stack_mode"] == "max"
    assert (res.data["min_rate_cents"], res.data["max_rate_cents"]) == (3000, 8000)


def test_create_rejects_inverted_rate_caps(api_client, campground):
    res = api_client.post(
        URL, _payload(min_rate_cents=8000, max_rate_cents=3000), format="json", **scope_headers(campground)
    )

    assert res.status_code == 400
    assert "max_rate_cents" in res.data["error"]["details"]


def test_create_rejects_discount_beyond_hundred_percent(api_client, campground):
    res = api_client.post(URL, _payload(adjustment_value="-150"), format="json", **scope_headers(campground))

    assert res.status_code == 400
    assert res.data["error"]["code"] == "validation_error"
    assert "adjustment_value" in res.data["error"]["details"]


def test_create_rejects_unknown_trigger(api_client, campground):
    res = api_client.post(URL, _payload(trigger="full_moon"), format="json", **scope_headers(campground))
    assert res.status_code == 400


def test_list_is_ordered_by_priority(api_client, campground):
    for name, priority in [("late", 50), ("early", 5), ("middle", 20)]:
        api_client.post(URL, _payload(name=name, priority=priority), format="json", **scope_headers(campground))

    res = api_client.get(URL, **scope_headers(campground))

    assert res.status_code == 200
    assert [r["name"] for r in res.data["results"]] == ["early", "middle", "late"]


def test_patch_and_delete(api_client, campground):
    created = api_client.post(URL, _payload(), format="json", **scope_headers(campground)).data

    res = api_client.patch(f"{URL}{created['id']}/", {"is_active": False}, format="json", **scope_headers(campground))
    assert res.status_code == 200
    assert res.data["is_active"] is False

    res = api_client.delete(f"{URL}{created['id']}/", **scope_headers(campground))
    assert res.status_code == 204
    assert not PricingRule.objects.filter(id=created["id"]).exists()


def test_missing_scope_header_is_forbidden(api_client):
    res = api_client.get(URL)
    assert res.status_code == 403
    assert res.data["error"]["code"] == "permission_denied"


@pytest.mark.parametrize("role", [MembershipRole.FRONT_DESK, MembershipRole.READONLY])
def test_non_staff_cannot_create(client_for, campground, role):
    res = client_for(role).post(URL, _payload(), format="json", **scope_headers(campground))
    assert res.status_code == 403


def test_readonly_can_list(client_for, campground):
    res = client_for(MembershipRole.READONLY).get(URL, **scope_headers(campground))
    assert res.status_code == 200
