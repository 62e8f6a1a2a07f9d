# cr_core/conftest.py
from datetime import date

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from cr_core.campgrounds.models import Campground, Site, SiteClass
from cr_core.iam.models import CampgroundMembership, MembershipRole
from cr_core.rates.models import RateEntry


def scope_headers(campground):
    """
    X-Campground-Id for the DRF test client (needs the HTTP_ prefix).
    """
    return {"HTTP_X_CAMPGROUND_ID": str(campground.id)}


@pytest.fixture
def campground(db):
    return Campground.objects.create(name="Pine Lake", slug="pine-lake", timezone="UTC")


@pytest.fixture
def other_campground(db):
    return Campground.objects.create(name="Red Rock", slug="red-rock", timezone="UTC")


@pytest.fixture
def site_class(campground):
    return SiteClass.objects.create(campground_id=campground.id, name="30A Full Hookup", code="30a-full")


@pytest.fixture
def site(campground, site_class):
    return Site.objects.create(campground_id=campground.id, name="Site 12", code="s12", site_class=site_class)


@pytest.fixture
def summer_rate(campground, site_class):
    """$50/night for the site class across summer 2030."""
    return RateEntry.objects.create(
        campground_id=campground.id,
        site_class=site_class,
        start_date=date(2030, 6, 1),
        end_date=date(2030, 8, 31),
        nightly_rate_cents=5000,
    )


@pytest.fixture
def make_user(db, campground):
    """
    make_user(role) -> user with an active membership at `campground`.
    """
    User = get_user_model()
    counter = {"n": 0}

    def _make(role=MembershipRole.ADMIN, *, at=None):
        counter["n"] += 1
        user = User.objects.create_user(username=f"user{counter['n']}-{role.lower()}", password="testpass")
        CampgroundMembership.objects.create(campground=at or campground, user_id=user.id, role=role)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user(MembershipRole.ADMIN)


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c


@pytest.fixture
def client_for(make_user):
    """
    client_for(role) -> APIClient authenticated as a fresh user with that role.
    """

    def _client(role):
        c = APIClient()
        c.force_authenticate(user=make_user(role))
        return c

    return _client
