# cr_core/campgrounds/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from cr_core.campgrounds.models import Campground, Site, SiteClass


def campground_by_id(*, campground_id: UUID) -> Campground:
    obj = Campground.objects.filter(id=campground_id).first()
    if obj is None:
        raise NotFound("Campground not found.")
    return obj


def campgrounds_for_user(*, user) -> QuerySet[Campground]:
    qs = Campground.objects.filter(is_active=True)
    if getattr(user, "is_superuser", False):
        return qs.order_by("name")

    from cr_core.iam.selectors import campground_ids_for_user

    return qs.filter(id__in=campground_ids_for_user(user_id=user.id)).order_by("name")


def site_by_id(*, campground_id: UUID, site_id: UUID) -> Site:
    obj = Site.objects.select_related("site_class").filter(campground_id=campground_id, id=site_id).first()
    if obj is None:
        raise NotFound("Site not found in this campground.")
    return obj


def site_class_by_id(*, campground_id: UUID, site_class_id: UUID) -> SiteClass:
    obj = SiteClass.objects.filter(campground_id=campground_id, id=site_class_id).first()
    if obj is None:
        raise NotFound("Site class not found in this campground.")
    return obj


def active_sites(*, campground_id: UUID, site_class_id: UUID | None = None) -> QuerySet[Site]:
    qs = Site.objects.filter(campground_id=campground_id, is_active=True)
    if site_class_id:
        qs = qs.filter(site_class_id=site_class_id)
    return qs
