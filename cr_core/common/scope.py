# cr_core/common/scope.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import NotFound, ValidationError


@dataclass(frozen=True)
class Scope:
    campground_id: UUID


HDR_CAMPGROUND = "X-Campground-Id"

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Campground-Id."
INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Campground-Id."


def _parse_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def get_header(request, name: str) -> Optional[str]:
    """
    request.headers is case-insensitive; fall back to META for the test client.
    """
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(name)
        if v:
            return v
    meta_key = "HTTP_" + name.upper().replace("-", "_")
    return request.META.get(meta_key)


def resolve_scope(request) -> Optional[Scope]:
    """
    Returns Scope when the header is present and valid, None when it is absent.
    Raises 400 when it is present but not a UUID.
    """
    cached = getattr(request, "scope", None)
    if isinstance(cached, Scope):
        return cached

    raw = get_header(request, HDR_CAMPGROUND)
    if not raw:
        return None

    campground_id = _parse_uuid(raw)
    if campground_id is None:
        raise ValidationError({"detail": INVALID_SCOPE_MSG})

    scope = Scope(campground_id=campground_id)
    request.scope = scope
    request.campground_id = campground_id
    return scope


def require_scope(request) -> Scope:
    scope = resolve_scope(request)
    if scope is None:
        raise ValidationError({"detail": MISSING_SCOPE_MSG})
    return scope


def require_scope_matches(request, campground_id) -> Scope:
    """
    For /campgrounds/{id}/ routes: the path id must be the scoped campground.
    """
    scope = require_scope(request)
    if _parse_uuid(campground_id) != scope.campground_id:
        raise NotFound("Campground not found in this scope.")
    return scope


def uuid_or_none(value, field_name: str) -> Optional[UUID]:
    if not value:
        return None
    parsed = _parse_uuid(value)
    if parsed is None:
        raise ValidationError({field_name: "Invalid UUID"})
    return parsed
