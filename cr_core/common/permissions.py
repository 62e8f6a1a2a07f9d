# cr_core/common/permissions.py

from __future__ import annotations

from typing import Set
from uuid import UUID

from rest_framework.exceptions import ValidationError
from rest_framework.permissions import BasePermission, SAFE_METHODS

from cr_core.common.scope import resolve_scope

ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_FRONT_DESK = "FRONT_DESK"
ROLE_READONLY = "READONLY"

ALL_ROLES = {ROLE_ADMIN, ROLE_MANAGER, ROLE_FRONT_DESK, ROLE_READONLY}
STAFF_WRITERS = {ROLE_ADMIN, ROLE_MANAGER}
DESK_WRITERS = {ROLE_ADMIN, ROLE_MANAGER, ROLE_FRONT_DESK}


def _user_roles(user, campground_id: UUID | None) -> Set[str]:
    """
    Resolve roles for the scoped campground from CampgroundMembership.

    - Superuser is treated as ADMIN everywhere.
    - No active membership means no roles (deny).
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if campground_id is None:
        return roles

    from cr_core.iam.selectors import membership_roles

    roles.update(membership_roles(user_id=user.id, campground_id=campground_id))
    return roles


class BaseRolePermission(BasePermission):
    """
    Role-based access control for campground-scoped endpoints.

    - Missing/invalid X-Campground-Id -> deny (403), never a 400 from here.
    - ADMIN bypass.
    - allowed_roles_per_action decides everything else; SAFE methods with an
      unknown action fall back to list/retrieve.
    - Actions in scope_exempt_actions only require authentication.
    """
    message = "You do not have permission to perform this action."

    allowed_roles_per_action: dict[str, set[str]] = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": STAFF_WRITERS,
        "update": STAFF_WRITERS,
        "partial_update": STAFF_WRITERS,
        "destroy": STAFF_WRITERS,
    }
    scope_exempt_actions: set[str] = set()

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        action = self._infer_action(request, view)
        if action in self.scope_exempt_actions:
            return True

        try:
            scope = resolve_scope(request)
        except ValidationError:
            return False
        if scope is None:
            return False

        roles = _user_roles(user, scope.campground_id)
        if not roles:
            return False

        if ROLE_ADMIN in roles:
            return True

        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            allowed = self.allowed_roles_per_action.get("retrieve" if is_detail else "list")

        if allowed is not None:
            return bool(roles & allowed)

        # Unknown action => deny by default
        return False


class SettingsPermission(BaseRolePermission):
    """Staff-authored configuration: rates, pricing rules, tax rules, upsells, deposits."""


class CampgroundPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "policies": STAFF_WRITERS,
        "fees": STAFF_WRITERS,
    }
    scope_exempt_actions = {"list"}


class QuotePermission(BaseRolePermission):
    allowed_roles_per_action = {
        "create": DESK_WRITERS,
    }


class ReservationPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "create": DESK_WRITERS,
        "confirm": DESK_WRITERS,
        "check_in": DESK_WRITERS,
        "check_out": DESK_WRITERS,
        "cancel": DESK_WRITERS,
        "payments": DESK_WRITERS,
        "cancellation_preview": ALL_ROLES,
    }


class AuditPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": STAFF_WRITERS,
    }
