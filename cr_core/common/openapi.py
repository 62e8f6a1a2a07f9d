# cr_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter

from cr_core.common.scope import HDR_CAMPGROUND


class CampreservAutoSchema(AutoSchema):
    """
    Adds X-Campground-Id to every scoped operation and documents
    Idempotency-Key on reservation creation.
    """

    SCOPE_HEADER = OpenApiParameter(
        name=HDR_CAMPGROUND,
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=True,
        description="Campground scope UUID (required for scoped endpoints).",
    )

    IDEMPOTENCY_HEADER = OpenApiParameter(
        name="Idempotency-Key",
        type=OpenApiTypes.STR,
        location=OpenApiParameter.HEADER,
        required=False,
        description="Optional key for safely retrying reservation creation.",
    )

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        if view.__class__.__name__ in {"SpectacularAPIView", "SpectacularSwaggerView"}:
            return True

        permission = next(iter(getattr(view, "permission_classes", []) or []), None)
        if permission is None or not hasattr(permission, "scope_exempt_actions"):
            # token views and other role-less endpoints
            return True
        exempt = permission.scope_exempt_actions
        return getattr(view, "action", None) in exempt

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])
        existing = {p.name.lower() for p in params}

        if not self._is_unscoped_endpoint() and HDR_CAMPGROUND.lower() not in existing:
            params.append(self.SCOPE_HEADER)

        path = getattr(self, "path", "") or ""
        if self.method == "POST" and path.rstrip("/").endswith("/reservations"):
            if "idempotency-key" not in existing:
                params.append(self.IDEMPOTENCY_HEADER)

        return params
