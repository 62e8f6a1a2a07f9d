# cr_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets

from cr_core.audit.api.serializers import AuditEventSerializer
from cr_core.audit.models import AuditEvent
from cr_core.audit.selectors import list_audit_events
from cr_core.common.api.pagination import paginate
from cr_core.common.permissions import AuditPermission
from cr_core.common.scope import require_scope, uuid_or_none


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Configuration and reservation history for the scoped campground.
    """
    permission_classes = [AuditPermission]
    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="entity_type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity type (e.g. PricingRule, Reservation).",
            ),
            OpenApiParameter(
                name="entity_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
            ),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by event code (e.g. reservation.cancelled).",
            ),
        ],
    )
    def list(self, request):
        scope = require_scope(request)

        qs = list_audit_events(
            campground_id=scope.campground_id,
            entity_type=request.query_params.get("entity_type") or None,
            entity_id=uuid_or_none(request.query_params.get("entity_id"), "entity_id"),
            event_code=request.query_params.get("event_code") or None,
        )
        return paginate(request, qs, AuditEventSerializer)
