# cr_core/rates/api/views.py
from __future__ import annotations

from datetime import date

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from cr_core.common.api.pagination import paginate
from cr_core.common.permissions import SettingsPermission
from cr_core.common.scope import require_scope, uuid_or_none
from cr_core.rates.api.serializers import RateEntryCreateSerializer, RateEntrySerializer, RateEntryUpdateSerializer
from cr_core.rates.models import RateEntry
from cr_core.rates.selectors import rate_entries_filtered
from cr_core.rates.services import RateEntryService, RateEntryUpdate


def _date_or_none(value: str | None, field_name: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError({field_name: "Invalid date (YYYY-MM-DD expected)."})


class RateEntryViewSet(viewsets.GenericViewSet):
    """
    Nightly rates per site or site class. Locked entries reject edits with 409.
    """
    permission_classes = [SettingsPermission]
    serializer_class = RateEntrySerializer
    queryset = RateEntry.objects.none()

    @extend_schema(
        tags=["Rates"],
        responses={200: RateEntrySerializer(many=True)},
        parameters=[
            OpenApiParameter(name="site", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="site_class", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False
            ),
            OpenApiParameter(
                name="on_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Only entries covering this night.",
            ),
        ],
    )
    def list(self, request):
        scope = require_scope(request)

        qs = rate_entries_filtered(
            campground_id=scope.campground_id,
            site_id=uuid_or_none(request.query_params.get("site"), "site"),
            site_class_id=uuid_or_none(request.query_params.get("site_class"), "site_class"),
            on_date=_date_or_none(request.query_params.get("on_date"), "on_date"),
        )
        return paginate(request, qs, RateEntrySerializer)

    @extend_schema(tags=["Rates"], request=RateEntryCreateSerializer, responses={201: RateEntrySerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = RateEntryCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        entry = RateEntryService.create(
            campground_id=scope.campground_id,
            site_id=d.get("site"),
            site_class_id=d.get("site_class"),
            start_date=d["start_date"],
            end_date=d["end_date"],
            nightly_rate_cents=d["nightly_rate_cents"],
            label=d.get("label", ""),
            actor_user_id=request.user.id,
        )
        return Response(RateEntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Rates"], request=RateEntryUpdateSerializer, responses={200: RateEntrySerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = RateEntryUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        entry = RateEntryService.update(
            campground_id=scope.campground_id,
            rate_entry_id=uuid_or_none(pk, "id"),
            patch=RateEntryUpdate(**ser.validated_data),
            actor_user_id=request.user.id,
        )
        return Response(RateEntrySerializer(entry).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Rates"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)

        RateEntryService.delete(
            campground_id=scope.campground_id,
            rate_entry_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
