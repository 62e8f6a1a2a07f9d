# cr_core/charges/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cr_core.charges.api.serializers import (
    TaxRuleCreateSerializer,
    TaxRuleSerializer,
    TaxRuleUpdateSerializer,
    UpsellCreateSerializer,
    UpsellSerializer,
    UpsellUpdateSerializer,
)
from cr_core.charges.models import TaxRule, Upsell
from cr_core.charges.selectors import tax_rules_filtered, upsells_filtered
from cr_core.charges.services import TaxRuleService, TaxRuleUpdate, UpsellService, UpsellUpdate
from cr_core.common.api.pagination import paginate
from cr_core.common.permissions import SettingsPermission
from cr_core.common.scope import require_scope, require_scope_matches, uuid_or_none

IS_ACTIVE_PARAM = OpenApiParameter(
    name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False
)


def _bool_or_none(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


class TaxRuleViewSet(viewsets.GenericViewSet):
    """
    Tax rules. All taxes are exclusive (added on top of the subtotal).
    """
    permission_classes = [SettingsPermission]
    serializer_class = TaxRuleSerializer
    queryset = TaxRule.objects.none()

    @extend_schema(tags=["Taxes"], responses={200: TaxRuleSerializer(many=True)}, parameters=[IS_ACTIVE_PARAM])
    def list(self, request):
        scope = require_scope(request)
        qs = tax_rules_filtered(
            campground_id=scope.campground_id,
            is_active=_bool_or_none(request.query_params.get("is_active")),
        )
        return paginate(request, qs, TaxRuleSerializer)

    @extend_schema(tags=["Taxes"], responses={200: TaxRuleSerializer(many=True)}, parameters=[IS_ACTIVE_PARAM])
    @action(detail=False, methods=["get"], url_path=r"campground/(?P<campground_pk>[^/.]+)")
    def by_campground(self, request, campground_pk=None):
        scope = require_scope_matches(request, campground_pk)
        qs = tax_rules_filtered(
            campground_id=scope.campground_id,
            is_active=_bool_or_none(request.query_params.get("is_active")),
        )
        return Response(TaxRuleSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Taxes"], request=TaxRuleCreateSerializer, responses={201: TaxRuleSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = TaxRuleCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        rule = TaxRuleService.create(
            campground_id=scope.campground_id,
            name=d["name"],
            kind=d["kind"],
            rate_percent=d.get("rate_percent"),
            amount_cents=d.get("amount_cents"),
            applies_to=d["applies_to"],
            min_nights=d.get("min_nights"),
            max_nights=d.get("max_nights"),
            is_active=d["is_active"],
            actor_user_id=request.user.id,
        )
        return Response(TaxRuleSerializer(rule).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Taxes"], request=TaxRuleUpdateSerializer, responses={200: TaxRuleSerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = TaxRuleUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        rule = TaxRuleService.update(
            campground_id=scope.campground_id,
            tax_rule_id=uuid_or_none(pk, "id"),
            patch=TaxRuleUpdate(**ser.validated_data),
            actor_user_id=request.user.id,
        )
        return Response(TaxRuleSerializer(rule).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Taxes"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)
        TaxRuleService.delete(
            campground_id=scope.campground_id,
            tax_rule_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class UpsellViewSet(viewsets.GenericViewSet):
    permission_classes = [SettingsPermission]
    serializer_class = UpsellSerializer
    queryset = Upsell.objects.none()

    @extend_schema(tags=["Upsells"], responses={200: UpsellSerializer(many=True)}, parameters=[IS_ACTIVE_PARAM])
    def list(self, request):
        scope = require_scope(request)
        qs = upsells_filtered(
            campground_id=scope.campground_id,
            is_active=_bool_or_none(request.query_params.get("is_active")),
        )
        return paginate(request, qs, UpsellSerializer)

    @extend_schema(tags=["Upsells"], request=UpsellCreateSerializer, responses={201: UpsellSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = UpsellCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        upsell = UpsellService.create(
            campground_id=scope.campground_id,
            code=d["code"],
            name=d["name"],
            price_cents=d["price_cents"],
            pricing_type=d["pricing_type"],
            is_active=d["is_active"],
            actor_user_id=request.user.id,
        )
        return Response(UpsellSerializer(upsell).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Upsells"], request=UpsellUpdateSerializer, responses={200: UpsellSerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = UpsellUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        upsell = UpsellService.update(
            campground_id=scope.campground_id,
            upsell_id=uuid_or_none(pk, "id"),
            patch=UpsellUpdate(**ser.validated_data),
            actor_user_id=request.user.id,
        )
        return Response(UpsellSerializer(upsell).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Upsells"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)
        UpsellService.delete(
            campground_id=scope.campground_id,
            upsell_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
