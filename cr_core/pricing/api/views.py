# cr_core/pricing/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.response import Response

from cr_core.common.api.pagination import paginate
from cr_core.common.permissions import SettingsPermission
from cr_core.common.scope import require_scope, uuid_or_none
from cr_core.pricing.api.serializers import (
    PricingRuleCreateSerializer,
    PricingRuleSerializer,
    PricingRuleUpdateSerializer,
)
from cr_core.pricing.models import PricingRule, StackMode
from cr_core.pricing.selectors import pricing_rule_by_id, pricing_rules_filtered
from cr_core.pricing.services import PricingRuleService, PricingRuleUpdate


def _bool_or_none(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


class PricingRuleViewSet(viewsets.GenericViewSet):
    """
    /dynamic-pricing/rules/
    """
    permission_classes = [SettingsPermission]
    serializer_class = PricingRuleSerializer
    queryset = PricingRule.objects.none()

    @extend_schema(
        tags=["Dynamic pricing"],
        responses={200: PricingRuleSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="trigger", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        qs = pricing_rules_filtered(
            campground_id=scope.campground_id,
            trigger=request.query_params.get("trigger") or None,
            is_active=_bool_or_none(request.query_params.get("is_active")),
        )
        return paginate(request, qs, PricingRuleSerializer)

    @extend_schema(tags=["Dynamic pricing"], responses={200: PricingRuleSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        rule = pricing_rule_by_id(campground_id=scope.campground_id, rule_id=uuid_or_none(pk, "id"))
        return Response(PricingRuleSerializer(rule).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Dynamic pricing"], request=PricingRuleCreateSerializer, responses={201: PricingRuleSerializer})
    def create(self, request):
        scope = require_scope(request)

        ser = PricingRuleCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        rule = PricingRuleService.create(
            campground_id=scope.campground_id,
            name=d["name"],
            trigger=d["trigger"],
            adjustment_type=d["adjustment_type"],
            adjustment_value=d["adjustment_value"],
            threshold=d.get("threshold"),
            stack_mode=d.get("stack_mode", StackMode.ADDITIVE),
            min_rate_cents=d.get("min_rate_cents"),
            max_rate_cents=d.get("max_rate_cents"),
            site_class_id=d.get("site_class"),
            starts_on=d.get("starts_on"),
            ends_on=d.get("ends_on"),
            is_active=d.get("is_active", True),
            priority=d.get("priority", 100),
            actor_user_id=request.user.id,
        )
        return Response(PricingRuleSerializer(rule).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Dynamic pricing"], request=PricingRuleUpdateSerializer, responses={200: PricingRuleSerializer})
    def partial_update(self, request, pk=None):
        scope = require_scope(request)

        ser = PricingRuleUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        rule = PricingRuleService.update(
            campground_id=scope.campground_id,
            rule_id=uuid_or_none(pk, "id"),
            patch=PricingRuleUpdate(**ser.validated_data),
            actor_user_id=request.user.id,
        )
        return Response(PricingRuleSerializer(rule).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Dynamic pricing"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_scope(request)
        PricingRuleService.delete(
            campground_id=scope.campground_id,
            rule_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
