# cr_core/deposits/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from cr_core.common.permissions import SettingsPermission
from cr_core.common.scope import require_scope, uuid_or_none
from cr_core.deposits.api.serializers import DepositConfigSerializer
from cr_core.deposits.models import DepositApplyTo, DepositRule
from cr_core.deposits.selectors import deposit_config_for
from cr_core.deposits.services import DepositConfigService


def _no_deposit(site_class_id) -> dict:
    return {
        "site_class": str(site_class_id) if site_class_id else None,
        "rule": DepositRule.NONE.value,
        "apply_to": DepositApplyTo.LODGING_PLUS_FEES.value,
        "percentage": None,
        "flat_cents": None,
        "min_cents": None,
        "max_cents": None,
        "is_active": True,
    }


class DepositConfigView(APIView):
    """
    GET /deposit-config/[?site_class=]  -> stored config for that target (rule=none when never configured)
    PUT /deposit-config/                -> replace the config for body.site_class (or the default)
    """
    permission_classes = [SettingsPermission]

    @extend_schema(
        tags=["Deposits"],
        parameters=[OpenApiParameter("site_class", OpenApiTypes.UUID, OpenApiParameter.QUERY)],
        responses={200: DepositConfigSerializer},
    )
    def get(self, request):
        scope = require_scope(request)
        site_class_id = uuid_or_none(request.query_params.get("site_class"), "site_class")
        config = deposit_config_for(campground_id=scope.campground_id, site_class_id=site_class_id)
        data = DepositConfigSerializer(config).data if config is not None else _no_deposit(site_class_id)
        return Response(data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Deposits"], request=DepositConfigSerializer, responses={200: DepositConfigSerializer})
    def put(self, request):
        scope = require_scope(request)

        ser = DepositConfigSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        config = DepositConfigService.upsert(
            campground_id=scope.campground_id,
            site_class_id=d.get("site_class_id"),
            rule=d["rule"],
            apply_to=d.get("apply_to", DepositApplyTo.LODGING_PLUS_FEES),
            percentage=d.get("percentage"),
            flat_cents=d.get("flat_cents"),
            min_cents=d.get("min_cents"),
            max_cents=d.get("max_cents"),
            is_active=d.get("is_active", True),
            actor_user_id=request.user.id,
        )
        return Response(DepositConfigSerializer(config).data, status=status.HTTP_200_OK)
