# cr_core/campgrounds/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cr_core.campgrounds.api.serializers import (
    CampgroundSerializer,
    CancellationPolicySerializer,
    FeeUpdateSerializer,
    PolicyUpdateSerializer,
)
from cr_core.campgrounds.models import Campground
from cr_core.campgrounds.selectors import campground_by_id, campgrounds_for_user
from cr_core.campgrounds.services import CampgroundService, FeeUpdate, PolicyUpdate
from cr_core.common.permissions import CampgroundPermission
from cr_core.common.scope import require_scope_matches


class CampgroundViewSet(viewsets.GenericViewSet):
    """
    Campground settings:
    - list: campgrounds the user belongs to (no scope header needed)
    - retrieve
    - policies: PATCH cancellation policy
    - fees: PATCH occupancy / pet fees and tax requirement
    """
    permission_classes = [CampgroundPermission]
    serializer_class = CampgroundSerializer
    queryset = Campground.objects.none()

    @extend_schema(tags=["Campgrounds"], responses={200: CampgroundSerializer(many=True)})
    def list(self, request):
        qs = campgrounds_for_user(user=request.user)
        return Response(CampgroundSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Campgrounds"], responses={200: CampgroundSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope_matches(request, pk)
        cg = campground_by_id(campground_id=scope.campground_id)
        return Response(CampgroundSerializer(cg).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Campgrounds"],
        request=PolicyUpdateSerializer,
        responses={200: CancellationPolicySerializer},
    )
    @action(detail=True, methods=["patch"], url_path="policies")
    def policies(self, request, pk=None):
        scope = require_scope_matches(request, pk)

        ser = PolicyUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        cg = CampgroundService.update_policies(
            campground_id=scope.campground_id,
            patch=PolicyUpdate(**ser.validated_data),
            actor_user_id=request.user.id,
        )
        return Response(CancellationPolicySerializer(cg).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Campgrounds"],
        request=FeeUpdateSerializer,
        responses={200: CampgroundSerializer},
    )
    @action(detail=True, methods=["patch"], url_path="fees")
    def fees(self, request, pk=None):
        scope = require_scope_matches(request, pk)

        ser = FeeUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        cg = CampgroundService.update_fees(
            campground_id=scope.campground_id,
            patch=FeeUpdate(**ser.validated_data),
            actor_user_id=request.user.id,
        )
        return Response(CampgroundSerializer(cg).data, status=status.HTTP_200_OK)
