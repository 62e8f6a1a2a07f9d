# cr_core/reservations/api/views.py
from __future__ import annotations

from datetime import date

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from cr_core.common.api.pagination import paginate
from cr_core.common.idempotency import get_key, load_response, save_response
from cr_core.common.permissions import ReservationPermission
from cr_core.common.scope import require_scope, uuid_or_none
from cr_core.reservations.api.serializers import (
    CancellationOutcomeSerializer,
    CancellationResultSerializer,
    PaymentSerializer,
    ReservationCreateSerializer,
    ReservationSerializer,
)
from cr_core.reservations.models import Reservation, ReservationStatus
from cr_core.reservations.selectors import reservation_by_id, reservations_filtered
from cr_core.reservations.services import ReservationService


def _date_or_none(value: str | None, field_name: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError({field_name: "Invalid date (YYYY-MM-DD expected)."})


class ReservationViewSet(viewsets.GenericViewSet):
    """
    Bookings:
    - create books a site (Idempotency-Key supported)
    - confirm / check-in / check-out walk the lifecycle
    - cancellation-preview evaluates the fee without writing; cancel applies it
    """
    permission_classes = [ReservationPermission]
    serializer_class = ReservationSerializer
    queryset = Reservation.objects.none()

    @extend_schema(
        tags=["Reservations"],
        responses={200: ReservationSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=ReservationStatus.values,
            ),
            OpenApiParameter(name="site", type=OpenApiTypes.UUID, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="arriving_from", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False
            ),
            OpenApiParameter(
                name="arriving_to", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False
            ),
        ],
    )
    def list(self, request):
        scope = require_scope(request)
        qs = reservations_filtered(
            campground_id=scope.campground_id,
            status=request.query_params.get("status") or None,
            site_id=uuid_or_none(request.query_params.get("site"), "site"),
            arriving_from=_date_or_none(request.query_params.get("arriving_from"), "arriving_from"),
            arriving_to=_date_or_none(request.query_params.get("arriving_to"), "arriving_to"),
        )
        return paginate(request, qs, ReservationSerializer)

    @extend_schema(tags=["Reservations"], responses={200: ReservationSerializer})
    def retrieve(self, request, pk=None):
        scope = require_scope(request)
        res = reservation_by_id(campground_id=scope.campground_id, reservation_id=uuid_or_none(pk, "id"))
        return Response(ReservationSerializer(res).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Reservations"], request=ReservationCreateSerializer, responses={201: ReservationSerializer})
    def create(self, request):
        scope = require_scope(request)

        idem = get_key(request)
        if idem:
            cached = load_response(scope.campground_id, request.user.id, request.method, request.path, idem)
            if cached is not None:
                cached_status, cached_data = cached
                return Response(cached_data, status=cached_status)

        ser = ReservationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        res = ReservationService.create(
            campground_id=scope.campground_id,
            site_id=d["site"],
            guest_name=d["guest_name"],
            guest_email=d.get("guest_email", ""),
            arrival=d["arrival_date"],
            departure=d["departure_date"],
            adults=d["adults"],
            children=d["children"],
            pets=d["pets"],
            upsells=d["upsells"],
            demand_score=d["demand_score"],
            actor_user_id=request.user.id,
        )

        out = ReservationSerializer(res).data
        if idem:
            save_response(
                scope.campground_id,
                request.user.id,
                request.method,
                request.path,
                idem,
                out,
                status_code=status.HTTP_201_CREATED,
            )
        return Response(out, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Reservations"], request=None, responses={200: ReservationSerializer})
    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, pk=None):
        scope = require_scope(request)
        res = ReservationService.confirm(
            campground_id=scope.campground_id,
            reservation_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(ReservationSerializer(res).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Reservations"], request=None, responses={200: ReservationSerializer})
    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):
        scope = require_scope(request)
        res = ReservationService.check_in(
            campground_id=scope.campground_id,
            reservation_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(ReservationSerializer(res).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Reservations"], request=None, responses={200: ReservationSerializer})
    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):
        scope = require_scope(request)
        res = ReservationService.check_out(
            campground_id=scope.campground_id,
            reservation_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(ReservationSerializer(res).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Reservations"], request=PaymentSerializer, responses={200: ReservationSerializer})
    @action(detail=True, methods=["post"], url_path="payments")
    def payments(self, request, pk=None):
        scope = require_scope(request)

        ser = PaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        res = ReservationService.record_payment(
            campground_id=scope.campground_id,
            reservation_id=uuid_or_none(pk, "id"),
            amount_cents=ser.validated_data["amount_cents"],
            actor_user_id=request.user.id,
        )
        return Response(ReservationSerializer(res).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Reservations"], responses={200: CancellationOutcomeSerializer})
    @action(detail=True, methods=["get"], url_path="cancellation-preview")
    def cancellation_preview(self, request, pk=None):
        scope = require_scope(request)
        outcome = ReservationService.preview_cancellation(
            campground_id=scope.campground_id,
            reservation_id=uuid_or_none(pk, "id"),
        )
        return Response(outcome.as_dict(), status=status.HTTP_200_OK)

    @extend_schema(tags=["Reservations"], request=None, responses={200: CancellationResultSerializer})
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        scope = require_scope(request)
        res, outcome = ReservationService.cancel(
            campground_id=scope.campground_id,
            reservation_id=uuid_or_none(pk, "id"),
            actor_user_id=request.user.id,
        )
        return Response(
            {"reservation": ReservationSerializer(res).data, "outcome": outcome.as_dict()},
            status=status.HTTP_200_OK,
        )
