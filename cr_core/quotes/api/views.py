# cr_core/quotes/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from cr_core.common.permissions import QuotePermission
from cr_core.common.scope import require_scope
from cr_core.quotes.api.serializers import QuoteRequestSerializer, QuoteSerializer
from cr_core.quotes.services import QuoteService


class QuoteView(APIView):
    """
    POST /quotes/ -> price a prospective stay. Nothing is stored.
    """
    permission_classes = [QuotePermission]

    @extend_schema(tags=["Quotes"], request=QuoteRequestSerializer, responses={200: QuoteSerializer})
    def post(self, request):
        scope = require_scope(request)

        ser = QuoteRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        quote = QuoteService.build_quote(
            campground_id=scope.campground_id,
            arrival=d["arrival_date"],
            departure=d["departure_date"],
            site_id=d.get("site"),
            site_class_id=d.get("site_class"),
            adults=d["adults"],
            children=d["children"],
            pets=d["pets"],
            upsells=d["upsells"],
            demand_score=d["demand_score"],
            occupancy_percent=d.get("occupancy_percent"),
        )
        return Response(quote.as_dict(), status=status.HTTP_200_OK)
