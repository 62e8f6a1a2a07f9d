# cr_core/common/api/pagination.py
from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = "page_size"
    max_page_size = 500


def paginate(request, queryset, serializer_class, *, context: dict | None = None) -> Response:
    """
    List responses always use { count, next, previous, results }.
    Settings tables are small, so callers rarely pass page_size.
    """
    p = DefaultPagination()
    ctx = {"request": request, **(context or {})}
    page = p.paginate_queryset(queryset, request)
    return p.get_paginated_response(serializer_class(page, many=True, context=ctx).data)
