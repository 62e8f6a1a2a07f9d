# cr_core/common/api/exceptions.py

from __future__ import annotations

import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope for Campreserv.
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class DomainError(APIException):
    """
    Base for typed business errors.

    Extra keyword details are carried next to "detail" so the envelope handler
    renders them under error.details.
    """
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Request cannot be processed."
    default_code = "domain_error"

    def __init__(self, detail=None, code=None, **details):
        message = detail or self.default_detail
        payload = {"detail": message, **details} if details else message
        super().__init__(detail=payload, code=code or self.default_code)


class ConflictError(DomainError):
    """
    409 Conflict that still flows through the global exception handler.
    Use when business rules block an action (double booking, illegal status change).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


class InvalidDateRange(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Departure date must be after arrival date."
    default_code = "invalid_date_range"


class NoRateConfigured(DomainError):
    default_detail = "No rate is configured for one or more nights of this stay."
    default_code = "no_rate_configured"


class TaxRuleMissing(DomainError):
    default_detail = "Tax setup is incomplete: this campground requires tax but has no active tax rules."
    default_code = "tax_rule_missing"


class InvalidDepositConfig(DomainError):
    default_detail = "Deposit configuration is invalid."
    default_code = "invalid_deposit_config"


class InvalidCancellationState(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Only pending or confirmed reservations can be cancelled."
    default_code = "invalid_cancellation_state"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    data = response.data

    # 1) {"detail": "..."} only -> message=detail, details=None
    # 2) {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) otherwise -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
