# cr_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from cr_core.audit.api.views import AuditEventViewSet
from cr_core.campgrounds.api.views import CampgroundViewSet
from cr_core.charges.api.views import TaxRuleViewSet, UpsellViewSet
from cr_core.deposits.api.views import DepositConfigView
from cr_core.pricing.api.views import PricingRuleViewSet
from cr_core.quotes.api.views import QuoteView
from cr_core.rates.api.views import RateEntryViewSet
from cr_core.reservations.api.views import ReservationViewSet

router = DefaultRouter()

# Settings
router.register(r"campgrounds", CampgroundViewSet, basename="campgrounds")
router.register(r"rates", RateEntryViewSet, basename="rates")
router.register(r"dynamic-pricing/rules", PricingRuleViewSet, basename="pricing-rules")
router.register(r"tax-rules", TaxRuleViewSet, basename="tax-rules")
router.register(r"upsells", UpsellViewSet, basename="upsells")

# Bookings
router.register(r"reservations", ReservationViewSet, basename="reservations")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("quotes/", QuoteView.as_view(), name="quotes"),
    path("deposit-config/", DepositConfigView.as_view(), name="deposit-config"),
    path("", include(router.urls)),
]
