"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import (
    AccessCodeValidateView,
    AvailabilityCalendarView,
    AvailabilityView,
    BookingViewSet,
    HoldViewSet,
    PriceView,
)

router = DefaultRouter()
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"holds", HoldViewSet, basename="hold")

urlpatterns = [
    path("availability/", AvailabilityView.as_view(), name="availability"),
    path("availability/calendar/", AvailabilityCalendarView.as_view(), name="availability-calendar"),
    path("price/", PriceView.as_view(), name="price"),
    path("access-codes/validate/", AccessCodeValidateView.as_view(), name="access-code-validate"),
    path("", include(router.urls)),
]
