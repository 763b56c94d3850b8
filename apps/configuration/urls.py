from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import AccessCodeViewSet, BookingConfigurationView, SeasonalRestrictionPeriodViewSet

router = DefaultRouter()
router.register(r"restriction-periods", SeasonalRestrictionPeriodViewSet, basename="restriction-period")
router.register(r"access-codes", AccessCodeViewSet, basename="access-code")

urlpatterns = [
    path("configuration/", BookingConfigurationView.as_view(), name="booking-configuration"),
    path("", include(router.urls)),
]
