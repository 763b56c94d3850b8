from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import BlockageViewSet, RoomViewSet

router = DefaultRouter()
router.register(r"rooms", RoomViewSet, basename="room")
router.register(r"blockages", BlockageViewSet, basename="blockage")

urlpatterns = [
    path("", include(router.urls)),
]
