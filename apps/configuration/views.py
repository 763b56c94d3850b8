"""Admin API for the booking settings."""

from __future__ import annotations

import logging

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from .models import AccessCode, BookingConfiguration, SeasonalRestrictionPeriod
from .serializers import (
    AccessCodeSerializer,
    BookingConfigurationSerializer,
    SeasonalRestrictionPeriodSerializer,
)

logger = logging.getLogger(__name__)


class BookingConfigurationView(APIView):
    """Čtení a úprava ceníku a limitů hromadných rezervací."""

    permission_classes = [permissions.IsAdminUser]
    serializer_class = BookingConfigurationSerializer

    def get(self, request):  # type: ignore
        return Response(BookingConfigurationSerializer(BookingConfiguration.load()).data)

    def put(self, request):  # type: ignore
        config = BookingConfiguration.load()
        serializer = BookingConfigurationSerializer(config, data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"Booking configuration updated by {request.user}")
        return Response(serializer.data)

    def patch(self, request):  # type: ignore
        config = BookingConfiguration.load()
        serializer = BookingConfigurationSerializer(config, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        logger.info(f"Booking configuration updated by {request.user}")
        return Response(serializer.data)


class SeasonalRestrictionPeriodViewSet(viewsets.ModelViewSet):
    queryset = SeasonalRestrictionPeriod.objects.all()
    serializer_class = SeasonalRestrictionPeriodSerializer
    permission_classes = [permissions.IsAdminUser]


class AccessCodeViewSet(viewsets.ModelViewSet):
    queryset = AccessCode.objects.all()
    serializer_class = AccessCodeSerializer
    permission_classes = [permissions.IsAdminUser]
