"""Loading the booking settings record into an immutable value."""

from __future__ import annotations

import logging

from django.core.exceptions import ImproperlyConfigured  # type: ignore
from django.db.models import Sum  # type: ignore

from apps.rooms.models import Room

from .domain import (
    BookingSettings,
    BulkPriceTable,
    PriceTable,
    RestrictionPeriod,
)
from .models import AccessCode, BookingConfiguration, SeasonalRestrictionPeriod
from .serializers import BulkPriceTableSerializer, PriceTableSerializer

logger = logging.getLogger(__name__)


def total_bed_capacity() -> int:
    return Room.objects.filter(is_active=True).aggregate(total=Sum("beds"))["total"] or 0


def load_booking_settings() -> BookingSettings:
    """Read, schema-check and freeze the current booking settings.

    A stored record that no longer passes validation is a deployment
    error, not a client error, so it raises ImproperlyConfigured.
    """
    config = BookingConfiguration.load()

    prices = PriceTableSerializer(data=config.prices)
    bulk_prices = BulkPriceTableSerializer(data=config.bulk_prices)
    if not prices.is_valid() or not bulk_prices.is_valid():
        logger.error(
            f"Stored booking configuration is invalid: prices={prices.errors} bulk={bulk_prices.errors}"
        )
        raise ImproperlyConfigured("Stored booking configuration failed validation")

    periods = tuple(
        RestrictionPeriod(
            period_id=period.period_id,
            name=period.name,
            start_date=period.start_date,
            end_date=period.end_date,
            year=period.year,
        )
        for period in SeasonalRestrictionPeriod.objects.all()
    )
    codes = frozenset(AccessCode.objects.filter(is_active=True).values_list("code", flat=True))

    return BookingSettings(
        prices=PriceTable.from_dict(prices.validated_data),
        bulk_prices=BulkPriceTable(**bulk_prices.validated_data),
        bulk_min_guests=config.bulk_min_guests,
        bulk_max_guests=config.bulk_max_guests or total_bed_capacity(),
        restriction_periods=periods,
        access_codes=codes,
    )
