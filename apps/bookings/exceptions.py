"""Turns booking errors into structured API responses."""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.errors import BookingError, PolicyError

logger = logging.getLogger(__name__)


def booking_exception_handler(exc, context):  # type: ignore
    """DRF exception handler aware of the booking error taxonomy."""
    if isinstance(exc, BookingError):
        payload = exc.to_dict()
        if isinstance(exc, PolicyError) and exc.warnings:
            payload["warnings"] = exc.warnings
        view = context.get("view")
        logger.info(
            f"{type(exc).__name__} in {type(view).__name__ if view else 'unknown view'}: {exc.message}"
        )
        return Response(payload, status=exc.status_code)
    return exception_handler(exc, context)
