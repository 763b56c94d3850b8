"""Celery tasks delivering booking e-mails after commit."""

from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from .services import (
    send_booking_confirmation_email,
    send_booking_deletion_email,
    send_booking_modification_email,
)

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BASE_SECONDS = 30


def _retry_or_give_up(task, description: str) -> Dict[str, bool]:
    retries = task.request.retries
    if retries >= task.max_retries:
        logger.error(f"Giving up on {description} after {retries} retries")
        return {"sent": False}
    raise task.retry(countdown=RETRY_BASE_SECONDS * 2 ** retries)


@shared_task(bind=True, name="notifications.send_booking_confirmation", max_retries=MAX_RETRIES)
def send_booking_confirmation(self, booking_id: str) -> Dict[str, bool]:
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        logger.warning(f"Booking {booking_id} vanished before its confirmation was sent")
        return {"sent": False}
    if send_booking_confirmation_email(booking):
        return {"sent": True}
    return _retry_or_give_up(self, f"confirmation of {booking_id}")


@shared_task(bind=True, name="notifications.send_booking_modification", max_retries=MAX_RETRIES)
def send_booking_modification(self, booking_id: str, changes: Dict[str, Any]) -> Dict[str, bool]:
    booking = Booking.objects.filter(pk=booking_id).first()
    if booking is None:
        logger.warning(f"Booking {booking_id} vanished before its modification notice was sent")
        return {"sent": False}
    if send_booking_modification_email(booking, changes):
        return {"sent": True}
    return _retry_or_give_up(self, f"modification notice of {booking_id}")


@shared_task(bind=True, name="notifications.send_booking_deletion", max_retries=MAX_RETRIES)
def send_booking_deletion(self, snapshot: Dict[str, Any]) -> Dict[str, bool]:
    if send_booking_deletion_email(snapshot):
        return {"sent": True}
    return _retry_or_give_up(self, f"deletion notice of {snapshot.get('id')}")
