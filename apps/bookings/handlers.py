"""
Event handlers wiring booking events to background tasks.

Handlers run after commit (see DjangoUnitOfWork) and only enqueue Celery
tasks, so mail delivery never sits in the request path.
"""

from __future__ import annotations

import logging

from apps.notifications.tasks import (
    send_booking_confirmation,
    send_booking_deletion,
    send_booking_modification,
)
from shared.application.message_bus import MessageBus, message_bus

from .domain.events import BookingCreated, BookingDeleted, BookingUpdated
from .tasks import release_session_holds

logger = logging.getLogger(__name__)


def on_booking_created(event: BookingCreated) -> None:
    send_booking_confirmation.delay(event.booking_id)
    if event.session_id:
        release_session_holds.delay(event.session_id)


def on_booking_updated(event: BookingUpdated) -> None:
    send_booking_modification.delay(event.booking_id, event.changes)


def on_booking_deleted(event: BookingDeleted) -> None:
    send_booking_deletion.delay(event.snapshot)


def register_handlers(bus: MessageBus = message_bus) -> None:
    bus.register_event_handler(BookingCreated, on_booking_created)
    bus.register_event_handler(BookingUpdated, on_booking_updated)
    bus.register_event_handler(BookingDeleted, on_booking_deleted)
    logger.debug("Booking event handlers registered")
