"""Post-commit event publishing."""

from __future__ import annotations

from unittest import mock

import pytest

from apps.bookings.domain.events import BookingCreated, BookingDeleted
from apps.bookings.handlers import on_booking_created, register_handlers
from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork


@pytest.mark.django_db
def test_events_published_only_after_commit(django_capture_on_commit_callbacks) -> None:
    published = []
    with mock.patch("shared.application.message_bus.message_bus.publish_events", side_effect=published.extend):
        with django_capture_on_commit_callbacks(execute=True):
            with DjangoUnitOfWork() as uow:
                uow.add_event(BookingDeleted(booking_id="BK1", snapshot={"id": "BK1"}))
                assert published == []

    assert [event.booking_id for event in published] == ["BK1"]


@pytest.mark.django_db
def test_rollback_discards_events(django_capture_on_commit_callbacks) -> None:
    with mock.patch("shared.application.message_bus.message_bus.publish_events") as publish:
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(RuntimeError):
                with DjangoUnitOfWork() as uow:
                    uow.add_event(BookingDeleted(booking_id="BK1", snapshot={}))
                    raise RuntimeError("boom")

    assert callbacks == []
    publish.assert_not_called()


def test_failing_handler_does_not_stop_others() -> None:
    bus = MessageBus()
    calls = []

    def broken(event):
        raise ValueError("broken handler")

    bus.register_event_handler(BookingCreated, broken)
    bus.register_event_handler(BookingCreated, calls.append)
    bus.publish_events([BookingCreated(booking_id="BK1", session_id=None)])

    assert len(calls) == 1


def test_register_handlers_is_idempotent() -> None:
    bus = MessageBus()

    register_handlers(bus)
    register_handlers(bus)

    assert bus.handlers_for(BookingCreated) == [on_booking_created]
