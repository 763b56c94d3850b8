"""
Unit of Work Pattern

One atomic database transaction per booking command. Domain events
collected inside it are handed to the message bus only after the
transaction has committed, so a rolled-back reservation never triggers
an e-mail or a hold cleanup.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            lock_rooms(room_ids)
            ensure_rooms_available(stays, exclude_session_id=session_id)
            booking = Booking.objects.create(...)
            booking.add_event(BookingCreated(...))
            uow.collect_events(booking)
        # BookingCreated reaches the message bus after COMMIT
    """

    def __init__(self, using: str | None = None):
        self._events: List[DomainEvent] = []
        self._transaction = None
        self._using = using

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic(using=self._using)
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule event publishing for after the database commit

        transaction.on_commit() drops the callback when the outermost
        atomic block rolls back.
        """
        events = self._events.copy()
        self._events.clear()
        logger.debug(f"Committing unit of work with {len(events)} events")

        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self._using)

    def rollback(self):
        """Rollback changes and discard events"""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """Move pending events from an aggregate root into this unit of work"""
        new_events = getattr(aggregate, 'events', None)
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                f"Collected {len(new_events)} events from "
                f"{aggregate.__class__.__name__} ({getattr(aggregate, 'pk', None)})"
            )

    def add_event(self, event: DomainEvent):
        """Record an event that has no surviving aggregate (e.g. a deletion)"""
        self._events.append(event)

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The reservation is already committed; a publishing failure
            # must not surface to the caller.
            logger.error(f"Error publishing events: {e}", exc_info=True)
