"""
Base Domain Classes

Building blocks shared by every app:
- ValueObject: Immutable objects compared by value
- DomainEvent: Something that happened, published after commit
- EventRecorder: Mixin letting an aggregate root (plain object or Django
  model instance) collect events for the Unit of Work
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are used to communicate between bounded contexts.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)
    aggregate_id: Any = None


class EventRecorder:
    """
    Aggregate root mixin

    Events are kept on the instance until the Unit of Work collects them.
    Works on Django models too: the list is created lazily, never persisted.
    """

    def add_event(self, event: DomainEvent):
        """Add a domain event to be published"""
        if not hasattr(self, '_recorded_events'):
            self._recorded_events: List[DomainEvent] = []
        self._recorded_events.append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        if hasattr(self, '_recorded_events'):
            self._recorded_events.clear()

    @property
    def events(self) -> List[DomainEvent]:
        """Get copy of collected events"""
        return list(getattr(self, '_recorded_events', []))
