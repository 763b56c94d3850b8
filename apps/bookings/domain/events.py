"""
Booking Domain Events

Published by the Unit of Work only after the transaction commits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A booking was committed

    Triggers:
    - Send confirmation e-mail
    - Release the committing session's holds
    """
    booking_id: str
    session_id: Optional[str] = None


@dataclass(kw_only=True)
class BookingUpdated(DomainEvent):
    """
    Event: A booking was edited

    Triggers:
    - Send modification e-mail listing the changed fields
    """
    booking_id: str
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(kw_only=True)
class BookingDeleted(DomainEvent):
    """
    Event: A booking was deleted

    The booking row is gone when handlers run, so the event carries a
    snapshot of what the deletion e-mail needs.
    """
    booking_id: str
    snapshot: Dict[str, Any] = field(default_factory=dict)

