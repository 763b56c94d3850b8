"""
Booking Request Structures

Typed shapes of what callers ask the transaction coordinator for. A
reservation maps each room id to its own date range and guests; bulk
reservations carry one composition for the whole chalet instead.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from apps.configuration.domain import GuestType
from shared.domain.value_objects import DateRange

from .pricing import GuestComposition


@dataclass(frozen=True)
class RoomRequest:
    room_id: str
    date_range: DateRange
    guests: GuestComposition = field(default_factory=GuestComposition)


@dataclass(frozen=True)
class ContactDetails:
    name: str
    email: str
    phone: str = ''
    company: str = ''
    address: str = ''
    city: str = ''
    zip_code: str = ''
    ico: str = ''
    dic: str = ''
    notes: str = ''


@dataclass(frozen=True)
class BookingRequest:
    """One reservation to commit"""
    rooms: Mapping[str, RoomRequest]
    contact: ContactDetails
    guest_type: GuestType = GuestType.EXTERNAL
    is_bulk: bool = False
    bulk_guests: GuestComposition = field(default_factory=GuestComposition)
    session_id: Optional[str] = None
    access_code: Optional[str] = None
    paid: bool = False

    @property
    def room_ids(self) -> Tuple[str, ...]:
        return tuple(self.rooms)

    @property
    def guests(self) -> GuestComposition:
        if self.is_bulk:
            return self.bulk_guests
        total = GuestComposition()
        for room in self.rooms.values():
            total = total + room.guests
        return total

    @property
    def envelope(self) -> DateRange:
        """Earliest check-in to latest checkout over all rooms"""
        ranges = [room.date_range for room in self.rooms.values()]
        return DateRange(min(r.start_date for r in ranges), max(r.end_date for r in ranges))


@dataclass(frozen=True)
class BookingChanges:
    """
    Fields an edit may touch; None means unchanged

    ``rooms`` replaces the whole room set (admin only) or the per-room
    ranges and guests of the existing rooms.
    """
    rooms: Optional[Mapping[str, RoomRequest]] = None
    bulk_guests: Optional[GuestComposition] = None
    contact: Dict[str, Any] = field(default_factory=dict)
    guest_type: Optional[GuestType] = None
    paid: Optional[bool] = None
    price_locked: Optional[bool] = None
    total_price: Optional[int] = None

    @property
    def affects_occupancy(self) -> bool:
        return self.rooms is not None

    @property
    def affects_price(self) -> bool:
        return self.rooms is not None or self.bulk_guests is not None or self.guest_type is not None

