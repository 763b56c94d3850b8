"""
Availability Resolver and Conflict Checker

Loads blockages, committed bookings and live holds for a set of rooms
and answers questions with the pure occupancy model. Reads are plain
snapshots; the commit path calls ensure_rooms_available() again inside
its transaction while the rooms are locked.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from django.utils import timezone  # type: ignore

from apps.bookings.domain.occupancy import (
    DayAvailability,
    NightType,
    Occupancy,
    day_status,
    first_conflict,
)
from apps.bookings.models import BookingRoom, ProposedBookingRoom
from apps.rooms.models import Blockage, Room
from apps.rooms.services import resolve_rooms
from shared.domain.errors import BookingValidationError, ConflictError
from shared.domain.value_objects import DateRange

logger = logging.getLogger(__name__)

MAX_CALENDAR_DAYS = 400


def load_occupancies(
    room_ids: Iterable[str],
    window: DateRange,
    *,
    exclude_booking_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, List[Occupancy]]:
    """Everything occupying the given rooms on any night of the window."""
    room_ids = [str(room_id) for room_id in room_ids]
    now = now or timezone.now()
    result: Dict[str, List[Occupancy]] = {room_id: [] for room_id in room_ids}

    blockages = (
        Blockage.objects.filter(start_date__lt=window.end_date, end_date__gte=window.start_date)
        .prefetch_related("rooms")
    )
    for blockage in blockages:
        blocked_ids = [room.id for room in blockage.rooms.all()] or room_ids
        occupancy = Occupancy(blockage.date_range, NightType.BLOCKED, blockage.blockage_id)
        for room_id in blocked_ids:
            if room_id in result:
                result[room_id].append(occupancy)

    booked = BookingRoom.objects.filter(
        room_id__in=room_ids,
        start_date__lt=window.end_date,
        end_date__gt=window.start_date,
    )
    if exclude_booking_id:
        booked = booked.exclude(booking_id=exclude_booking_id)
    for booking_room in booked:
        result[booking_room.room_id].append(
            Occupancy(booking_room.date_range, NightType.CONFIRMED, booking_room.booking_id)
        )

    held = ProposedBookingRoom.objects.filter(
        room_id__in=room_ids,
        start_date__lt=window.end_date,
        end_date__gt=window.start_date,
        proposal__expires_at__gt=now,
    ).select_related("proposal")
    for proposed_room in held:
        result[proposed_room.room_id].append(
            Occupancy(
                proposed_room.date_range,
                NightType.PROPOSED,
                proposed_room.proposal_id,
                session_id=proposed_room.proposal.session_id,
            )
        )

    return result


def check_availability(
    room_id: str,
    day: date,
    exclude_session_id: Optional[str] = None,
) -> DayAvailability:
    """Status of one room on one calendar day."""
    room = resolve_rooms([room_id])[0]
    window = DateRange(day - timedelta(days=1), day + timedelta(days=1))
    occupancies = load_occupancies([room.id], window)[room.id]
    return day_status(day, occupancies, exclude_session_id)


def availability_calendar(
    start: date,
    end: date,
    room_ids: Optional[Iterable[str]] = None,
    exclude_session_id: Optional[str] = None,
) -> Dict[str, Dict[str, DayAvailability]]:
    """Per-room day statuses for days start..end inclusive."""
    if end < start:
        raise BookingValidationError("Konec období nesmí být před jeho začátkem")
    if (end - start).days >= MAX_CALENDAR_DAYS:
        raise BookingValidationError(f"Kalendář lze načíst nejvýše na {MAX_CALENDAR_DAYS} dní")

    if room_ids:
        rooms = resolve_rooms(room_ids)
    else:
        rooms = list(Room.objects.filter(is_active=True))
    window = DateRange(start - timedelta(days=1), end + timedelta(days=1))
    occupancies = load_occupancies([room.id for room in rooms], window)

    calendar: Dict[str, Dict[str, DayAvailability]] = {}
    for room in rooms:
        days: Dict[str, DayAvailability] = {}
        current = start
        while current <= end:
            days[current.isoformat()] = day_status(current, occupancies[room.id], exclude_session_id)
            current += timedelta(days=1)
        calendar[room.id] = days
    return calendar


def ensure_rooms_available(
    stays: Mapping[str, DateRange],
    *,
    exclude_session_id: Optional[str] = None,
    exclude_booking_id: Optional[str] = None,
) -> None:
    """
    Raise ConflictError for the first room with a taken night.

    Every night of every room's range must be free of blockages,
    committed bookings and other sessions' holds.
    """
    if not stays:
        return
    window = DateRange(
        min(stay.start_date for stay in stays.values()),
        max(stay.end_date for stay in stays.values()),
    )
    occupancies = load_occupancies(stays.keys(), window, exclude_booking_id=exclude_booking_id)

    for room_id in sorted(stays):
        conflict = first_conflict(stays[room_id], occupancies[room_id], exclude_session_id)
        if conflict is None:
            continue
        night, occupancy = conflict
        logger.warning(
            f"Conflict on room {room_id} night {night}: {occupancy.kind.value} "
            f"{occupancy.source_id} ({occupancy.date_range})"
        )
        raise ConflictError(
            f"Pokoj {room_id} není {night:%d.%m.%Y} volný",
            room_id=room_id,
            date=night,
            conflicting_range=occupancy.date_range,
        )
