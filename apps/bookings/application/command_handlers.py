"""
Booking Command Handlers

The use cases of the booking engine. Each mutation runs as one Unit of
Work while the affected rooms are locked:

    validate -> seasonal policy -> [lock rooms -> conflict check -> price -> insert] -> commit

Domain events collected in the unit reach the message bus only after the
database commit (confirmation e-mail, hold cleanup).

Commands:
- commit_booking / commit_booking_batch: create reservations
- update_booking: edit dates, guests, contact details (rooms: admin only)
- delete_booking: cancel a reservation
- calculate_price: quote without writing anything
- set_paid / set_price_locked: admin flags
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.auth import Anonymous, AuthContext
from apps.bookings.domain.access_policy import check_access
from apps.bookings.domain.entities import BookingChanges, BookingRequest, ContactDetails, RoomRequest
from apps.bookings.domain.events import BookingCreated, BookingDeleted, BookingUpdated
from apps.bookings.domain.pricing import (
    GuestComposition,
    GuestEntry,
    PersonType,
    RoomStay,
    calculate_bulk_price,
    calculate_standard_price,
)
from apps.bookings.models import Booking, BookingGuest, BookingRoom
from apps.bookings.services.availability import ensure_rooms_available
from apps.bookings.services.locks import lock_room_rows, locked_rooms
from apps.configuration.domain import BookingSettings, GuestType, RoomSize
from apps.configuration.services import load_booking_settings
from apps.rooms.models import Room
from apps.rooms.services import resolve_rooms
from shared.application.uow import DjangoUnitOfWork
from shared.domain.errors import BookingValidationError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    booking: Booking
    warnings: List[str] = field(default_factory=list)


# ===== Validation =====

def _today() -> date:
    return timezone.localdate()


def validate_booking_request(
    request: BookingRequest,
    rooms: Mapping[str, Room],
    booking_settings: BookingSettings,
    *,
    privileged: bool,
    today: date,
) -> None:
    """Structural checks made before any transaction is opened."""
    if not request.rooms:
        raise BookingValidationError("Není vybrán žádný pokoj")

    max_advance = getattr(settings, "BOOKING_MAX_ADVANCE_DAYS", 730)
    for room_id, room_request in request.rooms.items():
        stay = room_request.date_range
        if not privileged and stay.start_date < today:
            raise BookingValidationError(
                "Nelze rezervovat termín v minulosti", room_id=room_id, date=stay.start_date
            )
        if stay.start_date > today + timedelta(days=max_advance):
            raise BookingValidationError(
                f"Rezervovat lze nejvýše {max_advance} dní dopředu", room_id=room_id, date=stay.start_date
            )

    guests = request.guests
    if guests.capacity_count < 1:
        raise BookingValidationError("Rezervace musí obsahovat alespoň jednoho platícího hosta")

    if request.is_bulk:
        active_ids = set(Room.objects.filter(is_active=True).values_list("id", flat=True))
        if set(request.rooms) != active_ids:
            raise BookingValidationError("Hromadná rezervace musí zahrnovat všechny pokoje chaty")
        if len({room.date_range for room in request.rooms.values()}) != 1:
            raise BookingValidationError("Hromadná rezervace má jeden společný termín pro všechny pokoje")
        if guests.capacity_count < booking_settings.bulk_min_guests:
            raise BookingValidationError(
                f"Hromadná rezervace vyžaduje alespoň {booking_settings.bulk_min_guests} hostů",
                minimum=booking_settings.bulk_min_guests,
            )
        if booking_settings.bulk_max_guests and guests.capacity_count > booking_settings.bulk_max_guests:
            raise BookingValidationError(
                f"Kapacita chaty je {booking_settings.bulk_max_guests} hostů",
                maximum=booking_settings.bulk_max_guests,
            )
        return

    capacity = sum(rooms[room_id].beds for room_id in request.rooms)
    if guests.capacity_count > capacity:
        raise BookingValidationError(
            f"Počet hostů ({guests.capacity_count}) překračuje kapacitu vybraných pokojů ({capacity})",
            maximum=capacity,
        )


# ===== Pricing =====

def room_stays(request: BookingRequest, rooms: Mapping[str, Room]) -> List[RoomStay]:
    return [
        RoomStay(
            room_id=room_id,
            size=RoomSize(rooms[room_id].size),
            date_range=room_request.date_range,
            guests=room_request.guests,
            beds=rooms[room_id].beds,
            guest_type=room_request.guests.dominant_guest_type(request.guest_type),
        )
        for room_id, room_request in request.rooms.items()
    ]


def price_request(
    request: BookingRequest,
    rooms: Mapping[str, Room],
    booking_settings: BookingSettings,
) -> int:
    if request.is_bulk:
        quote = calculate_bulk_price(request.bulk_guests, len(request.envelope), booking_settings.bulk_prices)
        return quote.total
    return calculate_standard_price(room_stays(request, rooms), booking_settings.prices)


def calculate_price(request: BookingRequest, booking_settings: Optional[BookingSettings] = None) -> int:
    """Quote a request without touching availability or writing anything."""
    booking_settings = booking_settings or load_booking_settings()
    rooms = {room.id: room for room in resolve_rooms(request.room_ids)}
    return price_request(request, rooms, booking_settings)


# ===== Persistence helpers =====

def _guest_rows(booking: Booking, request: BookingRequest) -> List[BookingGuest]:
    rows: List[BookingGuest] = []
    if request.is_bulk:
        placed = [(None, guest) for guest in request.bulk_guests.guests]
    else:
        placed = [
            (room_id, guest)
            for room_id, room_request in request.rooms.items()
            for guest in room_request.guests.guests
        ]
    for order, (room_id, guest) in enumerate(placed):
        rows.append(
            BookingGuest(
                booking=booking,
                room_id=room_id,
                person_type=guest.person_type.value,
                guest_type=guest.guest_type.value,
                first_name=guest.first_name,
                last_name=guest.last_name,
                order=order,
            )
        )
    return rows


def _write_rooms_and_guests(booking: Booking, request: BookingRequest) -> None:
    booking.booking_rooms.all().delete()
    booking.guests.all().delete()
    BookingRoom.objects.bulk_create(
        BookingRoom(
            booking=booking,
            room_id=room_id,
            start_date=room_request.date_range.start_date,
            end_date=room_request.date_range.end_date,
            adults=room_request.guests.adults,
            children=room_request.guests.children,
            toddlers=room_request.guests.toddlers,
            guest_type=room_request.guests.dominant_guest_type(request.guest_type).value,
        )
        for room_id, room_request in request.rooms.items()
    )
    BookingGuest.objects.bulk_create(_guest_rows(booking, request))


def _apply_request(booking: Booking, request: BookingRequest) -> None:
    guests = request.guests
    envelope = request.envelope
    booking.guest_type = GuestType(request.guest_type).value
    booking.adults = guests.adults
    booking.children = guests.children
    booking.toddlers = guests.toddlers
    booking.start_date = envelope.start_date
    booking.end_date = envelope.end_date
    booking.is_bulk_booking = request.is_bulk


def request_from_booking(booking: Booking) -> BookingRequest:
    """Rebuild the typed request a stored booking was committed from."""
    by_room: Dict[Optional[str], List[GuestEntry]] = {}
    for guest in booking.guests.all():
        by_room.setdefault(guest.room_id, []).append(
            GuestEntry(
                PersonType(guest.person_type),
                GuestType(guest.guest_type),
                first_name=guest.first_name,
                last_name=guest.last_name,
            )
        )
    rooms = {
        booking_room.room_id: RoomRequest(
            room_id=booking_room.room_id,
            date_range=booking_room.date_range,
            guests=GuestComposition(tuple(by_room.get(booking_room.room_id, ()))),
        )
        for booking_room in booking.booking_rooms.all()
    }
    return BookingRequest(
        rooms=rooms,
        contact=ContactDetails(name=booking.name, email=booking.email),
        guest_type=GuestType(booking.guest_type),
        is_bulk=booking.is_bulk_booking,
        bulk_guests=GuestComposition(tuple(by_room.get(None, ()))),
        session_id=booking.session_id or None,
    )


def retier_request(request: BookingRequest, guest_type: GuestType) -> BookingRequest:
    """Move every stored guest of a request to a new booking-level tier."""
    tier = GuestType(guest_type)
    return replace(
        request,
        rooms={
            room_id: replace(room, guests=room.guests.with_guest_type(tier))
            for room_id, room in request.rooms.items()
        },
        bulk_guests=request.bulk_guests.with_guest_type(tier),
        guest_type=tier,
    )


# ===== Commit =====

def commit_booking(
    request: BookingRequest,
    auth: AuthContext = Anonymous(),
    *,
    today: Optional[date] = None,
) -> CommitResult:
    """Validate, check and insert one reservation atomically."""
    return _commit([request], auth, today=today, group_id="")[0]


def commit_booking_batch(
    requests: Sequence[BookingRequest],
    auth: AuthContext = Anonymous(),
    *,
    today: Optional[date] = None,
) -> List[CommitResult]:
    """Commit several reservations in one transaction under a shared group id."""
    if not requests:
        raise BookingValidationError("Košík rezervací je prázdný")
    group_id = "GRP" + secrets.token_hex(8).upper() if len(requests) > 1 else ""
    return _commit(list(requests), auth, today=today, group_id=group_id)


def _commit(
    requests: List[BookingRequest],
    auth: AuthContext,
    *,
    today: Optional[date],
    group_id: str,
) -> List[CommitResult]:
    today = today or _today()
    all_room_ids = sorted({room_id for request in requests for room_id in request.room_ids})
    logger.info(f"Commit attempt: {len(requests)} reservation(s), rooms {all_room_ids}")

    with locked_rooms(all_room_ids):
        booking_settings = load_booking_settings()
        rooms = {room.id: room for room in resolve_rooms(all_room_ids)}

        warnings: List[List[str]] = []
        for request in requests:
            validate_booking_request(
                request, rooms, booking_settings, privileged=auth.is_privileged, today=today
            )
            decision = check_access(
                booking_settings,
                request.envelope,
                today=today,
                guest_type=request.guest_type,
                rooms_count=len(request.rooms),
                is_bulk=request.is_bulk,
                access_code=request.access_code,
            )
            warnings.append(decision.warnings)

        results: List[CommitResult] = []
        with DjangoUnitOfWork() as uow:
            lock_room_rows(all_room_ids)
            for request, request_warnings in zip(requests, warnings):
                ensure_rooms_available(
                    {room_id: room.date_range for room_id, room in request.rooms.items()},
                    exclude_session_id=request.session_id,
                )
                booking = Booking(
                    name=request.contact.name,
                    email=request.contact.email,
                    phone=request.contact.phone,
                    company=request.contact.company,
                    address=request.contact.address,
                    city=request.contact.city,
                    zip_code=request.contact.zip_code,
                    ico=request.contact.ico,
                    dic=request.contact.dic,
                    notes=request.contact.notes,
                    total_price=price_request(request, rooms, booking_settings),
                    paid=bool(request.paid and auth.is_privileged),
                    group_id=group_id,
                    session_id=request.session_id or "",
                )
                _apply_request(booking, request)
                booking.save(force_insert=True)
                _write_rooms_and_guests(booking, request)

                booking.add_event(
                    BookingCreated(
                        aggregate_id=booking.id,
                        booking_id=booking.id,
                        session_id=request.session_id,
                    )
                )
                uow.collect_events(booking)
                results.append(CommitResult(booking=booking, warnings=request_warnings))

    for result in results:
        logger.info(
            f"Booking {result.booking.id} committed: rooms {result.booking.room_ids}, "
            f"{result.booking.start_date} - {result.booking.end_date}, price {result.booking.total_price}"
        )
    return results


# ===== Edit / delete =====

def _get_booking(booking_id: str) -> Booking:
    try:
        return Booking.objects.get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError(f"Rezervace {booking_id} neexistuje", booking_id=booking_id)


def authorize_mutation(booking: Booking, auth: AuthContext, today: date) -> None:
    """Non-admin callers need the edit token, an unpaid booking and enough notice."""
    if auth.is_privileged:
        return
    if not isinstance(auth, Anonymous) or not auth.owns(booking):
        raise ForbiddenError("Neplatný editační odkaz")
    if booking.paid:
        raise ForbiddenError("Zaplacenou rezervaci nelze měnit, kontaktujte správce", reason="paid")
    deadline = getattr(settings, "BOOKING_EDIT_DEADLINE_DAYS", 3)
    if booking.days_until_start(today) < deadline:
        raise ForbiddenError(
            f"Rezervaci lze měnit nejpozději {deadline} dny před příjezdem",
            reason="edit_window_closed",
        )


def _diff(old: Any, new: Any) -> Optional[Dict[str, Any]]:
    if old == new:
        return None
    return {"old": old, "new": new}


def update_booking(
    booking_id: str,
    changes: BookingChanges,
    auth: AuthContext,
    *,
    session_id: Optional[str] = None,
    access_code: Optional[str] = None,
    today: Optional[date] = None,
) -> CommitResult:
    """
    Edit a booking.

    The conflict check runs only when rooms or dates change; the price is
    recomputed only when a price-affecting field changed and the price is
    not locked. A tier change moves the stored guests to the new tier, and
    any change to dates, rooms, guests or tier re-applies the seasonal
    policy for non-admin callers.
    """
    today = today or _today()
    booking = _get_booking(booking_id)
    authorize_mutation(booking, auth, today)

    if not auth.is_privileged:
        if changes.paid is not None or changes.price_locked is not None or changes.total_price is not None:
            raise ForbiddenError("Platbu a cenu může měnit pouze správce")
        if changes.rooms is not None and set(changes.rooms) != set(booking.room_ids):
            raise ForbiddenError("Pokoje rezervace může měnit pouze správce", reason="rooms_immutable")

    current = request_from_booking(booking)
    base = retier_request(current, changes.guest_type) if changes.guest_type is not None else current
    new_rooms = dict(changes.rooms) if changes.rooms is not None else dict(base.rooms)
    updated = replace(
        base,
        rooms=new_rooms,
        bulk_guests=changes.bulk_guests if changes.bulk_guests is not None else base.bulk_guests,
        session_id=session_id,
        access_code=access_code,
    )
    occupancy_changed = {rid: r.date_range for rid, r in new_rooms.items()} != {
        rid: r.date_range for rid, r in current.rooms.items()
    }

    all_room_ids = sorted(set(new_rooms) | set(current.rooms))
    warnings: List[str] = []
    with locked_rooms(all_room_ids):
        booking_settings = load_booking_settings()
        rooms = {room.id: room for room in resolve_rooms(new_rooms)}

        if changes.rooms is not None or changes.bulk_guests is not None:
            validate_booking_request(
                updated, rooms, booking_settings, privileged=auth.is_privileged, today=today
            )
        if (occupancy_changed or changes.affects_price) and not auth.is_privileged:
            warnings = check_access(
                booking_settings,
                updated.envelope,
                today=today,
                guest_type=updated.guest_type,
                rooms_count=len(updated.rooms),
                is_bulk=updated.is_bulk,
                access_code=access_code,
            ).warnings

        summary: Dict[str, Any] = {}
        with DjangoUnitOfWork() as uow:
            lock_room_rows(all_room_ids)
            if occupancy_changed:
                ensure_rooms_available(
                    {room_id: room.date_range for room_id, room in new_rooms.items()},
                    exclude_session_id=session_id,
                    exclude_booking_id=booking.id,
                )

            for attr, value in changes.contact.items():
                change = _diff(getattr(booking, attr), value)
                if change:
                    summary[attr] = change
                    setattr(booking, attr, value)

            old_price = booking.total_price
            old_range = (booking.start_date.isoformat(), booking.end_date.isoformat())
            old_rooms = booking.room_ids
            old_tier = booking.guest_type
            if changes.affects_price or changes.affects_occupancy:
                _apply_request(booking, updated)
                _write_rooms_and_guests(booking, updated)

            if auth.is_privileged and changes.paid is not None:
                booking.paid = changes.paid
            if auth.is_privileged and changes.price_locked is not None:
                booking.price_locked = changes.price_locked

            if auth.is_privileged and changes.total_price is not None:
                booking.total_price = changes.total_price
            elif changes.affects_price and not booking.price_locked:
                booking.total_price = price_request(updated, rooms, booking_settings)

            new_range = (booking.start_date.isoformat(), booking.end_date.isoformat())
            for key, change in (
                ("dates", _diff(old_range, new_range)),
                ("rooms", _diff(sorted(old_rooms), sorted(new_rooms))),
                ("guest_type", _diff(old_tier, booking.guest_type)),
                ("total_price", _diff(old_price, booking.total_price)),
            ):
                if change:
                    summary[key] = change

            booking.save()
            if summary:
                booking.add_event(
                    BookingUpdated(aggregate_id=booking.id, booking_id=booking.id, changes=summary)
                )
                uow.collect_events(booking)

    logger.info(f"Booking {booking.id} updated: {sorted(summary) or 'no changes'}")
    return CommitResult(booking=booking, warnings=warnings)


def delete_booking(booking_id: str, auth: AuthContext, *, today: Optional[date] = None) -> None:
    today = today or _today()
    booking = _get_booking(booking_id)
    authorize_mutation(booking, auth, today)

    with DjangoUnitOfWork() as uow:
        snapshot = booking.snapshot()
        booking.delete()
        uow.add_event(BookingDeleted(aggregate_id=booking_id, booking_id=booking_id, snapshot=snapshot))

    logger.info(f"Booking {booking_id} deleted by {type(auth).__name__}")


# ===== Admin flags =====

def _require_privileged(auth: AuthContext) -> None:
    if not auth.is_privileged:
        raise ForbiddenError("Akce je vyhrazena správci")


def set_paid(booking_id: str, auth: AuthContext, paid: bool = True) -> Booking:
    _require_privileged(auth)
    booking = _get_booking(booking_id)
    booking.paid = paid
    booking.save(update_fields=["paid", "updated_at"])
    logger.info(f"Booking {booking_id} marked {'paid' if paid else 'unpaid'}")
    return booking


def set_price_locked(booking_id: str, auth: AuthContext, locked: bool = True) -> Booking:
    _require_privileged(auth)
    booking = _get_booking(booking_id)
    booking.price_locked = locked
    booking.save(update_fields=["price_locked", "updated_at"])
    logger.info(f"Booking {booking_id} price {'locked' if locked else 'unlocked'}")
    return booking

