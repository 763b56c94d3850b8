"""
Hold Store (proposed bookings)

Session-scoped soft reservations created while a guest fills in the
booking form. Holds block other sessions, never their owner, and are
re-validated rather than trusted at commit time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Mapping, Optional

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.models import ProposedBooking, ProposedBookingRoom
from apps.rooms.services import resolve_rooms
from shared.domain.errors import BookingValidationError, ForbiddenError, NotFoundError
from shared.domain.value_objects import DateRange

from .availability import ensure_rooms_available
from .locks import lock_room_rows, locked_rooms

logger = logging.getLogger(__name__)


def hold_ttl() -> timedelta:
    return timedelta(minutes=getattr(settings, "BOOKING_HOLD_TTL_MINUTES", 15))


def _supersede_own_holds(session_id: str, stays: Mapping[str, DateRange]) -> int:
    """Drop the session's room holds that overlap the new ones."""
    removed = 0
    touched_proposals = set()
    for room_id, stay in stays.items():
        overlapping = ProposedBookingRoom.objects.filter(
            proposal__session_id=session_id,
            room_id=room_id,
            start_date__lt=stay.end_date,
            end_date__gt=stay.start_date,
        )
        touched_proposals.update(overlapping.values_list("proposal_id", flat=True))
        removed += overlapping.delete()[0]
    if touched_proposals:
        ProposedBooking.objects.filter(proposal_id__in=touched_proposals, rooms__isnull=True).delete()
    return removed


def create_hold(
    session_id: str,
    stays: Mapping[str, DateRange],
    guests: Optional[Mapping[str, int]] = None,
    *,
    now: Optional[datetime] = None,
) -> ProposedBooking:
    """
    Hold rooms for a session.

    Raises ConflictError when another session's hold, a booking or a
    blockage takes one of the nights. The session's own overlapping holds
    on the same room are replaced.
    """
    if not session_id:
        raise BookingValidationError("Chybí identifikátor relace")
    if not stays:
        raise BookingValidationError("Není vybrán žádný pokoj")

    rooms = resolve_rooms(stays.keys())
    now = now or timezone.now()
    guests = guests or {}

    with locked_rooms(stays.keys()), transaction.atomic():
        lock_room_rows(stays.keys())
        ensure_rooms_available(stays, exclude_session_id=session_id)
        superseded = _supersede_own_holds(session_id, stays)

        proposal = ProposedBooking.objects.create(session_id=session_id, expires_at=now + hold_ttl())
        ProposedBookingRoom.objects.bulk_create(
            ProposedBookingRoom(
                proposal=proposal,
                room=room,
                start_date=stays[room.id].start_date,
                end_date=stays[room.id].end_date,
                guests=max(0, int(guests.get(room.id, 0))),
            )
            for room in rooms
        )

    logger.info(
        f"Hold {proposal.proposal_id} created for session {session_id}: "
        f"rooms {sorted(stays)} (superseded {superseded})"
    )
    return proposal


def cancel_hold(proposal_id: str, session_id: Optional[str] = None) -> None:
    """Delete one hold; a session may only cancel its own holds."""
    try:
        proposal = ProposedBooking.objects.get(proposal_id=proposal_id)
    except ProposedBooking.DoesNotExist:
        raise NotFoundError(f"Podržení {proposal_id} neexistuje", proposal_id=proposal_id)
    if session_id is not None and proposal.session_id != session_id:
        raise ForbiddenError("Podržení patří jiné relaci")
    proposal.delete()
    logger.info(f"Hold {proposal_id} cancelled")


def release_session_holds(session_id: str) -> int:
    """Delete every hold of a session. Returns the number of holds removed."""
    if not session_id:
        return 0
    deleted, details = ProposedBooking.objects.filter(session_id=session_id).delete()
    released = details.get(ProposedBooking._meta.label, 0)
    if released:
        logger.info(f"Released {released} holds of session {session_id}")
    return released


def expire_holds(now: Optional[datetime] = None) -> int:
    """Delete holds past their expiry. Idempotent."""
    now = now or timezone.now()
    deleted, details = ProposedBooking.objects.filter(expires_at__lte=now).delete()
    expired = details.get(ProposedBooking._meta.label, 0)
    if expired:
        logger.info(f"Expired {expired} holds")
    return expired
