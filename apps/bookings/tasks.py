"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import holds

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (spouštěné přes Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_proposed_bookings")
def expire_proposed_bookings() -> dict[str, int]:
    """
    Smazání propadlých podržení termínů.

    Spouští se každých BOOKING_HOLD_SWEEP_SECONDS sekund; opakované
    spuštění nic nepokazí.

    Returns:
        dict: {"expired": počet smazaných podržení}
    """
    expired = holds.expire_holds()
    return {"expired": expired}


@shared_task(name="bookings.release_session_holds")
def release_session_holds(session_id: str) -> dict[str, int]:
    """Úklid podržení relace po úspěšném dokončení rezervace."""
    released = holds.release_session_holds(session_id)
    return {"released": released}
