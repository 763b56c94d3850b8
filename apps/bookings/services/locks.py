"""
Per-room advisory locks around the check-then-insert unit.

Two layers, always taken in sorted room order:
- process-local mutexes, held for the whole unit of work including its
  commit, serialize writers inside one process whatever the database
- SELECT ... FOR UPDATE on the Room rows serializes writers across
  processes on backends that support it (a no-op on SQLite)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List

from django.db import connections, router  # type: ignore

from apps.rooms.models import Room

logger = logging.getLogger(__name__)


class RoomLockRegistry:
    """Process-wide registry of per-room mutexes."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, room_id: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(str(room_id), threading.Lock())

    @contextmanager
    def hold(self, room_ids: Iterable[str]) -> Iterator[List[str]]:
        ordered = sorted({str(room_id) for room_id in room_ids})
        acquired: List[threading.Lock] = []
        try:
            for room_id in ordered:
                lock = self.lock_for(room_id)
                lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()


room_locks = RoomLockRegistry()


def lock_room_rows(room_ids: Iterable[str]) -> List[Room]:
    """Row-lock the rooms inside the current atomic block."""
    using = router.db_for_write(Room)
    connection = connections[using]
    queryset = Room.objects.using(using).filter(id__in=sorted(set(room_ids))).order_by("id")
    if connection.in_atomic_block and connection.features.has_select_for_update:
        queryset = queryset.select_for_update()
    rooms = list(queryset)
    logger.debug(f"Locked rooms {[room.id for room in rooms]}")
    return rooms


@contextmanager
def locked_rooms(room_ids: Iterable[str]) -> Iterator[List[str]]:
    """Process-local room mutexes; pair with lock_room_rows() inside the transaction."""
    with room_locks.hold(room_ids) as ordered:
        yield ordered
