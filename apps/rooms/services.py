"""Room catalog seeding and blockage management."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Tuple

from django.db import transaction  # type: ignore

from shared.domain.errors import BookingValidationError, NotFoundError

from .models import Blockage, Room

logger = logging.getLogger(__name__)

# (id, size, beds) in display order
DEFAULT_ROOMS: Tuple[Tuple[str, str, int], ...] = (
    ("12", Room.Size.SMALL, 2),
    ("13", Room.Size.SMALL, 3),
    ("14", Room.Size.LARGE, 4),
    ("22", Room.Size.SMALL, 2),
    ("23", Room.Size.SMALL, 3),
    ("24", Room.Size.LARGE, 4),
    ("42", Room.Size.SMALL, 2),
    ("43", Room.Size.SMALL, 2),
    ("44", Room.Size.LARGE, 4),
)


def seed_default_rooms() -> int:
    """Create the chalet's nine rooms if missing. Returns how many were created."""
    created_count = 0
    for order, (room_id, size, beds) in enumerate(DEFAULT_ROOMS):
        _room, created = Room.objects.get_or_create(
            id=room_id,
            defaults={"name": f"Pokoj {room_id}", "size": size, "beds": beds, "sort_order": order},
        )
        created_count += int(created)
    if created_count:
        logger.info(f"Seeded {created_count} rooms")
    return created_count


def resolve_rooms(room_ids: Iterable[str]) -> List[Room]:
    """Fetch active rooms by id, failing on the first unknown one."""
    wanted = list(dict.fromkeys(str(room_id) for room_id in room_ids))
    found = {room.id: room for room in Room.objects.filter(id__in=wanted, is_active=True)}
    for room_id in wanted:
        if room_id not in found:
            raise NotFoundError(f"Pokoj {room_id} neexistuje", room_id=room_id)
    return [found[room_id] for room_id in wanted]


def create_blockage(
    start_date: date,
    end_date: date,
    room_ids: Iterable[str] = (),
    reason: str = "",
) -> Blockage:
    """Block whole days start..end inclusive; no rooms means the whole chalet."""
    if end_date < start_date:
        raise BookingValidationError("Konec blokace nesmí být před jejím začátkem")

    rooms = resolve_rooms(room_ids)
    with transaction.atomic():
        blockage = Blockage.objects.create(start_date=start_date, end_date=end_date, reason=reason)
        if rooms:
            blockage.rooms.set(rooms)
    logger.info(
        f"Blockage {blockage.blockage_id} created: {start_date} - {end_date} "
        f"rooms={[room.id for room in rooms] or 'all'}"
    )
    return blockage


def delete_blockage(blockage_id: str) -> None:
    deleted, _details = Blockage.objects.filter(blockage_id=blockage_id).delete()
    if not deleted:
        raise NotFoundError(f"Blokace {blockage_id} neexistuje", blockage_id=blockage_id)
    logger.info(f"Blockage {blockage_id} deleted")

