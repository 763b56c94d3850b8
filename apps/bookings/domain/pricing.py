"""
Price Calculator

Pure functions mapping a room/guest composition to a whole-unit integer
price. Toddlers are free everywhere and never count toward capacity.

Standard pricing, per room and night:
    base(tier, size) for the room's first priced guest
    + adult(tier, size) for every further adult
    + child(tier, size) for every child (unless the child is the first priced guest)
Each guest is priced at their own tier, so one room may mix tiers.

Bulk pricing (whole chalet), per night:
    base + sum over tiers of adults * adult(tier) + children * child(tier)
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from apps.configuration.domain import BulkPriceTable, GuestType, PriceTable, RoomSize
from shared.domain.value_objects import DateRange


class PersonType(str, Enum):
    ADULT = 'adult'
    CHILD = 'child'        # 3-17 years
    TODDLER = 'toddler'    # under 3, free


@dataclass(frozen=True)
class GuestEntry:
    person_type: PersonType
    guest_type: GuestType = GuestType.EXTERNAL
    first_name: str = field(default='', compare=False)
    last_name: str = field(default='', compare=False)

    @property
    def is_priced(self) -> bool:
        return self.person_type is not PersonType.TODDLER


@dataclass(frozen=True)
class GuestComposition:
    """Who sleeps in a room (or in the whole chalet for bulk bookings)"""
    guests: Tuple[GuestEntry, ...] = ()

    @classmethod
    def from_counts(
        cls,
        adults: int = 0,
        children: int = 0,
        toddlers: int = 0,
        guest_type: GuestType = GuestType.EXTERNAL,
    ) -> 'GuestComposition':
        tier = GuestType(guest_type)
        return cls(
            tuple(GuestEntry(PersonType.ADULT, tier) for _ in range(adults))
            + tuple(GuestEntry(PersonType.CHILD, tier) for _ in range(children))
            + tuple(GuestEntry(PersonType.TODDLER, tier) for _ in range(toddlers))
        )

    def count(self, person_type: PersonType, guest_type: GuestType = None) -> int:
        return sum(
            1 for guest in self.guests
            if guest.person_type is person_type and (guest_type is None or guest.guest_type is guest_type)
        )

    @property
    def adults(self) -> int:
        return self.count(PersonType.ADULT)

    @property
    def children(self) -> int:
        return self.count(PersonType.CHILD)

    @property
    def toddlers(self) -> int:
        return self.count(PersonType.TODDLER)

    @property
    def priced_guests(self) -> List[GuestEntry]:
        return [guest for guest in self.guests if guest.is_priced]

    @property
    def capacity_count(self) -> int:
        """Beds needed: toddlers sleep with their parents"""
        return len(self.priced_guests)

    def dominant_guest_type(self, default: GuestType = GuestType.EXTERNAL) -> GuestType:
        tiers = Counter(guest.guest_type for guest in self.priced_guests)
        if not tiers:
            return GuestType(default)
        # ties go to the full-price tier
        return max(tiers, key=lambda tier: (tiers[tier], tier is GuestType.EXTERNAL))

    def __add__(self, other: 'GuestComposition') -> 'GuestComposition':
        return GuestComposition(self.guests + other.guests)

    def with_guest_type(self, guest_type: GuestType) -> 'GuestComposition':
        """Same guests, all moved to one price tier"""
        tier = GuestType(guest_type)
        return GuestComposition(tuple(replace(guest, guest_type=tier) for guest in self.guests))


@dataclass(frozen=True)
class RoomStay:
    """One room of a reservation: its own nights and its own guests"""
    room_id: str
    size: RoomSize
    date_range: DateRange
    guests: GuestComposition = field(default_factory=GuestComposition)
    beds: int = 0
    guest_type: GuestType = GuestType.EXTERNAL

    @property
    def nights(self) -> int:
        return len(self.date_range)


def room_nightly_price(stay: RoomStay, prices: PriceTable) -> int:
    """One night of one room, each guest at their own tier"""
    priced = stay.guests.priced_guests
    if not priced:
        # an empty room still costs its base rate
        return prices.rates_for(stay.guest_type, stay.size).base

    first_index = next(
        (i for i, guest in enumerate(priced) if guest.person_type is PersonType.ADULT),
        0,
    )
    total = prices.rates_for(priced[first_index].guest_type, stay.size).base
    for index, guest in enumerate(priced):
        if index == first_index:
            continue
        rates = prices.rates_for(guest.guest_type, stay.size)
        total += rates.adult if guest.person_type is PersonType.ADULT else rates.child
    return total


def calculate_standard_price(stays: Iterable[RoomStay], prices: PriceTable) -> int:
    total = 0
    for stay in stays:
        total += room_nightly_price(stay, prices) * stay.nights
    return max(0, int(total))


def distribute_guests(
    room_ids: Sequence[str],
    composition: GuestComposition,
) -> Dict[str, GuestComposition]:
    """
    Spread an aggregate guest count over rooms for pricing

    One adult goes to each room while adults last; every remaining guest
    goes to the first room. This reproduces "base per room + surcharge per
    additional adult and per child" for counts entered without a per-room
    breakdown.
    """
    if not room_ids:
        return {}
    adults = [g for g in composition.guests if g.person_type is PersonType.ADULT]
    others = [g for g in composition.guests if g.person_type is not PersonType.ADULT]

    assigned: Dict[str, List[GuestEntry]] = {room_id: [] for room_id in room_ids}
    for room_id in room_ids:
        if adults:
            assigned[room_id].append(adults.pop(0))
    assigned[room_ids[0]].extend(adults + others)
    return {room_id: GuestComposition(tuple(guests)) for room_id, guests in assigned.items()}


@dataclass(frozen=True)
class BulkQuote:
    total: int
    nightly: int
    nights: int
    subtotals: Mapping[str, int]


def calculate_bulk_price(
    guests: GuestComposition,
    nights: int,
    bulk_prices: BulkPriceTable,
) -> BulkQuote:
    """Whole-chalet price with per-tier subtotals"""
    subtotals: Dict[str, int] = {'base': bulk_prices.base_price}
    nightly = bulk_prices.base_price
    for tier in GuestType:
        adults = guests.count(PersonType.ADULT, tier)
        children = guests.count(PersonType.CHILD, tier)
        subtotals[f'{tier.value}_adults'] = adults * bulk_prices.adult_rate(tier)
        subtotals[f'{tier.value}_children'] = children * bulk_prices.child_rate(tier)
        nightly += subtotals[f'{tier.value}_adults'] + subtotals[f'{tier.value}_children']

    nights = max(0, int(nights))
    return BulkQuote(
        total=max(0, nightly * nights),
        nightly=nightly,
        nights=nights,
        subtotals={key: value * nights for key, value in subtotals.items()},
    )
