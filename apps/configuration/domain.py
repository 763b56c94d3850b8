"""
Booking Settings Value Objects

Immutable, already-validated view of the settings record used by the
price calculator and the seasonal access policy.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from shared.domain.base import ValueObject
from shared.domain.value_objects import DateRange


class GuestType(str, Enum):
    """Price tier of a guest"""
    UTIA = 'utia'            # discounted (employees and their family)
    EXTERNAL = 'external'    # full price


class RoomSize(str, Enum):
    SMALL = 'small'
    LARGE = 'large'


@dataclass(frozen=True)
class RoomRates(ValueObject):
    """Nightly rates of one tier for one room size"""
    base: int
    adult: int
    child: int


@dataclass(frozen=True)
class PriceTable(ValueObject):
    """Per-tier, per-room-size rates for standard bookings"""
    rates: Dict[Tuple[GuestType, RoomSize], RoomRates]

    def rates_for(self, guest_type: GuestType, size: RoomSize) -> RoomRates:
        return self.rates[(GuestType(guest_type), RoomSize(size))]

    @classmethod
    def from_dict(cls, data: dict) -> 'PriceTable':
        rates = {}
        for tier in GuestType:
            for size in RoomSize:
                entry = data[tier.value][size.value]
                rates[(tier, size)] = RoomRates(
                    base=int(entry['base']),
                    adult=int(entry['adult']),
                    child=int(entry['child']),
                )
        return cls(rates=rates)


@dataclass(frozen=True)
class BulkPriceTable(ValueObject):
    """Whole-chalet pricing: flat nightly base plus per-person surcharges"""
    base_price: int
    utia_adult: int
    utia_child: int
    external_adult: int
    external_child: int

    def adult_rate(self, guest_type: GuestType) -> int:
        return self.utia_adult if GuestType(guest_type) is GuestType.UTIA else self.external_adult

    def child_rate(self, guest_type: GuestType) -> int:
        return self.utia_child if GuestType(guest_type) is GuestType.UTIA else self.external_child


@dataclass(frozen=True)
class RestrictionPeriod(ValueObject):
    """
    Seasonal (Christmas) restriction period

    Days start_date..end_date are restricted inclusive. The cutoff is the
    last day before the open season: 30 September of ``year``.
    """
    period_id: str
    start_date: date
    end_date: date
    year: int
    name: str = ''

    @property
    def cutoff(self) -> date:
        return date(self.year, 9, 30)

    def overlaps_stay(self, stay: DateRange) -> bool:
        """Touching counts: checkout on the first restricted day still overlaps"""
        return stay.start_date <= self.end_date and stay.end_date >= self.start_date


DEFAULT_PRICES = {
    'utia': {
        'small': {'base': 300, 'adult': 50, 'child': 25},
        'large': {'base': 400, 'adult': 50, 'child': 25},
    },
    'external': {
        'small': {'base': 500, 'adult': 100, 'child': 50},
        'large': {'base': 600, 'adult': 100, 'child': 50},
    },
}

DEFAULT_BULK_PRICES = {
    'base_price': 2000,
    'utia_adult': 100,
    'utia_child': 0,
    'external_adult': 250,
    'external_child': 50,
}

DEFAULT_BULK_MIN_GUESTS = 10


@dataclass(frozen=True)
class BookingSettings(ValueObject):
    """Everything the booking engine needs from the settings record"""
    prices: PriceTable
    bulk_prices: BulkPriceTable
    bulk_min_guests: int = DEFAULT_BULK_MIN_GUESTS
    bulk_max_guests: int = 0
    restriction_periods: Tuple[RestrictionPeriod, ...] = ()
    access_codes: FrozenSet[str] = field(default_factory=frozenset)

    def restriction_for(self, stay: DateRange) -> Optional[RestrictionPeriod]:
        """First restriction period the stay touches, if any"""
        for period in sorted(self.restriction_periods, key=lambda p: p.start_date):
            if period.overlaps_stay(stay):
                return period
        return None

    def is_valid_access_code(self, code: Optional[str]) -> bool:
        return bool(code) and code.strip() in self.access_codes

    @classmethod
    def defaults(cls, bulk_max_guests: int = 0) -> 'BookingSettings':
        return cls(
            prices=PriceTable.from_dict(DEFAULT_PRICES),
            bulk_prices=BulkPriceTable(**DEFAULT_BULK_PRICES),
            bulk_max_guests=bulk_max_guests,
        )
