"""
Common Value Objects

- DateRange: a stay or hold period, start inclusive, end exclusive
  (the end is the checkout day and is never occupied)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Occupies the nights start_date..end_date-1. A night is named after the
    calendar day it starts on, so night D runs from D to D+1.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    @classmethod
    def for_days(cls, first_day: date, last_day: date) -> 'DateRange':
        """
        Range covering whole days first_day..last_day inclusive

        Used for blockages and restriction periods, which are entered as
        inclusive day spans (a single-day blockage has first == last).
        """
        return cls(first_day, last_day + timedelta(days=1))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range shares at least one night with another

        Overlap formula: start1 < end2 AND end1 > start2. The strict
        inequalities let a stay start on another stay's checkout day.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (back-to-back)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains_night(self, night: date) -> bool:
        """Night D (from D to D+1) is occupied when start <= D < end"""
        return self.start_date <= night < self.end_date

    def nights(self) -> Iterator[date]:
        """Yield every occupied night, named by its starting day"""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """Number of nights"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
