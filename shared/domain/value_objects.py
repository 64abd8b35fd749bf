"""
Common Value Objects

- Money: Monetary amount with currency (payment breakdowns)
- DateRange: Inclusive range of calendar days (story bookings)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from shared.domain.base import ValueObject

SUPPORTED_CURRENCIES = ('INR', 'USD', 'EUR')


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are kept as Decimal; ints, floats and numeric strings are
    coerced on construction.
    """
    amount: Decimal
    currency: str = 'INR'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, 'amount', Decimal(str(self.amount)))
            except ArithmeticError:
                raise ValueError(f"Invalid amount: {self.amount!r}")
        if not self.amount.is_finite():
            raise ValueError(f"Invalid amount: {self.amount}")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = 'INR') -> 'Money':
        return cls(Decimal('0'), currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Both start_date and end_date are included: a story booked from the
    10th to the 14th occupies five calendar days. A single-day range has
    start_date == end_date.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must not be after end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range shares at least one day with another

        Ranges that touch on a boundary day overlap, e.g.
        DateRange(10, 12) and DateRange(12, 14) both include the 12th.
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date <= other.end_date and other.start_date <= self.end_date

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def days(self) -> Iterator[date]:
        """Every calendar day in the range, in order"""
        return (self.start_date + timedelta(days=offset) for offset in range(len(self)))

    def __len__(self) -> int:
        """Number of calendar days, both ends included"""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
