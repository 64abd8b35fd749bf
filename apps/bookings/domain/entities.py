"""
Booking Domain Entities

- TravellerDetails / PaymentBreakdown: typed request payloads
- Reservation: aggregate for one booking of a story
- BookingRecord: what a successful reservation hands back to callers
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List
from uuid import UUID

from shared.domain.base import Aggregate, ValueObject
from shared.domain.value_objects import DateRange, Money

DEFAULT_PLATFORM_FEE = 50


class BookingStatus(Enum):
    """Only CONFIRMED bookings consume capacity"""
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'


class PaymentStatus(Enum):
    PENDING = 'pending'     # Waiting for the payment gateway
    SUCCESS = 'success'     # Payment captured
    REJECTED = 'rejected'   # Abandoned or refused; booking released


@dataclass(frozen=True)
class TravellerDetails(ValueObject):
    full_name: str
    email_address: str
    phone_number: str

    def __post_init__(self):
        for name in ('full_name', 'email_address', 'phone_number'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Traveller {name} is required")
            object.__setattr__(self, name, value.strip())
        object.__setattr__(self, 'email_address', self.email_address.lower())

    def to_dict(self) -> dict:
        return {
            'full_name': self.full_name,
            'email_address': self.email_address,
            'phone_number': self.phone_number,
        }


@dataclass(frozen=True)
class PaymentBreakdown(ValueObject):
    """
    Agreed price for a booking as computed by the fee collaborator

    The figures are stored as given; total_payment is not recomputed
    from the other fields.
    """
    total_base: Money
    total_payment: Money
    platform_fee: Money = None
    discount: Money = None

    def __post_init__(self):
        currency = self.total_base.currency
        if self.platform_fee is None:
            object.__setattr__(self, 'platform_fee', Money(DEFAULT_PLATFORM_FEE, currency))
        if self.discount is None:
            object.__setattr__(self, 'discount', Money.zero(currency))
        currencies = {m.currency for m in (self.total_base, self.total_payment, self.platform_fee, self.discount)}
        if len(currencies) > 1:
            raise ValueError(f"Payment breakdown mixes currencies: {sorted(currencies)}")

    @property
    def currency(self) -> str:
        return self.total_base.currency

    @classmethod
    def from_amounts(cls, total_base, total_payment, platform_fee=None, discount=None,
                     currency: str = 'INR') -> 'PaymentBreakdown':
        return cls(
            total_base=Money(total_base, currency),
            total_payment=Money(total_payment, currency),
            platform_fee=Money(platform_fee, currency) if platform_fee is not None else None,
            discount=Money(discount, currency) if discount is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            'total_base': str(self.total_base.amount),
            'platform_fee': str(self.platform_fee.amount),
            'discount': str(self.discount.amount),
            'total_payment': str(self.total_payment.amount),
            'currency': self.currency,
        }


@dataclass(frozen=True)
class BookingRecord:
    booking_id: UUID
    story_id: UUID
    start_date: date
    end_date: date
    total_travellers: int
    status: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            'bookingId': str(self.booking_id),
            'storyId': str(self.story_id),
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat(),
            'totalTravellers': self.total_travellers,
            'status': self.status,
            'createdAt': self.created_at.isoformat(),
        }


@dataclass(kw_only=True, eq=False)
class Reservation(Aggregate):
    """
    Booking Aggregate Root

    id is the booking's public identifier (random UUID).

    Key invariants:
    - At least one traveller; the count is the number of travellers listed
    - A cancelled reservation cannot be cancelled again
    """

    story_id: UUID
    dates: DateRange
    travellers: List[TravellerDetails]
    payment_details: List[PaymentBreakdown] = field(default_factory=list)
    user_id: int | None = None
    status: BookingStatus = BookingStatus.CONFIRMED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    cancellation_reason: str = ''

    def __post_init__(self):
        if not self.travellers:
            raise ValueError("At least one traveller is required")

    @classmethod
    def create(cls, *, story_id: UUID, dates: DateRange, travellers: List[TravellerDetails],
               payment_details: List[PaymentBreakdown], user_id: int | None = None) -> 'Reservation':
        from apps.bookings.domain.events import BookingReserved

        reservation = cls(
            story_id=story_id,
            dates=dates,
            travellers=list(travellers),
            payment_details=list(payment_details),
            user_id=user_id,
        )
        reservation.add_event(BookingReserved(
            aggregate_id=reservation.id,
            booking_id=reservation.id,
            story_id=story_id,
            dates=dates,
            total_travellers=reservation.total_travellers,
            user_id=user_id,
        ))
        return reservation

    @property
    def total_travellers(self) -> int:
        return len(self.travellers)

    @property
    def total_payment(self) -> Money:
        if not self.payment_details:
            return Money.zero()
        total = Money.zero(self.payment_details[0].currency)
        for breakdown in self.payment_details:
            total = total + breakdown.total_payment
        return total

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    def cancel(self, reason: str = '', payment_status: PaymentStatus | None = None):
        """
        Cancel reservation (CONFIRMED -> CANCELLED)

        Its travellers stop counting against the story's capacity.
        Events: BookingCancelled
        """
        if self.status == BookingStatus.CANCELLED:
            raise ValueError(f"Booking {self.id} is already cancelled")

        from apps.bookings.domain.events import BookingCancelled

        self.status = BookingStatus.CANCELLED
        self.cancellation_reason = reason
        if payment_status is not None:
            self.payment_status = payment_status

        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            story_id=self.story_id,
            dates=self.dates,
            total_travellers=self.total_travellers,
            reason=reason,
        ))

    def __str__(self):
        return f"Reservation {self.id} ({self.status.value})"
