"""
Booking Domain Events

Published on the message bus after the reserving or cancelling
transaction has committed.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass(kw_only=True)
class BookingReserved(DomainEvent):
    """
    Event: a booking was created and its travellers now count against capacity

    Triggers:
    - Schedule the unpaid-booking release check
    """
    booking_id: UUID
    story_id: UUID
    dates: DateRange
    total_travellers: int
    user_id: int | None = None


@dataclass(kw_only=True)
class BookingCancelled(DomainEvent):
    """
    Event: a booking was cancelled; its capacity is free again
    """
    booking_id: UUID
    story_id: UUID
    dates: DateRange
    total_travellers: int
    reason: str = ''
