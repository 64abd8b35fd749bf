"""Storage adapters for the reservation handlers.

All reads that feed a capacity decision are meant to run inside the
handler's `transaction.atomic()` block so they observe the same snapshot
as the insert that follows.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.stories.models import Story
from shared.domain.value_objects import DateRange

from .domain.capacity import CommittedBooking
from .domain.entities import (
    BookingRecord,
    BookingStatus,
    PaymentBreakdown,
    PaymentStatus,
    Reservation,
    TravellerDetails,
)
from .models import Booking


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class DjangoStoryRepository:
    def get(self, story_id: UUID) -> Optional[Story]:
        return Story.objects.filter(story_id=story_id).first()

    def get_for_update(self, story_id: UUID) -> Optional[Story]:
        """Fetch the story holding its row lock until the transaction ends.

        The story row is the per-story mutex: every writer that changes the
        set of confirmed bookings of a story takes it first.
        """
        queryset = _lock_queryset_if_possible(Story.objects.filter(story_id=story_id))
        return queryset.first()


class DjangoBookingRepository:
    def find_confirmed_overlapping(self, story: Story, dates: DateRange) -> List[CommittedBooking]:
        rows = (
            Booking.objects.confirmed()
            .filter(story=story)
            .covering(dates)
            .values_list("start_date", "end_date", "total_travellers")
        )
        return [
            CommittedBooking(dates=DateRange(start, end), travellers=travellers)
            for start, end, travellers in rows
        ]

    def add(self, story: Story, reservation: Reservation) -> BookingRecord:
        booking = Booking.objects.create(
            booking_id=reservation.id,
            story=story,
            user_id=reservation.user_id,
            start_date=reservation.dates.start_date,
            end_date=reservation.dates.end_date,
            total_travellers=reservation.total_travellers,
            travellers=[t.to_dict() for t in reservation.travellers],
            payment_details=[p.to_dict() for p in reservation.payment_details],
            total_payment=reservation.total_payment.amount,
            currency=reservation.total_payment.currency,
            status=reservation.status.value,
            payment_status=reservation.payment_status.value,
        )
        return to_record(booking)

    def get(self, booking_id: UUID) -> Optional[Booking]:
        return Booking.objects.select_related("story").filter(booking_id=booking_id).first()

    def get_for_update(self, booking_id: UUID) -> Optional[Booking]:
        queryset = _lock_queryset_if_possible(Booking.objects.filter(booking_id=booking_id))
        return queryset.first()

    def save_cancellation(self, booking: Booking, reservation: Reservation) -> Booking:
        booking.status = reservation.status.value
        booking.payment_status = reservation.payment_status.value
        booking.cancellation_reason = reservation.cancellation_reason[:255]
        booking.cancelled_at = timezone.now()
        booking.save(
            update_fields=[
                "status",
                "payment_status",
                "cancellation_reason",
                "cancelled_at",
                "updated_at",
            ]
        )
        return booking


def to_record(booking: Booking) -> BookingRecord:
    return BookingRecord(
        booking_id=booking.booking_id,
        story_id=booking.story.story_id,
        start_date=booking.start_date,
        end_date=booking.end_date,
        total_travellers=booking.total_travellers,
        status=booking.status,
        created_at=booking.created_at,
    )


def to_reservation(booking: Booking) -> Reservation:
    """Rebuild the aggregate from a stored row (no events are raised)."""
    currency = booking.currency
    breakdowns = [
        PaymentBreakdown.from_amounts(
            total_base=Decimal(item["total_base"]),
            total_payment=Decimal(item["total_payment"]),
            platform_fee=Decimal(item["platform_fee"]),
            discount=Decimal(item["discount"]),
            currency=item.get("currency", currency),
        )
        for item in booking.payment_details
    ]
    return Reservation(
        id=booking.booking_id,
        story_id=booking.story.story_id,
        dates=booking.dates,
        travellers=[TravellerDetails(**t) for t in booking.travellers],
        payment_details=breakdowns,
        user_id=booking.user_id,
        status=BookingStatus(booking.status),
        payment_status=PaymentStatus(booking.payment_status),
        cancellation_reason=booking.cancellation_reason,
    )
