"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- ReserveStoryCommand: Reserve places on a story for a date range
- CancelBookingCommand: Cancel a booking and free its capacity
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional
from uuid import UUID

import structlog
from django.db import DatabaseError

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import DateRange
from apps.bookings.domain.capacity import Reject, evaluate
from apps.bookings.domain.entities import (
    BookingRecord,
    PaymentBreakdown,
    PaymentStatus,
    Reservation,
    TravellerDetails,
)
from apps.bookings.exceptions import (
    BookingAlreadyCancelled,
    BookingNotFound,
    CapacityExceeded,
    DurationMismatch,
    ReservationFailed,
    ReservationValidationError,
    StoryNotBookable,
    StoryNotFound,
    TravellerCountMismatch,
)

logger = structlog.get_logger(__name__)


# ===== Commands =====

@dataclass
class ReserveStoryCommand:
    """
    Command to reserve a story

    This is the only sanctioned entry point for creating bookings.
    no_of_travellers is the count declared by the client; when given it
    must match the number of traveller entries.
    """
    story_id: UUID
    start_date: date
    end_date: date
    travellers: List[TravellerDetails]
    payment_details: List[PaymentBreakdown]
    no_of_travellers: Optional[int] = None
    user_id: Optional[int] = None


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: UUID
    reason: str = ''
    payment_status: Optional[PaymentStatus] = None
    only_if: Optional[Callable] = field(default=None, repr=False)


# ===== Command Handlers =====

def _check_story(story, story_id: UUID, dates: DateRange):
    """Rejections that depend only on the story row, in a fixed order."""
    if story is None:
        raise StoryNotFound(story_id)
    if not story.is_bookable:
        raise StoryNotBookable(story_id, f"status is {story.status}")
    if not story.capacity_configured:
        raise StoryNotBookable(story_id, "capacity or length is not configured")
    if len(dates) != story.story_length_days:
        raise DurationMismatch(len(dates), story.story_length_days)


class ReserveStoryHandler:
    """
    Handler for ReserveStory command

    Strategy:
    1. Validate the request without touching storage
    2. Reject unknown / unbookable stories and wrong durations up front
    3. Start database transaction (atomic)
    4. Lock the story row (SELECT FOR UPDATE) and re-check it
    5. Load confirmed bookings overlapping the range and evaluate capacity
    6. Insert the booking, collect BookingReserved
    7. Commit; events are published after commit

    Any database error inside the transaction surfaces as ReservationFailed.
    """

    def __init__(self, story_repo, booking_repo):
        self.story_repo = story_repo
        self.booking_repo = booking_repo

    def handle(self, command: ReserveStoryCommand) -> BookingRecord:
        log = logger.bind(
            story_id=str(command.story_id),
            start_date=str(command.start_date),
            end_date=str(command.end_date),
        )
        log.info("reservation_attempt", travellers=len(command.travellers or []))

        try:
            dates = self._validate(command)
            _check_story(self.story_repo.get(command.story_id), command.story_id, dates)
        except (ReservationValidationError, StoryNotFound, StoryNotBookable) as exc:
            log.info("reservation_rejected", code=exc.code, reason=exc.message)
            raise
        except DatabaseError as exc:
            log.error("reservation_storage_failure", error=exc.__class__.__name__, exc_info=True)
            raise ReservationFailed() from exc

        try:
            with DjangoUnitOfWork() as uow:
                story = self.story_repo.get_for_update(command.story_id)
                _check_story(story, command.story_id, dates)

                ceiling = story.capacity_ceiling
                existing = self.booking_repo.find_confirmed_overlapping(story, dates)
                decision = evaluate(ceiling, existing, dates, len(command.travellers))
                if isinstance(decision, Reject):
                    raise CapacityExceeded(
                        decision.date,
                        decision.remaining,
                        len(command.travellers),
                        ceiling,
                    )

                reservation = Reservation.create(
                    story_id=command.story_id,
                    dates=dates,
                    travellers=command.travellers,
                    payment_details=command.payment_details,
                    user_id=command.user_id,
                )
                record = self.booking_repo.add(story, reservation)
                uow.collect_events(reservation)
        except CapacityExceeded as exc:
            log.info(
                "reservation_capacity_exceeded",
                date=exc.date.isoformat(),
                remaining=exc.remaining,
                requested=exc.requested,
            )
            raise
        except (ReservationValidationError, StoryNotFound, StoryNotBookable) as exc:
            log.info("reservation_rejected", code=exc.code, reason=exc.message)
            raise
        except DatabaseError as exc:
            log.error("reservation_storage_failure", error=exc.__class__.__name__, exc_info=True)
            raise ReservationFailed() from exc

        log.info(
            "reservation_confirmed",
            booking_id=str(record.booking_id),
            total_travellers=record.total_travellers,
        )
        return record

    def _validate(self, command: ReserveStoryCommand) -> DateRange:
        if not command.travellers:
            raise ReservationValidationError("At least one traveller is required")
        for traveller in command.travellers:
            if not isinstance(traveller, TravellerDetails):
                raise ReservationValidationError("Traveller details are incomplete")
        if command.no_of_travellers is not None and command.no_of_travellers != len(command.travellers):
            raise TravellerCountMismatch(command.no_of_travellers, len(command.travellers))
        if not command.payment_details:
            raise ReservationValidationError("Payment details are required")
        if command.start_date > command.end_date:
            raise ReservationValidationError("startDate must be on or before endDate")
        return DateRange(command.start_date, command.end_date)


class CancelBookingHandler:
    """
    Handler for cancelling booking

    Takes the story lock before touching the booking, the same order the
    reservation path uses, so a concurrent reservation sees the booking
    either fully confirmed or fully cancelled.
    """

    def __init__(self, story_repo, booking_repo):
        self.story_repo = story_repo
        self.booking_repo = booking_repo

    def handle(self, command: CancelBookingCommand) -> bool:
        """
        Cancel booking

        Returns False when `only_if` rejects the locked booking (nothing
        is changed), True once the booking is cancelled.
        """
        from apps.bookings.repositories import to_reservation

        log = logger.bind(booking_id=str(command.booking_id))

        current = self.booking_repo.get(command.booking_id)
        if current is None:
            raise BookingNotFound(command.booking_id)

        try:
            with DjangoUnitOfWork() as uow:
                self.story_repo.get_for_update(current.story.story_id)
                booking = self.booking_repo.get_for_update(command.booking_id)
                if booking is None:
                    raise BookingNotFound(command.booking_id)
                if command.only_if is not None and not command.only_if(booking):
                    log.info("cancellation_skipped", status=booking.status, payment_status=booking.payment_status)
                    return False

                reservation = to_reservation(booking)
                if not reservation.is_confirmed:
                    raise BookingAlreadyCancelled(command.booking_id)

                reservation.cancel(command.reason, payment_status=command.payment_status)
                self.booking_repo.save_cancellation(booking, reservation)
                uow.collect_events(reservation)
        except DatabaseError as exc:
            log.error("cancellation_storage_failure", error=exc.__class__.__name__, exc_info=True)
            raise ReservationFailed("Cancellation could not be completed, please retry.") from exc

        log.info("booking_cancelled", reason=command.reason)
        return True
