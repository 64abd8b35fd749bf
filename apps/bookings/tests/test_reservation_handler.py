"""Tests for the reservation and cancellation handlers."""

from __future__ import annotations

from datetime import date, timedelta
from unittest import mock
from uuid import uuid4

from django.db import IntegrityError, OperationalError
from django.test import TestCase

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ReserveStoryHandler,
)
from apps.bookings.domain.events import BookingCancelled, BookingReserved
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
from apps.bookings.models import Booking
from apps.bookings.repositories import DjangoBookingRepository, DjangoStoryRepository
from apps.stories.models import Story
from shared.application.message_bus import message_bus

from .helpers import ledger_snapshot, make_booking, make_story, reserve_command

NOV_10 = date(2025, 11, 10)
NOV_14 = date(2025, 11, 14)


class ReserveStoryHandlerTests(TestCase):
    def setUp(self) -> None:
        self.story = make_story(max_travellers_per_day=10, story_length_days=5)
        self.booking_repo = mock.Mock(wraps=DjangoBookingRepository())
        self.handler = ReserveStoryHandler(DjangoStoryRepository(), self.booking_repo)

    def test_admits_and_persists_confirmed_booking(self) -> None:
        record = self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 4))

        self.assertEqual(record.status, "confirmed")
        self.assertEqual(record.total_travellers, 4)
        self.assertEqual(record.story_id, self.story.story_id)
        booking = Booking.objects.get(booking_id=record.booking_id)
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(booking.payment_status, Booking.PaymentStatus.PENDING)
        self.assertEqual((booking.start_date, booking.end_date), (NOV_10, NOV_14))
        self.assertEqual(len(booking.travellers), 4)
        self.assertEqual(booking.travellers[0]["email_address"], "traveller0@example.com")
        self.assertEqual(str(booking.total_payment), "12050.00")

    def test_rejects_when_a_day_is_full(self) -> None:
        make_booking(self.story, NOV_10, NOV_14, 7)

        with self.assertRaises(CapacityExceeded) as ctx:
            self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 4))

        self.assertEqual(ctx.exception.date, NOV_10)
        self.assertEqual(ctx.exception.remaining, 3)
        self.assertEqual(ctx.exception.requested, 4)
        self.assertFalse(ctx.exception.retryable)
        self.assertEqual(Booking.objects.count(), 1)

    def test_fills_remaining_room_exactly(self) -> None:
        make_booking(self.story, NOV_10, NOV_14, 7)

        self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 3))

        self.assertEqual(Booking.objects.confirmed().count(), 2)

    def test_duration_mismatch_skips_capacity_check(self) -> None:
        story = make_story(story_length_days=3)

        with self.assertRaises(DurationMismatch) as ctx:
            self.handler.handle(reserve_command(story, NOV_10, NOV_14, 2))

        self.assertEqual(ctx.exception.requested_days, 5)
        self.assertEqual(ctx.exception.story_length_days, 3)
        self.booking_repo.find_confirmed_overlapping.assert_not_called()
        self.assertFalse(Booking.objects.exists())

    def test_draft_story_is_not_bookable_whatever_the_dates(self) -> None:
        story = make_story(status=Story.Status.DRAFT, story_length_days=3)

        # Five days against a three-day story: the status check comes first
        with self.assertRaises(StoryNotBookable):
            self.handler.handle(reserve_command(story, NOV_10, NOV_14, 2))

        self.booking_repo.find_confirmed_overlapping.assert_not_called()

    def test_rejected_story_is_not_bookable(self) -> None:
        story = make_story(status=Story.Status.REJECTED)

        with self.assertRaises(StoryNotBookable):
            self.handler.handle(reserve_command(story, NOV_10, NOV_14, 2))

    def test_approved_story_is_bookable(self) -> None:
        story = make_story(status=Story.Status.APPROVED)

        record = self.handler.handle(reserve_command(story, NOV_10, NOV_14, 2))

        self.assertEqual(record.status, "confirmed")

    def test_story_without_capacity_is_not_bookable(self) -> None:
        story = make_story(max_travellers_per_day=None)

        with self.assertRaises(StoryNotBookable):
            self.handler.handle(reserve_command(story, NOV_10, NOV_14, 2))

    def test_travel_with_stars_uses_scheduled_ceiling(self) -> None:
        story = make_story(
            availability_type=Story.AvailabilityType.TRAVEL_WITH_STARS,
            max_travellers_per_day=None,
            max_travellers_scheduled=3,
        )

        self.handler.handle(reserve_command(story, NOV_10, NOV_14, 3))
        with self.assertRaises(CapacityExceeded) as ctx:
            self.handler.handle(reserve_command(story, NOV_10, NOV_14, 1))

        self.assertEqual(ctx.exception.ceiling, 3)
        self.assertEqual(ctx.exception.remaining, 0)

    def test_reserves_on_the_last_representable_date(self) -> None:
        story = make_story(max_travellers_per_day=10, story_length_days=1)

        record = self.handler.handle(reserve_command(story, date.max, date.max, 2))

        self.assertEqual((record.start_date, record.end_date), (date.max, date.max))
        with self.assertRaises(CapacityExceeded) as ctx:
            self.handler.handle(reserve_command(story, date.max, date.max, 9))
        self.assertEqual(ctx.exception.remaining, 8)

    def test_unknown_story(self) -> None:
        missing = Story(story_id=uuid4())

        with self.assertRaises(StoryNotFound):
            self.handler.handle(reserve_command(missing, NOV_10, NOV_14, 2))

    def test_cancelled_bookings_do_not_count(self) -> None:
        make_booking(self.story, NOV_10, NOV_14, 10, status=Booking.Status.CANCELLED)

        self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 10))

    def test_other_stories_do_not_count(self) -> None:
        make_booking(make_story(), NOV_10, NOV_14, 10)

        self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 10))

    def test_input_validation(self) -> None:
        cases = [
            (reserve_command(self.story, NOV_10, NOV_14, 1, travellers=[]), ReservationValidationError),
            (reserve_command(self.story, NOV_10, NOV_14, 2, no_of_travellers=3), TravellerCountMismatch),
            (reserve_command(self.story, NOV_10, NOV_14, 2, payment_details=[]), ReservationValidationError),
            (reserve_command(self.story, NOV_14, NOV_10, 2), ReservationValidationError),
            (reserve_command(self.story, NOV_10, NOV_14, 1, travellers=[{"full_name": "A"}]),
             ReservationValidationError),
        ]
        for command, error in cases:
            with self.subTest(error=error.__name__):
                with self.assertRaises(error):
                    self.handler.handle(command)

        self.assertFalse(Booking.objects.exists())

    def test_declared_count_matching_is_accepted(self) -> None:
        record = self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 2, no_of_travellers=2))

        self.assertEqual(record.total_travellers, 2)

    def test_rejection_leaves_ledger_unchanged(self) -> None:
        make_booking(self.story, NOV_10, NOV_14, 6)
        make_booking(self.story, NOV_10 + timedelta(days=2), NOV_14 + timedelta(days=2), 2)
        before = ledger_snapshot()

        with self.assertRaises(CapacityExceeded):
            self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 3))

        self.assertEqual(ledger_snapshot(), before)

    def test_sequence_of_reservations_never_overbooks(self) -> None:
        story = make_story(max_travellers_per_day=10, story_length_days=3)
        requests = [(offset, count) for offset in range(8) for count in (4, 3, 5)]
        for offset, count in requests:
            start = NOV_10 + timedelta(days=offset)
            try:
                self.handler.handle(reserve_command(story, start, start + timedelta(days=2), count))
            except CapacityExceeded:
                pass

        bookings = list(Booking.objects.confirmed().filter(story=story))
        self.assertTrue(bookings)
        for offset in range(12):
            day = NOV_10 + timedelta(days=offset)
            total = sum(b.total_travellers for b in bookings if b.dates.contains(day))
            self.assertLessEqual(total, 10, day)

    def test_sequential_single_day_race_admits_one(self) -> None:
        story = make_story(max_travellers_per_day=10, story_length_days=1)

        self.handler.handle(reserve_command(story, NOV_10, NOV_10, 6))
        with self.assertRaises(CapacityExceeded) as ctx:
            self.handler.handle(reserve_command(story, NOV_10, NOV_10, 6))

        self.assertEqual(ctx.exception.remaining, 4)

    def test_database_error_becomes_retryable_failure(self) -> None:
        self.booking_repo.add = mock.Mock(side_effect=OperationalError("deadlock detected on relation 42"))

        with self.assertRaises(ReservationFailed) as ctx:
            self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 2))

        self.assertTrue(ctx.exception.retryable)
        self.assertIsInstance(ctx.exception.__cause__, OperationalError)
        self.assertNotIn("deadlock", ctx.exception.message)
        self.assertFalse(Booking.objects.exists())

    def test_integrity_error_becomes_retryable_failure(self) -> None:
        self.booking_repo.find_confirmed_overlapping = mock.Mock(side_effect=IntegrityError("boom"))

        with self.assertRaises(ReservationFailed):
            self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 2))

    def test_event_published_after_commit(self) -> None:
        received = []
        message_bus.register_event_handler(BookingReserved, received.append)
        self.addCleanup(message_bus.unregister_event_handler, BookingReserved, received.append)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            record = self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 4))
            self.assertEqual(received, [])

        self.assertEqual(len(callbacks), 1)
        [event] = received
        self.assertEqual(event.booking_id, record.booking_id)
        self.assertEqual(event.story_id, self.story.story_id)
        self.assertEqual(event.total_travellers, 4)

    def test_no_event_for_rejected_reservation(self) -> None:
        make_booking(self.story, NOV_10, NOV_14, 10)

        with self.captureOnCommitCallbacks() as callbacks:
            with self.assertRaises(CapacityExceeded):
                self.handler.handle(reserve_command(self.story, NOV_10, NOV_14, 1))

        self.assertEqual(callbacks, [])


class CancelBookingHandlerTests(TestCase):
    def setUp(self) -> None:
        self.story = make_story(max_travellers_per_day=10, story_length_days=5)
        self.handler = CancelBookingHandler(DjangoStoryRepository(), DjangoBookingRepository())
        self.reserve = ReserveStoryHandler(DjangoStoryRepository(), DjangoBookingRepository())

    def test_cancellation_frees_capacity(self) -> None:
        booking = make_booking(self.story, NOV_10, NOV_14, 8)

        cancelled = self.handler.handle(CancelBookingCommand(booking_id=booking.booking_id, reason="plans changed"))

        self.assertTrue(cancelled)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CANCELLED)
        self.assertEqual(booking.cancellation_reason, "plans changed")
        self.assertIsNotNone(booking.cancelled_at)
        self.reserve.handle(reserve_command(self.story, NOV_10, NOV_14, 10))

    def test_cancelling_twice_is_rejected(self) -> None:
        booking = make_booking(self.story, NOV_10, NOV_14, 2)
        self.handler.handle(CancelBookingCommand(booking_id=booking.booking_id))

        with self.assertRaises(BookingAlreadyCancelled):
            self.handler.handle(CancelBookingCommand(booking_id=booking.booking_id))

    def test_unknown_booking(self) -> None:
        with self.assertRaises(BookingNotFound):
            self.handler.handle(CancelBookingCommand(booking_id=uuid4()))

    def test_guard_can_veto_on_locked_row(self) -> None:
        booking = make_booking(self.story, NOV_10, NOV_14, 2)

        cancelled = self.handler.handle(
            CancelBookingCommand(booking_id=booking.booking_id, only_if=lambda b: False)
        )

        self.assertFalse(cancelled)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.Status.CONFIRMED)

    def test_cancelled_event_published(self) -> None:
        booking = make_booking(self.story, NOV_10, NOV_14, 2)
        received = []
        message_bus.register_event_handler(BookingCancelled, received.append)
        self.addCleanup(message_bus.unregister_event_handler, BookingCancelled, received.append)

        with self.captureOnCommitCallbacks(execute=True):
            self.handler.handle(CancelBookingCommand(booking_id=booking.booking_id, reason="sick"))

        [event] = received
        self.assertEqual(event.booking_id, booking.booking_id)
        self.assertEqual(event.reason, "sick")
