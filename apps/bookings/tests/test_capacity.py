"""Unit tests for the per-day capacity evaluator."""

from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase

from apps.bookings.domain.capacity import (
    Admit,
    CommittedBooking,
    Reject,
    committed_on,
    evaluate,
    remaining_capacity,
)
from shared.domain.value_objects import DateRange


def booking(start: date, end: date, travellers: int) -> CommittedBooking:
    return CommittedBooking(dates=DateRange(start, end), travellers=travellers)


NOV_10_14 = DateRange(date(2025, 11, 10), date(2025, 11, 14))


class EvaluateTests(SimpleTestCase):
    def test_admits_when_no_bookings_and_count_within_ceiling(self) -> None:
        decision = evaluate(10, [], NOV_10_14, 4)

        self.assertIsInstance(decision, Admit)
        self.assertTrue(decision.admitted)

    def test_admits_exactly_up_to_ceiling(self) -> None:
        self.assertTrue(evaluate(10, [], NOV_10_14, 10).admitted)
        existing = [booking(date(2025, 11, 10), date(2025, 11, 14), 6)]
        self.assertTrue(evaluate(10, existing, NOV_10_14, 4).admitted)

    def test_rejects_on_first_date_with_remaining_room(self) -> None:
        existing = [booking(date(2025, 11, 10), date(2025, 11, 14), 7)]

        decision = evaluate(10, existing, NOV_10_14, 4)

        self.assertEqual(
            decision,
            Reject(date=date(2025, 11, 10), committed=7, remaining=3, shortfall=1),
        )
        self.assertFalse(decision.admitted)

    def test_reports_the_first_failing_day_not_the_first_day(self) -> None:
        existing = [
            booking(date(2025, 11, 12), date(2025, 11, 13), 5),
            booking(date(2025, 11, 13), date(2025, 11, 16), 3),
        ]

        decision = evaluate(10, existing, NOV_10_14, 3)

        self.assertIsInstance(decision, Reject)
        self.assertEqual(decision.date, date(2025, 11, 13))
        self.assertEqual(decision.committed, 8)
        self.assertEqual(decision.remaining, 2)

    def test_boundary_days_are_inclusive(self) -> None:
        # Touching on the 14th only: the candidate's last day is shared
        existing = [booking(date(2025, 11, 14), date(2025, 11, 18), 8)]

        decision = evaluate(10, existing, NOV_10_14, 3)

        self.assertIsInstance(decision, Reject)
        self.assertEqual(decision.date, date(2025, 11, 14))

    def test_bookings_outside_the_range_are_ignored(self) -> None:
        existing = [
            booking(date(2025, 11, 1), date(2025, 11, 9), 10),
            booking(date(2025, 11, 15), date(2025, 11, 19), 10),
        ]

        self.assertTrue(evaluate(10, existing, NOV_10_14, 10).admitted)

    def test_zero_ceiling_rejects_any_traveller(self) -> None:
        decision = evaluate(0, [], NOV_10_14, 1)

        self.assertEqual(decision, Reject(date=date(2025, 11, 10), committed=0, remaining=0, shortfall=1))

    def test_overbooked_day_reports_zero_remaining(self) -> None:
        # Ceiling lowered after bookings were taken
        existing = [booking(date(2025, 11, 10), date(2025, 11, 10), 12)]

        decision = evaluate(10, existing, DateRange(date(2025, 11, 10), date(2025, 11, 10)), 1)

        self.assertEqual(decision.remaining, 0)
        self.assertEqual(decision.shortfall, 1)

    def test_single_day_range_checks_one_date(self) -> None:
        day = DateRange(date(2025, 11, 10), date(2025, 11, 10))
        existing = [booking(date(2025, 11, 11), date(2025, 11, 20), 10)]

        self.assertTrue(evaluate(10, existing, day, 10).admitted)

    def test_range_ending_on_the_last_representable_date(self) -> None:
        last_days = DateRange(date(9999, 12, 30), date.max)
        existing = [booking(date.max, date.max, 8)]

        decision = evaluate(10, existing, last_days, 3)

        self.assertEqual(decision, Reject(date=date.max, committed=8, remaining=2, shortfall=1))
        self.assertEqual(remaining_capacity(10, existing, last_days), {date(9999, 12, 30): 10, date.max: 2})

    def test_invalid_inputs_raise(self) -> None:
        with self.assertRaises(ValueError):
            evaluate(10, [], NOV_10_14, 0)
        with self.assertRaises(ValueError):
            evaluate(-1, [], NOV_10_14, 1)

    def test_same_inputs_give_same_decision(self) -> None:
        existing = [
            booking(date(2025, 11, 9), date(2025, 11, 11), 4),
            booking(date(2025, 11, 11), date(2025, 11, 15), 5),
        ]

        first = evaluate(10, existing, NOV_10_14, 2)
        second = evaluate(10, list(existing), NOV_10_14, 2)

        self.assertEqual(first, second)

    def test_accepts_a_one_shot_iterable(self) -> None:
        existing = iter([booking(date(2025, 11, 10), date(2025, 11, 14), 9)])

        decision = evaluate(10, existing, NOV_10_14, 2)

        self.assertEqual(decision.remaining, 1)


class RemainingCapacityTests(SimpleTestCase):
    def test_room_left_per_day(self) -> None:
        existing = [
            booking(date(2025, 11, 10), date(2025, 11, 11), 4),
            booking(date(2025, 11, 11), date(2025, 11, 12), 7),
        ]
        dates = DateRange(date(2025, 11, 10), date(2025, 11, 13))

        self.assertEqual(
            remaining_capacity(10, existing, dates),
            {
                date(2025, 11, 10): 6,
                date(2025, 11, 11): 0,
                date(2025, 11, 12): 3,
                date(2025, 11, 13): 10,
            },
        )

    def test_committed_on_sums_covering_bookings(self) -> None:
        existing = [
            booking(date(2025, 11, 10), date(2025, 11, 11), 4),
            booking(date(2025, 11, 11), date(2025, 11, 12), 7),
        ]

        self.assertEqual(committed_on(date(2025, 11, 11), existing), 11)
        self.assertEqual(committed_on(date(2025, 11, 13), existing), 0)
