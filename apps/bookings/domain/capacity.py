"""
Capacity Evaluator

Decides whether a candidate booking fits a story's per-day traveller
ceiling given the bookings already committed against it.

Every calendar day of the candidate range is checked on its own: a
booking of N travellers is admitted only if, for each day d,

    committed(d) + N <= ceiling

where committed(d) sums the travellers of existing bookings whose
inclusive range contains d. The first failing day is reported together
with the room that was left on it.

Everything here is pure: no database access and no clock, so the same
inputs always produce the same decision.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Union

from shared.domain.value_objects import DateRange


@dataclass(frozen=True)
class CommittedBooking:
    """A confirmed booking as seen by the evaluator"""
    dates: DateRange
    travellers: int


@dataclass(frozen=True)
class Admit:
    admitted = True


@dataclass(frozen=True)
class Reject:
    """
    Candidate does not fit on `date`

    remaining: travellers that would still have fit on that day (>= 0)
    shortfall: how many travellers too many were requested
    """
    date: date
    committed: int
    remaining: int
    shortfall: int

    admitted = False


Decision = Union[Admit, Reject]

ADMIT = Admit()


def committed_on(day: date, bookings: Iterable[CommittedBooking]) -> int:
    """Travellers already committed on a single day"""
    return sum(b.travellers for b in bookings if b.dates.contains(day))


def evaluate(
    ceiling: int,
    existing_bookings: Iterable[CommittedBooking],
    candidate_range: DateRange,
    candidate_count: int,
) -> Decision:
    if candidate_count < 1:
        raise ValueError("Traveller count must be at least 1")
    if ceiling < 0:
        raise ValueError("Capacity ceiling cannot be negative")

    # Only bookings touching the candidate range can matter
    relevant = [b for b in existing_bookings if b.dates.overlaps_with(candidate_range)]

    for day in candidate_range.days():
        committed = committed_on(day, relevant)
        if committed + candidate_count > ceiling:
            remaining = max(ceiling - committed, 0)
            return Reject(
                date=day,
                committed=committed,
                remaining=remaining,
                shortfall=candidate_count - remaining,
            )

    return ADMIT


def remaining_capacity(
    ceiling: int,
    existing_bookings: Iterable[CommittedBooking],
    dates: DateRange,
) -> Dict[date, int]:
    """Room left on each day of `dates`, clamped at zero"""
    bookings = [b for b in existing_bookings if b.dates.overlaps_with(dates)]
    return {
        day: max(ceiling - committed_on(day, bookings), 0)
        for day in dates.days()
    }
