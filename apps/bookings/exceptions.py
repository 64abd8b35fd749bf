"""Errors raised by the reservation and cancellation handlers."""

from __future__ import annotations

from datetime import date
from uuid import UUID


class ReservationError(Exception):
    """Base class: a booking request was not carried out.

    `code` is stable and meant for clients; `retryable` tells the caller
    whether sending the very same request again can succeed.
    """

    code = "reservation_failed"
    http_status = 400
    retryable = False
    default_message = "Reservation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def details(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        return {
            "success": False,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            **self.details(),
        }


class ReservationValidationError(ReservationError):
    code = "validation_failed"
    default_message = "Validation failed."


class TravellerCountMismatch(ReservationValidationError):
    code = "traveller_count_mismatch"

    def __init__(self, declared: int, provided: int) -> None:
        self.declared = declared
        self.provided = provided
        super().__init__(
            f"Number of traveller details ({provided}) must match noOfTravellers ({declared})"
        )

    def details(self) -> dict:
        return {"declared": self.declared, "provided": self.provided}


class DurationMismatch(ReservationValidationError):
    code = "duration_mismatch"

    def __init__(self, requested_days: int, story_length_days: int) -> None:
        self.requested_days = requested_days
        self.story_length_days = story_length_days
        super().__init__(
            f"Booking spans {requested_days} day(s) but the story lasts {story_length_days} day(s)"
        )

    def details(self) -> dict:
        return {"requestedDays": self.requested_days, "storyLengthDays": self.story_length_days}


class StoryNotFound(ReservationError):
    code = "story_not_found"
    http_status = 404

    def __init__(self, story_id: UUID) -> None:
        self.story_id = story_id
        super().__init__(f"Story {story_id} not found")


class StoryNotBookable(ReservationError):
    code = "story_not_bookable"
    http_status = 409

    def __init__(self, story_id: UUID, reason: str) -> None:
        self.story_id = story_id
        self.reason = reason
        super().__init__(f"Story {story_id} cannot be booked: {reason}")


class CapacityExceeded(ReservationError):
    """Not enough room on `date`; `remaining` travellers would still have fit."""

    code = "capacity_exceeded"
    http_status = 409

    def __init__(self, date: date, remaining: int, requested: int, ceiling: int) -> None:
        self.date = date
        self.remaining = remaining
        self.requested = requested
        self.ceiling = ceiling
        super().__init__(
            f"Booking exceeds maximum capacity of {ceiling} travellers per day on "
            f"{date.isoformat()}: {remaining} place(s) left, {requested} requested"
        )

    def details(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "remaining": self.remaining,
            "requested": self.requested,
            "maxTravellersPerDay": self.ceiling,
        }


class ReservationFailed(ReservationError):
    """Storage failed mid-transaction; nothing was written and a retry may succeed."""

    code = "transient_storage_failure"
    http_status = 503
    retryable = True
    default_message = "Reservation could not be completed, please retry."


class BookingNotFound(ReservationError):
    code = "booking_not_found"
    http_status = 404

    def __init__(self, booking_id: UUID) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class BookingAlreadyCancelled(ReservationError):
    code = "booking_already_cancelled"
    http_status = 409

    def __init__(self, booking_id: UUID) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} is already cancelled")
