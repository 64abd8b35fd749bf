"""Celery tasks for the booking domain."""

from __future__ import annotations

from datetime import timedelta

import structlog
from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .application.command_handlers import CancelBookingCommand, CancelBookingHandler
from .domain.entities import PaymentStatus
from .exceptions import BookingAlreadyCancelled, BookingNotFound
from .models import Booking
from .repositories import DjangoBookingRepository, DjangoStoryRepository

logger = structlog.get_logger(__name__)

UNPAID_RELEASE_REASON = "Payment not received in time"


def _release_if_overdue(booking_id) -> bool:
    """Cancel an unpaid booking once its payment window has passed.

    The overdue check is repeated on the locked row, so a payment confirmed
    while the task waits for the lock keeps the booking.
    """
    now = timezone.now()
    handler = CancelBookingHandler(DjangoStoryRepository(), DjangoBookingRepository())
    return handler.handle(
        CancelBookingCommand(
            booking_id=booking_id,
            reason=UNPAID_RELEASE_REASON,
            payment_status=PaymentStatus.REJECTED,
            only_if=lambda booking: booking.payment_overdue(now),
        )
    )


@shared_task(name="bookings.release_unpaid_booking")
def release_unpaid_booking(booking_id: str) -> bool:
    """Release one booking whose payment did not arrive in time."""
    try:
        released = _release_if_overdue(booking_id)
    except (BookingNotFound, BookingAlreadyCancelled):
        return False

    if released:
        logger.info("unpaid_booking_released", booking_id=str(booking_id))
    return released


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.release_unpaid_bookings")
def release_unpaid_bookings() -> dict[str, int]:
    """
    Release confirmed bookings whose payment is still pending after
    BOOKING_PAYMENT_TIMEOUT_MINUTES.

    Runs every 5 minutes via Celery Beat; at most BOOKING_RELEASE_BATCH_SIZE
    bookings per run.

    Returns:
        dict: {"released": bookings cancelled, "errors": bookings that failed}
    """
    cutoff = timezone.now() - timedelta(minutes=settings.BOOKING_PAYMENT_TIMEOUT_MINUTES)
    booking_ids = list(
        Booking.objects.unpaid_since(cutoff)
        .order_by("created_at")
        .values_list("booking_id", flat=True)[: settings.BOOKING_RELEASE_BATCH_SIZE]
    )

    released = 0
    errors = 0
    for booking_id in booking_ids:
        try:
            if _release_if_overdue(booking_id):
                released += 1
        except (BookingNotFound, BookingAlreadyCancelled):
            continue
        except Exception:
            errors += 1
            logger.error("unpaid_booking_release_failed", booking_id=str(booking_id), exc_info=True)

    if released or errors:
        logger.info("unpaid_bookings_released", released=released, errors=errors)

    return {"released": released, "errors": errors}
