"""
Booking Event Handlers

Subscribed to the message bus in `BookingsConfig.ready()`; they run after
the reserving or cancelling transaction has committed.
"""

import logging

from django.conf import settings

from apps.bookings.domain.events import BookingCancelled, BookingReserved

logger = logging.getLogger(__name__)

# Slack so the single-booking check lands after the payment window closes
RELEASE_GRACE_SECONDS = 30


def schedule_unpaid_release(event: BookingReserved):
    """Queue the release check for when the payment window closes"""
    from apps.bookings.tasks import release_unpaid_booking

    countdown = settings.BOOKING_PAYMENT_TIMEOUT_MINUTES * 60 + RELEASE_GRACE_SECONDS
    release_unpaid_booking.apply_async(args=[str(event.booking_id)], countdown=countdown)
    logger.debug(f"Scheduled unpaid release check for booking {event.booking_id} in {countdown}s")


def log_cancellation(event: BookingCancelled):
    logger.info(
        f"Booking {event.booking_id} cancelled, {event.total_travellers} place(s) "
        f"released on story {event.story_id} for {event.dates}"
    )


def register_handlers(bus):
    bus.register_event_handler(BookingReserved, schedule_unpaid_release)
    bus.register_event_handler(BookingCancelled, log_cancellation)
