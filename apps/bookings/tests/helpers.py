"""Builders shared by the booking test modules."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from apps.bookings.application.command_handlers import ReserveStoryCommand
from apps.bookings.domain.entities import PaymentBreakdown, TravellerDetails
from apps.bookings.models import Booking
from apps.stories.models import Story


def make_story(**overrides) -> Story:
    fields = {
        "title": "Spiti Valley Road Trip",
        "status": Story.Status.PUBLISHED,
        "story_length_days": 5,
        "max_travellers_per_day": 10,
    }
    fields.update(overrides)
    return Story.objects.create(**fields)


def make_travellers(count: int) -> list[TravellerDetails]:
    return [
        TravellerDetails(
            full_name=f"Traveller {i}",
            email_address=f"traveller{i}@example.com",
            phone_number=f"+9198765432{i:02d}",
        )
        for i in range(count)
    ]


def make_payment(total_base="12000.00", total_payment="12050.00") -> PaymentBreakdown:
    return PaymentBreakdown.from_amounts(total_base=total_base, total_payment=total_payment)


def reserve_command(story: Story, start: date, end: date, traveller_count: int, **overrides) -> ReserveStoryCommand:
    fields = {
        "story_id": story.story_id,
        "start_date": start,
        "end_date": end,
        "travellers": make_travellers(traveller_count),
        "payment_details": [make_payment()],
    }
    fields.update(overrides)
    return ReserveStoryCommand(**fields)


def make_booking(story: Story, start: date, end: date, travellers: int, **overrides) -> Booking:
    """Insert a ledger row directly, bypassing the capacity check."""
    fields = {
        "story": story,
        "start_date": start,
        "end_date": end,
        "total_travellers": travellers,
        "travellers": [t.to_dict() for t in make_travellers(travellers)],
        "payment_details": [make_payment().to_dict()],
        "total_payment": Decimal("12050.00"),
    }
    fields.update(overrides)
    return Booking.objects.create(**fields)


def ledger_snapshot() -> list[tuple]:
    return list(
        Booking.objects.order_by("pk").values_list(
            "pk", "booking_id", "story_id", "start_date", "end_date",
            "total_travellers", "status", "payment_status", "updated_at",
        )
    )
