"""Booking ledger models."""

from __future__ import annotations

import uuid
from datetime import timedelta
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange


class BookingQuerySet(models.QuerySet):
    def confirmed(self):
        return self.filter(status=Booking.Status.CONFIRMED)

    def covering(self, dates: DateRange):
        """Bookings sharing at least one day with `dates` (both ends inclusive)."""
        return self.filter(start_date__lte=dates.end_date, end_date__gte=dates.start_date)

    def unpaid_since(self, cutoff):
        return self.confirmed().filter(
            payment_status=Booking.PaymentStatus.PENDING,
            created_at__lt=cutoff,
        )


class Booking(models.Model):
    """A reservation of N travellers on a story for an inclusive date range.

    Rows are created only by `ReserveStoryHandler`, inside the transaction
    that checked the story's capacity.
    """

    class Status(models.TextChoices):
        CONFIRMED = "confirmed", _("Confirmed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        SUCCESS = "success", _("Success")
        REJECTED = "rejected", _("Rejected")

    booking_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    story = models.ForeignKey(
        "stories.Story",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="story_bookings",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    total_travellers = models.PositiveSmallIntegerField()
    travellers = models.JSONField(default=list)
    payment_details = models.JSONField(default=list)
    total_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="INR")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.CONFIRMED)
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="booking_end_not_before_start",
            ),
            models.CheckConstraint(
                condition=models.Q(total_travellers__gte=1),
                name="booking_at_least_one_traveller",
            ),
        ]
        indexes = [
            models.Index(fields=["story", "start_date", "end_date"], name="booking_story_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.booking_id} for story {self.story_id}"

    @property
    def dates(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    def payment_overdue(self, now=None) -> bool:
        timeout = timedelta(minutes=settings.BOOKING_PAYMENT_TIMEOUT_MINUTES)
        now = now or timezone.now()
        return (
            self.status == self.Status.CONFIRMED
            and self.payment_status == self.PaymentStatus.PENDING
            and self.created_at + timeout < now
        )
