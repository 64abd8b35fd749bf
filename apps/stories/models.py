"""Story models: the capacity side of a bookable tour package."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Story(models.Model):
    """A tour package with a fixed length and a per-day traveller ceiling."""

    class Status(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        INCOMPLETE = "INCOMPLETE", _("Incomplete")
        PUBLISHED = "PUBLISHED", _("Published")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")

    class AvailabilityType(models.TextChoices):
        YEAR_ROUND = "YEAR_ROUND", _("Year round")
        TRAVEL_WITH_STARS = "TRAVEL_WITH_STARS", _("Travel with stars")

    BOOKABLE_STATUSES = (Status.PUBLISHED, Status.APPROVED)

    story_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    host = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stories",
    )
    title = models.CharField(max_length=255)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    availability_type = models.CharField(
        max_length=20,
        choices=AvailabilityType.choices,
        default=AvailabilityType.YEAR_ROUND,
    )
    story_length_days = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text=_("Exact number of calendar days a booking must span."),
    )
    max_travellers_per_day = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Traveller ceiling for every calendar day (year-round stories)."),
    )
    max_travellers_scheduled = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Traveller ceiling for scheduled departures."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Story")
        verbose_name_plural = _("Stories")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(story_length_days__isnull=True) | models.Q(story_length_days__gte=1),
                name="story_length_at_least_one_day",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="story_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.story_id})"

    @property
    def capacity_ceiling(self) -> int | None:
        if self.availability_type == self.AvailabilityType.TRAVEL_WITH_STARS:
            return self.max_travellers_scheduled
        return self.max_travellers_per_day

    @property
    def is_bookable(self) -> bool:
        return self.status in self.BOOKABLE_STATUSES

    @property
    def capacity_configured(self) -> bool:
        return self.capacity_ceiling is not None and bool(self.story_length_days)
