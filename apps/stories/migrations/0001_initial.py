import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Story",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("story_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("title", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("INCOMPLETE", "Incomplete"),
                            ("PUBLISHED", "Published"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                (
                    "availability_type",
                    models.CharField(
                        choices=[("YEAR_ROUND", "Year round"), ("TRAVEL_WITH_STARS", "Travel with stars")],
                        default="YEAR_ROUND",
                        max_length=20,
                    ),
                ),
                (
                    "story_length_days",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Exact number of calendar days a booking must span.",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                (
                    "max_travellers_per_day",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Traveller ceiling for every calendar day (year-round stories).",
                        null=True,
                    ),
                ),
                (
                    "max_travellers_scheduled",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Traveller ceiling for scheduled departures.",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "host",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stories",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Story",
                "verbose_name_plural": "Stories",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status"], name="story_status_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("story_length_days__isnull", True), ("story_length_days__gte", 1), _connector="OR"),
                        name="story_length_at_least_one_day",
                    )
                ],
            },
        ),
    ]
