"""URL routing for the stories domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import StoryAvailabilityView

urlpatterns = [
    path("<uuid:story_id>/availability/", StoryAvailabilityView.as_view(), name="story-availability"),
]
