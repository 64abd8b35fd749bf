"""Admin registration for stories."""

from __future__ import annotations

from django.contrib import admin

from .models import Story


@admin.register(Story)
class StoryAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "status",
        "availability_type",
        "story_length_days",
        "max_travellers_per_day",
        "max_travellers_scheduled",
        "host",
        "created_at",
    )
    list_filter = ("status", "availability_type")
    search_fields = ("title", "story_id", "host__email")
    readonly_fields = ("story_id", "created_at", "updated_at")
