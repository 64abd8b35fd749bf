"""Serializers for the stories domain."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from rest_framework import serializers  # type: ignore


class AvailabilityQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError("start must be on or before end.")
        days = (attrs["end"] - attrs["start"]).days + 1
        if days > settings.STORY_AVAILABILITY_MAX_DAYS:
            raise serializers.ValidationError(
                f"At most {settings.STORY_AVAILABILITY_MAX_DAYS} days can be requested at once."
            )
        return attrs


class DayAvailabilitySerializer(serializers.Serializer):
    date = serializers.DateField()
    booked = serializers.IntegerField()
    remaining = serializers.IntegerField()
