"""API views for the stories domain."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from drf_spectacular.utils import OpenApiParameter, extend_schema  # type: ignore
from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.domain.capacity import committed_on, remaining_capacity
from apps.bookings.repositories import DjangoBookingRepository
from shared.domain.value_objects import DateRange

from .models import Story
from .serializers import AvailabilityQuerySerializer, DayAvailabilitySerializer


class StoryAvailabilityView(APIView):
    """Places left per day on a bookable story, for the public calendar.

    Read without locks: the figures are advisory and a reservation made
    from them may still be rejected.
    """

    permission_classes = [permissions.AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter("start", str, description="First date, YYYY-MM-DD"),
            OpenApiParameter("end", str, description="Last date (inclusive), YYYY-MM-DD"),
        ],
        responses={200: DayAvailabilitySerializer(many=True)},
    )
    def get(self, request, story_id):  # type: ignore
        story = get_object_or_404(Story, story_id=story_id, status__in=Story.BOOKABLE_STATUSES)
        if not story.capacity_configured:
            return Response(
                {"detail": "Story capacity is not configured."},
                status=status.HTTP_404_NOT_FOUND,
            )

        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        dates = DateRange(query.validated_data["start"], query.validated_data["end"])

        ceiling = story.capacity_ceiling
        bookings = DjangoBookingRepository().find_confirmed_overlapping(story, dates)
        remaining = remaining_capacity(ceiling, bookings, dates)
        result = [
            {"date": day, "booked": committed_on(day, bookings), "remaining": left}
            for day, left in remaining.items()
        ]

        serializer = DayAvailabilitySerializer(result, many=True)
        return Response(
            {
                "storyId": str(story.story_id),
                "storyLengthDays": story.story_length_days,
                "maxTravellersPerDay": ceiling,
                "dates": serializer.data,
            }
        )
