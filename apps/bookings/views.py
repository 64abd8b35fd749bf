"""API views for the booking domain."""

from __future__ import annotations

import django_filters  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from drf_spectacular.utils import extend_schema  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ReserveStoryHandler,
)
from .exceptions import BookingAlreadyCancelled, ReservationError
from .models import Booking
from .repositories import DjangoBookingRepository, DjangoStoryRepository
from .serializers import BookingSerializer, CancelBookingSerializer, ReserveStorySerializer


def reservation_error_response(exc: ReservationError) -> Response:
    return Response(exc.to_dict(), status=exc.http_status)


def validation_error_response(errors) -> Response:
    return Response(
        {
            "success": False,
            "code": "validation_failed",
            "message": "Validation failed.",
            "retryable": False,
            "errors": errors,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class IsBookingOwnerOrStaff(permissions.BasePermission):
    """The guest who made the booking, or platform staff."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.user_id == user.id


class BookingFilterSet(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=Booking.Status.choices)
    payment_status = django_filters.ChoiceFilter(choices=Booking.PaymentStatus.choices)
    story = django_filters.UUIDFilter(field_name="story__story_id")

    class Meta:
        model = Booking
        fields = ["status", "payment_status", "story"]


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reserve stories and manage the resulting bookings."""

    queryset = Booking.objects.select_related("story", "user").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingOwnerOrStaff]
    lookup_field = "booking_id"
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return qs
        return qs.filter(user=user)

    def _reserve_handler(self) -> ReserveStoryHandler:
        return ReserveStoryHandler(DjangoStoryRepository(), DjangoBookingRepository())

    def _cancel_handler(self) -> CancelBookingHandler:
        return CancelBookingHandler(DjangoStoryRepository(), DjangoBookingRepository())

    @extend_schema(request=ReserveStorySerializer, responses={201: BookingSerializer})
    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReserveStorySerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        command = serializer.to_command(
            user_id=request.user.id,
            currency=settings.BOOKING_DEFAULT_CURRENCY,
        )
        try:
            record = self._reserve_handler().handle(command)
        except ReservationError as exc:
            return reservation_error_response(exc)

        return Response({"success": True, "data": record.to_dict()}, status=status.HTTP_201_CREATED)

    @extend_schema(request=CancelBookingSerializer, responses={200: BookingSerializer})
    @action(detail=True, methods=["post"])
    def cancel(self, request, booking_id=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = CancelBookingSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        try:
            self._cancel_handler().handle(
                CancelBookingCommand(
                    booking_id=booking.booking_id,
                    reason=serializer.validated_data["reason"],
                )
            )
        except ReservationError as exc:
            return reservation_error_response(exc)

        booking.refresh_from_db()
        return Response({"success": True, "data": BookingSerializer(booking).data})

    @extend_schema(request=None, responses={200: BookingSerializer})
    @action(
        detail=True,
        methods=["post"],
        url_path="confirm-payment",
        permission_classes=[permissions.IsAdminUser],
    )
    def confirm_payment(self, request, booking_id=None):  # type: ignore
        """Payment collaborator hook: mark the booking as paid."""
        booking: Booking = self.get_object()  # type: ignore
        updated = Booking.objects.filter(
            pk=booking.pk,
            status=Booking.Status.CONFIRMED,
        ).update(payment_status=Booking.PaymentStatus.SUCCESS, updated_at=timezone.now())
        if not updated:
            return reservation_error_response(BookingAlreadyCancelled(booking.booking_id))

        booking.refresh_from_db()
        return Response({"success": True, "data": BookingSerializer(booking).data})
