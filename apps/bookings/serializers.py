"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .application.command_handlers import ReserveStoryCommand
from .domain.entities import PaymentBreakdown, TravellerDetails
from .models import Booking


class TravellerSerializer(serializers.Serializer):
    fullName = serializers.CharField(max_length=255, trim_whitespace=True)
    emailAddress = serializers.EmailField()
    phoneNumber = serializers.CharField(max_length=32, trim_whitespace=True)


class PaymentDetailSerializer(serializers.Serializer):
    totalBase = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    platformFee = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    totalPayment = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class ReserveStorySerializer(serializers.Serializer):
    """Reservation request body (camelCase, as sent by the web client)."""

    storyId = serializers.UUIDField()
    startDate = serializers.DateField()
    endDate = serializers.DateField()
    noOfTravellers = serializers.IntegerField(min_value=1, required=False)
    travellers = TravellerSerializer(many=True, allow_empty=False)
    paymentDetails = PaymentDetailSerializer(many=True, allow_empty=False)

    def to_command(self, user_id=None, currency: str = "INR") -> ReserveStoryCommand:
        data = self.validated_data
        return ReserveStoryCommand(
            story_id=data["storyId"],
            start_date=data["startDate"],
            end_date=data["endDate"],
            no_of_travellers=data.get("noOfTravellers"),
            travellers=[
                TravellerDetails(
                    full_name=t["fullName"],
                    email_address=t["emailAddress"],
                    phone_number=t["phoneNumber"],
                )
                for t in data["travellers"]
            ],
            payment_details=[
                PaymentBreakdown.from_amounts(
                    total_base=p["totalBase"],
                    total_payment=p["totalPayment"],
                    platform_fee=p.get("platformFee"),
                    discount=p.get("discount"),
                    currency=currency,
                )
                for p in data["paymentDetails"]
            ],
            user_id=user_id,
        )


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a stored booking."""

    bookingId = serializers.UUIDField(source="booking_id", read_only=True)
    storyId = serializers.UUIDField(source="story.story_id", read_only=True)
    storyTitle = serializers.ReadOnlyField(source="story.title")
    userId = serializers.ReadOnlyField(source="user_id")
    startDate = serializers.DateField(source="start_date", read_only=True)
    endDate = serializers.DateField(source="end_date", read_only=True)
    totalTravellers = serializers.IntegerField(source="total_travellers", read_only=True)
    paymentDetails = serializers.JSONField(source="payment_details", read_only=True)
    totalPayment = serializers.DecimalField(
        source="total_payment", max_digits=12, decimal_places=2, read_only=True
    )
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    cancellationReason = serializers.CharField(source="cancellation_reason", read_only=True)
    cancelledAt = serializers.DateTimeField(source="cancelled_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "bookingId",
            "storyId",
            "storyTitle",
            "userId",
            "startDate",
            "endDate",
            "totalTravellers",
            "travellers",
            "paymentDetails",
            "totalPayment",
            "currency",
            "status",
            "paymentStatus",
            "cancellationReason",
            "cancelledAt",
            "createdAt",
        ]
        read_only_fields = fields
