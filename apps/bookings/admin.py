"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_id",
        "story",
        "user",
        "status",
        "payment_status",
        "start_date",
        "end_date",
        "total_travellers",
        "total_payment",
        "created_at",
    )
    list_filter = ("status", "payment_status", "start_date")
    search_fields = ("booking_id", "story__title", "user__email")
    date_hierarchy = "start_date"
    # Bookings are created and cancelled through the reservation handlers only
    readonly_fields = tuple(
        field.name for field in Booking._meta.fields
    )

    def has_add_permission(self, request):
        return False
