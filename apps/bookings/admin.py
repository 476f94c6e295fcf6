"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "room",
        "photographer",
        "booking_status",
        "payment_status",
        "start_time",
        "end_time",
        "total_price",
        "created_at",
    )
    list_filter = ("booking_status", "payment_status", "start_time")
    search_fields = ("id", "room__name", "photographer__email", "photographer__phone")
    readonly_fields = (
        "id",
        "room",
        "photographer",
        "start_time",
        "end_time",
        "equipment_ids",
        "total_price",
        "currency",
        "payment_status",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
