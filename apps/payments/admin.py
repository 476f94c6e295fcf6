"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import PaymentRecord


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "amount", "gateway", "status", "external_ref", "settled_at")
    list_filter = ("status", "gateway")
    search_fields = ("id", "external_ref", "booking__id")
    readonly_fields = (
        "booking",
        "amount",
        "currency",
        "gateway",
        "status",
        "external_ref",
        "payment_url",
        "error_detail",
        "created_at",
        "settled_at",
    )
