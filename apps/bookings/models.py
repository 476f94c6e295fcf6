"""Booking persistence models for StudioReserve."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import BookingStatus, PaymentStatus


class Booking(models.Model):
    """Reservation of a room for a time window."""

    class Status(models.TextChoices):
        PENDING = BookingStatus.PENDING.value, _("Pending")
        ACCEPTED = BookingStatus.ACCEPTED.value, _("Accepted")
        REJECTED = BookingStatus.REJECTED.value, _("Rejected")
        COMPLETED = BookingStatus.COMPLETED.value, _("Completed")
        CANCELLED = BookingStatus.CANCELLED.value, _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = PaymentStatus.PENDING.value, _("Pending")
        PAID = PaymentStatus.PAID.value, _("Paid")
        FAILED = PaymentStatus.FAILED.value, _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(
        "studios.Room",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    photographer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    equipment_ids = models.JSONField(default=list, blank=True)
    total_price = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="IRR")
    booking_status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="booking_valid_time_range",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_time", "end_time"]),
            models.Index(fields=["booking_status"]),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} for room {self.room_id}"
