"""Payment persistence models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import PaymentStatus
from apps.payments.domain.entities import PaymentGateway


class PaymentRecord(models.Model):
    """One payment attempt for a booking."""

    class Gateway(models.TextChoices):
        ZARINPAL = PaymentGateway.ZARINPAL.value, _("Zarinpal")
        IDPAY = PaymentGateway.IDPAY.value, _("IDPay")
        NEXTPAY = PaymentGateway.NEXTPAY.value, _("NextPay")

    class Status(models.TextChoices):
        PENDING = PaymentStatus.PENDING.value, _("Pending")
        PAID = PaymentStatus.PAID.value, _("Paid")
        FAILED = PaymentStatus.FAILED.value, _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="IRR")
    gateway = models.CharField(
        max_length=20,
        choices=Gateway.choices,
        default=Gateway.ZARINPAL,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    external_ref = models.CharField(max_length=100, unique=True, null=True, blank=True)
    payment_url = models.URLField(max_length=500, blank=True)
    error_detail = models.TextField(blank=True)
    created_at = models.DateTimeField()
    settled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=models.Q(status__in=["PENDING", "PAID"]),
                name="payment_one_active_per_booking",
            ),
        ]

    def __str__(self) -> str:
        return f"Payment {self.id} ({self.status})"
