"""Equipment persistence models."""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.equipment.domain.custody import EquipmentStatus, LogAction


class EquipmentItem(models.Model):
    """A physical item a studio rents out, identified by its scan code."""

    class Status(models.TextChoices):
        AVAILABLE = EquipmentStatus.AVAILABLE.value, _("Available")
        RENTED = EquipmentStatus.RENTED.value, _("Rented")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    studio = models.ForeignKey(
        "studios.Studio",
        on_delete=models.CASCADE,
        related_name="equipment",
    )
    name = models.CharField(max_length=150)
    brand = models.CharField(max_length=100, blank=True)
    type = models.CharField(max_length=100, blank=True)
    serial_number = models.CharField(max_length=100, blank=True)
    rental_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    condition = models.CharField(max_length=100, blank=True)
    barcode_code = models.CharField(max_length=100, unique=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Equipment item")
        verbose_name_plural = _("Equipment items")
        ordering = ["studio", "name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.barcode_code})"


class EquipmentLogEntry(models.Model):
    """Append-only custody trail; rows are never updated or deleted."""

    class Action(models.TextChoices):
        CHECK_OUT = LogAction.CHECK_OUT.value, _("Check out")
        CHECK_IN = LogAction.CHECK_IN.value, _("Check in")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    equipment = models.ForeignKey(
        EquipmentItem,
        on_delete=models.PROTECT,
        related_name="logs",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="equipment_logs",
    )
    action = models.CharField(max_length=20, choices=Action.choices)
    timestamp = models.DateTimeField(default=timezone.now)
    note = models.TextField(null=True, blank=True)

    class Meta:
        verbose_name = _("Equipment log entry")
        verbose_name_plural = _("Equipment log entries")
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["equipment", "timestamp"]),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.equipment_id} by {self.user_id}"
