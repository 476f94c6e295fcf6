"""Serializers for the payment API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.entities import PaymentGateway


class PaymentInitiateSerializer(serializers.Serializer):
    booking_id = serializers.UUIDField()
    gateway = serializers.ChoiceField(
        choices=[gateway.value for gateway in PaymentGateway],
        required=False,
        allow_null=True,
    )

    def validate_gateway(self, value: str | None) -> PaymentGateway:
        return PaymentGateway(value) if value else PaymentGateway.default()

