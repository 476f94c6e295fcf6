"""Serializers for the equipment API."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers  # type: ignore

from apps.studios.models import Studio

from .domain.custody import EquipmentAction
from .domain.entities import generate_scan_code
from .models import EquipmentItem, EquipmentLogEntry


class EquipmentItemSerializer(serializers.ModelSerializer):
    studio_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = EquipmentItem
        fields = [
            "id",
            "studio_id",
            "name",
            "brand",
            "type",
            "serial_number",
            "rental_price",
            "condition",
            "status",
            "barcode_code",
        ]
        read_only_fields = fields


class EquipmentCreateSerializer(serializers.ModelSerializer):
    """New item for one of the requester's studios; the scan code is generated."""

    studio_id = serializers.PrimaryKeyRelatedField(
        source="studio",
        queryset=Studio.objects.all(),
    )
    rental_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )

    class Meta:
        model = EquipmentItem
        fields = [
            "studio_id",
            "name",
            "brand",
            "type",
            "serial_number",
            "rental_price",
            "condition",
        ]

    def validate_studio_id(self, studio: Studio) -> Studio:
        user = self.context["request"].user
        if studio.owner_id != user.id:
            raise serializers.ValidationError("Studio does not belong to the current user")
        return studio

    def validate(self, attrs):  # type: ignore
        for field in ("name", "brand", "type", "serial_number", "condition"):
            if field in attrs:
                attrs[field] = attrs[field].strip()
        if not attrs.get("name"):
            raise serializers.ValidationError({"name": "This field may not be blank."})
        return attrs

    def create(self, validated_data):  # type: ignore
        return EquipmentItem.objects.create(barcode_code=generate_scan_code(), **validated_data)


class EquipmentScanSerializer(serializers.Serializer):
    barcode_code = serializers.CharField(max_length=100)
    action = serializers.ChoiceField(choices=[action.value for action in EquipmentAction])
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)

    def validate_barcode_code(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("barcode_code is required")
        return value

    def validate_action(self, value: str) -> EquipmentAction:
        return EquipmentAction(value)


class EquipmentLogEntrySerializer(serializers.ModelSerializer):
    equipment_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = EquipmentLogEntry
        fields = ["id", "equipment_id", "user_id", "action", "timestamp", "note"]
        read_only_fields = fields
