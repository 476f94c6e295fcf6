"""API views for equipment custody."""

from __future__ import annotations

from uuid import UUID

from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import PermissionDenied, ValidationError  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import HasKnownRole, IsStudioOwnerOrAdmin
from shared.api import error_response

from .application.command_handlers import ScanEquipmentCommand, ScanEquipmentHandler
from .models import EquipmentItem, EquipmentLogEntry
from .serializers import (
    EquipmentCreateSerializer,
    EquipmentItemSerializer,
    EquipmentLogEntrySerializer,
    EquipmentScanSerializer,
)


def _uuid_param(request, name: str) -> UUID | None:
    raw = request.query_params.get(name)
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        raise ValidationError({name: f"{name} must be a valid UUID"})


class EquipmentViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Equipment listing and registration, plus the custody scan."""

    queryset = EquipmentItem.objects.select_related("studio").order_by("name")
    serializer_class = EquipmentItemSerializer

    def get_permissions(self):  # type: ignore
        if self.action == "logs":
            return [IsStudioOwnerOrAdmin()]
        return [HasKnownRole()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return EquipmentCreateSerializer
        if self.action == "scan":
            return EquipmentScanSerializer
        return EquipmentItemSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user.is_photographer():
            return qs.none()
        if not user.is_admin():
            qs = qs.filter(studio__owner=user)
        studio_id = _uuid_param(self.request, "studio")
        if studio_id:
            qs = qs.filter(studio_id=studio_id)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        if not request.user.is_studio_owner():
            raise PermissionDenied("Only studio owners can add equipment")
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        return Response(EquipmentItemSerializer(item).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def scan(self, request):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = ScanEquipmentHandler().handle(ScanEquipmentCommand(
            scan_code=data["barcode_code"],
            actor_id=request.user.id,
            role=request.user.user_role,
            action=data["action"],
            note=data.get("note"),
        ))
        if not result.ok:
            return error_response(result.error, result.message)

        item = EquipmentItem.objects.get(pk=result.item.id)
        entry = EquipmentLogEntry.objects.get(pk=result.log_entry.id)
        return Response({
            "equipment": EquipmentItemSerializer(item).data,
            "log": EquipmentLogEntrySerializer(entry).data,
        })

    @action(detail=False, methods=["get"])
    def logs(self, request):  # type: ignore
        """Custody log, newest first: admins see everything, owners their studios."""
        qs = EquipmentLogEntry.objects.select_related("equipment").order_by("-timestamp")
        if not request.user.is_admin():
            qs = qs.filter(equipment__studio__owner=request.user)
        equipment_id = _uuid_param(request, "equipment")
        if equipment_id:
            qs = qs.filter(equipment_id=equipment_id)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(EquipmentLogEntrySerializer(page, many=True).data)
        return Response(EquipmentLogEntrySerializer(qs, many=True).data)
