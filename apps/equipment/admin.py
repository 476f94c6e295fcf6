"""Admin registration for equipment."""

from __future__ import annotations

from django.contrib import admin

from .models import EquipmentItem, EquipmentLogEntry


@admin.register(EquipmentItem)
class EquipmentItemAdmin(admin.ModelAdmin):
    list_display = ("name", "studio", "brand", "type", "status", "barcode_code")
    list_filter = ("status", "type")
    search_fields = ("name", "serial_number", "barcode_code", "studio__name")
    readonly_fields = ("barcode_code", "status", "created_at")


@admin.register(EquipmentLogEntry)
class EquipmentLogEntryAdmin(admin.ModelAdmin):
    list_display = ("equipment", "action", "user", "timestamp")
    list_filter = ("action",)
    search_fields = ("equipment__name", "equipment__barcode_code", "user__email")
    readonly_fields = ("equipment", "user", "action", "timestamp", "note")

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_change_permission(self, request, obj=None):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
