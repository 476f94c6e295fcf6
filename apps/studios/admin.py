"""Admin registration for studios and rooms."""

from __future__ import annotations

from django.contrib import admin

from .models import Room, Studio


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0


@admin.register(Studio)
class StudioAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "city", "created_at")
    search_fields = ("name", "city", "owner__email")
    inlines = [RoomInline]


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("name", "studio", "hourly_price", "daily_price")
    search_fields = ("name", "studio__name")
