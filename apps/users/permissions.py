"""Role-based DRF permissions shared by the API surface."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class HasKnownRole(permissions.BasePermission):
    """Authenticated user whose stored role is one the engine understands."""

    message = "Unknown role"

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return getattr(user, "user_role", None) is not None


class IsPhotographer(HasKnownRole):
    message = "Only photographers can perform this action"

    def has_permission(self, request, view) -> bool:  # type: ignore
        return super().has_permission(request, view) and request.user.is_photographer()


class IsStudioOwnerOrAdmin(HasKnownRole):
    message = "Only studio owners and administrators can perform this action"

    def has_permission(self, request, view) -> bool:  # type: ignore
        if not super().has_permission(request, view):
            return False
        return request.user.is_studio_owner() or request.user.is_admin()
