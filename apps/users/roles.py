"""Actor roles understood by the reservation engine."""

from __future__ import annotations

from enum import Enum


class UserRole(Enum):
    ADMIN = "ADMIN"
    STUDIO_OWNER = "STUDIO_OWNER"
    PHOTOGRAPHER = "PHOTOGRAPHER"

    @classmethod
    def parse(cls, value: str | None) -> "UserRole | None":
        """Role from its stored value, or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None
