"""Contact lookup used by the engine to address notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from .models import User


class AbstractUserRepository(ABC):
    @abstractmethod
    def get_contact(self, user_id: UUID) -> str | None:
        """Phone number of the user, or None when unknown or unset"""


class DjangoUserRepository(AbstractUserRepository):
    def get_contact(self, user_id: UUID) -> str | None:
        return User.objects.filter(pk=user_id).values_list("phone", flat=True).first()
