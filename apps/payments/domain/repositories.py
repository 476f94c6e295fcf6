"""
Payment repository contracts
"""

from abc import ABC, abstractmethod
from uuid import UUID

from apps.payments.domain.entities import PaymentRecord


class AbstractPaymentRepository(ABC):

    @abstractmethod
    def get(self, payment_id: UUID, lock: bool = False) -> PaymentRecord | None:
        pass

    @abstractmethod
    def get_by_external_ref(self, external_ref: str, lock: bool = False) -> PaymentRecord | None:
        pass

    @abstractmethod
    def find_active_for_booking(self, booking_id: UUID) -> PaymentRecord | None:
        """The PENDING or PAID record of the booking, if any"""

    @abstractmethod
    def add(self, record: PaymentRecord) -> None:
        pass

    @abstractmethod
    def update(self, record: PaymentRecord) -> None:
        pass
