"""
Equipment repository contracts
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from apps.equipment.domain.entities import EquipmentItem, EquipmentLogEntry


class AbstractEquipmentRepository(ABC):

    @abstractmethod
    def get(self, equipment_id: UUID, lock: bool = False) -> EquipmentItem | None:
        pass

    @abstractmethod
    def get_by_scan_code(self, scan_code: str, lock: bool = False) -> EquipmentItem | None:
        pass

    @abstractmethod
    def add(self, item: EquipmentItem) -> None:
        pass

    @abstractmethod
    def update(self, item: EquipmentItem) -> None:
        """Persist the custody status of an existing item"""


class AbstractEquipmentLogRepository(ABC):
    """Append-only: there is no update or delete"""

    @abstractmethod
    def append(self, entry: EquipmentLogEntry) -> None:
        pass

    @abstractmethod
    def list_for_equipment(self, equipment_id: UUID) -> List[EquipmentLogEntry]:
        """Entries of one item, oldest first"""
