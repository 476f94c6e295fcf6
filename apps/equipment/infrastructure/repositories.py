"""
Django ORM repositories for equipment and its custody log
"""

from decimal import Decimal
from typing import List
from uuid import UUID

from shared.infrastructure.orm import lock_queryset_if_possible
from apps.equipment.domain.custody import EquipmentStatus, LogAction
from apps.equipment.domain.entities import EquipmentItem, EquipmentLogEntry
from apps.equipment.domain.repositories import (
    AbstractEquipmentLogRepository,
    AbstractEquipmentRepository,
)
from apps.equipment.models import EquipmentItem as EquipmentItemModel
from apps.equipment.models import EquipmentLogEntry as EquipmentLogEntryModel


def _item_to_entity(model: EquipmentItemModel) -> EquipmentItem:
    return EquipmentItem(
        id=model.id,
        studio_id=model.studio_id,
        owner_id=model.studio.owner_id,
        name=model.name,
        brand=model.brand,
        type=model.type,
        serial_number=model.serial_number,
        rental_price=Decimal(model.rental_price),
        condition=model.condition,
        barcode_code=model.barcode_code,
        status=EquipmentStatus(model.status),
    )


def _entry_to_entity(model: EquipmentLogEntryModel) -> EquipmentLogEntry:
    return EquipmentLogEntry(
        id=model.id,
        equipment_id=model.equipment_id,
        user_id=model.user_id,
        action=LogAction(model.action),
        timestamp=model.timestamp,
        note=model.note,
    )


class DjangoEquipmentRepository(AbstractEquipmentRepository):

    def _fetch(self, lock: bool, **lookup) -> EquipmentItem | None:
        queryset = EquipmentItemModel.objects.select_related('studio').filter(**lookup)
        if lock:
            queryset = lock_queryset_if_possible(queryset, of=('self',))
        model = queryset.first()
        return _item_to_entity(model) if model else None

    def get(self, equipment_id: UUID, lock: bool = False) -> EquipmentItem | None:
        return self._fetch(lock, pk=equipment_id)

    def get_by_scan_code(self, scan_code: str, lock: bool = False) -> EquipmentItem | None:
        return self._fetch(lock, barcode_code=scan_code)

    def add(self, item: EquipmentItem) -> None:
        EquipmentItemModel.objects.create(
            id=item.id,
            studio_id=item.studio_id,
            name=item.name,
            brand=item.brand,
            type=item.type,
            serial_number=item.serial_number,
            rental_price=item.rental_price,
            condition=item.condition,
            barcode_code=item.barcode_code,
            status=item.status.value,
        )

    def update(self, item: EquipmentItem) -> None:
        EquipmentItemModel.objects.filter(pk=item.id).update(status=item.status.value)


class DjangoEquipmentLogRepository(AbstractEquipmentLogRepository):

    def append(self, entry: EquipmentLogEntry) -> None:
        EquipmentLogEntryModel.objects.create(
            id=entry.id,
            equipment_id=entry.equipment_id,
            user_id=entry.user_id,
            action=entry.action.value,
            timestamp=entry.timestamp,
            note=entry.note,
        )

    def list_for_equipment(self, equipment_id: UUID) -> List[EquipmentLogEntry]:
        queryset = EquipmentLogEntryModel.objects.filter(equipment_id=equipment_id).order_by('timestamp')
        return [_entry_to_entity(model) for model in queryset]
