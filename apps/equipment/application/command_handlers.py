"""
Equipment Command Handlers

Commands:
- ScanEquipmentCommand: check an item out of or back into a studio
"""

from dataclasses import dataclass
from typing import Callable
from uuid import UUID
import logging

from django.db import DatabaseError  # type: ignore

from shared.application.clock import Clock, SystemClock
from shared.application.locks import equipment_locks, serialize_unless_row_locking
from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork
from shared.domain.base import DomainError, ErrorKind
from apps.equipment.domain.custody import EquipmentAction, can_operate
from apps.equipment.domain.entities import EquipmentItem, EquipmentLogEntry
from apps.users.roles import UserRole

logger = logging.getLogger(__name__)


@dataclass
class ScanEquipmentCommand:
    scan_code: str
    actor_id: UUID
    role: UserRole | None
    action: EquipmentAction
    note: str | None = None


@dataclass
class ScanResult:
    item: EquipmentItem | None = None
    log_entry: EquipmentLogEntry | None = None
    error: ErrorKind | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanEquipmentHandler:
    """
    Handler for ScanEquipment command

    Status update and log append commit together or not at all.
    Order of checks: unknown code (NOT_FOUND), actor not owner/admin
    (FORBIDDEN), wrong direction for the current status (INVALID_STATUS).
    """

    def __init__(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
        clock: Clock | None = None,
    ):
        self.uow_factory = uow_factory
        self.clock = clock or SystemClock()

    def handle(self, command: ScanEquipmentCommand) -> ScanResult:
        scan_code = (command.scan_code or '').strip()
        logger.info(f"Scan {command.action.value} of '{scan_code}' by {command.actor_id}")

        uow = self.uow_factory()
        try:
            with serialize_unless_row_locking(uow, equipment_locks, scan_code):
                with uow:
                    item = uow.equipment.get_by_scan_code(scan_code, lock=True)
                    if item is None:
                        raise DomainError(ErrorKind.NOT_FOUND, f"No equipment with scan code '{scan_code}'")

                    if not can_operate(command.role, command.actor_id, item.owner_id):
                        raise DomainError(
                            ErrorKind.FORBIDDEN,
                            "Only the studio owner or an administrator can scan this item"
                        )

                    entry = item.scan(command.action, command.actor_id, self.clock.now(), command.note)

                    uow.collect_events(item)
                    uow.equipment.update(item)
                    uow.equipment_logs.append(entry)
        except DomainError as e:
            logger.warning(f"Scan of '{scan_code}' rejected ({e.kind.value}): {e.message}")
            return ScanResult(error=e.kind, message=e.message)
        except DatabaseError as e:
            logger.error(f"Storage failure while scanning '{scan_code}': {e}", exc_info=True)
            return ScanResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))

        logger.info(f"Equipment {item.id} is now {item.status.value} (log entry {entry.id})")
        return ScanResult(item=item, log_entry=entry)
