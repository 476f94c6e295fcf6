"""Custody machine and scan handler tests against the in-memory store."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch
from uuid import uuid4

from django.db import DatabaseError
from django.test import SimpleTestCase

from apps.equipment.application.command_handlers import (
    ScanEquipmentCommand,
    ScanEquipmentHandler,
)
from apps.equipment.domain.custody import (
    EquipmentAction,
    EquipmentStatus,
    LogAction,
    can_operate,
    next_status,
)
from apps.equipment.domain.events import EquipmentScanned
from apps.users.roles import UserRole
from shared.application.clock import FixedClock
from shared.domain.base import ErrorKind
from shared.testing import InMemoryEquipmentLogRepository, InMemoryStore


class CustodyMachineTests(SimpleTestCase):

    def test_next_status(self) -> None:
        self.assertEqual(next_status(EquipmentStatus.AVAILABLE, EquipmentAction.SCAN_OUT), EquipmentStatus.RENTED)
        self.assertEqual(next_status(EquipmentStatus.RENTED, EquipmentAction.SCAN_IN), EquipmentStatus.AVAILABLE)
        self.assertIsNone(next_status(EquipmentStatus.RENTED, EquipmentAction.SCAN_OUT))
        self.assertIsNone(next_status(EquipmentStatus.AVAILABLE, EquipmentAction.SCAN_IN))

    def test_can_operate(self) -> None:
        owner_id = uuid4()
        self.assertTrue(can_operate(UserRole.STUDIO_OWNER, owner_id, owner_id))
        self.assertTrue(can_operate(UserRole.ADMIN, uuid4(), owner_id))
        self.assertFalse(can_operate(UserRole.STUDIO_OWNER, uuid4(), owner_id))
        self.assertFalse(can_operate(UserRole.PHOTOGRAPHER, owner_id, owner_id))
        self.assertFalse(can_operate(None, owner_id, owner_id))


class ScanEquipmentHandlerTests(SimpleTestCase):

    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.owner_id = self.store.add_user()
        self.item = self.store.add_equipment(self.owner_id, barcode_code="CAM-001")
        self.clock = FixedClock(datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc))
        self.handler = ScanEquipmentHandler(uow_factory=self.store.uow_factory(), clock=self.clock)

    def scan(self, action, actor_id=None, role=UserRole.STUDIO_OWNER, code="CAM-001", note=None):
        return self.handler.handle(ScanEquipmentCommand(
            scan_code=code,
            actor_id=actor_id or self.owner_id,
            role=role,
            action=action,
            note=note,
        ))

    def stored_status(self) -> EquipmentStatus:
        return self.store.equipment[self.item.id].status

    def test_round_trip_writes_two_log_entries(self) -> None:
        out = self.scan(EquipmentAction.SCAN_OUT, note="  shoot #12  ")
        self.clock.advance(hours=3)
        back = self.scan(EquipmentAction.SCAN_IN)

        self.assertTrue(out.ok, out.message)
        self.assertTrue(back.ok, back.message)
        self.assertEqual(self.stored_status(), EquipmentStatus.AVAILABLE)

        logs = self.store.logs_for(self.item.id)
        self.assertEqual([entry.action for entry in logs], [LogAction.CHECK_OUT, LogAction.CHECK_IN])
        self.assertEqual(logs[0].note, "shoot #12")
        self.assertEqual(logs[1].timestamp, self.clock.now())
        self.assertEqual({entry.user_id for entry in logs}, {self.owner_id})

    def test_second_scan_out_is_invalid_status_and_not_logged(self) -> None:
        self.scan(EquipmentAction.SCAN_OUT)

        result = self.scan(EquipmentAction.SCAN_OUT)

        self.assertEqual(result.error, ErrorKind.INVALID_STATUS)
        self.assertEqual(self.stored_status(), EquipmentStatus.RENTED)
        self.assertEqual(len(self.store.logs_for(self.item.id)), 1)

    def test_scan_in_of_available_item_is_invalid_status(self) -> None:
        result = self.scan(EquipmentAction.SCAN_IN)

        self.assertEqual(result.error, ErrorKind.INVALID_STATUS)
        self.assertEqual(self.store.logs_for(self.item.id), [])

    def test_photographer_is_forbidden(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT, actor_id=uuid4(), role=UserRole.PHOTOGRAPHER)

        self.assertEqual(result.error, ErrorKind.FORBIDDEN)
        self.assertEqual(self.stored_status(), EquipmentStatus.AVAILABLE)
        self.assertEqual(self.store.logs_for(self.item.id), [])

    def test_other_owner_is_forbidden(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT, actor_id=uuid4())
        self.assertEqual(result.error, ErrorKind.FORBIDDEN)

    def test_admin_may_scan_any_item(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT, actor_id=uuid4(), role=UserRole.ADMIN)
        self.assertTrue(result.ok, result.message)

    def test_unknown_code_is_not_found(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT, code="NOPE")
        self.assertEqual(result.error, ErrorKind.NOT_FOUND)

    def test_unknown_code_wins_over_forbidden(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT, code="NOPE", role=UserRole.PHOTOGRAPHER)
        self.assertEqual(result.error, ErrorKind.NOT_FOUND)

    def test_forbidden_wins_over_invalid_status(self) -> None:
        result = self.scan(EquipmentAction.SCAN_IN, actor_id=uuid4(), role=UserRole.PHOTOGRAPHER)
        self.assertEqual(result.error, ErrorKind.FORBIDDEN)

    def test_scan_code_is_trimmed(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT, code="  CAM-001 ")
        self.assertTrue(result.ok, result.message)

    def test_successful_scan_publishes_event(self) -> None:
        result = self.scan(EquipmentAction.SCAN_OUT)

        [event] = self.store.published
        self.assertIsInstance(event, EquipmentScanned)
        self.assertEqual(event.log_entry_id, result.log_entry.id)
        self.assertEqual(event.new_status, EquipmentStatus.RENTED)

    def test_storage_failure_on_commit_changes_nothing(self) -> None:
        self.store.failing_commits = {1}

        with self.assertLogs("apps.equipment.application.command_handlers", level="ERROR"):
            result = self.scan(EquipmentAction.SCAN_OUT)

        self.assertEqual(result.error, ErrorKind.STORAGE_FAILURE)
        self.assertEqual(self.stored_status(), EquipmentStatus.AVAILABLE)
        self.assertEqual(self.store.logs_for(self.item.id), [])
        self.assertEqual(self.store.published, [])

    def test_failed_log_append_rolls_back_status(self) -> None:
        with patch.object(InMemoryEquipmentLogRepository, "append", side_effect=DatabaseError("log table locked")):
            with self.assertLogs("apps.equipment.application.command_handlers", level="ERROR"):
                result = self.scan(EquipmentAction.SCAN_OUT)

        self.assertEqual(result.error, ErrorKind.STORAGE_FAILURE)
        self.assertEqual(self.stored_status(), EquipmentStatus.AVAILABLE)
        self.assertEqual(self.store.logs_for(self.item.id), [])
        self.assertEqual(self.store.commits, 0)

        self.assertTrue(self.scan(EquipmentAction.SCAN_OUT).ok)
        self.assertEqual(self.stored_status(), EquipmentStatus.RENTED)
