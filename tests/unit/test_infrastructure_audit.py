"""Unit tests for the audit infrastructure.

Tests cover:
- AuditLogWriter: non-blocking submit, background drain, queue-full drop,
  store failures logged and skipped, data-access helpers
- InMemoryAuditStore: append-only copies, filtering, ordering, paging
- export_entries: JSON export and export auditing
"""

import asyncio
import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.entities import AuditLogEntry
from src.domain.enums import AuditAction, AuditSeverity, DataOperation
from src.domain.errors import AuditError
from src.domain.value_objects import Actor
from src.infrastructure.audit import AuditLogWriter, InMemoryAuditStore, export_entries

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _entry(
    action: AuditAction = AuditAction.FORM_SUBMITTED,
    *,
    actor_id: str = "user-1",
    resource_id: str = "f-1",
    severity: AuditSeverity = AuditSeverity.INFO,
    minutes: int = 0,
) -> AuditLogEntry:
    return AuditLogEntry.create(
        actor_id=actor_id,
        actor_display="Dr. Smith",
        action=action,
        resource_type="FormSubmission",
        resource_id=resource_id,
        details=f"Form submitted: {resource_id}",
        severity=severity,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        metadata={"eventType": "FORM_SUBMITTED"},
    )


@pytest.mark.unit
class TestAuditLogWriter:
    """Test the non-blocking writer."""

    async def test_submit_writes_in_background(self, mock_logger):
        """Test submitted entries reach the store after flush."""
        store = InMemoryAuditStore()
        writer = AuditLogWriter(store=store, logger=mock_logger)

        assert writer.submit(_entry()) is True
        await writer.flush()

        assert len(store) == 1
        assert writer.pending == 0
        await writer.stop()

    async def test_submit_does_not_await_store(self, mock_logger):
        """Test submit returns before a slow store finishes."""
        store = MagicMock()
        gate = asyncio.Event()

        async def slow_write(entry):
            await gate.wait()
            return Success(value=None)

        store.write = slow_write
        writer = AuditLogWriter(store=store, logger=mock_logger)

        accepted = writer.submit(_entry())

        assert accepted is True
        gate.set()
        await writer.stop()

    async def test_queue_full_drops_and_logs_critical(self, mock_logger):
        """Test overflow drops the entry and logs audit_queue_full."""
        writer = AuditLogWriter(store=InMemoryAuditStore(), logger=mock_logger, max_queue_size=1)

        first = writer.submit(_entry())
        second = writer.submit(_entry())

        assert first is True
        assert second is False
        assert writer.dropped == 1
        assert mock_logger.critical.call_args.args[0] == "audit_queue_full"
        await writer.stop()

    async def test_store_failure_logged_and_worker_continues(self, mock_logger):
        """Test a failing write does not stop later entries."""
        store = MagicMock()
        store.write = AsyncMock(
            side_effect=[
                Failure(error=AuditError(code=ErrorCode.AUDIT_RECORD_FAILED, message="db down")),
                RuntimeError("connection reset"),
                Success(value=None),
            ]
        )
        writer = AuditLogWriter(store=store, logger=mock_logger)

        for _ in range(3):
            writer.submit(_entry())
        await writer.flush()

        assert store.write.await_count == 3
        assert mock_logger.error.call_count == 2
        assert mock_logger.error.call_args_list[0].kwargs["error_code"] == "audit_record_failed"
        assert writer.is_running
        await writer.stop()
        assert not writer.is_running

    def test_submit_outside_event_loop_is_queued(self, mock_logger):
        """Test entries submitted without a loop wait for start()."""
        store = InMemoryAuditStore()
        writer = AuditLogWriter(store=store, logger=mock_logger)

        writer.submit(_entry())

        assert writer.pending == 1

        async def drain():
            await writer.start()
            await writer.stop()

        asyncio.run(drain())
        assert len(store) == 1

    async def test_log_data_access_delete_is_warning(self, mock_logger):
        """Test DELETE operations are recorded at WARNING."""
        store = InMemoryAuditStore()
        writer = AuditLogWriter(store=store, logger=mock_logger)
        actor = Actor(id="u-1", display_name="Dr. Smith", role_level=3)

        writer.log_data_access(actor, "Patient", "p-1", DataOperation.DELETE)
        writer.log_data_access(actor, "Patient", "p-1", DataOperation.READ)
        await writer.stop()

        deleted, viewed = sorted(store, key=lambda e: e.action_name)
        assert deleted.action == AuditAction.DATA_DELETED
        assert deleted.severity == AuditSeverity.WARNING
        assert deleted.details == "DELETE Patient p-1"
        assert viewed.action == AuditAction.DATA_VIEWED
        assert viewed.severity == AuditSeverity.INFO


@pytest.mark.unit
class TestInMemoryAuditStore:
    """Test the append-only in-memory store."""

    async def test_entries_are_copied(self):
        """Test the store keeps its own copy of metadata."""
        store = InMemoryAuditStore()
        entry = _entry()

        await store.write(entry)
        entry.metadata["eventType"] = "tampered"

        (stored,) = (await store.query()).value
        assert stored.metadata["eventType"] == "FORM_SUBMITTED"

    async def test_query_filters(self):
        """Test actor, action, severity and date filters."""
        store = InMemoryAuditStore()
        await store.write(_entry(actor_id="a", minutes=0))
        await store.write(_entry(actor_id="b", minutes=10))
        await store.write(
            _entry(AuditAction.SYNC_FAILED, actor_id="b", severity=AuditSeverity.ERROR, minutes=20)
        )

        by_actor = (await store.query(actor_id="b")).value
        by_action = (await store.query(action=AuditAction.SYNC_FAILED)).value
        by_severity = (await store.query(severity=AuditSeverity.ERROR)).value
        by_range = (
            await store.query(
                start_date=BASE_TIME + timedelta(minutes=5),
                end_date=BASE_TIME + timedelta(minutes=15),
            )
        ).value

        assert len(by_actor) == 2
        assert len(by_action) == 1
        assert by_severity == by_action
        assert [e.actor_id for e in by_range] == ["b"]

    async def test_newest_first_with_paging(self):
        """Test ordering and limit/offset."""
        store = InMemoryAuditStore()
        for minute in range(5):
            await store.write(_entry(resource_id=f"f-{minute}", minutes=minute))

        page = (await store.query(limit=2, offset=1)).value

        assert [e.resource_id for e in page] == ["f-3", "f-2"]


@pytest.mark.unit
class TestExportEntries:
    """Test JSON export."""

    async def test_export_json(self):
        """Test exported entries render enums and timestamps as JSON values."""
        store = InMemoryAuditStore()
        await store.write(_entry())

        result = await export_entries(store)

        assert isinstance(result, Success)
        (exported,) = json.loads(result.value)
        assert exported["action"] == "form_submitted"
        assert exported["severity"] == "INFO"
        assert exported["timestamp"].startswith("2024-05-01T12:00:00")

    async def test_export_applies_filters(self):
        """Test filters pass through to the store; paging keys are ignored."""
        store = InMemoryAuditStore()
        await store.write(_entry(actor_id="a"))
        await store.write(_entry(actor_id="b"))

        result = await export_entries(store, {"actor_id": "a", "limit": 1, "offset": 5})

        assert [e["actor_id"] for e in json.loads(result.value)] == ["a"]

    async def test_export_is_audited(self, mock_logger):
        """Test an export with writer and actor records DATA_EXPORTED."""
        store = InMemoryAuditStore()
        await store.write(_entry())
        writer = AuditLogWriter(store=store, logger=mock_logger)
        actor = Actor(id="auditor", display_name="Auditor", role_level=3)

        await export_entries(store, writer=writer, actor=actor)
        await writer.stop()

        exported = (await store.query(action=AuditAction.DATA_EXPORTED)).value
        assert len(exported) == 1
        assert exported[0].details == "Exported 1 audit entries"

    async def test_export_propagates_store_failure(self):
        """Test a store query failure is returned unchanged."""
        error = AuditError(code=ErrorCode.AUDIT_QUERY_FAILED, message="db down")
        store = MagicMock()
        store.query = AsyncMock(return_value=Failure(error=error))

        result = await export_entries(store)

        assert isinstance(result, Failure)
        assert result.error is error
