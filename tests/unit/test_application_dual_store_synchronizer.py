"""Unit tests for DualStoreSynchronizer.

Tests cover:
- Concurrent writes of both partitions (fan-out/fan-in)
- Timeout and exception handling per partition
- FailedSyncRecord capture with the entire original event
- No rollback of the partition that succeeded
- ERROR audit entry on failure
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.application.services import DualStoreSynchronizer, SyncPlan
from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Success
from src.domain.enums import AuditAction, AuditSeverity
from src.domain.errors import SyncError
from src.domain.events import Event, EventType
from src.infrastructure.persistence.repositories.failed_sync_repository import (
    FAILED_SYNCS_COLLECTION,
    QuarantineFailedSyncRepository,
)
from src.infrastructure.stores import (
    InMemoryGeneralStore,
    InMemoryProtectedStore,
    InMemoryQuarantineStore,
)


class SlowProtectedStore(InMemoryProtectedStore):
    """Protected store whose writes never finish in time."""

    async def create(self, resource):
        await asyncio.sleep(5)
        return await super().create(resource)


class RendezvousProtectedStore(InMemoryProtectedStore):
    """Protected store that only completes once the general write has started."""

    def __init__(self, general_started: asyncio.Event):
        super().__init__()
        self._general_started = general_started

    async def create(self, resource):
        await self._general_started.wait()
        return await super().create(resource)


class SignallingGeneralStore(InMemoryGeneralStore):
    def __init__(self, started: asyncio.Event):
        super().__init__()
        self._started = started

    async def add(self, collection, document):
        self._started.set()
        return await super().add(collection, document)


def _event() -> Event:
    return Event(
        event_type=EventType.FORM_SUBMITTED,
        actor_id="user-1",
        payload={
            "formId": "f-1",
            "patientId": "p-1",
            "studyId": "s-1",
            "data": {"patientName": "Jane Doe", "visitCount": 3},
        },
    ).stamped()


def _plan(event: Event) -> SyncPlan:
    return SyncPlan(
        event=event,
        protected_resource={"resourceType": "Observation", "status": "final"},
        general_collection="formSubmissions",
        general_document={"formId": "f-1", "data": {"visitCount": 3}},
    )


def _synchronizer(
    protected_store, general_store, audit_writer, logger, timeout=1.0, quarantine_store=None
):
    if quarantine_store is None:
        quarantine_store = InMemoryQuarantineStore()
    return DualStoreSynchronizer(
        protected_store=protected_store,
        general_store=general_store,
        failed_sync_repository=QuarantineFailedSyncRepository(general_store, quarantine_store),
        audit_writer=audit_writer,
        logger=logger,
        write_timeout_seconds=timeout,
    )


@pytest.fixture
def audit_writer() -> MagicMock:
    return MagicMock()


@pytest.mark.unit
class TestSynchronizeSuccess:
    """Test the happy path."""

    async def test_both_partitions_written(self, audit_writer, mock_logger):
        """Test one protected and one general write with ids in the receipt."""
        protected, general = InMemoryProtectedStore(), InMemoryGeneralStore()
        synchronizer = _synchronizer(protected, general, audit_writer, mock_logger)

        result = await synchronizer.synchronize(_plan(_event()))

        assert isinstance(result, Success)
        assert len(protected) == 1
        assert general.count("formSubmissions") == 1
        assert result.value.protected_resource_id is not None
        assert result.value.general_document_id is not None
        audit_writer.submit.assert_not_called()
        assert mock_logger.info.call_args.args[0] == "dual_store_sync_completed"

    async def test_writes_run_concurrently(self, audit_writer, mock_logger):
        """Test the protected write can wait on the general write without deadlock."""
        started = asyncio.Event()
        synchronizer = _synchronizer(
            RendezvousProtectedStore(started),
            SignallingGeneralStore(started),
            audit_writer,
            mock_logger,
        )

        result = await asyncio.wait_for(synchronizer.synchronize(_plan(_event())), timeout=2)

        assert isinstance(result, Success)

    async def test_empty_plan_writes_nothing(self, audit_writer, mock_logger):
        """Test a plan without partitions is a successful no-op."""
        protected, general = InMemoryProtectedStore(), InMemoryGeneralStore()
        synchronizer = _synchronizer(protected, general, audit_writer, mock_logger)
        plan = SyncPlan(
            event=_event(),
            protected_resource=None,
            general_collection="formSubmissions",
            general_document=None,
        )

        result = await synchronizer.synchronize(plan)

        assert isinstance(result, Success)
        assert len(protected) == 0

    async def test_general_only_plan(self, audit_writer, mock_logger):
        """Test only the non-empty partition is written."""
        protected, general = InMemoryProtectedStore(), InMemoryGeneralStore()
        synchronizer = _synchronizer(protected, general, audit_writer, mock_logger)
        plan = SyncPlan(
            event=_event(),
            protected_resource=None,
            general_collection="formSubmissions",
            general_document={"data": {"visitCount": 3}},
        )

        result = await synchronizer.synchronize(plan)

        assert result.value.protected_resource_id is None
        assert len(protected) == 0
        assert general.count("formSubmissions") == 1


@pytest.mark.unit
class TestSynchronizeFailure:
    """Test failure capture."""

    async def test_protected_timeout_captures_failed_sync(self, audit_writer, mock_logger):
        """Test a protected-store timeout while the general write succeeds."""
        general = InMemoryGeneralStore()
        quarantine = InMemoryQuarantineStore()
        synchronizer = _synchronizer(
            SlowProtectedStore(),
            general,
            audit_writer,
            mock_logger,
            timeout=0.05,
            quarantine_store=quarantine,
        )
        event = _event()

        result = await synchronizer.synchronize(_plan(event))

        assert isinstance(result, Failure)
        assert isinstance(result.error, SyncError)
        assert result.error.code == ErrorCode.SYNC_PARTITION_WRITE_FAILED
        assert result.error.failed_partitions == ("protected",)
        assert "timed out" in result.error.message

        # General write is kept.
        assert general.count("formSubmissions") == 1

        (record_document,) = (await general.query(FAILED_SYNCS_COLLECTION)).value
        assert record_document["retryCount"] == 0
        assert record_document["status"] == "pending"
        assert record_document["failedPartitions"] == ["protected"]
        assert record_document["eventId"] == str(event.event_id)
        assert "originalEvent" not in record_document
        assert result.error.failed_sync_id == record_document["id"]

        full_record = (await quarantine.get(record_document["id"])).value
        assert full_record["originalEvent"] == event.to_dict()
        assert full_record["retryCount"] == 0

    async def test_failure_is_audited_at_error(self, audit_writer, mock_logger):
        """Test a SYNC_FAILED ERROR entry is submitted."""
        synchronizer = _synchronizer(
            SlowProtectedStore(), InMemoryGeneralStore(), audit_writer, mock_logger, timeout=0.05
        )

        await synchronizer.synchronize(_plan(_event()))

        entry = audit_writer.submit.call_args.args[0]
        assert entry.action == AuditAction.SYNC_FAILED
        assert entry.severity == AuditSeverity.ERROR
        assert entry.metadata["recordSaved"] is True
        assert mock_logger.error.call_args.args[0] == "dual_store_sync_failed"

    async def test_store_exception_converted(self, audit_writer, mock_logger):
        """Test an exception from a store becomes a partition failure."""
        general = MagicMock(spec=InMemoryGeneralStore)
        general.add = AsyncMock(side_effect=ConnectionError("refused"))
        general.query = AsyncMock(return_value=Success(value=[]))
        failed_sync_repository = MagicMock()
        failed_sync_repository.save = AsyncMock(return_value=Success(value="fs-1"))
        synchronizer = DualStoreSynchronizer(
            protected_store=InMemoryProtectedStore(),
            general_store=general,
            failed_sync_repository=failed_sync_repository,
            audit_writer=audit_writer,
            logger=mock_logger,
        )

        result = await synchronizer.synchronize(_plan(_event()))

        assert result.error.failed_partitions == ("general",)
        assert result.error.failed_sync_id == "fs-1"
        assert "refused" in result.error.message
        saved_record = failed_sync_repository.save.call_args.args[0]
        assert saved_record.retry_count == 0
        assert saved_record.failed_partitions == ("general",)

    async def test_failure_result_from_store(self, audit_writer, mock_logger):
        """Test a Failure returned by a store is treated like an exception."""
        protected = MagicMock()
        protected.create = AsyncMock(
            return_value=Failure(
                error=DomainError(code=ErrorCode.PROTECTED_STORE_WRITE_FAILED, message="down")
            )
        )
        synchronizer = _synchronizer(protected, InMemoryGeneralStore(), audit_writer, mock_logger)

        result = await synchronizer.synchronize(_plan(_event()))

        assert result.error.failed_partitions == ("protected",)

    async def test_unsaved_record_logged_critical(self, audit_writer, mock_logger):
        """Test a failing failed-sync repository is logged and still reported."""
        failed_sync_repository = MagicMock()
        failed_sync_repository.save = AsyncMock(side_effect=RuntimeError("disk full"))
        synchronizer = DualStoreSynchronizer(
            protected_store=SlowProtectedStore(),
            general_store=InMemoryGeneralStore(),
            failed_sync_repository=failed_sync_repository,
            audit_writer=audit_writer,
            logger=mock_logger,
            write_timeout_seconds=0.05,
        )

        result = await synchronizer.synchronize(_plan(_event()))

        assert isinstance(result, Failure)
        assert result.error.failed_sync_id is None
        assert mock_logger.critical.call_args.args[0] == "failed_sync_record_not_saved"
        assert audit_writer.submit.call_args.args[0].metadata["recordSaved"] is False
