"""Dual-store synchronizer.

Writes the two partitions of one logical submission to two independent
stores without a shared transaction:

    regulated partition -> protected store (FHIR-shaped resource)
    general partition   -> general store (document, opaque subject ref only)

Both writes run concurrently and the synchronizer returns only when both
have finished (fan-out/fan-in). Each write is bounded by a timeout; a
timeout counts as a failure.

Failure path:
    1. The side that succeeded is left in place (no partial rollback).
    2. A FailedSyncRecord holding the ENTIRE original event is saved, so the
       retry sweep redrives both partitions together.
    3. An ERROR audit entry is submitted.
    4. Failure(SyncError) is returned to the caller.

Architecture:
    - Application service (orchestrates ports, no I/O of its own)
    - Returns Result; store exceptions are converted at this boundary

Usage:
    synchronizer = DualStoreSynchronizer(
        protected_store=..., general_store=..., failed_sync_repository=...,
        audit_writer=..., logger=...,
    )
    result = await synchronizer.synchronize(SyncPlan(event=event, ...))
"""

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from src.core.enums import ErrorCode
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import AuditLogEntry, FailedSyncRecord
from src.domain.enums import AuditAction, AuditSeverity
from src.domain.errors import SyncError
from src.domain.events import Event
from src.domain.protocols import (
    AuditWriterProtocol,
    FailedSyncRepository,
    GeneralStoreProtocol,
    LoggerProtocol,
    ProtectedStoreProtocol,
)
from src.domain.value_objects import SYSTEM_ACTOR

PROTECTED_PARTITION = "protected"
GENERAL_PARTITION = "general"

_WRITE_FAILED_CODES = {
    PROTECTED_PARTITION: ErrorCode.PROTECTED_STORE_WRITE_FAILED,
    GENERAL_PARTITION: ErrorCode.GENERAL_STORE_WRITE_FAILED,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncPlan:
    """What to write for one event.

    Attributes:
        event: The event being synchronized (captured whole on failure).
        protected_resource: Resource for the protected store, or None when
            the regulated partition is empty.
        general_collection: Target collection in the general store.
        general_document: Document for the general store, or None when the
            general partition is empty.
    """

    event: Event
    protected_resource: dict[str, Any] | None
    general_collection: str
    general_document: dict[str, Any] | None

    @property
    def is_empty(self) -> bool:
        return self.protected_resource is None and self.general_document is None


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncReceipt:
    """Ids produced by a fully successful synchronization."""

    protected_resource_id: str | None = None
    general_document_id: str | None = None


class DualStoreSynchronizer:
    """Concurrent protected/general writes with failure capture.

    Attributes:
        write_timeout_seconds: Upper bound for each individual write.
    """

    def __init__(
        self,
        *,
        protected_store: ProtectedStoreProtocol,
        general_store: GeneralStoreProtocol,
        failed_sync_repository: FailedSyncRepository,
        audit_writer: AuditWriterProtocol,
        logger: LoggerProtocol,
        write_timeout_seconds: float = 10.0,
    ) -> None:
        self._protected_store = protected_store
        self._general_store = general_store
        self._failed_sync_repository = failed_sync_repository
        self._audit_writer = audit_writer
        self._logger = logger
        self.write_timeout_seconds = write_timeout_seconds

    async def synchronize(self, plan: SyncPlan) -> Result[SyncReceipt, SyncError]:
        """Write both partitions concurrently and wait for both.

        Args:
            plan: Resource/document to write for one event.

        Returns:
            Success(SyncReceipt): Every non-empty partition was written.
            Failure(SyncError): At least one write failed; the failure was
                captured as a FailedSyncRecord and audited.
        """
        if plan.is_empty:
            return Success(value=SyncReceipt())

        writes: dict[str, Awaitable[Result[Any, DomainError]]] = {}
        if plan.protected_resource is not None:
            writes[PROTECTED_PARTITION] = self._protected_store.create(
                plan.protected_resource
            )
        if plan.general_document is not None:
            writes[GENERAL_PARTITION] = self._general_store.add(
                plan.general_collection, plan.general_document
            )

        results = await asyncio.gather(
            *(self._bounded(partition, write) for partition, write in writes.items())
        )
        outcomes = dict(zip(writes, results))

        failures = {
            partition: result.error
            for partition, result in outcomes.items()
            if isinstance(result, Failure)
        }
        if not failures:
            receipt = SyncReceipt(
                protected_resource_id=self._value_of(outcomes.get(PROTECTED_PARTITION)),
                general_document_id=self._value_of(outcomes.get(GENERAL_PARTITION)),
            )
            self._logger.info(
                "dual_store_sync_completed",
                event_id=str(plan.event.event_id),
                event_type=plan.event.event_type,
                partitions=list(outcomes),
            )
            return Success(value=receipt)

        return Failure(error=await self._capture_failure(plan.event, failures))

    async def _bounded(
        self,
        partition: str,
        write: Awaitable[Result[Any, DomainError]],
    ) -> Result[Any, DomainError]:
        try:
            return await asyncio.wait_for(write, timeout=self.write_timeout_seconds)
        except TimeoutError:
            return Failure(
                error=DomainError(
                    code=_WRITE_FAILED_CODES[partition],
                    message=(
                        f"{partition} store write timed out after "
                        f"{self.write_timeout_seconds:g}s"
                    ),
                    details={"partition": partition, "error_type": "TimeoutError"},
                )
            )
        except Exception as e:
            return Failure(
                error=DomainError(
                    code=_WRITE_FAILED_CODES[partition],
                    message=f"{partition} store write failed: {e}",
                    details={"partition": partition, "error_type": type(e).__name__},
                )
            )

    async def _capture_failure(
        self,
        event: Event,
        failures: dict[str, DomainError],
    ) -> SyncError:
        failed_partitions = tuple(sorted(failures))
        error_message = "; ".join(
            f"{partition}: {error.message}" for partition, error in sorted(failures.items())
        )
        record = FailedSyncRecord(
            original_event=event,
            failed_partitions=failed_partitions,
            error_message=error_message,
        )

        failed_sync_id: str | None = None
        try:
            saved = await self._failed_sync_repository.save(record)
        except Exception as e:
            self._logger.critical(
                "failed_sync_record_not_saved",
                error=e,
                event_id=str(event.event_id),
                failed_sync_id=record.id,
            )
        else:
            match saved:
                case Success(value=record_id):
                    failed_sync_id = record_id
                case Failure(error=save_error):
                    self._logger.critical(
                        "failed_sync_record_not_saved",
                        event_id=str(event.event_id),
                        failed_sync_id=record.id,
                        error_code=save_error.code.value,
                        error_message=save_error.message,
                    )

        self._logger.error(
            "dual_store_sync_failed",
            event_id=str(event.event_id),
            event_type=event.event_type,
            failed_partitions=list(failed_partitions),
            failed_sync_id=failed_sync_id,
        )
        self._audit_writer.submit(
            AuditLogEntry.create(
                actor_id=event.actor_id or SYSTEM_ACTOR.id,
                actor_display=SYSTEM_ACTOR.display_name,
                action=AuditAction.SYNC_FAILED,
                resource_type="FailedSync",
                resource_id=failed_sync_id or record.id,
                details=(
                    f"Dual-store sync failed for {event.event_type} "
                    f"({', '.join(failed_partitions)})"
                ),
                severity=AuditSeverity.ERROR,
                metadata={
                    "eventId": str(event.event_id),
                    "eventType": event.event_type,
                    "failedPartitions": list(failed_partitions),
                    "recordSaved": failed_sync_id is not None,
                },
            )
        )

        return SyncError(
            code=ErrorCode.SYNC_PARTITION_WRITE_FAILED,
            message=f"Dual-store sync failed: {error_message}",
            failed_partitions=failed_partitions,
            failed_sync_id=failed_sync_id,
            details={"event_id": str(event.event_id)},
        )

    @staticmethod
    def _value_of(result: Result[Any, DomainError] | None) -> str | None:
        if isinstance(result, Success):
            return result.value
        return None
