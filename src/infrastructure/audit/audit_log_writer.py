"""Non-blocking audit log writer.

Audit writes must never add latency or failure modes to the operation they
describe. Callers hand entries to ``submit()``, which only enqueues; a
background task drains the bounded queue into the audit store.

Failure policy ("log best-effort, never fail the caller"):
    - Queue full: entry dropped, ``audit_queue_full`` logged at CRITICAL.
    - Store returns Failure or raises: ``audit_write_failed`` logged at ERROR,
      the worker moves on to the next entry.

Usage:
    writer = AuditLogWriter(store=get_audit_store(), logger=get_logger())
    await writer.start()
    writer.submit(entry)
    ...
    await writer.stop()  # flushes pending entries first
"""

import asyncio
import contextlib
from typing import Any

from src.core.result import Failure
from src.domain.entities import AuditLogEntry
from src.domain.enums import AuditAction, AuditSeverity, DataOperation
from src.domain.protocols import AuditStoreProtocol, LoggerProtocol
from src.domain.value_objects import Actor

DATA_OPERATION_ACTIONS: dict[DataOperation, AuditAction] = {
    DataOperation.CREATE: AuditAction.DATA_CREATED,
    DataOperation.READ: AuditAction.DATA_VIEWED,
    DataOperation.UPDATE: AuditAction.DATA_UPDATED,
    DataOperation.DELETE: AuditAction.DATA_DELETED,
    DataOperation.EXPORT: AuditAction.DATA_EXPORTED,
}


class AuditLogWriter:
    """Bounded queue plus one background task writing to the audit store.

    The worker is started lazily on the first ``submit()`` made from inside
    a running event loop, so callers that forget ``start()`` still get
    their entries written.

    Attributes:
        store: Append-only audit store.
        max_queue_size: Queue bound; entries beyond it are dropped.
    """

    def __init__(
        self,
        store: AuditStoreProtocol,
        logger: LoggerProtocol,
        *,
        max_queue_size: int = 1000,
    ) -> None:
        self.store = store
        self.max_queue_size = max_queue_size
        self._logger = logger
        self._queue: asyncio.Queue[AuditLogEntry] = asyncio.Queue(maxsize=max_queue_size)
        self._worker: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._dropped = 0

    @property
    def pending(self) -> int:
        """Entries queued but not yet written."""
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        """Entries dropped because the queue was full."""
        return self._dropped

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        """Start the background worker (no-op if already running)."""
        self._ensure_worker()

    def submit(self, entry: AuditLogEntry) -> bool:
        """Enqueue an entry without waiting.

        Returns:
            True if queued, False if dropped because the queue is full.
        """
        with contextlib.suppress(RuntimeError):
            # No running loop: entry waits for start().
            self._ensure_worker()
        try:
            self._queue.put_nowait(entry)
        except asyncio.QueueFull:
            self._dropped += 1
            self._logger.critical(
                "audit_queue_full",
                entry_id=entry.id,
                action=entry.action_name,
                resource_type=entry.resource_type,
                queue_size=self.max_queue_size,
                dropped_total=self._dropped,
            )
            return False
        return True

    def record(
        self,
        *,
        actor: Actor,
        action: AuditAction | str,
        resource_type: str,
        details: str,
        severity: AuditSeverity = AuditSeverity.INFO,
        resource_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """Build an entry for ``actor`` and submit it."""
        return self.submit(
            AuditLogEntry.create(
                actor_id=actor.id,
                actor_display=actor.display_name,
                action=action,
                resource_type=resource_type,
                resource_id=resource_id,
                details=details,
                severity=severity,
                metadata=metadata,
            )
        )

    def log_data_access(
        self,
        actor: Actor,
        resource_type: str,
        resource_id: str,
        operation: DataOperation,
        details: str | None = None,
    ) -> bool:
        """Record a data access. DELETE is WARNING, everything else INFO."""
        severity = (
            AuditSeverity.WARNING
            if operation is DataOperation.DELETE
            else AuditSeverity.INFO
        )
        return self.record(
            actor=actor,
            action=DATA_OPERATION_ACTIONS[operation],
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or f"{operation.value} {resource_type} {resource_id}",
            severity=severity,
            metadata={"operation": operation.value},
        )

    async def flush(self) -> None:
        """Wait until every queued entry has been handed to the store."""
        if self._queue.empty():
            return
        self._ensure_worker()
        await self._queue.join()

    async def stop(self) -> None:
        """Flush pending entries, then stop the worker."""
        await self.flush()
        if self._worker is not None:
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
        self._worker = None
        self._loop = None

    def _ensure_worker(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            # A queue binds to the loop it first waits on; rebuild it for the new loop.
            self._rebind_queue()
            self._loop = loop
            self._worker = None
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._run(), name="audit-log-writer")

    def _rebind_queue(self) -> None:
        pending: list[AuditLogEntry] = []
        while not self._queue.empty():
            pending.append(self._queue.get_nowait())
        self._queue = asyncio.Queue(maxsize=self.max_queue_size)
        for entry in pending:
            self._queue.put_nowait(entry)

    async def _run(self) -> None:
        while True:
            entry = await self._queue.get()
            try:
                await self._write(entry)
            finally:
                self._queue.task_done()

    async def _write(self, entry: AuditLogEntry) -> None:
        try:
            result = await self.store.write(entry)
        except Exception as e:
            self._logger.error(
                "audit_write_failed",
                error=e,
                entry_id=entry.id,
                action=entry.action_name,
                resource_type=entry.resource_type,
            )
            return

        if isinstance(result, Failure):
            self._logger.error(
                "audit_write_failed",
                entry_id=entry.id,
                action=entry.action_name,
                resource_type=entry.resource_type,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
