"""Failed synchronization record.

Captured when a dual-store write fails. The record carries the entire
original event so that a retry sweep redrives both partitions together.

State Machine:
    PENDING -> RETRIED (retry_count increments on every redrive)
    PENDING/RETRIED -> ABANDONED (terminal)
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.enums import FailedSyncStatus
from src.domain.errors import IllegalStateError
from src.domain.events import Event


@dataclass
class FailedSyncRecord:
    """Failed dual-store write awaiting retry.

    Attributes:
        id: Record id.
        original_event: Event whose synchronization failed, unmodified.
        failed_at: When the failure was captured (UTC).
        retry_count: Number of redrives so far; starts at 0.
        status: Current status.
        failed_partitions: Which writes failed on the first attempt.
        error_message: Summary of the first failure (no regulated values).
    """

    original_event: Event
    id: str = field(default_factory=lambda: str(uuid7()))
    failed_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    retry_count: int = 0
    status: FailedSyncStatus = FailedSyncStatus.PENDING
    failed_partitions: tuple[str, ...] = ()
    error_message: str | None = None

    def mark_retried(self) -> Result[None, IllegalStateError]:
        """Record one redrive attempt.

        Returns:
            Success(None): retry_count incremented, status RETRIED.
            Failure(IllegalStateError): Record was abandoned.
        """
        if self.status == FailedSyncStatus.ABANDONED:
            return Failure(error=self._illegal("retry"))
        self.retry_count += 1
        self.status = FailedSyncStatus.RETRIED
        return Success(value=None)

    def abandon(self) -> Result[None, IllegalStateError]:
        """Give up on automatic repair."""
        if self.status == FailedSyncStatus.ABANDONED:
            return Failure(error=self._illegal("abandon"))
        self.status = FailedSyncStatus.ABANDONED
        return Success(value=None)

    def _illegal(self, action: str) -> IllegalStateError:
        return IllegalStateError(
            code=ErrorCode.FAILED_SYNC_ILLEGAL_TRANSITION,
            message=f"Cannot {action} a failed sync record in {self.status.value} state",
            current_status=self.status.value,
            attempted_action=action,
        )

    def to_document(self) -> dict[str, Any]:
        """Full document form, original event included (regulated values possible)."""
        return {
            "id": self.id,
            "originalEvent": self.original_event.to_dict(),
            "failedAt": self.failed_at.isoformat(),
            "retryCount": self.retry_count,
            "status": self.status.value,
            "failedPartitions": list(self.failed_partitions),
            "errorMessage": self.error_message,
        }

    def to_index_document(self) -> dict[str, Any]:
        """Tracking fields only; safe for the general store."""
        return {
            "id": self.id,
            "eventId": str(self.original_event.event_id),
            "eventType": self.original_event.event_type,
            "failedAt": self.failed_at.isoformat(),
            "retryCount": self.retry_count,
            "status": self.status.value,
            "failedPartitions": list(self.failed_partitions),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "FailedSyncRecord":
        return cls(
            id=document["id"],
            original_event=Event.from_dict(document["originalEvent"]),
            failed_at=datetime.fromisoformat(document["failedAt"]),
            retry_count=document.get("retryCount", 0),
            status=FailedSyncStatus(document.get("status", "pending")),
            failed_partitions=tuple(document.get("failedPartitions", ())),
            error_message=document.get("errorMessage"),
        )
