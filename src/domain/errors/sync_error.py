"""Dual-store synchronization errors."""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncError(DomainError):
    """One or both partition writes failed.

    The full original event has already been captured as a failed sync
    record by the time this error is returned; the side that succeeded is
    left in place.

    Attributes:
        failed_partitions: Which writes failed (``protected``, ``general``).
        failed_sync_id: Id of the stored failed sync record, when saving it worked.
    """

    failed_partitions: tuple[str, ...] = ()
    failed_sync_id: str | None = None
