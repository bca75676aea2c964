"""FailedSyncRepository protocol for failed synchronization records.

Port (interface) for hexagonal architecture. Consumed by the retry sweep,
which is outside this system.
"""

from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.entities import FailedSyncRecord


class FailedSyncRepository(Protocol):
    """Failed sync record repository protocol (port)."""

    async def save(self, record: FailedSyncRecord) -> Result[str, DomainError]:
        """Persist a new record.

        Returns:
            Success(record_id) or Failure(DomainError).
        """
        ...

    async def update(self, record: FailedSyncRecord) -> Result[None, DomainError]:
        """Persist a status or retry-count change."""
        ...

    async def find_pending(self) -> Result[list[FailedSyncRecord], DomainError]:
        """Records with status PENDING or RETRIED, oldest first."""
        ...
