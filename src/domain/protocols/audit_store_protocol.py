"""Audit store protocol (port).

Append-only persistence for audit entries. Implementations MUST refuse to
update or delete a written entry.

Implementations:
    - InMemoryAuditStore: deep-copied list append (tests, local runs)
    - SqlAlchemyAuditStore: relational table with an ORM guard against UPDATE/DELETE

Error Handling:
    All methods return Result types. NEVER raise; wrap I/O failures in
    Failure(AuditError(...)).
"""

from datetime import datetime
from typing import Protocol

from src.core.result import Result
from src.domain.entities import AuditLogEntry
from src.domain.enums import AuditAction, AuditSeverity
from src.domain.errors import AuditError


class AuditStoreProtocol(Protocol):
    """Protocol for append-only audit stores."""

    async def write(self, entry: AuditLogEntry) -> Result[None, AuditError]:
        """Append one entry.

        Returns:
            Success(None) when stored, Failure(AuditError) otherwise.
        """
        ...

    async def query(
        self,
        *,
        actor_id: str | None = None,
        action: AuditAction | str | None = None,
        resource_type: str | None = None,
        resource_id: str | None = None,
        severity: AuditSeverity | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[list[AuditLogEntry], AuditError]:
        """Query entries, newest first. All filters are ANDed."""
        ...
