"""In-memory implementation of AuditStoreProtocol.

Append-only list of deep-copied entries. Used by tests and local runs where
no audit database is configured. There is deliberately no API to update or
remove an entry.
"""

import asyncio
import copy
from collections.abc import Iterator
from datetime import datetime

from src.core.result import Result, Success
from src.domain.entities import AuditLogEntry
from src.domain.enums import AuditAction, AuditSeverity
from src.domain.errors import AuditError

MAX_QUERY_LIMIT = 1000


class InMemoryAuditStore:
    """Append-only in-process audit store.

    Entries are deep-copied on write and on read, so neither the writer nor
    a reader can alter what the store holds.
    """

    def __init__(self) -> None:
        self._entries: list[AuditLogEntry] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AuditLogEntry]:
        return iter([copy.deepcopy(entry) for entry in self._entries])

    async def write(self, entry: AuditLogEntry) -> Result[None, AuditError]:
        async with self._lock:
            self._entries.append(copy.deepcopy(entry))
        return Success(value=None)

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
        limit = min(limit, MAX_QUERY_LIMIT)
        action_name = action.value if isinstance(action, AuditAction) else action

        matches = [
            entry
            for entry in self._entries
            if (actor_id is None or entry.actor_id == actor_id)
            and (action_name is None or entry.action_name == action_name)
            and (resource_type is None or entry.resource_type == resource_type)
            and (resource_id is None or entry.resource_id == resource_id)
            and (severity is None or entry.severity == severity)
            and (start_date is None or entry.timestamp >= start_date)
            and (end_date is None or entry.timestamp <= end_date)
        ]
        # Newest first; insertion order breaks timestamp ties.
        ordered = [
            entry
            for _, entry in sorted(
                enumerate(matches),
                key=lambda pair: (pair[1].timestamp, pair[0]),
                reverse=True,
            )
        ]
        page = ordered[offset : offset + limit]
        return Success(value=[copy.deepcopy(entry) for entry in page])
