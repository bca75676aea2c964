"""Failed sync record repository implementation.

A FailedSyncRecord is stored in two halves:

    quarantine store : full record, original event included (may hold
                       regulated values; restricted access)
    general store    : tracking index in ``failedSyncs`` (id, eventId,
                       eventType, failedAt, retryCount, status,
                       failedPartitions) so the retry sweep can list work
                       without reading protected data

The general store never receives the event payload.
"""

from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import FailedSyncRecord
from src.domain.enums import FailedSyncStatus
from src.domain.protocols import GeneralStoreProtocol, QuarantineStoreProtocol

FAILED_SYNCS_COLLECTION = "failedSyncs"

_OPEN_STATUSES = frozenset({FailedSyncStatus.PENDING.value, FailedSyncStatus.RETRIED.value})


class QuarantineFailedSyncRepository:
    """FailedSyncRepository over the quarantine store plus a general-store index."""

    def __init__(
        self,
        general_store: GeneralStoreProtocol,
        quarantine_store: QuarantineStoreProtocol,
        collection: str = FAILED_SYNCS_COLLECTION,
    ) -> None:
        self._general_store = general_store
        self._quarantine_store = quarantine_store
        self._collection = collection

    async def save(self, record: FailedSyncRecord) -> Result[str, DomainError]:
        # Payload first: an index entry must always resolve to a record.
        stored = await self._quarantine_store.put(record.id, record.to_document())
        if isinstance(stored, Failure):
            return stored
        return await self._general_store.add(self._collection, record.to_index_document())

    async def update(self, record: FailedSyncRecord) -> Result[None, DomainError]:
        stored = await self._quarantine_store.put(record.id, record.to_document())
        if isinstance(stored, Failure):
            return stored
        return await self._general_store.update(
            self._collection,
            record.id,
            {"retryCount": record.retry_count, "status": record.status.value},
        )

    async def find_pending(self) -> Result[list[FailedSyncRecord], DomainError]:
        """Records still awaiting repair, oldest first."""
        index = await self._general_store.query(self._collection)
        if isinstance(index, Failure):
            return index

        records: list[FailedSyncRecord] = []
        for entry in index.value:
            if entry.get("status") not in _OPEN_STATUSES:
                continue
            document = await self._quarantine_store.get(entry["id"])
            if isinstance(document, Failure):
                return document
            records.append(
                FailedSyncRecord.from_document(
                    {
                        **document.value,
                        "retryCount": entry.get("retryCount", 0),
                        "status": entry["status"],
                    }
                )
            )
        records.sort(key=lambda record: record.failed_at)
        return Success(value=records)
