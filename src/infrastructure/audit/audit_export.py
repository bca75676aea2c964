"""JSON export of the audit trail.

Audit entries are retained indefinitely and leave the system only through
export. The export pages through the store (newest first) and serializes the
entries with a pydantic TypeAdapter, so timestamps and enums are rendered
consistently regardless of the backing store.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter

from src.core.result import Failure, Result, Success
from src.domain.entities import AuditLogEntry
from src.domain.enums import DataOperation
from src.domain.errors import AuditError
from src.domain.protocols import AuditStoreProtocol
from src.domain.value_objects import Actor
from src.infrastructure.audit.audit_log_writer import AuditLogWriter

_ENTRIES_ADAPTER: TypeAdapter[list[AuditLogEntry]] = TypeAdapter(list[AuditLogEntry])

EXPORT_PAGE_SIZE = 1000


async def export_entries(
    store: AuditStoreProtocol,
    filters: Mapping[str, Any] | None = None,
    *,
    writer: AuditLogWriter | None = None,
    actor: Actor | None = None,
) -> Result[str, AuditError]:
    """Export every entry matching ``filters`` as a JSON array.

    Args:
        store: Audit store to read from.
        filters: Keyword filters accepted by ``AuditStoreProtocol.query``
            (``limit``/``offset`` are managed here and ignored if given).
        writer: When given together with ``actor``, the export is itself
            recorded as a DATA_EXPORTED access.
        actor: Who requested the export.

    Returns:
        Success(json_text) or the store's Failure(AuditError).
    """
    query_filters = {
        key: value
        for key, value in (filters or {}).items()
        if key not in ("limit", "offset")
    }
    entries: list[AuditLogEntry] = []
    offset = 0
    while True:
        result = await store.query(
            **query_filters, limit=EXPORT_PAGE_SIZE, offset=offset
        )
        if isinstance(result, Failure):
            return result
        page = result.value
        entries.extend(page)
        if len(page) < EXPORT_PAGE_SIZE:
            break
        offset += EXPORT_PAGE_SIZE

    if writer is not None and actor is not None:
        writer.log_data_access(
            actor,
            "audit_log",
            "export",
            DataOperation.EXPORT,
            details=f"Exported {len(entries)} audit entries",
        )

    return Success(value=_ENTRIES_ADAPTER.dump_json(entries, indent=2).decode())
