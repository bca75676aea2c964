"""SQLAlchemy implementation of AuditStoreProtocol.

Immutable audit logging over the ``audit_logs`` table with:
- ORM session guards rejecting UPDATE/DELETE of audit rows
- Async SQLAlchemy for database operations
- Result types for error handling (no exceptions)
- JSON storage for structured metadata

Following hexagonal architecture:
- Infrastructure implements domain protocol (AuditStoreProtocol)
- Domain doesn't know about SQLAlchemy
- Runs on PostgreSQL (asyncpg) in production and SQLite (aiosqlite) in tests

Compliance:
    21 CFR Part 11: entries are never altered or deleted; export-only.

Usage:
    store = SqlAlchemyAuditStore(Database(settings.audit_database_url))
    await store.write(entry)
    result = await store.query(resource_type="form_instance", limit=50)
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.entities import AuditLogEntry
from src.domain.enums import AuditAction, AuditSeverity
from src.domain.errors import AuditError
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.models import AuditImmutabilityError, AuditLogModel

MAX_QUERY_LIMIT = 1000


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _to_action(name: str) -> AuditAction | str:
    try:
        return AuditAction(name)
    except ValueError:
        return name


class SqlAlchemyAuditStore:
    """Relational, append-only audit store.

    Each call opens its own transactional session, so a write is durable
    as soon as it returns Success.

    Attributes:
        database: Database wrapper providing sessions.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    async def write(self, entry: AuditLogEntry) -> Result[None, AuditError]:
        """Insert one entry. Only INSERT is ever issued against audit_logs."""
        try:
            model = AuditLogModel(
                id=UUID(entry.id),
                created_at=entry.timestamp,
                actor_id=entry.actor_id,
                actor_display=entry.actor_display,
                action=entry.action_name,
                resource_type=entry.resource_type,
                resource_id=entry.resource_id,
                details=entry.details,
                severity=entry.severity.value,
                context=entry.metadata or None,
            )
            async with self.database.get_session() as session:
                session.add(model)
            return Success(value=None)

        except (SQLAlchemyError, AuditImmutabilityError, ValueError) as e:
            return Failure(
                error=AuditError(
                    code=ErrorCode.AUDIT_RECORD_FAILED,
                    message=f"Failed to record audit entry: {e}",
                    details={
                        "entry_id": entry.id,
                        "action": entry.action_name,
                        "resource_type": entry.resource_type,
                        "error_type": type(e).__name__,
                    },
                )
            )

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
        """Query the audit trail (read-only, newest first).

        Limit is capped at 1000.
        """
        action_name = action.value if isinstance(action, AuditAction) else action
        try:
            stmt = select(AuditLogModel)

            if actor_id is not None:
                stmt = stmt.where(AuditLogModel.actor_id == actor_id)
            if action_name is not None:
                stmt = stmt.where(AuditLogModel.action == action_name)
            if resource_type is not None:
                stmt = stmt.where(AuditLogModel.resource_type == resource_type)
            if resource_id is not None:
                stmt = stmt.where(AuditLogModel.resource_id == resource_id)
            if severity is not None:
                stmt = stmt.where(AuditLogModel.severity == severity.value)
            if start_date is not None:
                stmt = stmt.where(AuditLogModel.created_at >= start_date)
            if end_date is not None:
                stmt = stmt.where(AuditLogModel.created_at <= end_date)

            stmt = (
                stmt.order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc())
                .limit(min(limit, MAX_QUERY_LIMIT))
                .offset(offset)
            )

            async with self.database.get_session() as session:
                rows = (await session.execute(stmt)).scalars().all()

            return Success(value=[self._to_entity(row) for row in rows])

        except SQLAlchemyError as e:
            error_details: dict[str, Any] = {"error_type": type(e).__name__}
            if actor_id is not None:
                error_details["actor_id"] = actor_id
            if action_name is not None:
                error_details["action"] = action_name
            if resource_type is not None:
                error_details["resource_type"] = resource_type

            return Failure(
                error=AuditError(
                    code=ErrorCode.AUDIT_QUERY_FAILED,
                    message=f"Failed to query audit entries: {e}",
                    details=error_details,
                )
            )

    @staticmethod
    def _to_entity(row: AuditLogModel) -> AuditLogEntry:
        return AuditLogEntry(
            id=str(row.id),
            actor_id=row.actor_id,
            actor_display=row.actor_display,
            action=_to_action(row.action),
            resource_type=row.resource_type,
            resource_id=row.resource_id,
            details=row.details,
            severity=AuditSeverity(row.severity),
            timestamp=_as_utc(row.created_at),
            metadata=dict(row.context or {}),
        )
