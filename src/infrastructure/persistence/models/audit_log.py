"""Audit log database model.

CRITICAL: This table is IMMUTABLE. Rows may be inserted, never updated or
deleted. Immutability is enforced in the ORM by session event listeners
(flush-time and statement-time), so it holds on every backend.
"""

from typing import Any

from sqlalchemy import JSON, Index, String, Text, event
from sqlalchemy.orm import Mapped, ORMExecuteState, Session, UOWTransaction, mapped_column

from src.infrastructure.persistence.base import BaseModel


class AuditImmutabilityError(Exception):
    """Raised when code tries to update or delete an audit row."""


class AuditLogModel(BaseModel):
    """Audit log model - IMMUTABLE.

    Fields:
        id: Entry id (from BaseModel)
        created_at: Entry timestamp (from BaseModel)
        actor_id / actor_display: Who
        action: What happened
        resource_type / resource_id: What was affected
        details: Human-readable summary (no regulated values)
        severity: INFO, WARNING, ERROR, CRITICAL
        context: Structured metadata

    Indexes:
        - idx_audit_actor_action: (actor_id, action) for activity queries
        - idx_audit_resource: (resource_type, resource_id) for resource audits
    """

    __tablename__ = "audit_logs"

    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    actor_display: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    resource_type: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    context: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_audit_actor_action", "actor_id", "action"),
        Index("idx_audit_resource", "resource_type", "resource_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogModel("
            f"id={self.id}, "
            f"action={self.action!r}, "
            f"actor_id={self.actor_id!r}, "
            f"created_at={self.created_at}"
            f")>"
        )


@event.listens_for(Session, "before_flush")
def _reject_audit_row_mutation(
    session: Session,
    flush_context: UOWTransaction,
    instances: object,
) -> None:
    for obj in session.deleted:
        if isinstance(obj, AuditLogModel):
            raise AuditImmutabilityError("Audit log entries cannot be deleted")
    for obj in session.dirty:
        if isinstance(obj, AuditLogModel) and session.is_modified(obj):
            raise AuditImmutabilityError("Audit log entries cannot be updated")


@event.listens_for(Session, "do_orm_execute")
def _reject_bulk_audit_mutation(state: ORMExecuteState) -> None:
    if not (state.is_update or state.is_delete):
        return
    if any(mapper.class_ is AuditLogModel for mapper in state.all_mappers):
        raise AuditImmutabilityError("Audit log entries cannot be updated or deleted")
