"""Audit log entry domain entity.

Entries are append-only: once handed to an audit store they are never
updated or deleted. The dataclass is frozen so that nothing in process can
mutate an entry after creation either.

Usage:
    entry = AuditLogEntry.create(
        actor_id="user-1",
        actor_display="Dr. Smith",
        action=AuditAction.FORM_INSTANCE_SIGNED,
        resource_type="form_instance",
        resource_id=instance.id,
        details="Form instance signed (Investigator approval)",
    )
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from uuid_extensions import uuid7

from src.domain.enums import AuditAction, AuditSeverity


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditLogEntry:
    """Immutable record of one state-changing action.

    Attributes:
        id: Unique entry id (UUID v7, time-ordered).
        actor_id: Who performed the action.
        actor_display: Display name of the actor.
        action: What happened.
        resource_type: Kind of resource acted on.
        resource_id: Identifier of the resource, when there is one.
        details: Short human-readable summary. Never holds regulated values.
        severity: Severity level.
        timestamp: When it happened (UTC).
        metadata: Extra structured context (ids, counts, event id).
    """

    id: str
    actor_id: str
    actor_display: str
    action: AuditAction | str
    resource_type: str
    details: str
    severity: AuditSeverity = AuditSeverity.INFO
    resource_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        *,
        actor_id: str,
        actor_display: str,
        action: AuditAction | str,
        resource_type: str,
        details: str,
        severity: AuditSeverity = AuditSeverity.INFO,
        resource_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> "AuditLogEntry":
        """Build an entry with a fresh id and (by default) the current time."""
        return cls(
            id=str(uuid7()),
            actor_id=actor_id,
            actor_display=actor_display,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details,
            severity=severity,
            timestamp=timestamp or datetime.now(UTC),
            metadata=dict(metadata or {}),
        )

    @property
    def action_name(self) -> str:
        if isinstance(self.action, AuditAction):
            return self.action.value
        return self.action
