"""Base model for relational persistence.

Following hexagonal architecture:
- This is an infrastructure concern (database implementation detail)
- Domain entities (AuditLogEntry) do NOT inherit from this
- Stores map domain entities to/from these models

Usage:
    class AuditLogModel(BaseModel):
        __tablename__ = "audit_logs"
        action: Mapped[str]
        # Has: id, created_at
"""

from datetime import datetime
from typing import Any
from uuid import UUID as PythonUUID, uuid4

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class BaseModel(DeclarativeBase):
    """Base class for all database models.

    Provides:
    - id: UUID primary key
    - created_at: Timestamp when the record was created (UTC)

    Models are kept database-agnostic (generic Uuid/DateTime types) so the
    audit store runs on PostgreSQL in production and SQLite in tests.
    """

    __abstract__ = True

    id: Mapped[PythonUUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary (for debugging/logging)."""
        return {
            "id": str(self.id),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
