"""Database models for the persistence layer.

These are infrastructure concerns and must not be imported by the domain
layer. Domain entities live in src/domain/entities/ and are mapped by the
stores.
"""

from src.infrastructure.persistence.models.audit_log import (
    AuditImmutabilityError,
    AuditLogModel,
)

__all__ = ["AuditImmutabilityError", "AuditLogModel"]
