"""Audit trail error types.

Returned by audit stores when recording or querying fails. The audit writer
logs and drops these; they are never surfaced to a business caller.

Usage:
    return Failure(error=AuditError(
        code=ErrorCode.AUDIT_RECORD_FAILED,
        message="Failed to record audit entry: database connection lost",
    ))
"""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditError(DomainError):
    """Audit store failure (connection loss, rejected write, bad query)."""

    pass
