"""Audit infrastructure implementations.

Append-only audit stores (in-memory and SQLAlchemy), the non-blocking
audit log writer, and JSON export.
"""

from src.infrastructure.audit.audit_export import export_entries
from src.infrastructure.audit.audit_log_writer import AuditLogWriter
from src.infrastructure.audit.in_memory_audit_store import InMemoryAuditStore
from src.infrastructure.audit.sqlalchemy_audit_store import SqlAlchemyAuditStore

__all__ = [
    "AuditLogWriter",
    "InMemoryAuditStore",
    "SqlAlchemyAuditStore",
    "export_entries",
]
