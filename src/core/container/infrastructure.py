"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console/JSON)
- Protected store (regulated, FHIR-shaped resources)
- General store (non-regulated documents)
- Quarantine store (failed-sync payloads)
- Audit store (in-memory or SQLAlchemy) and the queued audit writer
- Identity provider (current actor)
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings

if TYPE_CHECKING:
    from src.domain.protocols.audit_store_protocol import AuditStoreProtocol
    from src.domain.protocols.general_store_protocol import GeneralStoreProtocol
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.protected_store_protocol import ProtectedStoreProtocol
    from src.domain.protocols.quarantine_store_protocol import QuarantineStoreProtocol
    from src.infrastructure.audit.audit_log_writer import AuditLogWriter
    from src.infrastructure.identity.context_identity_provider import (
        ContextIdentityProvider,
    )
    from src.infrastructure.persistence.database import Database


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Rendering follows settings:
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON lines)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from src.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(
        use_json=settings.use_json_logs,
        level=settings.log_level,
        app_name=settings.app_name,
    )


@lru_cache()
def get_protected_store() -> "ProtectedStoreProtocol":
    """Get the regulated-data store singleton.

    The in-memory adapter stands in for the external healthcare-record
    service; a networked adapter only has to satisfy ProtectedStoreProtocol.
    """
    from src.infrastructure.stores import InMemoryProtectedStore

    return InMemoryProtectedStore()


@lru_cache()
def get_general_store() -> "GeneralStoreProtocol":
    """Get the general (non-regulated) document store singleton."""
    from src.infrastructure.stores import InMemoryGeneralStore

    return InMemoryGeneralStore()


@lru_cache()
def get_quarantine_store() -> "QuarantineStoreProtocol":
    """Get the restricted store for failed-sync payloads.

    Separate from the general store so regulated values in a failed
    event never land next to non-regulated documents.
    """
    from src.infrastructure.stores import InMemoryQuarantineStore

    return InMemoryQuarantineStore()


@lru_cache()
def get_audit_database() -> "Database | None":
    """Get the audit database manager, or None when no URL is configured."""
    from src.infrastructure.persistence.database import Database

    settings = get_settings()
    if not settings.audit_database_url:
        return None
    return Database(database_url=settings.audit_database_url, echo=settings.db_echo)


@lru_cache()
def get_audit_store() -> "AuditStoreProtocol":
    """Get the audit store singleton.

    Returns SqlAlchemyAuditStore when AUDIT_DATABASE_URL is set, otherwise
    InMemoryAuditStore (development and tests).
    """
    from src.infrastructure.audit import InMemoryAuditStore, SqlAlchemyAuditStore

    database = get_audit_database()
    if database is None:
        return InMemoryAuditStore()
    return SqlAlchemyAuditStore(database=database)


@lru_cache()
def get_audit_writer() -> "AuditLogWriter":
    """Get the queued audit writer singleton.

    The worker task starts lazily on the first submit from a running loop.

    Usage:
        writer = get_audit_writer()
        writer.record(actor=actor, action=AuditAction.DATA_VIEWED, resource_type="FormInstance")
        await writer.flush()
    """
    from src.infrastructure.audit import AuditLogWriter

    return AuditLogWriter(
        store=get_audit_store(),
        logger=get_logger(),
        max_queue_size=get_settings().audit_queue_max_size,
    )


@lru_cache()
def get_identity_provider() -> "ContextIdentityProvider":
    """Get the identity provider singleton (context-variable backed)."""
    from src.infrastructure.identity import ContextIdentityProvider

    return ContextIdentityProvider()
