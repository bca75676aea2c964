"""Event handlers subscribed to the event bus.

Handlers:
    - ValidationEventHandler: structural payload validation (runs first)
    - AuditEventHandler: immutable audit entries via the audit log writer
    - SynchronizationEventHandler: dual-store partition writes
    - LoggingEventHandler: structured log line per event

All handlers return Result and are isolated by the bus: one handler's
failure never prevents another from running.
"""

from src.infrastructure.events.handlers.audit_event_handler import (
    AUDIT_MAPPINGS,
    AuditEventHandler,
    AuditMapping,
)
from src.infrastructure.events.handlers.logging_event_handler import LoggingEventHandler
from src.infrastructure.events.handlers.synchronization_event_handler import (
    SYNC_TARGETS,
    SynchronizationEventHandler,
    SyncTarget,
)
from src.infrastructure.events.handlers.validation_event_handler import (
    DOCUMENT_TYPES,
    ValidationEventHandler,
)

__all__ = [
    "AUDIT_MAPPINGS",
    "AuditEventHandler",
    "AuditMapping",
    "DOCUMENT_TYPES",
    "LoggingEventHandler",
    "SYNC_TARGETS",
    "SyncTarget",
    "SynchronizationEventHandler",
    "ValidationEventHandler",
]
