"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

Usage:
    from src.domain.protocols import EventBusProtocol, ProtectedStoreProtocol
"""

# Service protocols
from src.domain.protocols.audit_store_protocol import AuditStoreProtocol
from src.domain.protocols.audit_writer_protocol import AuditWriterProtocol
from src.domain.protocols.event_bus_protocol import (
    EventBusProtocol,
    EventDispatchProtocol,
    EventStreamProtocol,
    HandlerOutcomeProtocol,
)
from src.domain.protocols.event_handler_protocol import EventHandlerProtocol
from src.domain.protocols.field_classifier_protocol import FieldClassifierProtocol
from src.domain.protocols.general_store_protocol import GeneralStoreProtocol
from src.domain.protocols.identity_provider_protocol import IdentityProviderProtocol
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.protected_store_protocol import ProtectedStoreProtocol
from src.domain.protocols.quarantine_store_protocol import QuarantineStoreProtocol

# Repository protocols
from src.domain.protocols.failed_sync_repository import FailedSyncRepository
from src.domain.protocols.form_instance_repository import FormInstanceRepository
from src.domain.protocols.form_template_repository import FormTemplateRepository

__all__ = [
    # Service protocols
    "AuditStoreProtocol",
    "AuditWriterProtocol",
    "EventBusProtocol",
    "EventDispatchProtocol",
    "EventStreamProtocol",
    "HandlerOutcomeProtocol",
    "EventHandlerProtocol",
    "FieldClassifierProtocol",
    "GeneralStoreProtocol",
    "IdentityProviderProtocol",
    "LoggerProtocol",
    "ProtectedStoreProtocol",
    "QuarantineStoreProtocol",
    # Repository protocols
    "FailedSyncRepository",
    "FormInstanceRepository",
    "FormTemplateRepository",
]
