"""Container module - Centralized dependency injection.

Re-exports all factory functions from submodules:

    from src.core.container import get_event_bus, get_form_instance_service

The container is organized into modules by concern:
- infrastructure: logging, stores, audit store/writer, identity
- repositories: template, form instance and failed-sync repositories
- services: dual-store synchronizer and application services
- events: event bus and registry-driven handler wiring

Every factory is ``lru_cache``-d; tests reset state with
``factory.cache_clear()``.
"""

# Infrastructure services
from src.core.container.infrastructure import (
    get_audit_database,
    get_audit_store,
    get_audit_writer,
    get_general_store,
    get_identity_provider,
    get_logger,
    get_protected_store,
    get_quarantine_store,
)

# Repositories
from src.core.container.repositories import (
    get_failed_sync_repository,
    get_form_instance_repository,
    get_template_repository,
)

# Application services
from src.core.container.services import (
    get_dual_store_synchronizer,
    get_form_instance_service,
    get_form_submission_service,
)

# Event bus
from src.core.container.events import get_event_bus

__all__ = [
    # Infrastructure
    "get_logger",
    "get_protected_store",
    "get_general_store",
    "get_quarantine_store",
    "get_audit_database",
    "get_audit_store",
    "get_audit_writer",
    "get_identity_provider",
    # Repositories
    "get_template_repository",
    "get_form_instance_repository",
    "get_failed_sync_repository",
    # Services
    "get_dual_store_synchronizer",
    "get_form_instance_service",
    "get_form_submission_service",
    # Events
    "get_event_bus",
]
