"""Application service factories.

Application-scoped singletons for the use-case services. Everything they
need comes from the infrastructure and repository factories.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings
from src.core.container.infrastructure import (
    get_audit_writer,
    get_general_store,
    get_identity_provider,
    get_logger,
    get_protected_store,
)
from src.core.container.repositories import (
    get_failed_sync_repository,
    get_form_instance_repository,
    get_template_repository,
)

if TYPE_CHECKING:
    from src.application.services import (
        DualStoreSynchronizer,
        FormInstanceService,
        FormSubmissionService,
    )


@lru_cache()
def get_dual_store_synchronizer() -> "DualStoreSynchronizer":
    """Get the dual-store synchronizer singleton."""
    from src.application.services import DualStoreSynchronizer

    return DualStoreSynchronizer(
        protected_store=get_protected_store(),
        general_store=get_general_store(),
        failed_sync_repository=get_failed_sync_repository(),
        audit_writer=get_audit_writer(),
        logger=get_logger(),
        write_timeout_seconds=get_settings().sync_write_timeout_seconds,
    )


@lru_cache()
def get_form_instance_service() -> "FormInstanceService":
    """Get the form instance lifecycle service singleton.

    Usage:
        service = get_form_instance_service()
        result = await service.create("tpl-vitals", subject_id="subj-001")
    """
    from src.application.services import FormInstanceService
    from src.core.container.events import get_event_bus

    settings = get_settings()
    return FormInstanceService(
        template_repository=get_template_repository(),
        instance_repository=get_form_instance_repository(),
        protected_store=get_protected_store(),
        event_bus=get_event_bus(),
        identity_provider=get_identity_provider(),
        logger=get_logger(),
        signature_min_role_level=settings.signature_min_role_level,
        lock_min_role_level=settings.lock_min_role_level,
    )


@lru_cache()
def get_form_submission_service() -> "FormSubmissionService":
    """Get the form submission service singleton."""
    from src.application.services import FormSubmissionService
    from src.core.container.events import get_event_bus

    return FormSubmissionService(
        event_bus=get_event_bus(),
        identity_provider=get_identity_provider(),
        logger=get_logger(),
    )
