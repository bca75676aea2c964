"""Repository dependency factories.

Application-scoped repositories layered over the store singletons.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings
from src.core.container.infrastructure import (
    get_general_store,
    get_protected_store,
    get_quarantine_store,
)

if TYPE_CHECKING:
    from src.infrastructure.persistence.repositories import (
        QuarantineFailedSyncRepository,
        InMemoryFormTemplateRepository,
        StoreFormInstanceRepository,
    )


@lru_cache()
def get_template_repository() -> "InMemoryFormTemplateRepository":
    """Get the form template repository singleton.

    Templates are authored outside this system and registered with
    ``await get_template_repository().save(template)``.
    """
    from src.infrastructure.persistence.repositories import (
        InMemoryFormTemplateRepository,
    )

    return InMemoryFormTemplateRepository()


@lru_cache()
def get_form_instance_repository() -> "StoreFormInstanceRepository":
    """Get the form instance repository singleton.

    General partition lives in the general store; regulated values are
    hydrated from the protected store on read.
    """
    from src.infrastructure.persistence.repositories import StoreFormInstanceRepository

    return StoreFormInstanceRepository(
        general_store=get_general_store(),
        protected_store=get_protected_store(),
    )


@lru_cache()
def get_failed_sync_repository() -> "QuarantineFailedSyncRepository":
    """Get the failed-sync repository singleton.

    Full records go to the quarantine store; the general store only holds
    the tracking index (``failedSyncs`` by default).
    """
    from src.infrastructure.persistence.repositories import (
        QuarantineFailedSyncRepository,
    )

    return QuarantineFailedSyncRepository(
        general_store=get_general_store(),
        quarantine_store=get_quarantine_store(),
        collection=get_settings().failed_sync_collection,
    )
