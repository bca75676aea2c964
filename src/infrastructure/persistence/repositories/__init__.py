"""Repository implementations.

Adapters implementing the domain repository protocols on top of the store
ports (general/protected) or in-process registries.
"""

from src.infrastructure.persistence.repositories.failed_sync_repository import (
    FAILED_SYNCS_COLLECTION,
    QuarantineFailedSyncRepository,
)
from src.infrastructure.persistence.repositories.form_instance_repository import (
    FORM_INSTANCES_COLLECTION,
    StoreFormInstanceRepository,
)
from src.infrastructure.persistence.repositories.form_template_repository import (
    InMemoryFormTemplateRepository,
)

__all__ = [
    "FAILED_SYNCS_COLLECTION",
    "FORM_INSTANCES_COLLECTION",
    "QuarantineFailedSyncRepository",
    "InMemoryFormTemplateRepository",
    "StoreFormInstanceRepository",
]
