"""Application services (use-case orchestration over domain ports)."""

from src.application.services.dual_store_synchronizer import (
    GENERAL_PARTITION,
    PROTECTED_PARTITION,
    DualStoreSynchronizer,
    SyncPlan,
    SyncReceipt,
)
from src.application.services.form_instance_service import FormInstanceService
from src.application.services.form_submission_service import (
    VALIDATION_HANDLER_NAME,
    FormSubmissionService,
)

__all__ = [
    "GENERAL_PARTITION",
    "PROTECTED_PARTITION",
    "DualStoreSynchronizer",
    "SyncPlan",
    "SyncReceipt",
    "FormInstanceService",
    "VALIDATION_HANDLER_NAME",
    "FormSubmissionService",
]
