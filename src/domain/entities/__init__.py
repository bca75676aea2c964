"""Domain entities.

Usage:
    from src.domain.entities import FormInstance, FormTemplate, AuditLogEntry
"""

from src.domain.entities.audit_log_entry import AuditLogEntry
from src.domain.entities.failed_sync_record import FailedSyncRecord
from src.domain.entities.form_instance import (
    FormInstance,
    compute_completion_percentage,
)
from src.domain.entities.form_template import (
    FieldCondition,
    FormField,
    FormTemplate,
    ValidationRule,
)

__all__ = [
    "AuditLogEntry",
    "FailedSyncRecord",
    "FieldCondition",
    "FormField",
    "FormInstance",
    "FormTemplate",
    "ValidationRule",
    "compute_completion_percentage",
]
