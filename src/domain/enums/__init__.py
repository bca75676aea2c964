"""Domain enums.

All domain enums live in src/domain/enums/ for discoverability.

Available Enums:
    - AuditAction / AuditSeverity: audit trail classification
    - DataOperation: CRUD operation recorded on data access entries
    - FormInstanceStatus: form instance lifecycle state
    - FailedSyncStatus: failed dual-store write state
    - TemplateStatus: form template publication state
    - FieldType / ConditionOperator: template field typing and conditions
    - HandlerStage: event handler ordering stage
"""

from src.domain.enums.audit_action import AuditAction
from src.domain.enums.audit_severity import AuditSeverity
from src.domain.enums.condition_operator import ConditionOperator
from src.domain.enums.data_operation import DataOperation
from src.domain.enums.failed_sync_status import FailedSyncStatus
from src.domain.enums.field_type import FieldType
from src.domain.enums.form_instance_status import FormInstanceStatus
from src.domain.enums.handler_stage import HandlerStage
from src.domain.enums.template_status import TemplateStatus

__all__ = [
    "AuditAction",
    "AuditSeverity",
    "ConditionOperator",
    "DataOperation",
    "FailedSyncStatus",
    "FieldType",
    "FormInstanceStatus",
    "HandlerStage",
    "TemplateStatus",
]
