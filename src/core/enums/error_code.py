"""Machine-readable error codes.

Codes follow the ENTITY_ACTION_REASON naming convention and travel inside
DomainError subclasses on the Failure side of a Result.
"""

from enum import Enum


class ErrorCode(Enum):
    """Error codes for the compliance pipeline."""

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    EVENT_PAYLOAD_INVALID = "event_payload_invalid"
    DOCUMENT_TYPE_UNSUPPORTED = "document_type_unsupported"
    INVALID_DATE_RANGE = "invalid_date_range"
    FIELD_TOO_LONG = "field_too_long"

    # Resource errors
    FORM_TEMPLATE_NOT_FOUND = "form_template_not_found"
    FORM_INSTANCE_NOT_FOUND = "form_instance_not_found"
    RESOURCE_NOT_FOUND = "resource_not_found"

    # Conflict errors
    FORM_INSTANCE_VERSION_CONFLICT = "form_instance_version_conflict"

    # Lifecycle errors
    FORM_INSTANCE_ILLEGAL_TRANSITION = "form_instance_illegal_transition"
    FAILED_SYNC_ILLEGAL_TRANSITION = "failed_sync_illegal_transition"

    # Authorization errors
    PERMISSION_DENIED = "permission_denied"

    # Synchronization errors
    SYNC_PARTITION_WRITE_FAILED = "sync_partition_write_failed"
    SYNC_PAYLOAD_INVALID = "sync_payload_invalid"
    PROTECTED_STORE_WRITE_FAILED = "protected_store_write_failed"
    GENERAL_STORE_WRITE_FAILED = "general_store_write_failed"

    # Audit trail errors
    AUDIT_RECORD_FAILED = "audit_record_failed"
    AUDIT_QUERY_FAILED = "audit_query_failed"
