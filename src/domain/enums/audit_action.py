"""Audit action types for compliance tracking.

Every state-changing action in the pipeline maps to one of these values so
that the audit trail can be filtered by what happened regardless of which
handler or service wrote the entry.

Categories:
    - Form: FORM_* submission and draft actions
    - Form instance: FORM_INSTANCE_* lifecycle actions
    - Subject/study: PATIENT_*, STUDY_* record changes
    - Document: DOCUMENT_* saves and deletions
    - Data access: DATA_* reads, writes, exports
    - System: SYNC_FAILED and other operational actions

Usage:
    from src.domain.enums import AuditAction

    entry = AuditLogEntry.create(
        action=AuditAction.FORM_INSTANCE_SIGNED,
        resource_type="form_instance",
        ...
    )
"""

from enum import Enum


class AuditAction(str, Enum):
    """Audit action types.

    String Enum: values are snake_case strings stored as-is by audit stores.
    """

    # Form submission flow
    FORM_SUBMITTED = "form_submitted"
    FORM_DRAFT_SAVED = "form_draft_saved"
    FORM_VALIDATION_FAILED = "form_validation_failed"

    # Form instance lifecycle
    FORM_INSTANCE_CREATED = "form_instance_created"
    FORM_INSTANCE_UPDATED = "form_instance_updated"
    FORM_INSTANCE_SUBMITTED = "form_instance_submitted"
    FORM_INSTANCE_SIGNED = "form_instance_signed"
    FORM_INSTANCE_LOCKED = "form_instance_locked"

    # Subjects and studies
    PATIENT_CREATED = "patient_created"
    PATIENT_UPDATED = "patient_updated"
    STUDY_CREATED = "study_created"
    STUDY_UPDATED = "study_updated"

    # Documents
    DOCUMENT_SAVED = "document_saved"
    DOCUMENT_DELETED = "document_deleted"

    # Data access
    DATA_CREATED = "data_created"
    DATA_VIEWED = "data_viewed"
    DATA_UPDATED = "data_updated"
    DATA_DELETED = "data_deleted"
    DATA_EXPORTED = "data_exported"

    # System
    SYNC_FAILED = "sync_failed"
