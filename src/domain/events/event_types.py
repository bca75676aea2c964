"""Catalogue of event type tags known to the compliance pipeline.

The bus routes on plain string tags so new event types can be introduced at
composition time. ``EventType`` is the closed catalogue for this bounded
context; the registry and the handlers key on it.
"""

from enum import Enum


class EventType(str, Enum):
    """Known event type tags."""

    # Form submission flow
    FORM_SUBMITTED = "FORM_SUBMITTED"
    FORM_DRAFT_SAVED = "FORM_DRAFT_SAVED"
    FORM_VALIDATION_FAILED = "FORM_VALIDATION_FAILED"

    # Form instance lifecycle
    FORM_INSTANCE_CREATED = "FORM_INSTANCE_CREATED"
    FORM_INSTANCE_UPDATED = "FORM_INSTANCE_UPDATED"
    FORM_INSTANCE_SUBMITTED = "FORM_INSTANCE_SUBMITTED"
    FORM_INSTANCE_SIGNED = "FORM_INSTANCE_SIGNED"
    FORM_INSTANCE_LOCKED = "FORM_INSTANCE_LOCKED"

    # Subjects and studies
    PATIENT_CREATED = "PATIENT_CREATED"
    PATIENT_UPDATED = "PATIENT_UPDATED"
    STUDY_CREATED = "STUDY_CREATED"
    STUDY_UPDATED = "STUDY_UPDATED"

    # Documents
    DOCUMENT_SAVED = "DOCUMENT_SAVED"
    DOCUMENT_DELETED = "DOCUMENT_DELETED"

    # System
    DATA_SYNC_FAILED = "DATA_SYNC_FAILED"
    AUDIT_LOG_CREATED = "AUDIT_LOG_CREATED"


def event_type_tag(event_type: "EventType | str") -> str:
    """Return the plain string tag for an EventType or raw tag."""
    if isinstance(event_type, EventType):
        return event_type.value
    return event_type
