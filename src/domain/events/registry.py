"""Event Registry - single source of truth for event wiring.

Catalogues every known event type with the handler concerns it needs.
Used for:
- Container wiring (automated subscription of validation, audit, sync and
  logging handlers)
- Drift tests (every registered type has an audit mapping, etc.)

Adding a new event type:
1. Add the tag to ``EventType``
2. Add an entry to ``EVENT_REGISTRY`` below
3. Run tests - they report any missing audit mapping or handler
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from src.domain.events.event_types import EventType


class EventCategory(Enum):
    """Event categories for organization and filtering."""

    FORM = "form"
    FORM_INSTANCE = "form_instance"
    PATIENT = "patient"
    STUDY = "study"
    DOCUMENT = "document"
    SYSTEM = "system"


@dataclass(frozen=True, kw_only=True)
class EventMetadata:
    """Wiring metadata for one event type.

    Attributes:
        event_type: Tag the metadata describes.
        category: Grouping used in statistics and docs.
        requires_validation: Structural payload validation before other handlers.
        requires_audit: Audit entry written for every occurrence.
        requires_sync: Dual-store synchronization performed.
        requires_logging: Structured log line emitted.
    """

    event_type: EventType
    category: EventCategory
    requires_validation: bool = False
    requires_audit: bool = True
    requires_sync: bool = False
    requires_logging: bool = True


EVENT_REGISTRY: list[EventMetadata] = [
    # Form submission flow
    EventMetadata(
        event_type=EventType.FORM_SUBMITTED,
        category=EventCategory.FORM,
        requires_validation=True,
        requires_sync=True,
    ),
    EventMetadata(
        event_type=EventType.FORM_DRAFT_SAVED,
        category=EventCategory.FORM,
    ),
    EventMetadata(
        event_type=EventType.FORM_VALIDATION_FAILED,
        category=EventCategory.FORM,
    ),
    # Form instance lifecycle
    EventMetadata(
        event_type=EventType.FORM_INSTANCE_CREATED,
        category=EventCategory.FORM_INSTANCE,
    ),
    EventMetadata(
        event_type=EventType.FORM_INSTANCE_UPDATED,
        category=EventCategory.FORM_INSTANCE,
    ),
    EventMetadata(
        event_type=EventType.FORM_INSTANCE_SUBMITTED,
        category=EventCategory.FORM_INSTANCE,
    ),
    EventMetadata(
        event_type=EventType.FORM_INSTANCE_SIGNED,
        category=EventCategory.FORM_INSTANCE,
    ),
    EventMetadata(
        event_type=EventType.FORM_INSTANCE_LOCKED,
        category=EventCategory.FORM_INSTANCE,
    ),
    # Subjects and studies
    EventMetadata(
        event_type=EventType.PATIENT_CREATED,
        category=EventCategory.PATIENT,
    ),
    EventMetadata(
        event_type=EventType.PATIENT_UPDATED,
        category=EventCategory.PATIENT,
        requires_sync=True,
    ),
    EventMetadata(
        event_type=EventType.STUDY_CREATED,
        category=EventCategory.STUDY,
    ),
    EventMetadata(
        event_type=EventType.STUDY_UPDATED,
        category=EventCategory.STUDY,
        requires_sync=True,
    ),
    # Documents
    EventMetadata(
        event_type=EventType.DOCUMENT_SAVED,
        category=EventCategory.DOCUMENT,
        requires_validation=True,
    ),
    EventMetadata(
        event_type=EventType.DOCUMENT_DELETED,
        category=EventCategory.DOCUMENT,
    ),
    # System
    EventMetadata(
        event_type=EventType.DATA_SYNC_FAILED,
        category=EventCategory.SYSTEM,
    ),
    EventMetadata(
        event_type=EventType.AUDIT_LOG_CREATED,
        category=EventCategory.SYSTEM,
        requires_audit=False,  # auditing the audit trail would recurse
    ),
]


_HANDLER_FIELDS = {
    "validation": "requires_validation",
    "audit": "requires_audit",
    "sync": "requires_sync",
    "logging": "requires_logging",
}


def get_all_event_types() -> list[EventType]:
    """Get all registered event types.

    Returns:
        Event types in registry order.
    """
    return [meta.event_type for meta in EVENT_REGISTRY]


def get_metadata(event_type: EventType | str) -> EventMetadata | None:
    """Look up metadata for a tag, or None for an unregistered tag."""
    for meta in EVENT_REGISTRY:
        if meta.event_type == event_type:
            return meta
    return None


def get_events_requiring(handler_type: str) -> list[EventType]:
    """Get event types requiring a specific handler.

    Args:
        handler_type: "validation", "audit", "sync", or "logging".

    Returns:
        Event types requiring that handler.

    Raises:
        ValueError: If handler_type is invalid.
    """
    if handler_type not in _HANDLER_FIELDS:
        raise ValueError(
            f"Invalid handler_type: {handler_type}. "
            f"Must be one of: {list(_HANDLER_FIELDS.keys())}"
        )

    field_name = _HANDLER_FIELDS[handler_type]
    return [meta.event_type for meta in EVENT_REGISTRY if getattr(meta, field_name)]


def get_statistics() -> dict[str, int | dict[str, int]]:
    """Get registry statistics.

    Returns:
        Dict with counts by category and handler requirement.
    """
    return {
        "total_events": len(EVENT_REGISTRY),
        "by_category": dict(Counter(meta.category.value for meta in EVENT_REGISTRY)),
        "requiring_validation": sum(1 for m in EVENT_REGISTRY if m.requires_validation),
        "requiring_audit": sum(1 for m in EVENT_REGISTRY if m.requires_audit),
        "requiring_sync": sum(1 for m in EVENT_REGISTRY if m.requires_sync),
        "requiring_logging": sum(1 for m in EVENT_REGISTRY if m.requires_logging),
    }
