"""Audit event handler for domain events.

Maps each mutating event to an AuditAction and submits an immutable audit
entry to the audit log writer. The handler never fails the publisher: entry
construction problems are logged and swallowed, and the writer itself only
enqueues.

Event -> Audit Action Mapping (resource type, resource id payload key):
    - FORM_SUBMITTED          -> FORM_SUBMITTED (FormSubmission, formId)
    - FORM_DRAFT_SAVED        -> FORM_DRAFT_SAVED (FormSubmission, formId)
    - FORM_VALIDATION_FAILED  -> FORM_VALIDATION_FAILED (FormInstance, formInstanceId) WARNING
    - FORM_INSTANCE_*         -> FORM_INSTANCE_* (FormInstance, formInstanceId)
    - PATIENT_CREATED/UPDATED -> PATIENT_* (Patient, patientId)
    - STUDY_CREATED/UPDATED   -> STUDY_* (Study, studyId)
    - DOCUMENT_SAVED          -> DOCUMENT_SAVED (payload documentType, documentId)
    - DOCUMENT_DELETED        -> DOCUMENT_DELETED (payload documentType, documentId) WARNING
    - DATA_SYNC_FAILED        -> SYNC_FAILED (FailedSync, failedSyncId) ERROR

Audit Entry Structure:
    - details: short summary; never contains payload data values
    - metadata: event id/type plus allow-listed opaque identifiers and counts

Events are not deduplicated: publishing the same event twice yields two
independent entries.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from src.core.errors import DomainError
from src.core.result import Result, Success
from src.domain.entities import AuditLogEntry
from src.domain.enums import AuditAction, AuditSeverity, HandlerStage
from src.domain.events import Event, EventType
from src.domain.protocols import AuditWriterProtocol, LoggerProtocol
from src.domain.value_objects import SYSTEM_ACTOR

# Payload keys safe to copy into audit metadata (ids, flags and counts only).
METADATA_KEYS = (
    "formId",
    "formInstanceId",
    "templateId",
    "templateVersion",
    "studyId",
    "patientId",
    "documentId",
    "documentType",
    "failedSyncId",
    "status",
    "version",
    "meaning",
    "containsRegulatedData",
    "completionPercentage",
    "changedFieldIds",
    "errorCount",
    "fieldIds",
    "failedPartitions",
)


@dataclass(frozen=True, slots=True, kw_only=True)
class AuditMapping:
    """How one event type becomes an audit entry."""

    action: AuditAction
    resource_type: str
    resource_id_key: str | None
    summary: str
    severity: AuditSeverity = AuditSeverity.INFO
    resource_type_key: str | None = None


AUDIT_MAPPINGS: dict[str, AuditMapping] = {
    EventType.FORM_SUBMITTED.value: AuditMapping(
        action=AuditAction.FORM_SUBMITTED,
        resource_type="FormSubmission",
        resource_id_key="formId",
        summary="Form submitted",
    ),
    EventType.FORM_DRAFT_SAVED.value: AuditMapping(
        action=AuditAction.FORM_DRAFT_SAVED,
        resource_type="FormSubmission",
        resource_id_key="formId",
        summary="Form draft saved",
    ),
    EventType.FORM_VALIDATION_FAILED.value: AuditMapping(
        action=AuditAction.FORM_VALIDATION_FAILED,
        resource_type="FormInstance",
        resource_id_key="formInstanceId",
        summary="Form validation failed",
        severity=AuditSeverity.WARNING,
    ),
    EventType.FORM_INSTANCE_CREATED.value: AuditMapping(
        action=AuditAction.FORM_INSTANCE_CREATED,
        resource_type="FormInstance",
        resource_id_key="formInstanceId",
        summary="Form instance created",
    ),
    EventType.FORM_INSTANCE_UPDATED.value: AuditMapping(
        action=AuditAction.FORM_INSTANCE_UPDATED,
        resource_type="FormInstance",
        resource_id_key="formInstanceId",
        summary="Form instance updated",
    ),
    EventType.FORM_INSTANCE_SUBMITTED.value: AuditMapping(
        action=AuditAction.FORM_INSTANCE_SUBMITTED,
        resource_type="FormInstance",
        resource_id_key="formInstanceId",
        summary="Form instance submitted",
    ),
    EventType.FORM_INSTANCE_SIGNED.value: AuditMapping(
        action=AuditAction.FORM_INSTANCE_SIGNED,
        resource_type="FormInstance",
        resource_id_key="formInstanceId",
        summary="Form instance signed",
    ),
    EventType.FORM_INSTANCE_LOCKED.value: AuditMapping(
        action=AuditAction.FORM_INSTANCE_LOCKED,
        resource_type="FormInstance",
        resource_id_key="formInstanceId",
        summary="Form instance locked",
    ),
    EventType.PATIENT_CREATED.value: AuditMapping(
        action=AuditAction.PATIENT_CREATED,
        resource_type="Patient",
        resource_id_key="patientId",
        summary="Patient created",
    ),
    EventType.PATIENT_UPDATED.value: AuditMapping(
        action=AuditAction.PATIENT_UPDATED,
        resource_type="Patient",
        resource_id_key="patientId",
        summary="Patient updated",
    ),
    EventType.STUDY_CREATED.value: AuditMapping(
        action=AuditAction.STUDY_CREATED,
        resource_type="Study",
        resource_id_key="studyId",
        summary="Study created",
    ),
    EventType.STUDY_UPDATED.value: AuditMapping(
        action=AuditAction.STUDY_UPDATED,
        resource_type="Study",
        resource_id_key="studyId",
        summary="Study updated",
    ),
    EventType.DOCUMENT_SAVED.value: AuditMapping(
        action=AuditAction.DOCUMENT_SAVED,
        resource_type="Document",
        resource_type_key="documentType",
        resource_id_key="documentId",
        summary="Document saved",
    ),
    EventType.DOCUMENT_DELETED.value: AuditMapping(
        action=AuditAction.DOCUMENT_DELETED,
        resource_type="Document",
        resource_type_key="documentType",
        resource_id_key="documentId",
        summary="Document deleted",
        severity=AuditSeverity.WARNING,
    ),
    EventType.DATA_SYNC_FAILED.value: AuditMapping(
        action=AuditAction.SYNC_FAILED,
        resource_type="FailedSync",
        resource_id_key="failedSyncId",
        summary="Data synchronization failed",
        severity=AuditSeverity.ERROR,
    ),
}


class AuditEventHandler:
    """Event handler for audit trail recording.

    Attributes:
        _writer: Non-blocking audit writer (from container).
        _logger: Logger for swallowed failures.
    """

    name = "AuditEventHandler"
    stage = HandlerStage.PROCESSING

    def __init__(
        self,
        writer: AuditWriterProtocol,
        logger: LoggerProtocol,
        mappings: Mapping[str, AuditMapping] | None = None,
    ) -> None:
        self._writer = writer
        self._logger = logger
        self._mappings = dict(mappings if mappings is not None else AUDIT_MAPPINGS)
        self.handled_event_types = frozenset(self._mappings)

    def can_handle(self, event: Event) -> bool:
        return event.event_type in self.handled_event_types

    async def handle(self, event: Event) -> Result[None, DomainError]:
        """Submit an audit entry for ``event``. Always returns Success."""
        try:
            entry = self.build_entry(event)
            if entry is not None:
                self._writer.submit(entry)
        except Exception as e:
            self._logger.error(
                "audit_event_handler_failed",
                error=e,
                event_type=event.event_type,
                event_id=str(event.event_id),
            )
        return Success(value=None)

    def build_entry(self, event: Event) -> AuditLogEntry | None:
        """Audit entry for ``event``, or None for unmapped event types."""
        mapping = self._mappings.get(event.event_type)
        if mapping is None:
            return None

        payload = event.payload
        resource_type = mapping.resource_type
        if mapping.resource_type_key and payload.get(mapping.resource_type_key):
            resource_type = str(payload[mapping.resource_type_key])
        resource_id = (
            payload.get(mapping.resource_id_key) if mapping.resource_id_key else None
        )

        details = mapping.summary
        if resource_id:
            details = f"{details}: {resource_id}"
        if event.matches(EventType.FORM_INSTANCE_SIGNED) and payload.get("meaning"):
            details = f"{details} ({payload['meaning']})"

        return AuditLogEntry.create(
            actor_id=event.actor_id or SYSTEM_ACTOR.id,
            actor_display=str(
                payload.get("actorDisplay")
                or event.actor_id
                or SYSTEM_ACTOR.display_name
            ),
            action=mapping.action,
            resource_type=resource_type,
            resource_id=str(resource_id) if resource_id else None,
            details=details,
            severity=mapping.severity,
            timestamp=event.occurred_at,
            metadata=self._metadata(event),
        )

    @staticmethod
    def _metadata(event: Event) -> dict[str, Any]:
        metadata: dict[str, Any] = {
            "eventId": str(event.event_id),
            "eventType": event.event_type,
        }
        for key in METADATA_KEYS:
            if key in event.payload:
                value = event.payload[key]
                metadata[key] = list(value) if isinstance(value, (list, tuple)) else value
        return metadata
