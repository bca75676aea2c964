"""Synchronization event handler.

Splits the data of FORM_SUBMITTED, PATIENT_UPDATED and STUDY_UPDATED events
into regulated and general partitions and hands both writes to the
DualStoreSynchronizer.

Sync Targets:
    - FORM_SUBMITTED  -> Observation   + formSubmissions (subject: patientId)
    - PATIENT_UPDATED -> Patient       + patients        (subject: patientId)
    - STUDY_UPDATED   -> ResearchStudy + studies         (subject: studyId)

Classification:
    Template-driven when the payload names a known ``templateId``;
    otherwise the conservative key-name heuristic.

The general document references the subject only by opaque id and never
carries a regulated value.

Both writes are keyed by the event id (general document id, protected
``eventId`` identifier), so replaying an event after a partial failure
rewrites the same two records.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from src.application.services import DualStoreSynchronizer, SyncPlan
from src.core.enums import ErrorCode
from src.core.errors import DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.enums import HandlerStage
from src.domain.events import Event, EventType
from src.domain.protocols import (
    FieldClassifierProtocol,
    FormTemplateRepository,
    LoggerProtocol,
)
from src.domain.services import (
    HeuristicClassifier,
    Partition,
    TemplateClassifier,
    partition,
    record_to_observation,
    record_to_resource,
)

# Opaque identifiers copied onto the general document when present.
LINK_KEYS = ("formId", "formInstanceId", "templateId", "studyId")


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncTarget:
    """Where one event type's partitions are written."""

    resource_type: str
    collection: str
    subject_key: str


SYNC_TARGETS: dict[str, SyncTarget] = {
    EventType.FORM_SUBMITTED.value: SyncTarget(
        resource_type="Observation",
        collection="formSubmissions",
        subject_key="patientId",
    ),
    EventType.PATIENT_UPDATED.value: SyncTarget(
        resource_type="Patient",
        collection="patients",
        subject_key="patientId",
    ),
    EventType.STUDY_UPDATED.value: SyncTarget(
        resource_type="ResearchStudy",
        collection="studies",
        subject_key="studyId",
    ),
}


class SynchronizationEventHandler:
    """Dual-store synchronization for regulated events."""

    name = "SynchronizationEventHandler"
    stage = HandlerStage.PROCESSING
    handled_event_types = frozenset(SYNC_TARGETS)

    def __init__(
        self,
        synchronizer: DualStoreSynchronizer,
        template_repository: FormTemplateRepository,
        logger: LoggerProtocol,
    ) -> None:
        self._synchronizer = synchronizer
        self._template_repository = template_repository
        self._logger = logger

    def can_handle(self, event: Event) -> bool:
        return event.event_type in self.handled_event_types

    async def handle(self, event: Event) -> Result[None, DomainError]:
        """Partition the event data and synchronize both partitions.

        Returns:
            Success(None), Failure(ValidationError) for an unusable payload,
            or Failure(SyncError) when a partition write failed.
        """
        target = SYNC_TARGETS.get(event.event_type)
        if target is None:
            return Success(value=None)

        # Writes are keyed by event id; the bus stamps, direct callers may not.
        event = event.stamped()

        payload = event.payload
        data = payload.get("data")
        subject = payload.get(target.subject_key)
        if not isinstance(data, Mapping) or not subject:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.SYNC_PAYLOAD_INVALID,
                    message=(
                        f"{event.event_type} payload needs a data object and "
                        f"{target.subject_key}"
                    ),
                    field="data" if not isinstance(data, Mapping) else target.subject_key,
                )
            )

        classifier = await self._classifier_for(payload)
        parts = partition(data, classifier)
        plan = self.build_plan(event, target, parts, subject=str(subject))

        self._logger.debug(
            "dual_store_sync_started",
            event_id=str(event.event_id),
            event_type=event.event_type,
            regulated_field_count=len(parts.regulated),
            general_field_count=len(parts.general),
        )
        result = await self._synchronizer.synchronize(plan)
        if isinstance(result, Failure):
            return result
        return Success(value=None)

    def build_plan(
        self,
        event: Event,
        target: SyncTarget,
        parts: Partition,
        *,
        subject: str,
    ) -> SyncPlan:
        """Protected resource and general document for one partitioned event."""
        payload = event.payload
        protected_resource: dict[str, Any] | None = None
        if parts.has_regulated:
            if target.resource_type == "Observation":
                identifiers = {
                    key: str(payload[key]) for key in LINK_KEYS if payload.get(key)
                }
                identifiers["eventId"] = str(event.event_id)
                protected_resource = record_to_observation(
                    parts.regulated,
                    subject_reference=subject,
                    code_text=str(payload.get("formName") or "Clinical form data"),
                    effective=event.occurred_at,
                    identifiers=identifiers,
                )
            else:
                protected_resource = record_to_resource(
                    target.resource_type,
                    parts.regulated,
                    subject_reference=subject,
                    identifiers={"eventId": str(event.event_id)},
                )

        general_document: dict[str, Any] | None = None
        if parts.has_general:
            general_document = {
                key: payload[key] for key in LINK_KEYS if payload.get(key)
            }
            # Keyed by event so a redrive overwrites instead of appending.
            general_document["id"] = str(event.event_id)
            general_document.update(
                {
                    "subjectRef": subject,
                    "data": dict(parts.general),
                    "eventId": str(event.event_id),
                    "eventType": event.event_type,
                    "syncedAt": datetime.now(UTC).isoformat(),
                    "actorId": event.actor_id,
                    "syncStatus": "synced",
                }
            )

        return SyncPlan(
            event=event,
            protected_resource=protected_resource,
            general_collection=target.collection,
            general_document=general_document,
        )

    async def _classifier_for(self, payload: Mapping[str, Any]) -> FieldClassifierProtocol:
        template_id = payload.get("templateId")
        if template_id:
            template = await self._template_repository.find_by_id(str(template_id))
            if template is not None:
                return TemplateClassifier.for_template(template)
            self._logger.warning(
                "sync_template_not_found",
                template_id=str(template_id),
            )
        return HeuristicClassifier()
