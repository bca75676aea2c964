"""Form submission service.

Publishes raw form submissions (the payload shape produced by data-entry
screens) onto the event bus. Validation, audit and dual-store
synchronization happen in the subscribed handlers, not here.

Payload shape:
    {"formId": ..., "studyId": ..., "patientId": ..., "templateId": ...?,
     "data": {field id: value}}

By default the call is fire-and-forget. ``await_validation=True`` waits for
the validation stage only and reports its verdict; processing handlers
(audit, sync) keep running in the background either way.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.events import Event, EventType
from src.domain.protocols import (
    EventBusProtocol,
    EventDispatchProtocol,
    IdentityProviderProtocol,
    LoggerProtocol,
)

VALIDATION_HANDLER_NAME = "ValidationEventHandler"


class FormSubmissionService:
    """Publishes FORM_SUBMITTED and FORM_DRAFT_SAVED events."""

    def __init__(
        self,
        *,
        event_bus: EventBusProtocol,
        identity_provider: IdentityProviderProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._event_bus = event_bus
        self._identity = identity_provider
        self._logger = logger

    async def submit_form(
        self,
        payload: Mapping[str, Any],
        *,
        await_validation: bool = False,
    ) -> Result[EventDispatchProtocol, DomainError]:
        """Publish FORM_SUBMITTED.

        Args:
            payload: Submission payload.
            await_validation: Wait for the validation handler and return its
                error as a Failure.

        Returns:
            Success(dispatch) or Failure(ValidationError) when awaiting
            validation and the payload was rejected.
        """
        dispatch = await self._publish(EventType.FORM_SUBMITTED, payload)
        if not await_validation:
            return Success(value=dispatch)

        outcome = await dispatch.outcome_of(VALIDATION_HANDLER_NAME)
        if outcome is not None and outcome.error is not None:
            return Failure(error=outcome.error)
        return Success(value=dispatch)

    async def submit_batch(
        self, payloads: Iterable[Mapping[str, Any]]
    ) -> list[EventDispatchProtocol]:
        """Publish one FORM_SUBMITTED per payload, in order."""
        dispatches = [
            await self._publish(EventType.FORM_SUBMITTED, payload) for payload in payloads
        ]
        self._logger.info("form_batch_submitted", count=len(dispatches))
        return dispatches

    async def save_draft(self, payload: Mapping[str, Any]) -> EventDispatchProtocol:
        """Publish FORM_DRAFT_SAVED."""
        return await self._publish(EventType.FORM_DRAFT_SAVED, payload)

    async def _publish(
        self, event_type: EventType, payload: Mapping[str, Any]
    ) -> EventDispatchProtocol:
        actor = self._identity.current_actor()
        body = dict(payload)
        body.setdefault("actorDisplay", actor.display_name)
        dispatch = await self._event_bus.publish(
            Event(event_type=event_type, actor_id=actor.id, payload=body)
        )
        self._logger.debug(
            "form_event_published",
            event_type=event_type.value,
            event_id=dispatch.event.event_id,
            form_id=body.get("formId"),
        )
        return dispatch
