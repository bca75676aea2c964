"""Unit tests for FormSubmissionService.

The service is wired to a real InMemoryEventBus with the validation handler
subscribed, so awaiting validation exercises the staged dispatch.
"""

import pytest

from src.application.services import FormSubmissionService
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.events import EventType
from src.infrastructure.events import InMemoryEventBus
from src.infrastructure.events.handlers import ValidationEventHandler
from src.infrastructure.identity import ContextIdentityProvider


@pytest.fixture
def bus(mock_logger) -> InMemoryEventBus:
    bus = InMemoryEventBus(logger=mock_logger)
    bus.subscribe(EventType.FORM_SUBMITTED, ValidationEventHandler(logger=mock_logger))
    return bus


@pytest.fixture
def identity() -> ContextIdentityProvider:
    return ContextIdentityProvider()


@pytest.fixture
def service(bus, identity, mock_logger) -> FormSubmissionService:
    return FormSubmissionService(event_bus=bus, identity_provider=identity, logger=mock_logger)


VALID_PAYLOAD = {
    "formId": "f-1",
    "studyId": "s-1",
    "patientId": "p-1",
    "data": {"patientName": "Jane Doe", "visitCount": 3},
}


@pytest.mark.unit
class TestSubmitForm:
    """Test FormSubmissionService.submit_form."""

    async def test_fire_and_forget(self, service, bus, identity, coordinator):
        """Test the published event carries the actor and the payload."""
        with identity.acting_as(coordinator):
            result = await service.submit_form(VALID_PAYLOAD)

        assert isinstance(result, Success)
        event = result.value.event
        assert event.event_type == "FORM_SUBMITTED"
        assert event.actor_id == "user-coordinator"
        assert event.payload["actorDisplay"] == "Dr. Coordinator"
        assert event.payload["data"] == VALID_PAYLOAD["data"]
        await bus.drain()

    async def test_await_validation_success(self, service):
        """Test a valid payload passes the validation stage."""
        result = await service.submit_form(VALID_PAYLOAD, await_validation=True)

        assert isinstance(result, Success)
        outcome = await result.value.outcome_of("ValidationEventHandler")
        assert outcome.succeeded is True

    async def test_await_validation_failure(self, service):
        """Test a rejected payload is reported as the validator's error."""
        result = await service.submit_form({**VALID_PAYLOAD, "data": {}}, await_validation=True)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EVENT_PAYLOAD_INVALID
        assert result.error.message == "Form data cannot be empty"

    async def test_invalid_payload_without_waiting_is_success(self, service, bus):
        """Test fire-and-forget never surfaces handler failures."""
        result = await service.submit_form({"data": {}})

        assert isinstance(result, Success)
        await bus.drain()

    async def test_explicit_actor_display_kept(self, service):
        """Test a caller-supplied actorDisplay is not overwritten."""
        result = await service.submit_form({**VALID_PAYLOAD, "actorDisplay": "Site 12"})

        assert result.value.event.payload["actorDisplay"] == "Site 12"


@pytest.mark.unit
class TestBatchAndDrafts:
    """Test batch submission and draft saving."""

    async def test_submit_batch(self, service, bus, mock_logger):
        """Test one event per payload, in order."""
        payloads = [{**VALID_PAYLOAD, "formId": f"f-{i}"} for i in range(3)]

        dispatches = await service.submit_batch(payloads)
        await bus.drain()

        assert [d.event.payload["formId"] for d in dispatches] == ["f-0", "f-1", "f-2"]
        assert len({d.event.event_id for d in dispatches}) == 3
        mock_logger.info.assert_called_with("form_batch_submitted", count=3)

    async def test_save_draft(self, service):
        """Test drafts publish FORM_DRAFT_SAVED and skip validation."""
        dispatch = await service.save_draft({"formId": "f-1", "data": {}})

        assert dispatch.event.event_type == "FORM_DRAFT_SAVED"
        assert await dispatch.outcomes() == []
