"""Unit tests for InMemoryEventBus.

Tests cover:
- Subscription (idempotent subscribe, unsubscribe, handlers_for)
- Fire-and-forget publishing and stamping
- Fail-open handler isolation (exceptions and Failure results)
- Staged dispatch (validation before processing) and outcome lookup
- Event streams (filtered and unfiltered) and drain
"""

import asyncio

import pytest

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Success
from src.domain.enums import HandlerStage
from src.domain.events import Event, EventType
from src.infrastructure.events.in_memory_event_bus import InMemoryEventBus


class RecordingHandler:
    """Handler that records calls and returns a configurable result."""

    def __init__(
        self,
        name: str,
        *,
        stage: HandlerStage = HandlerStage.PROCESSING,
        log: list[str] | None = None,
        result=None,
        raises: Exception | None = None,
        accepts: bool = True,
        delay: float = 0,
    ):
        self.name = name
        self.stage = stage
        self.log = log if log is not None else []
        self._result = result if result is not None else Success(value=None)
        self._raises = raises
        self._accepts = accepts
        self._delay = delay
        self.events: list[Event] = []

    def can_handle(self, event: Event) -> bool:
        return self._accepts

    async def handle(self, event: Event):
        if self._delay:
            await asyncio.sleep(self._delay)
        self.events.append(event)
        self.log.append(self.name)
        if self._raises:
            raise self._raises
        return self._result


@pytest.fixture
def bus(mock_logger) -> InMemoryEventBus:
    return InMemoryEventBus(logger=mock_logger)


def _submitted() -> Event:
    return Event(
        event_type=EventType.FORM_SUBMITTED,
        actor_id="user-1",
        payload={"formId": "f-1", "formData": {"visitCount": 1}},
    )


@pytest.mark.unit
class TestSubscription:
    """Test handler registry operations."""

    def test_subscribe_same_handler_twice_is_noop(self, bus):
        """Test duplicate subscriptions are ignored."""
        handler = RecordingHandler("h")

        bus.subscribe(EventType.FORM_SUBMITTED, handler)
        bus.subscribe("FORM_SUBMITTED", handler)

        assert bus.handlers_for(EventType.FORM_SUBMITTED) == (handler,)

    def test_unsubscribe(self, bus):
        """Test unsubscribe removes only the given handler."""
        first, second = RecordingHandler("a"), RecordingHandler("b")
        bus.subscribe(EventType.FORM_SUBMITTED, first)
        bus.subscribe(EventType.FORM_SUBMITTED, second)

        bus.unsubscribe(EventType.FORM_SUBMITTED, first)
        bus.unsubscribe(EventType.FORM_SUBMITTED, RecordingHandler("unknown"))

        assert bus.handlers_for(EventType.FORM_SUBMITTED) == (second,)

    def test_unsubscribe_last_handler_clears_type(self, bus):
        """Test the type has no handlers once the last one is removed."""
        handler = RecordingHandler("a")
        bus.subscribe(EventType.PATIENT_UPDATED, handler)

        bus.unsubscribe(EventType.PATIENT_UPDATED, handler)

        assert bus.handlers_for(EventType.PATIENT_UPDATED) == ()

    def test_unknown_type_tags_accepted(self, bus):
        """Test arbitrary tags can be subscribed and looked up."""
        handler = RecordingHandler("a")

        bus.subscribe("CUSTOM_EVENT", handler)

        assert bus.handlers_for("CUSTOM_EVENT") == (handler,)


@pytest.mark.unit
class TestPublish:
    """Test publishing and fail-open semantics."""

    async def test_publish_without_handlers_returns_done_dispatch(self, bus):
        """Test an event with no subscribers is a no-op."""
        dispatch = await bus.publish(_submitted())

        assert dispatch.done() is True
        assert await dispatch.outcomes() == []
        assert dispatch.event.is_stamped

    async def test_publish_stamps_event_and_delivers(self, bus):
        """Test handlers receive the stamped event."""
        handler = RecordingHandler("h")
        bus.subscribe(EventType.FORM_SUBMITTED, handler)

        dispatch = await bus.publish(_submitted())
        outcomes = await dispatch.outcomes()

        assert handler.events[0].event_id == dispatch.event.event_id
        assert handler.events[0].occurred_at is not None
        assert outcomes[0].succeeded is True

    async def test_publish_does_not_wait_for_handlers(self, bus):
        """Test publish returns before slow handlers finish."""
        handler = RecordingHandler("slow", delay=0.05)
        bus.subscribe(EventType.FORM_SUBMITTED, handler)

        dispatch = await bus.publish(_submitted())

        assert dispatch.done() is False
        assert handler.events == []
        await bus.drain()
        assert len(handler.events) == 1
        assert bus.in_flight_count == 0

    async def test_raising_handler_does_not_stop_others(self, bus, mock_logger):
        """Test an exception in one handler is isolated and logged."""
        failing = RecordingHandler("failing", raises=RuntimeError("boom"))
        healthy = RecordingHandler("healthy")
        bus.subscribe(EventType.FORM_SUBMITTED, failing)
        bus.subscribe(EventType.FORM_SUBMITTED, healthy)

        dispatch = await bus.publish(_submitted())
        outcomes = {o.handler_name: o for o in await dispatch.outcomes()}

        assert isinstance(outcomes["failing"].exception, RuntimeError)
        assert outcomes["failing"].succeeded is False
        assert outcomes["healthy"].succeeded is True
        assert mock_logger.warning.call_args.args[0] == "event_handler_failed"
        assert mock_logger.warning.call_args.kwargs["handler_name"] == "failing"

    async def test_failure_result_logged_and_reported(self, bus, mock_logger):
        """Test a Failure result is surfaced on the outcome."""
        error = ValidationError(code=ErrorCode.VALIDATION_FAILED, message="bad")
        bus.subscribe(EventType.FORM_SUBMITTED, RecordingHandler("v", result=Failure(error=error)))

        dispatch = await bus.publish(_submitted())
        (outcome,) = await dispatch.outcomes()

        assert outcome.error is error
        assert mock_logger.warning.call_args.kwargs["error_code"] == "validation_failed"

    async def test_declining_handler_is_skipped(self, bus):
        """Test can_handle=False marks the outcome skipped without calling handle."""
        handler = RecordingHandler("picky", accepts=False)
        bus.subscribe(EventType.FORM_SUBMITTED, handler)

        dispatch = await bus.publish(_submitted())
        (outcome,) = await dispatch.outcomes()

        assert outcome.skipped is True
        assert outcome.succeeded is True
        assert handler.events == []

    async def test_handlers_see_immutable_payload(self, bus):
        """Test handlers cannot mutate the shared payload."""

        class MutatingHandler(RecordingHandler):
            async def handle(self, event):
                event.payload["formId"] = "changed"

        bus.subscribe(EventType.FORM_SUBMITTED, MutatingHandler("mutator"))
        reader = RecordingHandler("reader")
        bus.subscribe(EventType.FORM_SUBMITTED, reader)

        dispatch = await bus.publish(_submitted())
        outcomes = {o.handler_name: o for o in await dispatch.outcomes()}

        assert isinstance(outcomes["mutator"].exception, TypeError)
        assert reader.events[0].payload["formId"] == "f-1"


@pytest.mark.unit
class TestStagedDispatch:
    """Test the validation stage runs before processing handlers."""

    async def test_validation_stage_runs_first(self, bus):
        """Test processing handlers start only after validation completes."""
        log: list[str] = []
        # Subscribed first so ordering cannot come from registration order.
        bus.subscribe(EventType.FORM_SUBMITTED, RecordingHandler("sync", log=log))
        bus.subscribe(
            EventType.FORM_SUBMITTED,
            RecordingHandler("validation", stage=HandlerStage.VALIDATION, log=log, delay=0.01),
        )

        dispatch = await bus.publish(_submitted())
        await dispatch.outcomes()

        assert log == ["validation", "sync"]

    async def test_outcome_of_validation_handler(self, bus):
        """Test a caller can await the validation verdict by handler name."""
        error = ValidationError(code=ErrorCode.VALIDATION_FAILED, message="Form data cannot be empty")
        bus.subscribe(
            EventType.FORM_SUBMITTED,
            RecordingHandler(
                "ValidationEventHandler",
                stage=HandlerStage.VALIDATION,
                result=Failure(error=error),
            ),
        )
        bus.subscribe(EventType.FORM_SUBMITTED, RecordingHandler("audit"))

        dispatch = await bus.publish(_submitted())
        outcome = await dispatch.outcome_of("ValidationEventHandler")

        assert outcome is not None
        assert outcome.error.message == "Form data cannot be empty"
        assert await dispatch.outcome_of("missing") is None

    async def test_failed_validation_does_not_block_processing(self, bus):
        """Test processing handlers still run after a validation failure."""
        error = ValidationError(code=ErrorCode.VALIDATION_FAILED, message="bad")
        audit = RecordingHandler("audit")
        bus.subscribe(
            EventType.FORM_SUBMITTED,
            RecordingHandler("v", stage=HandlerStage.VALIDATION, result=Failure(error=error)),
        )
        bus.subscribe(EventType.FORM_SUBMITTED, audit)

        dispatch = await bus.publish(_submitted())
        await dispatch.outcomes()

        assert len(audit.events) == 1

    async def test_validation_outcomes_without_validation_handlers(self, bus):
        """Test validation_outcomes is empty when only processing handlers exist."""
        bus.subscribe(EventType.FORM_SUBMITTED, RecordingHandler("audit"))

        dispatch = await bus.publish(_submitted())

        assert await dispatch.validation_outcomes() == []
        await bus.drain()


@pytest.mark.unit
class TestEventStreams:
    """Test reactive event streams."""

    async def test_filtered_stream_receives_matching_events(self, bus):
        """Test a typed stream yields only its event type."""
        stream = bus.get_event_stream(EventType.PATIENT_UPDATED)
        iterator = aiter(stream)

        await bus.publish(Event(event_type=EventType.STUDY_UPDATED))
        await bus.publish(Event(event_type=EventType.PATIENT_UPDATED, actor_id="u"))
        received = await asyncio.wait_for(anext(iterator), timeout=1)

        assert received.event_type == "PATIENT_UPDATED"
        assert received.is_stamped
        await stream.aclose()

    async def test_unfiltered_stream_receives_everything(self, bus):
        """Test a stream without a filter yields every event in order."""
        stream = bus.get_event_stream()
        iterator = aiter(stream)

        await bus.publish(Event(event_type=EventType.STUDY_UPDATED))
        await bus.publish(Event(event_type="CUSTOM_EVENT"))

        first = await asyncio.wait_for(anext(iterator), timeout=1)
        second = await asyncio.wait_for(anext(iterator), timeout=1)
        assert [first.event_type, second.event_type] == ["STUDY_UPDATED", "CUSTOM_EVENT"]
        await stream.aclose()

    async def test_aclose_ends_iteration(self, bus):
        """Test closing the stream stops its iterators."""
        stream = bus.get_event_stream()
        iterator = aiter(stream)

        await stream.aclose()

        with pytest.raises(StopAsyncIteration):
            await anext(iterator)

    async def test_stream_attached_late_misses_earlier_events(self, bus):
        """Test streams only see events published after they attach."""
        await bus.publish(Event(event_type=EventType.STUDY_UPDATED))
        stream = bus.get_event_stream()
        iterator = aiter(stream)
        await bus.publish(Event(event_type=EventType.PATIENT_UPDATED))

        received = await asyncio.wait_for(anext(iterator), timeout=1)

        assert received.event_type == "PATIENT_UPDATED"
        await stream.aclose()
