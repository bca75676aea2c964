"""In-memory event bus implementation.

Implements EventBusProtocol with an in-process handler registry. Suitable
for single-process deployments; a broker-backed adapter can replace it
without touching publishers or handlers.

Architecture:
    - Implements EventBusProtocol (hexagonal adapter pattern)
    - Copy-on-write registry (event type tag -> tuple of handlers)
    - Fire-and-forget dispatch: ``publish`` schedules a supervisor task and
      returns an ``EventDispatch`` handle without waiting for handlers
    - Two delivery stages: VALIDATION handlers first, then PROCESSING
      handlers, each stage run concurrently
    - Fail-open: handler failures are logged, never raised to the publisher
    - Reactive streams: ``get_event_stream`` yields every published event

Usage:
    >>> bus = InMemoryEventBus(logger=get_logger())
    >>> bus.subscribe(EventType.FORM_SUBMITTED, validation_handler)
    >>> bus.subscribe(EventType.FORM_SUBMITTED, sync_handler)
    >>> dispatch = await bus.publish(Event(event_type=EventType.FORM_SUBMITTED, ...))
    >>> # Optional: an orchestrating caller may wait for a specific handler
    >>> outcome = await dispatch.outcome_of("ValidationEventHandler")
"""

import asyncio
import threading
from collections.abc import AsyncIterator
from dataclasses import dataclass

from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.enums import HandlerStage
from src.domain.events import Event, EventType, event_type_tag
from src.domain.protocols.event_handler_protocol import EventHandlerProtocol
from src.domain.protocols.logger_protocol import LoggerProtocol

_STREAM_CLOSED = object()


def _handler_name(handler: EventHandlerProtocol) -> str:
    return getattr(handler, "name", None) or type(handler).__name__


def _handler_stage(handler: EventHandlerProtocol) -> HandlerStage:
    return getattr(handler, "stage", HandlerStage.PROCESSING)


@dataclass(frozen=True, slots=True, kw_only=True)
class HandlerOutcome:
    """Outcome of one handler for one event.

    Attributes:
        handler_name: Name of the handler.
        result: Result returned by the handler (None when skipped or raised).
        exception: Exception raised by the handler, if any.
        skipped: True when ``can_handle`` declined the event.
    """

    handler_name: str
    result: Result[None, DomainError] | None = None
    exception: Exception | None = None
    skipped: bool = False

    @property
    def succeeded(self) -> bool:
        return self.skipped or isinstance(self.result, Success)

    @property
    def error(self) -> DomainError | None:
        if isinstance(self.result, Failure):
            return self.result.error
        return None


class EventDispatch:
    """Handle on the handler execution for one published event.

    Awaiting the handle is optional. Outcomes are read through
    ``asyncio.shield`` so a caller that stops waiting never cancels the
    handlers themselves.
    """

    def __init__(
        self,
        event: Event,
        task: "asyncio.Task[list[HandlerOutcome]] | None" = None,
        validated: "asyncio.Future[list[HandlerOutcome]] | None" = None,
    ) -> None:
        self.event = event
        self._task = task
        self._validated = validated

    def done(self) -> bool:
        return self._task is None or self._task.done()

    async def outcomes(self) -> list[HandlerOutcome]:
        """Wait for every handler and return their outcomes."""
        if self._task is None:
            return []
        return await asyncio.shield(self._task)

    async def validation_outcomes(self) -> list[HandlerOutcome]:
        """Wait for the validation stage only and return its outcomes."""
        if self._validated is None:
            return []
        return await asyncio.shield(self._validated)

    async def outcome_of(self, handler_name: str) -> HandlerOutcome | None:
        """Outcome of a single named handler, or None if it was not invoked.

        Validation-stage handlers are answered as soon as that stage ends,
        without waiting for the processing stage.
        """
        for outcome in await self.validation_outcomes():
            if outcome.handler_name == handler_name:
                return outcome
        for outcome in await self.outcomes():
            if outcome.handler_name == handler_name:
                return outcome
        return None


class EventStream:
    """Lazy, unbounded feed of published events.

    Every ``async for`` (or ``aiter``) call creates an independent
    subscription that starts receiving events immediately. ``aclose`` ends
    every subscription created from this stream.
    """

    def __init__(self, bus: "InMemoryEventBus", event_type: str | None) -> None:
        self._bus = bus
        self._event_type = event_type
        self._queues: list[asyncio.Queue[object]] = []

    def __aiter__(self) -> AsyncIterator[Event]:
        queue = self._bus._attach_stream(self._event_type)
        self._queues.append(queue)
        return self._iterate(queue)

    async def _iterate(self, queue: "asyncio.Queue[object]") -> AsyncIterator[Event]:
        try:
            while True:
                item = await queue.get()
                if item is _STREAM_CLOSED:
                    return
                yield item  # type: ignore[misc]
        finally:
            self._bus._detach_stream(queue)

    async def aclose(self) -> None:
        for queue in self._queues:
            self._bus._detach_stream(queue)
            queue.put_nowait(_STREAM_CLOSED)
        self._queues.clear()


class InMemoryEventBus:
    """In-memory event bus with staged, fail-open, fire-and-forget dispatch.

    Thread Safety:
        Registry writes take a lock and replace the whole mapping, so a
        publish running concurrently always reads a complete handler set.

    Attributes:
        _handlers: Event type tag -> handlers (replaced on every write).
        _streams: Attached stream queues with their type filter.
        _in_flight: Supervisor tasks not yet finished (keeps them referenced).
        _logger: Logger for handler failures and publishing.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        """Initialize event bus with logger.

        Args:
            logger: Logger for handler failures (warning) and publishing (debug).
        """
        self._handlers: dict[str, tuple[EventHandlerProtocol, ...]] = {}
        self._streams: tuple[tuple[str | None, asyncio.Queue[object]], ...] = ()
        self._in_flight: set[asyncio.Task[list[HandlerOutcome]]] = set()
        self._lock = threading.Lock()
        self._logger = logger

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def subscribe(
        self,
        event_type: EventType | str,
        handler: EventHandlerProtocol,
    ) -> None:
        """Register a handler for an event type.

        Subscribing the same handler object twice to the same type is a no-op.
        """
        tag = event_type_tag(event_type)
        with self._lock:
            current = self._handlers.get(tag, ())
            if any(existing is handler for existing in current):
                return
            updated = dict(self._handlers)
            updated[tag] = current + (handler,)
            self._handlers = updated

    def unsubscribe(
        self,
        event_type: EventType | str,
        handler: EventHandlerProtocol,
    ) -> None:
        """Remove a handler registration; unknown registrations are ignored."""
        tag = event_type_tag(event_type)
        with self._lock:
            current = self._handlers.get(tag, ())
            remaining = tuple(h for h in current if h is not handler)
            if len(remaining) == len(current):
                return
            updated = dict(self._handlers)
            if remaining:
                updated[tag] = remaining
            else:
                del updated[tag]
            self._handlers = updated

    def handlers_for(self, event_type: EventType | str) -> tuple[EventHandlerProtocol, ...]:
        """Snapshot of the handlers registered for a type."""
        return self._handlers.get(event_type_tag(event_type), ())

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    async def publish(self, event: Event) -> EventDispatch:
        """Publish an event.

        Flow:
            1. Assign event_id/occurred_at if missing
            2. Push the event to matching stream subscribers
            3. Snapshot handlers registered for the event type
            4. Schedule a supervisor task running the handlers
            5. Return immediately (never raises because of handlers)

        Returns:
            EventDispatch handle for callers that want outcomes.
        """
        stamped = event.stamped()

        for stream_type, queue in self._streams:
            if stream_type is None or stream_type == stamped.event_type:
                queue.put_nowait(stamped)

        handlers = self._handlers.get(stamped.event_type, ())
        if not handlers:
            return EventDispatch(stamped)

        self._logger.debug(
            "event_publishing",
            event_type=stamped.event_type,
            event_id=str(stamped.event_id),
            handler_count=len(handlers),
        )

        validated: asyncio.Future[list[HandlerOutcome]] = (
            asyncio.get_running_loop().create_future()
        )
        task = asyncio.create_task(
            self._dispatch(stamped, handlers, validated),
            name=f"event-dispatch-{stamped.event_id}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return EventDispatch(stamped, task, validated)

    async def drain(self) -> None:
        """Wait until every in-flight dispatch has finished."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)

    async def _dispatch(
        self,
        event: Event,
        handlers: tuple[EventHandlerProtocol, ...],
        validated: "asyncio.Future[list[HandlerOutcome]]",
    ) -> list[HandlerOutcome]:
        validation = [h for h in handlers if _handler_stage(h) == HandlerStage.VALIDATION]
        processing = [h for h in handlers if _handler_stage(h) != HandlerStage.VALIDATION]

        validation_outcomes: list[HandlerOutcome] = []
        try:
            if validation:
                validation_outcomes = list(
                    await asyncio.gather(*(self._run_handler(event, h) for h in validation))
                )
        finally:
            if not validated.done():
                validated.set_result(validation_outcomes)

        outcomes = list(validation_outcomes)
        if processing:
            outcomes.extend(
                await asyncio.gather(*(self._run_handler(event, h) for h in processing))
            )
        return outcomes

    async def _run_handler(
        self,
        event: Event,
        handler: EventHandlerProtocol,
    ) -> HandlerOutcome:
        name = _handler_name(handler)
        try:
            if not handler.can_handle(event):
                return HandlerOutcome(handler_name=name, skipped=True)
            result = await handler.handle(event)
        except Exception as exc:
            self._logger.warning(
                "event_handler_failed",
                event_type=event.event_type,
                event_id=str(event.event_id),
                handler_name=name,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return HandlerOutcome(handler_name=name, exception=exc)

        if isinstance(result, Failure):
            self._logger.warning(
                "event_handler_failed",
                event_type=event.event_type,
                event_id=str(event.event_id),
                handler_name=name,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )
        return HandlerOutcome(handler_name=name, result=result)

    # -------------------------------------------------------------------------
    # Streams
    # -------------------------------------------------------------------------

    def get_event_stream(self, event_type: EventType | str | None = None) -> EventStream:
        """Feed of published events, optionally filtered by type."""
        tag = event_type_tag(event_type) if event_type is not None else None
        return EventStream(self, tag)

    def _attach_stream(self, event_type: str | None) -> "asyncio.Queue[object]":
        queue: asyncio.Queue[object] = asyncio.Queue()
        with self._lock:
            self._streams = self._streams + ((event_type, queue),)
        return queue

    def _detach_stream(self, queue: "asyncio.Queue[object]") -> None:
        with self._lock:
            self._streams = tuple(
                (event_type, q) for event_type, q in self._streams if q is not queue
            )
