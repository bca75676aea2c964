"""Event bus protocol (port).

Architecture:
    - Protocol (structural typing, NOT ABC inheritance)
    - Domain layer defines the interface (port)
    - Infrastructure implements it (InMemoryEventBus)

Key Requirements:
    1. **Fail-open**: one handler failure never prevents other handlers from
       running and never propagates to the publisher.
    2. **Fire-and-forget**: ``publish`` returns once the event has been
       stamped and scheduled; cancelling the publisher does not cancel
       handler execution.
    3. **Idempotent registration**: subscribing the same handler twice to the
       same type stores it once.
    4. **Safe runtime (un)subscription**: a concurrent publish sees either the
       old or the new handler set, never a partial one.

Usage:
    >>> bus = get_event_bus()
    >>> dispatch = await bus.publish(Event(event_type=EventType.FORM_SUBMITTED, ...))
    >>> outcomes = await dispatch.outcomes()  # optional
"""

from collections.abc import AsyncIterator
from typing import Protocol

from src.core.errors import DomainError
from src.domain.events import Event, EventType
from src.domain.protocols.event_handler_protocol import EventHandlerProtocol


class HandlerOutcomeProtocol(Protocol):
    """Outcome of one handler for one event."""

    @property
    def handler_name(self) -> str: ...

    @property
    def succeeded(self) -> bool: ...

    @property
    def error(self) -> DomainError | None: ...


class EventDispatchProtocol(Protocol):
    """Handle on one published event's handler execution."""

    event: Event

    def done(self) -> bool:
        """True once every handler has finished."""
        ...

    async def outcome_of(self, handler_name: str) -> HandlerOutcomeProtocol | None:
        """Wait for the named handler; None when it was not invoked."""
        ...


class EventStreamProtocol(Protocol):
    """Continuous feed of published events."""

    def __aiter__(self) -> AsyncIterator[Event]:
        ...

    async def aclose(self) -> None:
        ...


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations."""

    def subscribe(
        self,
        event_type: EventType | str,
        handler: EventHandlerProtocol,
    ) -> None:
        """Register a handler for an event type (idempotent)."""
        ...

    def unsubscribe(
        self,
        event_type: EventType | str,
        handler: EventHandlerProtocol,
    ) -> None:
        """Remove a handler registration. Unknown registrations are ignored."""
        ...

    async def publish(self, event: Event) -> EventDispatchProtocol:
        """Stamp, stream and dispatch an event to its handlers.

        Never raises because of handler failures.
        """
        ...

    def get_event_stream(
        self, event_type: EventType | str | None = None
    ) -> EventStreamProtocol:
        """Lazy, unbounded feed of events, optionally filtered by type."""
        ...
