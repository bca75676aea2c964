"""Infrastructure event implementations.

Event Bus:
    - InMemoryEventBus: process-wide bus; handlers run in a background
      supervisor task, validation stage first, failures isolated

Usage:
    >>> from src.infrastructure.events import InMemoryEventBus
    >>> bus = InMemoryEventBus(logger=logger)
    >>> bus.subscribe(EventType.FORM_SUBMITTED, audit_handler)
    >>> dispatch = await bus.publish(Event(event_type=EventType.FORM_SUBMITTED, payload={...}))
    >>> outcome = await dispatch.outcome_of("ValidationEventHandler")
"""

from src.infrastructure.events.in_memory_event_bus import (
    EventDispatch,
    EventStream,
    HandlerOutcome,
    InMemoryEventBus,
)

__all__ = [
    "EventDispatch",
    "EventStream",
    "HandlerOutcome",
    "InMemoryEventBus",
]
