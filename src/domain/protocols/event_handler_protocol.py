"""Event handler protocol (port).

Handlers are objects, not bare callables, so that the bus can ask them which
event types they accept (``can_handle``) and which delivery stage they run in
(``stage``) before invoking them.

Implementations:
    - ValidationEventHandler: structural payload validation (VALIDATION stage)
    - AuditEventHandler: audit trail entries
    - SynchronizationEventHandler: dual-store partition writes
    - LoggingEventHandler: structured log lines
"""

from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.enums import HandlerStage
from src.domain.events import Event


class EventHandlerProtocol(Protocol):
    """Protocol for event handlers.

    Attributes:
        name: Stable handler name used in logs and dispatch outcomes.
        stage: Delivery stage (VALIDATION handlers finish before PROCESSING start).
        handled_event_types: Tags the handler accepts.
    """

    name: str
    stage: HandlerStage
    handled_event_types: frozenset[str]

    def can_handle(self, event: Event) -> bool:
        """Return True when the handler accepts this event."""
        ...

    async def handle(self, event: Event) -> Result[None, DomainError]:
        """Process the event.

        Returns:
            Success(None) on success, Failure(DomainError) otherwise. Raising is
            tolerated by the bus (logged and isolated) but handlers should not.
        """
        ...
