"""Logging event handler for domain events.

Logs every delivered event as one structured line.

Log Levels:
    - INFO: normal activity
    - WARNING: FORM_VALIDATION_FAILED and DATA_SYNC_FAILED

Structured Fields:
    - event_type, event_id, occurred_at, actor_id
    - payload_keys: key names only; payload values are never logged
"""

from src.core.errors import DomainError
from src.core.result import Result, Success
from src.domain.enums import HandlerStage
from src.domain.events import Event, EventType
from src.domain.events.registry import get_events_requiring
from src.domain.protocols import LoggerProtocol

WARNING_EVENT_TYPES = frozenset(
    {EventType.FORM_VALIDATION_FAILED.value, EventType.DATA_SYNC_FAILED.value}
)


class LoggingEventHandler:
    """Event handler for structured logging of domain events.

    Attributes:
        _logger: Logger protocol implementation (from container).
    """

    name = "LoggingEventHandler"
    stage = HandlerStage.PROCESSING

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger
        self.handled_event_types = frozenset(
            event_type.value for event_type in get_events_requiring("logging")
        )

    def can_handle(self, event: Event) -> bool:
        return event.event_type in self.handled_event_types

    async def handle(self, event: Event) -> Result[None, DomainError]:
        log = (
            self._logger.warning
            if event.event_type in WARNING_EVENT_TYPES
            else self._logger.info
        )
        log(
            event.event_type.lower(),
            event_type=event.event_type,
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat() if event.occurred_at else None,
            actor_id=event.actor_id,
            payload_keys=sorted(event.payload),
        )
        return Success(value=None)
