"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. Handlers are
subscribed at startup by walking EVENT_REGISTRY (registry-driven wiring):
each ``requires_*`` flag names the handler that must receive the event.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.domain.protocols.event_bus_protocol import EventBusProtocol
    from src.domain.protocols.event_handler_protocol import EventHandlerProtocol
    from src.domain.protocols.logger_protocol import LoggerProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    For every event in EVENT_REGISTRY, and for every handler the metadata
    requires (validation, audit, sync, logging), the matching handler is
    subscribed when it declares the event type in ``handled_event_types``.

    Mode-dependent behavior when a required handler does not cover an event:
        - STRICT (EVENTS_STRICT_MODE=true): raise RuntimeError at startup
        - GRACEFUL (default): log a warning and skip the subscription

    Returns:
        Event bus implementing EventBusProtocol.

    Usage:
        event_bus = get_event_bus()
        dispatch = await event_bus.publish(Event(event_type=EventType.FORM_SUBMITTED, ...))
    """
    from src.core.config import get_settings
    from src.core.container.infrastructure import get_audit_writer, get_logger
    from src.core.container.repositories import get_template_repository
    from src.core.container.services import get_dual_store_synchronizer
    from src.domain.events.registry import EVENT_REGISTRY
    from src.infrastructure.events import InMemoryEventBus
    from src.infrastructure.events.handlers import (
        AuditEventHandler,
        LoggingEventHandler,
        SynchronizationEventHandler,
        ValidationEventHandler,
    )

    settings = get_settings()
    logger = get_logger()

    event_bus = InMemoryEventBus(logger=logger)

    handlers: dict[str, "EventHandlerProtocol"] = {
        "validation": ValidationEventHandler(
            logger=logger, max_field_length=settings.max_field_length
        ),
        "audit": AuditEventHandler(writer=get_audit_writer(), logger=logger),
        "sync": SynchronizationEventHandler(
            synchronizer=get_dual_store_synchronizer(),
            template_repository=get_template_repository(),
            logger=logger,
        ),
        "logging": LoggingEventHandler(logger=logger),
    }

    for metadata in EVENT_REGISTRY:
        required = {
            "validation": metadata.requires_validation,
            "audit": metadata.requires_audit,
            "sync": metadata.requires_sync,
            "logging": metadata.requires_logging,
        }
        for handler_type, is_required in required.items():
            if not is_required:
                continue
            handler = handlers[handler_type]
            if metadata.event_type in handler.handled_event_types:
                event_bus.subscribe(metadata.event_type, handler)
                continue
            _missing_handler(
                logger,
                strict=settings.events_strict_mode,
                handler_type=handler_type,
                handler_name=handler.name,
                event_type=metadata.event_type.value,
            )

    return event_bus


def _missing_handler(
    logger: "LoggerProtocol",
    *,
    strict: bool,
    handler_type: str,
    handler_name: str,
    event_type: str,
) -> None:
    if strict:
        raise RuntimeError(
            f"EVENTS_STRICT_MODE: Missing required {handler_type} handler\n"
            f"Event: {event_type}\n"
            f"Handler: {handler_name} does not declare this event type\n\n"
            f"Fix: Add the event to {handler_name}.handled_event_types\n"
            f"Or disable strict mode: Set EVENTS_STRICT_MODE=false in .env"
        )
    logger.warning(
        "event_handler_missing",
        handler_type=handler_type,
        handler_name=handler_name,
        event_type=event_type,
    )
