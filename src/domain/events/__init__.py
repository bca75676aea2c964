"""Domain events package.

Usage:
    from src.domain.events import Event, EventType
"""

from src.domain.events.base_event import Event
from src.domain.events.event_types import EventType, event_type_tag

__all__ = ["Event", "EventType", "event_type_tag"]
