"""Base event record routed by the event bus.

Events are immutable records of something that happened to a form, patient,
study or document. They are tagged with a string ``event_type`` rather than
a subclass so that the bus can route an open set of tags, while
``EventType`` names the tags this bounded context knows about.

Architecture:
    - Frozen dataclass (immutable after creation)
    - ``event_id`` and ``occurred_at`` may be omitted by the publisher; the
      bus stamps them before delivery (see ``Event.stamped``)
    - ``payload`` is copied on construction and exposed read-only

Usage:
    >>> event = Event(
    ...     event_type=EventType.FORM_SUBMITTED,
    ...     actor_id="user-1",
    ...     payload={"formId": "f-1", "studyId": "s-1", "patientId": "p-1", "data": {...}},
    ... )
    >>> event.event_id is None
    True
    >>> stamped = event.stamped()
    >>> stamped.event_id is not None
    True
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any
from uuid import UUID, uuid4

from src.domain.events.event_types import EventType, event_type_tag


@dataclass(frozen=True, kw_only=True, slots=True)
class Event:
    """Immutable event routed through the bus.

    Attributes:
        event_type: String tag (``EventType`` members are normalised to their value).
        actor_id: Identifier of the actor that caused the event.
        payload: Event body. Deep-copied and wrapped read-only.
        event_id: Unique id. Assigned by the bus when absent.
        occurred_at: UTC timestamp. Assigned by the bus when absent.
    """

    event_type: str
    actor_id: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)
    event_id: UUID | None = None
    occurred_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_type", event_type_tag(self.event_type))
        object.__setattr__(
            self, "payload", MappingProxyType(copy.deepcopy(dict(self.payload)))
        )

    @property
    def is_stamped(self) -> bool:
        """True once both identity fields are present."""
        return self.event_id is not None and self.occurred_at is not None

    def stamped(self) -> "Event":
        """Return this event with ``event_id``/``occurred_at`` filled in.

        Existing values are preserved, so re-publishing an event keeps its id.
        """
        if self.is_stamped:
            return self
        return replace(
            self,
            event_id=self.event_id or uuid4(),
            occurred_at=self.occurred_at or datetime.now(UTC),
        )

    def matches(self, event_type: EventType | str) -> bool:
        """Check the event's tag against an EventType or raw tag."""
        return self.event_type == event_type_tag(event_type)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form used when the event itself must be persisted."""
        return {
            "eventId": str(self.event_id) if self.event_id else None,
            "type": self.event_type,
            "timestamp": self.occurred_at.isoformat() if self.occurred_at else None,
            "actorId": self.actor_id,
            "payload": copy.deepcopy(dict(self.payload)),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        """Rebuild an event persisted with ``to_dict``."""
        event_id = data.get("eventId")
        timestamp = data.get("timestamp")
        return cls(
            event_type=data["type"],
            actor_id=data.get("actorId"),
            payload=data.get("payload") or {},
            event_id=UUID(event_id) if event_id else None,
            occurred_at=datetime.fromisoformat(timestamp) if timestamp else None,
        )
