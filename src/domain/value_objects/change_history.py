"""Change history entries recorded on form instances."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

REDACTED = "[REDACTED]"


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldChange:
    """Before/after values for one field.

    Regulated fields carry ``REDACTED`` in both positions so the history
    never duplicates protected values outside the protected store.
    """

    field_id: str
    old_value: Any
    new_value: Any
    regulated: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ChangeHistoryEntry:
    """One recorded mutation of a form instance.

    Attributes:
        action: ``created``, ``updated``, ``submitted``, ``signed`` or ``locked``.
        actor_id: Who made the change.
        timestamp: When it happened (UTC).
        reason: Reason supplied for corrections.
        changes: Field-level changes (empty for pure transitions).
    """

    action: str
    actor_id: str
    timestamp: datetime
    reason: str | None = None
    changes: tuple[FieldChange, ...] = field(default_factory=tuple)
