"""Form instance lifecycle states.

State Machine:
    DRAFT -> COMPLETED        (submit, after form-level validation)
    COMPLETED -> COMPLETED    (controlled correction via update)
    COMPLETED -> SIGNED       (electronic signature)
    SIGNED -> SIGNED          (co-signature)
    COMPLETED/SIGNED -> LOCKED (administrative, terminal)
"""

from enum import Enum


class FormInstanceStatus(str, Enum):
    """Lifecycle state of a form instance."""

    DRAFT = "draft"
    COMPLETED = "completed"
    SIGNED = "signed"
    LOCKED = "locked"

    def is_editable(self) -> bool:
        """Data may be changed in this state."""
        return self in (FormInstanceStatus.DRAFT, FormInstanceStatus.COMPLETED)

    def can_be_signed(self) -> bool:
        """A (co-)signature may be added in this state."""
        return self in (FormInstanceStatus.COMPLETED, FormInstanceStatus.SIGNED)

    def can_be_locked(self) -> bool:
        return self in (FormInstanceStatus.COMPLETED, FormInstanceStatus.SIGNED)

    def is_terminal(self) -> bool:
        """No transition leaves this state."""
        return self == FormInstanceStatus.LOCKED
