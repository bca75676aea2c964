"""Actor value object returned by the identity provider."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class Actor:
    """The user (or system process) performing an operation.

    Attributes:
        id: Stable actor identifier stamped on events and audit entries.
        display_name: Human-readable name for audit display.
        role_level: Numeric privilege level gating sign and lock.
    """

    id: str
    display_name: str
    role_level: int = 0

    def has_role_level(self, minimum: int) -> bool:
        return self.role_level >= minimum


SYSTEM_ACTOR = Actor(id="system", display_name="System", role_level=0)
