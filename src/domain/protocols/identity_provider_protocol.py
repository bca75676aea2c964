"""Identity provider protocol (port).

Authentication is outside this system; the provider only answers "who is
acting right now".
"""

from typing import Protocol

from src.domain.value_objects import Actor


class IdentityProviderProtocol(Protocol):
    """Protocol for resolving the current actor."""

    def current_actor(self) -> Actor:
        """Return the actor performing the current operation."""
        ...
