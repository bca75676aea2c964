"""Context-local implementation of IdentityProviderProtocol.

Authentication happens outside this system. Whatever authenticated the
caller binds the resulting Actor for the duration of the call with
``acting_as``; each asyncio task sees its own binding.

Usage:
    provider = ContextIdentityProvider()
    with provider.acting_as(Actor(id="u-1", display_name="Dr. Smith", role_level=3)):
        await service.sign(instance_id, meaning="Approval", method="password")
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from src.domain.value_objects import SYSTEM_ACTOR, Actor


class ContextIdentityProvider:
    """Resolves the current actor from a ContextVar, defaulting to ``default``."""

    def __init__(self, default: Actor = SYSTEM_ACTOR) -> None:
        self._default = default
        self._current: ContextVar[Actor | None] = ContextVar("current_actor", default=None)

    def current_actor(self) -> Actor:
        return self._current.get() or self._default

    @contextmanager
    def acting_as(self, actor: Actor) -> Iterator[Actor]:
        token = self._current.set(actor)
        try:
            yield actor
        finally:
            self._current.reset(token)
