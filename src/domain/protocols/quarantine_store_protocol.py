"""Quarantine store protocol (port).

Restricted key-value store for payloads that may hold regulated values but
cannot be written as FHIR resources, such as the original event of a failed
synchronization (the protected store is often the side that failed). It is
kept apart from the general store and carries protected-store access
controls.
"""

from typing import Any, Protocol

from src.core.errors import DomainError
from src.core.result import Result


class QuarantineStoreProtocol(Protocol):
    """Protocol for the restricted payload store."""

    async def put(self, key: str, document: dict[str, Any]) -> Result[None, DomainError]:
        """Store ``document`` under ``key``, replacing any previous value."""
        ...

    async def get(self, key: str) -> Result[dict[str, Any], DomainError]:
        """Read a document.

        Returns:
            Success(document) or Failure(NotFoundError | DomainError).
        """
        ...
