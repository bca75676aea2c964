"""General (non-regulated) document store protocol (port).

Documents are addressed by collection + document id. Documents reference
subjects only by opaque identifier, never by a regulated attribute.
"""

from typing import Any, Protocol

from src.core.errors import DomainError
from src.core.result import Result


class GeneralStoreProtocol(Protocol):
    """Protocol for the general document store."""

    async def add(
        self, collection: str, document: dict[str, Any]
    ) -> Result[str, DomainError]:
        """Add a document.

        A document carrying an ``id`` key is stored under that id, replacing
        any document already there (upsert); otherwise the store assigns one.

        Returns:
            Success(document_id) or Failure(DomainError).
        """
        ...

    async def update(
        self, collection: str, document_id: str, patch: dict[str, Any]
    ) -> Result[None, DomainError]:
        """Shallow-merge ``patch`` into an existing document.

        Returns:
            Success(None), Failure(NotFoundError) or Failure(DomainError).
        """
        ...

    async def query(
        self, collection: str, filters: dict[str, Any] | None = None
    ) -> Result[list[dict[str, Any]], DomainError]:
        """Return documents whose top-level keys equal every filter value."""
        ...
