"""In-memory implementation of GeneralStoreProtocol.

Collections of documents keyed by document id, with equality filtering on
top-level keys.
"""

import copy
from collections import defaultdict
from typing import Any

from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success


class InMemoryGeneralStore:
    """General (non-regulated) document store held in nested dicts."""

    def __init__(self) -> None:
        self._collections: defaultdict[str, dict[str, dict[str, Any]]] = defaultdict(dict)

    def count(self, collection: str) -> int:
        return len(self._collections.get(collection, {}))

    def collection_names(self) -> list[str]:
        """Names of collections holding at least one document."""
        return sorted(name for name, documents in self._collections.items() if documents)

    async def add(
        self, collection: str, document: dict[str, Any]
    ) -> Result[str, DomainError]:
        document_id = str(document.get("id") or uuid7())
        stored = copy.deepcopy(document)
        stored["id"] = document_id
        self._collections[collection][document_id] = stored
        return Success(value=document_id)

    async def update(
        self, collection: str, document_id: str, patch: dict[str, Any]
    ) -> Result[None, DomainError]:
        document = self._collections.get(collection, {}).get(document_id)
        if document is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.RESOURCE_NOT_FOUND,
                    message=f"Document {collection}/{document_id} not found",
                    resource_type=collection,
                    resource_id=document_id,
                )
            )
        document.update(copy.deepcopy(patch))
        document["id"] = document_id
        return Success(value=None)

    async def query(
        self, collection: str, filters: dict[str, Any] | None = None
    ) -> Result[list[dict[str, Any]], DomainError]:
        filters = filters or {}
        documents = [
            copy.deepcopy(document)
            for document in self._collections.get(collection, {}).values()
            if all(document.get(key) == value for key, value in filters.items())
        ]
        return Success(value=documents)
