"""In-memory implementation of QuarantineStoreProtocol."""

import copy
from typing import Any

from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success


class InMemoryQuarantineStore:
    """Restricted payload store held in a dict (deep copies in and out)."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._documents)

    async def put(self, key: str, document: dict[str, Any]) -> Result[None, DomainError]:
        self._documents[key] = copy.deepcopy(document)
        return Success(value=None)

    async def get(self, key: str) -> Result[dict[str, Any], DomainError]:
        document = self._documents.get(key)
        if document is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.RESOURCE_NOT_FOUND,
                    message=f"Quarantined document {key} not found",
                    resource_type="QuarantinedDocument",
                    resource_id=key,
                )
            )
        return Success(value=copy.deepcopy(document))
