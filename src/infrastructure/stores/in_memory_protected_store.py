"""In-memory implementation of ProtectedStoreProtocol.

Stores FHIR-shaped resources keyed by a generated id. Resources are
deep-copied in and out so callers never share state with the store.

Creation is conditional on the ``eventId`` identifier: a resource of the
same type tagged with an event id already stored is not created again and
the existing id is returned, so redriving a failed synchronization never
duplicates the regulated partition.
"""

import copy
from typing import Any

from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.services import EVENT_ID_SYSTEM, identifier_value


class InMemoryProtectedStore:
    """Protected (regulated) resource store held in a dict."""

    def __init__(self) -> None:
        self._resources: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._resources)

    async def create(self, resource: dict[str, Any]) -> Result[str, DomainError]:
        resource_type = resource.get("resourceType")
        if not resource_type:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.SYNC_PAYLOAD_INVALID,
                    message="Protected resource is missing resourceType",
                    field="resourceType",
                )
            )
        event_id = identifier_value(resource, EVENT_ID_SYSTEM)
        if event_id is not None:
            existing_id = self._find_by_event(resource_type, event_id)
            if existing_id is not None:
                return Success(value=existing_id)

        resource_id = str(uuid7())
        stored = copy.deepcopy(resource)
        stored["id"] = resource_id
        self._resources[resource_id] = stored
        return Success(value=resource_id)

    async def read(self, resource_id: str) -> Result[dict[str, Any], DomainError]:
        resource = self._resources.get(resource_id)
        if resource is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.RESOURCE_NOT_FOUND,
                    message=f"Protected resource {resource_id} not found",
                    resource_type="ProtectedResource",
                    resource_id=resource_id,
                )
            )
        return Success(value=copy.deepcopy(resource))

    def resources_of_type(self, resource_type: str) -> list[dict[str, Any]]:
        """Copies of every stored resource of ``resource_type``."""
        return [
            copy.deepcopy(resource)
            for resource in self._resources.values()
            if resource.get("resourceType") == resource_type
        ]

    def _find_by_event(self, resource_type: str, event_id: str) -> str | None:
        for resource_id, resource in self._resources.items():
            if (
                resource.get("resourceType") == resource_type
                and identifier_value(resource, EVENT_ID_SYSTEM) == event_id
            ):
                return resource_id
        return None
