"""Protected (PHI) store protocol (port).

Holds regulated data as FHIR-shaped resources (Patient, Observation...)
addressed by an opaque subject reference. No wire protocol is prescribed;
adapters translate to whatever healthcare-record service backs them.
"""

from typing import Any, Protocol

from src.core.errors import DomainError
from src.core.result import Result


class ProtectedStoreProtocol(Protocol):
    """Protocol for the regulated-data store."""

    async def create(self, resource: dict[str, Any]) -> Result[str, DomainError]:
        """Create a resource.

        Conditional on the ``urn:clinical-forms:eventId`` identifier: when a
        resource of the same type carrying the same event id exists, nothing
        is created and its id is returned.

        Returns:
            Success(resource_id) or Failure(DomainError).
        """
        ...

    async def read(self, resource_id: str) -> Result[dict[str, Any], DomainError]:
        """Read a resource by id.

        Returns:
            Success(resource) or Failure(NotFoundError | DomainError).
        """
        ...
