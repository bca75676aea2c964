"""FormInstanceRepository protocol for form instance persistence.

Port (interface) for hexagonal architecture. Implementations persist the
general partition only; regulated values are hydrated from the protected
store using ``regulated_resource_ids``.
"""

from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result
from src.domain.entities import FormInstance


class FormInstanceRepository(Protocol):
    """Form instance repository protocol (port)."""

    async def find_by_id(
        self, instance_id: str
    ) -> Result[FormInstance | None, DomainError]:
        """Load an instance with regulated data hydrated.

        Returns:
            Success(instance), Success(None) when missing, or Failure on store error.
        """
        ...

    async def save(self, instance: FormInstance) -> Result[None, DomainError]:
        """Create or replace an instance (regulated values are never written)."""
        ...
