"""Form instance repository implementation.

Persists form instances as documents in the general store. Only the general
partition is written; regulated values are re-read from the protected store
(through ``regulated_resource_ids``) when an instance is loaded.

Reference:
    - src/domain/protocols/form_instance_repository.py
"""

from typing import Any

from pydantic import TypeAdapter

from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import FormInstance
from src.domain.protocols import GeneralStoreProtocol, ProtectedStoreProtocol
from src.domain.services import resource_to_record

FORM_INSTANCES_COLLECTION = "formInstances"

_INSTANCE_ADAPTER: TypeAdapter[FormInstance] = TypeAdapter(FormInstance)


class StoreFormInstanceRepository:
    """FormInstanceRepository over the general and protected stores.

    **Implementation Notes**:
    - Maps between the domain entity and a JSON-safe document via pydantic
    - ``regulated_data`` is excluded from the document, never written
    - Later protected resources win when several hold the same field
      (documents written before snapshots may list more than one)
    """

    def __init__(
        self,
        general_store: GeneralStoreProtocol,
        protected_store: ProtectedStoreProtocol,
        collection: str = FORM_INSTANCES_COLLECTION,
    ) -> None:
        self._general_store = general_store
        self._protected_store = protected_store
        self._collection = collection

    async def find_by_id(
        self, instance_id: str
    ) -> Result[FormInstance | None, DomainError]:
        """Load an instance with regulated data hydrated.

        Args:
            instance_id: Form instance id.

        Returns:
            Success(instance), Success(None) if missing, Failure on store error.
        """
        result = await self._general_store.query(self._collection, {"id": instance_id})
        if isinstance(result, Failure):
            return result
        if not result.value:
            return Success(value=None)

        document = result.value[0]
        regulated: dict[str, Any] = {}
        for resource_id in document.get("regulated_resource_ids", []):
            read_result = await self._protected_store.read(resource_id)
            if isinstance(read_result, Failure):
                return read_result
            regulated.update(resource_to_record(read_result.value))

        general_keys = set(document.get("data", {}))
        document["regulated_data"] = {
            key: value for key, value in regulated.items() if key not in general_keys
        }
        return Success(value=self._to_entity(document))

    async def save(self, instance: FormInstance) -> Result[None, DomainError]:
        """Create or replace an instance's general document."""
        document = self._to_document(instance)
        existing = await self._general_store.query(self._collection, {"id": instance.id})
        if isinstance(existing, Failure):
            return existing
        if existing.value:
            return await self._general_store.update(self._collection, instance.id, document)

        added = await self._general_store.add(self._collection, document)
        if isinstance(added, Failure):
            return added
        return Success(value=None)

    @staticmethod
    def _to_document(instance: FormInstance) -> dict[str, Any]:
        return _INSTANCE_ADAPTER.dump_python(
            instance, mode="json", exclude={"regulated_data"}
        )

    @staticmethod
    def _to_entity(document: dict[str, Any]) -> FormInstance:
        return _INSTANCE_ADAPTER.validate_python(document)
