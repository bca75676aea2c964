"""In-process implementations of the store ports.

Concrete healthcare-record and document services are external
collaborators; these adapters stand in for them in tests and local runs.
"""

from src.infrastructure.stores.in_memory_general_store import InMemoryGeneralStore
from src.infrastructure.stores.in_memory_protected_store import InMemoryProtectedStore
from src.infrastructure.stores.in_memory_quarantine_store import InMemoryQuarantineStore

__all__ = ["InMemoryGeneralStore", "InMemoryProtectedStore", "InMemoryQuarantineStore"]
