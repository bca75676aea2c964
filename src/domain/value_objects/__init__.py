"""Domain value objects.

Usage:
    from src.domain.value_objects import Actor, ElectronicSignature
"""

from src.domain.value_objects.actor import SYSTEM_ACTOR, Actor
from src.domain.value_objects.change_history import (
    REDACTED,
    ChangeHistoryEntry,
    FieldChange,
)
from src.domain.value_objects.electronic_signature import (
    ElectronicSignature,
    compute_document_hash,
)
from src.domain.value_objects.validation_result import ValidationResult

__all__ = [
    "Actor",
    "SYSTEM_ACTOR",
    "ChangeHistoryEntry",
    "FieldChange",
    "REDACTED",
    "ElectronicSignature",
    "compute_document_hash",
    "ValidationResult",
]
