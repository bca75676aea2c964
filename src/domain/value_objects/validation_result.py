"""Outcome of validating form data against a template."""

from dataclasses import dataclass

from src.core.errors import FieldMessage


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationResult:
    """Aggregated validation outcome.

    Attributes:
        errors: Blocking messages, one per failing check.
        warnings: Non-blocking messages.
    """

    errors: tuple[FieldMessage, ...] = ()
    warnings: tuple[FieldMessage, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def errors_for(self, field_id: str) -> list[FieldMessage]:
        """Errors attached to a single field."""
        return [error for error in self.errors if error.field_id == field_id]
