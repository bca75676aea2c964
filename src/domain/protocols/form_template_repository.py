"""FormTemplateRepository protocol for template lookup.

Port (interface) for hexagonal architecture.
"""

from typing import Protocol

from src.domain.entities import FormTemplate


class FormTemplateRepository(Protocol):
    """Form template repository protocol (port)."""

    async def find_by_id(self, template_id: str) -> FormTemplate | None:
        """Find the current version of a template, or None."""
        ...

    async def save(self, template: FormTemplate) -> None:
        """Create or replace a template."""
        ...
