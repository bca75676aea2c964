"""Form template repository implementation.

In-process registry of published templates. Templates are authored by the
form builder (outside this system) and loaded here at composition time.
"""

import copy

from src.domain.entities import FormTemplate


class InMemoryFormTemplateRepository:
    """Template lookup by id. Saved templates are copied, so later edits to
    the caller's object never change what is stored."""

    def __init__(self, templates: list[FormTemplate] | None = None) -> None:
        self._templates: dict[str, FormTemplate] = {}
        for template in templates or []:
            self._templates[template.id] = copy.deepcopy(template)

    async def find_by_id(self, template_id: str) -> FormTemplate | None:
        template = self._templates.get(template_id)
        if template is None:
            return None
        return copy.deepcopy(template)

    async def save(self, template: FormTemplate) -> None:
        self._templates[template.id] = copy.deepcopy(template)
