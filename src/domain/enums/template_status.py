"""Form template publication states."""

from enum import Enum


class TemplateStatus(str, Enum):
    """Publication state of a form template."""

    DRAFT = "draft"
    PUBLISHED = "published"
    DEPRECATED = "deprecated"
