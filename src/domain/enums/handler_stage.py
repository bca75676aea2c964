"""Event handler delivery stages."""

from enum import Enum


class HandlerStage(str, Enum):
    """Ordering stage of an event handler.

    VALIDATION handlers for an event complete before PROCESSING handlers for
    the same event start. Handlers within a stage run concurrently.
    """

    VALIDATION = "validation"
    PROCESSING = "processing"
