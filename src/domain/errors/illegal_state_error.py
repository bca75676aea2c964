"""Lifecycle transition errors.

Usage:
    return Failure(error=IllegalStateError(
        code=ErrorCode.FORM_INSTANCE_ILLEGAL_TRANSITION,
        message="Cannot sign a form instance in draft state",
        current_status="draft",
        attempted_action="sign",
    ))
"""

from dataclasses import dataclass

from src.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class IllegalStateError(DomainError):
    """Transition attempted from a state that forbids it.

    Reported to the caller and never retried.

    Attributes:
        current_status: State the entity was in.
        attempted_action: Transition that was refused.
    """

    current_status: str
    attempted_action: str
