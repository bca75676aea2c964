"""Result types for railway-oriented programming.

Every fallible operation in the pipeline (state transitions, validation,
store writes) returns a Result instead of raising. Callers branch with
structural pattern matching, which keeps the failure path explicit.

Usage:
    def sign(instance: FormInstance) -> Result[ElectronicSignature, IllegalStateError]:
        if instance.status != FormInstanceStatus.COMPLETED:
            return Failure(error=IllegalStateError(...))
        return Success(value=signature)

    match sign(instance):
        case Success(value=signature):
            ...
        case Failure(error=error):
            ...
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful operation result.

    Attributes:
        value: The produced value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed operation result.

    Attributes:
        error: The error describing the failure.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]
