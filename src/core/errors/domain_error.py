"""Base error type carried on the Failure side of a Result.

Errors in this codebase are values, not exceptions. They flow back to the
caller inside ``Failure`` so that validation failures, illegal lifecycle
transitions and store write failures are all handled the same way.

Usage:
    from src.core.errors import DomainError
    from src.core.enums import ErrorCode

    @dataclass(frozen=True, slots=True, kw_only=True)
    class SyncError(DomainError):
        failed_partitions: tuple[str, ...] = ()
"""

from dataclasses import dataclass
from typing import Any

from src.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message, safe to show to an end user.
        details: Optional debugging context. Never holds regulated values.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
