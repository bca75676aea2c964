"""Core shared kernel.

This module provides foundational utilities used across all architectural layers:
- Result types for railway-oriented programming
- Base error classes for domain-level error handling
- Settings and the dependency container

The core module has NO dependencies on other application layers.
"""

from src.core.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    FieldMessage,
    NotFoundError,
    ValidationError,
)
from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success

__all__ = [
    "AuthorizationError",
    "ConflictError",
    "DomainError",
    "ErrorCode",
    "Failure",
    "FieldMessage",
    "NotFoundError",
    "Result",
    "Success",
    "ValidationError",
]
