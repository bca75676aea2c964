"""Core errors package.

Usage:
    from src.core.errors import DomainError, ValidationError, NotFoundError
"""

from src.core.errors.common_errors import (
    AuthorizationError,
    ConflictError,
    FieldMessage,
    NotFoundError,
    ValidationError,
)
from src.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "FieldMessage",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthorizationError",
]
