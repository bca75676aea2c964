"""Error types shared by every layer.

Error Types:
- ValidationError: structural or content violation, reported to the caller
- NotFoundError: a form template, form instance or stored resource is missing
- ConflictError: optimistic version check failed
- AuthorizationError: actor role level too low for sign/lock

Usage:
    from src.core.errors import ValidationError
    from src.core.enums import ErrorCode
    from src.core.result import Failure

    return Failure(error=ValidationError(
        code=ErrorCode.VALIDATION_FAILED,
        message="Form has 2 validation errors",
        errors=(FieldMessage(field_id="age", rule="required", message="Age is required"),),
    ))
"""

from dataclasses import dataclass

from src.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldMessage:
    """One field-level validation message.

    Attributes:
        field_id: Template field id (or payload key) the message refers to.
        rule: Rule name that produced it (``required``, ``min``, ``pattern``...).
        message: Human-readable message.
    """

    field_id: str
    rule: str
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        field: Single offending field, when the failure is about one field.
        errors: Aggregated field-level messages (never short-circuited).
    """

    field: str | None = None
    errors: tuple[FieldMessage, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class NotFoundError(DomainError):
    """Resource not found.

    Attributes:
        resource_type: Type of resource (FormInstance, FormTemplate...).
        resource_id: Identifier that was looked up.
    """

    resource_type: str
    resource_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ConflictError(DomainError):
    """Concurrent modification detected.

    Attributes:
        resource_type: Type of resource in conflict.
        conflicting_field: Field that conflicted (``version``).
    """

    resource_type: str
    conflicting_field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthorizationError(DomainError):
    """Actor lacks the role level required for an operation.

    Attributes:
        required_permission: Operation that was refused (``sign``, ``lock``).
    """

    required_permission: str | None = None
