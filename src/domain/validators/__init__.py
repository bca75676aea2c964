"""Validators package exports.

Exports:
    - Value-level validator functions (from functions.py)
    - Custom validator registry (from registry.py)
"""

from src.domain.validators.functions import (
    DEFAULT_ALLOWED_FILE_TYPES,
    is_empty_value,
    is_numeric,
    parse_date,
    parse_number,
    parse_time,
    validate_email,
    validate_file_extension,
    validate_phone,
)
from src.domain.validators.registry import (
    CUSTOM_VALIDATORS_REGISTRY,
    CustomValidatorMetadata,
    get_custom_validator,
    register_custom_validator,
    unregister_custom_validator,
)

__all__ = [
    # Validator functions
    "DEFAULT_ALLOWED_FILE_TYPES",
    "is_empty_value",
    "is_numeric",
    "parse_date",
    "parse_number",
    "parse_time",
    "validate_email",
    "validate_file_extension",
    "validate_phone",
    # Registry
    "CUSTOM_VALIDATORS_REGISTRY",
    "CustomValidatorMetadata",
    "get_custom_validator",
    "register_custom_validator",
    "unregister_custom_validator",
]
