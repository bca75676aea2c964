"""Custom validator registry.

Templates reference custom validation rules by name
(``ValidationRule(type="custom", custom_validator="study_subject_id")``).
The engine resolves the name here. Unknown names are reported as warnings by
the engine rather than failing the form, so a template authored against a
newer validator set still validates.

Pattern: registry with metadata catalog and helper functions.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from src.domain.validators.functions import is_numeric, parse_number

CustomValidatorFunction = Callable[[Any, Mapping[str, Any]], bool]


@dataclass(frozen=True, kw_only=True)
class CustomValidatorMetadata:
    """Metadata for one custom validator.

    Attributes:
        name: Registry key referenced from templates.
        validator_function: ``(value, all_data) -> bool``.
        description: What the validator accepts.
        default_message: Message used when the rule supplies none.
    """

    name: str
    validator_function: CustomValidatorFunction
    description: str
    default_message: str


def _is_subject_identifier(value: Any, _data: Mapping[str, Any]) -> bool:
    return isinstance(value, str) and re.fullmatch(r"[A-Z]{2,5}-\d{3,6}", value) is not None


def _is_non_negative_integer(value: Any, _data: Mapping[str, Any]) -> bool:
    if not is_numeric(value):
        return False
    number = parse_number(value)
    return number >= 0 and number == int(number)


def _is_percentage(value: Any, _data: Mapping[str, Any]) -> bool:
    return is_numeric(value) and 0 <= parse_number(value) <= 100


CUSTOM_VALIDATORS_REGISTRY: dict[str, CustomValidatorMetadata] = {
    "subject_identifier": CustomValidatorMetadata(
        name="subject_identifier",
        validator_function=_is_subject_identifier,
        description="Study subject code such as ABC-0012",
        default_message="must be a study subject identifier (e.g. ABC-0012)",
    ),
    "non_negative_integer": CustomValidatorMetadata(
        name="non_negative_integer",
        validator_function=_is_non_negative_integer,
        description="Whole number greater than or equal to zero",
        default_message="must be a whole number of zero or more",
    ),
    "percentage": CustomValidatorMetadata(
        name="percentage",
        validator_function=_is_percentage,
        description="Number between 0 and 100",
        default_message="must be between 0 and 100",
    ),
}


def get_custom_validator(name: str) -> CustomValidatorMetadata | None:
    """Get custom validator metadata by name, or None when unknown."""
    return CUSTOM_VALIDATORS_REGISTRY.get(name)


def register_custom_validator(
    name: str,
    validator_function: CustomValidatorFunction,
    *,
    description: str = "",
    default_message: str = "failed custom validation",
) -> CustomValidatorMetadata:
    """Add (or replace) a custom validator at composition time.

    Returns:
        The registered metadata.
    """
    metadata = CustomValidatorMetadata(
        name=name,
        validator_function=validator_function,
        description=description,
        default_message=default_message,
    )
    CUSTOM_VALIDATORS_REGISTRY[name] = metadata
    return metadata


def unregister_custom_validator(name: str) -> None:
    CUSTOM_VALIDATORS_REGISTRY.pop(name, None)
