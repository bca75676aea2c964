"""Form validation engine.

Validates a form instance's values (general and regulated merged) against
its template and returns every error found, never stopping at the first
failing field.

Per field, in order:
    1. Skip when the visibility conjunction is false.
    2. Required check (static, or conditional via ``required_when``).
       A failing required check skips the remaining checks for that field.
    3. Type-specific structural checks.
    4. Declared validation rules, in declaration order.
    5. Clinical plausibility ranges keyed by field name.
Then cross-field rules (end date vs start date, systolic vs diastolic).

Warnings (empty optional fields, unusual ages, unknown custom validators,
unsupported condition operators) never make a result invalid.

Usage:
    engine = FormValidationEngine()
    result = engine.validate(instance, template)
    if not result.is_valid:
        for error in result.errors:
            print(error.field_id, error.message)
"""

import re
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from src.core.errors import FieldMessage
from src.domain.entities import FormField, FormInstance, FormTemplate, ValidationRule
from src.domain.enums import FieldType
from src.domain.services.condition_evaluator import ConditionEvaluator
from src.domain.validators import (
    get_custom_validator,
    is_empty_value,
    is_numeric,
    parse_date,
    parse_number,
    parse_time,
    validate_email,
    validate_file_extension,
    validate_phone,
)
from src.domain.value_objects import ValidationResult

MAX_AGE_YEARS = 150

# (matcher, low, high, message) for numeric plausibility checks.
_CLINICAL_RANGES: tuple[tuple[str, float, float, str], ...] = (
    ("age", 0, 150, "Age must be between 0 and 150 years"),
    ("weight", 0, 1000, "Weight must be between 0 and 1000 kg"),
    ("height", 0, 300, "Height must be between 0 and 300 cm"),
    ("temperature", 20, 50, "Temperature must be between 20°C and 50°C"),
    ("bloodpressure", 50, 300, "Blood pressure must be between 50 and 300 mmHg"),
    ("heartrate", 30, 250, "Heart rate must be between 30 and 250 bpm"),
)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def name_tokens(name: str) -> list[str]:
    """Split ``patientAge``, ``patient_age`` or ``patient-age`` into lowercase words."""
    spaced = _CAMEL_BOUNDARY.sub("_", name)
    return [token for token in re.split(r"[_\-\s]+", spaced.lower()) if token]


def normalized_name(name: str) -> str:
    """Lowercase name with separators removed (``blood_pressure`` -> ``bloodpressure``)."""
    return "".join(name_tokens(name))


def matches_clinical_name(kind: str, name: str) -> bool:
    """True when field ``name`` denotes the clinical measurement ``kind``."""
    tokens = name_tokens(name)
    joined = "".join(tokens)
    match kind:
        case "age":
            return "age" in tokens
        case "bloodpressure":
            return "bloodpressure" in joined or "bp" in tokens
        case "heartrate":
            return "heartrate" in joined or "pulse" in joined
        case _:
            return kind in joined


def _years_ago(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return today.replace(year=today.year - years, day=28)


class FormValidationEngine:
    """Field-level, type-level and cross-field validation against a template."""

    def validate(self, instance: FormInstance, template: FormTemplate) -> ValidationResult:
        """Validate an instance's merged general and regulated values."""
        return self.validate_values(instance.all_values(), template)

    def validate_values(
        self,
        values: Mapping[str, Any],
        template: FormTemplate,
    ) -> ValidationResult:
        """Validate a raw value map against a template."""
        evaluator = ConditionEvaluator(template)
        errors: list[FieldMessage] = []
        warnings: list[FieldMessage] = []
        visible_ids: set[str] = set()

        for template_field in template.fields:
            visible, condition_warnings = evaluator.evaluate_all(
                template_field.all_visibility_conditions,
                values,
                subject_field_id=template_field.id,
            )
            warnings.extend(condition_warnings)
            if not visible:
                continue
            visible_ids.add(template_field.id)

            required, condition_warnings = self._is_required(
                template_field, values, evaluator
            )
            warnings.extend(condition_warnings)
            value = values.get(template_field.id)

            if is_empty_value(value):
                if required:
                    errors.append(
                        FieldMessage(
                            field_id=template_field.id,
                            rule="required",
                            message=f"{template_field.display_label} is required",
                        )
                    )
                else:
                    warnings.append(
                        FieldMessage(
                            field_id=template_field.id,
                            rule="missing_optional",
                            message=(
                                f"{template_field.display_label} is empty but may be "
                                "important for data completeness"
                            ),
                        )
                    )
                continue

            errors.extend(self._check_type(template_field, value))
            for rule in template_field.validation_rules:
                error, warning = self._check_rule(template_field, rule, value, values)
                if error:
                    errors.append(error)
                if warning:
                    warnings.append(warning)
            clinical_errors, clinical_warnings = self._check_clinical(template_field, value)
            errors.extend(clinical_errors)
            warnings.extend(clinical_warnings)

        errors.extend(self._check_cross_field(template, values, visible_ids))
        return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))

    # -------------------------------------------------------------------------
    # Required
    # -------------------------------------------------------------------------

    def _is_required(
        self,
        template_field: FormField,
        values: Mapping[str, Any],
        evaluator: ConditionEvaluator,
    ) -> tuple[bool, list[FieldMessage]]:
        if not template_field.required_when:
            return template_field.is_required, []
        return evaluator.evaluate_all(
            template_field.required_when, values, subject_field_id=template_field.id
        )

    # -------------------------------------------------------------------------
    # Type checks
    # -------------------------------------------------------------------------

    def _check_type(self, template_field: FormField, value: Any) -> list[FieldMessage]:
        label = template_field.display_label
        problem: str | None = None

        match template_field.type:
            case FieldType.NUMBER:
                if not is_numeric(value):
                    problem = f"{label} must be a valid number"
            case FieldType.DATE | FieldType.DATETIME:
                try:
                    parse_date(value)
                except ValueError:
                    problem = f"{label} must be a valid date"
            case FieldType.TIME:
                try:
                    parse_time(value)
                except ValueError:
                    problem = f"{label} must be a valid time"
            case FieldType.EMAIL:
                try:
                    validate_email(value)
                except ValueError:
                    problem = f"{label} must be a valid email address"
            case FieldType.PHONE:
                try:
                    validate_phone(value)
                except ValueError:
                    problem = f"{label} must be a valid phone number"
            case FieldType.SELECT | FieldType.RADIO:
                if template_field.options and value not in template_field.options:
                    problem = f"{label} has an invalid selection"
            case FieldType.MULTISELECT | FieldType.CHECKBOX:
                selections = value if isinstance(value, (list, tuple, set)) else [value]
                if template_field.type == FieldType.CHECKBOX and isinstance(value, bool):
                    selections = []
                if template_field.options and any(
                    item not in template_field.options for item in selections
                ):
                    problem = f"{label} has an invalid selection"
            case FieldType.BOOLEAN:
                if not isinstance(value, bool):
                    problem = f"{label} must be yes or no"
            case FieldType.FILE:
                file_names = value if isinstance(value, (list, tuple)) else [value]
                for file_name in file_names:
                    try:
                        validate_file_extension(
                            file_name, template_field.allowed_file_types or None
                        )
                    except ValueError as exc:
                        problem = f"{label}: {exc}"
                        break

        if problem is None:
            return []
        return [FieldMessage(field_id=template_field.id, rule="format", message=problem)]

    # -------------------------------------------------------------------------
    # Declared rules
    # -------------------------------------------------------------------------

    def _check_rule(
        self,
        template_field: FormField,
        rule: ValidationRule,
        value: Any,
        values: Mapping[str, Any],
    ) -> tuple[FieldMessage | None, FieldMessage | None]:
        """Returns (error, warning) for one rule; both None when it passes."""
        label = template_field.display_label
        failed_message: str | None = None

        match rule.type:
            case "min" | "max":
                ordering = self._compare_bound(template_field, value, rule.value)
                if ordering is None:
                    return None, None
                if rule.type == "min" and ordering < 0:
                    failed_message = f"{label} must be at least {rule.value}"
                elif rule.type == "max" and ordering > 0:
                    failed_message = f"{label} must be at most {rule.value}"
            case "min_length" | "max_length":
                length = len(value) if isinstance(value, (str, list, tuple)) else len(str(value))
                if rule.type == "min_length" and length < int(rule.value):
                    failed_message = f"{label} must be at least {rule.value} characters"
                elif rule.type == "max_length" and length > int(rule.value):
                    failed_message = f"{label} must be at most {rule.value} characters"
            case "pattern":
                try:
                    pattern = re.compile(str(rule.value))
                except re.error:
                    return None, FieldMessage(
                        field_id=template_field.id,
                        rule="pattern",
                        message=f"Invalid pattern configured for {label}",
                    )
                if not pattern.search(str(value)):
                    failed_message = f"{label} format is invalid"
            case "custom":
                metadata = get_custom_validator(rule.custom_validator or "")
                if metadata is None:
                    return None, FieldMessage(
                        field_id=template_field.id,
                        rule="custom",
                        message=(
                            f"Custom validator '{rule.custom_validator}' is not "
                            f"registered; {label} was not checked"
                        ),
                    )
                try:
                    passed = metadata.validator_function(value, values)
                except (TypeError, ValueError):
                    passed = False
                if not passed:
                    failed_message = f"{label} {metadata.default_message}"
            case _:
                return None, FieldMessage(
                    field_id=template_field.id,
                    rule=rule.type,
                    message=f"Unknown validation rule '{rule.type}' on {label}",
                )

        if failed_message is None:
            return None, None
        return (
            FieldMessage(
                field_id=template_field.id,
                rule=rule.type,
                message=rule.message or failed_message,
            ),
            None,
        )

    def _compare_bound(self, template_field: FormField, value: Any, bound: Any) -> int | None:
        try:
            if template_field.type in (FieldType.DATE, FieldType.DATETIME):
                left, right = parse_date(value), parse_date(bound)
            else:
                left, right = parse_number(value), parse_number(bound)
        except ValueError:
            return None
        return (left > right) - (left < right)

    # -------------------------------------------------------------------------
    # Clinical plausibility
    # -------------------------------------------------------------------------

    def _check_clinical(
        self, template_field: FormField, value: Any
    ) -> tuple[list[FieldMessage], list[FieldMessage]]:
        errors: list[FieldMessage] = []
        warnings: list[FieldMessage] = []

        if template_field.type.is_temporal():
            if "birth" in normalized_name(template_field.name):
                error = self._check_birth_date(template_field, value)
                if error:
                    errors.append(error)
            return errors, warnings

        if not is_numeric(value):
            return errors, warnings
        number = parse_number(value)

        for kind, low, high, message in _CLINICAL_RANGES:
            if not matches_clinical_name(kind, template_field.name):
                continue
            if number < low or number > high:
                errors.append(
                    FieldMessage(field_id=template_field.id, rule="range", message=message)
                )
            elif kind == "age" and (number < 1 or number > 100):
                warnings.append(
                    FieldMessage(
                        field_id=template_field.id,
                        rule="unusual_value",
                        message=f"Age of {value} is unusual, please verify",
                    )
                )
        return errors, warnings

    def _check_birth_date(self, template_field: FormField, value: Any) -> FieldMessage | None:
        try:
            birth_date = parse_date(value)
        except ValueError:
            return None
        today = datetime.now(UTC).date()
        if birth_date > today:
            message = "Birth date cannot be in the future"
        elif birth_date < _years_ago(today, MAX_AGE_YEARS):
            message = f"Birth date cannot be more than {MAX_AGE_YEARS} years ago"
        else:
            return None
        return FieldMessage(field_id=template_field.id, rule="range", message=message)

    # -------------------------------------------------------------------------
    # Cross-field rules
    # -------------------------------------------------------------------------

    def _check_cross_field(
        self,
        template: FormTemplate,
        values: Mapping[str, Any],
        visible_ids: set[str],
    ) -> list[FieldMessage]:
        errors: list[FieldMessage] = []
        fields = [f for f in template.fields if f.id in visible_ids]

        start_field = self._find_by_name(fields, "startdate")
        end_field = self._find_by_name(fields, "enddate")
        if start_field and end_field:
            try:
                start = parse_date(values.get(start_field.id))
                end = parse_date(values.get(end_field.id))
            except ValueError:
                pass
            else:
                if end < start:
                    errors.append(
                        FieldMessage(
                            field_id=end_field.id,
                            rule="cross_field",
                            message="End date must be on or after start date",
                        )
                    )

        systolic_field = self._find_by_name(fields, "systolic")
        diastolic_field = self._find_by_name(fields, "diastolic")
        if systolic_field and diastolic_field:
            systolic = values.get(systolic_field.id)
            diastolic = values.get(diastolic_field.id)
            if is_numeric(systolic) and is_numeric(diastolic):
                if parse_number(systolic) <= parse_number(diastolic):
                    errors.append(
                        FieldMessage(
                            field_id=systolic_field.id,
                            rule="cross_field",
                            message="Systolic pressure should be higher than diastolic pressure",
                        )
                    )
        return errors

    @staticmethod
    def _find_by_name(fields: list[FormField], fragment: str) -> FormField | None:
        for template_field in fields:
            if fragment in normalized_name(template_field.name):
                return template_field
        return None
