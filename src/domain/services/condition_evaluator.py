"""Conditional logic evaluation for visibility and required-when rules.

A condition compares the current value of one field with a fixed value.
Conditions on a field form a conjunction. Which operators may be used
depends on the target field's type; an operator outside that set (or an
unknown operator string) evaluates false and produces a warning rather
than an error.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from src.core.errors import FieldMessage
from src.domain.entities import FieldCondition, FormTemplate
from src.domain.enums import ConditionOperator, FieldType
from src.domain.validators import is_empty_value, parse_date, parse_number

_PRESENCE = frozenset(
    {
        ConditionOperator.EQUALS,
        ConditionOperator.NOT_EQUALS,
        ConditionOperator.IS_ANSWERED,
        ConditionOperator.IS_NOT_ANSWERED,
    }
)
_ORDERING = frozenset(
    {
        ConditionOperator.GREATER_THAN,
        ConditionOperator.LESS_THAN,
        ConditionOperator.GREATER_THAN_OR_EQUAL,
        ConditionOperator.LESS_THAN_OR_EQUAL,
    }
)
_TEXT = frozenset(
    {
        ConditionOperator.CONTAINS,
        ConditionOperator.NOT_CONTAINS,
        ConditionOperator.STARTS_WITH,
        ConditionOperator.ENDS_WITH,
    }
)
_CHOICE = frozenset(
    {
        ConditionOperator.SELECTED,
        ConditionOperator.NOT_SELECTED,
        ConditionOperator.CONTAINS,
        ConditionOperator.NOT_CONTAINS,
    }
)


def operators_for(field_type: FieldType | None) -> frozenset[ConditionOperator]:
    """Operators usable against a field of ``field_type`` (None: unknown field)."""
    if field_type is None:
        return frozenset(ConditionOperator)
    if field_type == FieldType.NUMBER or field_type.is_temporal():
        return _PRESENCE | _ORDERING
    if field_type.is_choice():
        return _PRESENCE | _CHOICE
    if field_type.is_textual():
        return _PRESENCE | _TEXT
    return _PRESENCE


def _coerce_operator(operator: ConditionOperator | str) -> ConditionOperator | None:
    if isinstance(operator, ConditionOperator):
        return operator
    try:
        return ConditionOperator(operator)
    except ValueError:
        return None


def _values_equal(left: Any, right: Any) -> bool:
    if left == right:
        return True
    try:
        return parse_number(left) == parse_number(right)
    except ValueError:
        return False


def _compare(left: Any, right: Any, field_type: FieldType | None) -> int | None:
    """-1/0/1 ordering of left vs right, or None when not comparable."""
    try:
        if field_type is not None and field_type.is_temporal():
            a, b = parse_date(left), parse_date(right)
        else:
            a, b = parse_number(left), parse_number(right)
    except ValueError:
        return None
    return (a > b) - (a < b)


def _is_selected(value: Any, expected: Any) -> bool:
    if isinstance(value, (list, tuple, set, frozenset)):
        return expected in value
    return _values_equal(value, expected)


def _contains(value: Any, expected: Any) -> bool:
    if isinstance(value, str):
        return isinstance(expected, str) and expected in value
    if isinstance(value, (list, tuple, set, frozenset)):
        return expected in value
    return False


class ConditionEvaluator:
    """Evaluates condition conjunctions against a template and its values."""

    def __init__(self, template: FormTemplate) -> None:
        self._template = template

    def evaluate(
        self,
        condition: FieldCondition,
        values: Mapping[str, Any],
    ) -> tuple[bool, str | None]:
        """Evaluate one condition.

        Returns:
            (outcome, warning_message). The warning is set when the operator is
            unsupported for the target field, in which case outcome is False.
        """
        target = self._template.get_field(condition.field_id)
        field_type = target.type if target else None
        operator = _coerce_operator(condition.operator)
        if operator is None or operator not in operators_for(field_type):
            type_name = field_type.value if field_type else "unknown"
            return False, (
                f"Operator '{condition.operator}' is not supported for "
                f"{type_name} field '{condition.field_id}'"
            )

        value = values.get(condition.field_id)
        expected = condition.value

        match operator:
            case ConditionOperator.EQUALS:
                return _values_equal(value, expected), None
            case ConditionOperator.NOT_EQUALS:
                return not _values_equal(value, expected), None
            case ConditionOperator.IS_ANSWERED:
                return not is_empty_value(value), None
            case ConditionOperator.IS_NOT_ANSWERED:
                return is_empty_value(value), None
            case ConditionOperator.CONTAINS:
                return _contains(value, expected), None
            case ConditionOperator.NOT_CONTAINS:
                return not _contains(value, expected), None
            case ConditionOperator.STARTS_WITH:
                return (
                    isinstance(value, str)
                    and isinstance(expected, str)
                    and value.startswith(expected)
                ), None
            case ConditionOperator.ENDS_WITH:
                return (
                    isinstance(value, str)
                    and isinstance(expected, str)
                    and value.endswith(expected)
                ), None
            case ConditionOperator.SELECTED:
                return _is_selected(value, expected), None
            case ConditionOperator.NOT_SELECTED:
                return not _is_selected(value, expected), None

        ordering = _compare(value, expected, field_type)
        if ordering is None:
            return False, None
        match operator:
            case ConditionOperator.GREATER_THAN:
                return ordering > 0, None
            case ConditionOperator.LESS_THAN:
                return ordering < 0, None
            case ConditionOperator.GREATER_THAN_OR_EQUAL:
                return ordering >= 0, None
            case _:
                return ordering <= 0, None

    def evaluate_all(
        self,
        conditions: Iterable[FieldCondition],
        values: Mapping[str, Any],
        *,
        subject_field_id: str,
    ) -> tuple[bool, list[FieldMessage]]:
        """Evaluate a conjunction; an empty conjunction is true.

        Every condition is evaluated (no short-circuit) so that all
        unsupported-operator warnings are reported.
        """
        outcome = True
        warnings: list[FieldMessage] = []
        for condition in conditions:
            result, warning = self.evaluate(condition, values)
            outcome = outcome and result
            if warning:
                warnings.append(
                    FieldMessage(
                        field_id=subject_field_id,
                        rule="unsupported_operator",
                        message=warning,
                    )
                )
        return outcome, warnings
