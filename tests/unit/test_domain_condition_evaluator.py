"""Unit tests for ConditionEvaluator.

Tests cover:
- Operators per field type
- Unsupported operators evaluate false with a warning
- Conjunction semantics (all conditions, every warning reported)
"""

import pytest

from src.domain.entities import FieldCondition, FormField, FormTemplate
from src.domain.enums import ConditionOperator, FieldType
from src.domain.services import ConditionEvaluator, operators_for


@pytest.fixture
def template() -> FormTemplate:
    return FormTemplate(
        id="t-cond",
        name="Conditions",
        fields=[
            FormField(id="age", name="age", type=FieldType.NUMBER),
            FormField(id="smoker", name="smoker", type=FieldType.RADIO, options=("yes", "no")),
            FormField(
                id="symptoms",
                name="symptoms",
                type=FieldType.MULTISELECT,
                options=("cough", "fever", "rash"),
            ),
            FormField(id="notes", name="notes", type=FieldType.TEXT),
            FormField(id="visitDate", name="visitDate", type=FieldType.DATE),
        ],
    )


@pytest.mark.unit
class TestOperatorsForFieldType:
    """Operator availability depends on the target field's type."""

    def test_numeric_gets_ordering_not_text(self):
        """Test numbers support ordering but not starts_with."""
        ops = operators_for(FieldType.NUMBER)

        assert ConditionOperator.GREATER_THAN in ops
        assert ConditionOperator.STARTS_WITH not in ops

    def test_choice_gets_selection(self):
        """Test choice fields support selected/not_selected."""
        ops = operators_for(FieldType.MULTISELECT)

        assert ConditionOperator.SELECTED in ops
        assert ConditionOperator.LESS_THAN not in ops

    def test_unknown_field_gets_everything(self):
        """Test a condition on an undeclared field is not restricted."""
        assert operators_for(None) == frozenset(ConditionOperator)


@pytest.mark.unit
class TestEvaluate:
    """Single-condition evaluation."""

    @pytest.mark.parametrize(
        ("condition", "values", "expected"),
        [
            (FieldCondition(field_id="age", operator="greater_than", value=17), {"age": 18}, True),
            (FieldCondition(field_id="age", operator="less_than_or_equal", value="17"), {"age": "18"}, False),
            (FieldCondition(field_id="age", operator="equals", value=18), {"age": "18"}, True),
            (FieldCondition(field_id="smoker", operator="selected", value="yes"), {"smoker": "yes"}, True),
            (FieldCondition(field_id="symptoms", operator="contains", value="fever"), {"symptoms": ["cough", "fever"]}, True),
            (FieldCondition(field_id="symptoms", operator="not_selected", value="rash"), {"symptoms": ["cough"]}, True),
            (FieldCondition(field_id="notes", operator="starts_with", value="Pt"), {"notes": "Pt stable"}, True),
            (FieldCondition(field_id="notes", operator="ends_with", value="x"), {"notes": "Pt stable"}, False),
            (FieldCondition(field_id="notes", operator="is_answered"), {"notes": "  "}, False),
            (FieldCondition(field_id="notes", operator="is_not_answered"), {}, True),
            (FieldCondition(field_id="visitDate", operator="greater_than", value="2024-01-01"), {"visitDate": "2024-03-01"}, True),
        ],
    )
    def test_supported_operators(self, template, condition, values, expected):
        """Test each supported operator against typical values."""
        outcome, warning = ConditionEvaluator(template).evaluate(condition, values)

        assert outcome is expected
        assert warning is None

    def test_unsupported_operator_is_false_with_warning(self, template):
        """Test starts_with on a number evaluates false and warns."""
        condition = FieldCondition(field_id="age", operator=ConditionOperator.STARTS_WITH, value="1")

        outcome, warning = ConditionEvaluator(template).evaluate(condition, {"age": 12})

        assert outcome is False
        assert "not supported" in warning

    def test_unknown_operator_string(self, template):
        """Test an operator outside the enum evaluates false and warns."""
        condition = FieldCondition(field_id="notes", operator="sounds_like", value="x")

        outcome, warning = ConditionEvaluator(template).evaluate(condition, {"notes": "x"})

        assert outcome is False
        assert "sounds_like" in warning

    def test_non_comparable_values_are_false(self, template):
        """Test ordering against a non-number is false, not an error."""
        condition = FieldCondition(field_id="age", operator="greater_than", value=10)

        outcome, warning = ConditionEvaluator(template).evaluate(condition, {"age": "old"})

        assert outcome is False
        assert warning is None


@pytest.mark.unit
class TestEvaluateAll:
    """Conjunction semantics."""

    def test_empty_conjunction_is_true(self, template):
        """Test a field without conditions is visible."""
        outcome, warnings = ConditionEvaluator(template).evaluate_all(
            (), {}, subject_field_id="notes"
        )

        assert outcome is True
        assert warnings == []

    def test_all_conditions_must_hold(self, template):
        """Test one false condition makes the conjunction false."""
        conditions = (
            FieldCondition(field_id="smoker", operator="equals", value="yes"),
            FieldCondition(field_id="age", operator="greater_than", value=40),
        )

        outcome, _ = ConditionEvaluator(template).evaluate_all(
            conditions, {"smoker": "yes", "age": 30}, subject_field_id="notes"
        )

        assert outcome is False

    def test_every_warning_reported(self, template):
        """Test evaluation does not stop at the first unsupported operator."""
        conditions = (
            FieldCondition(field_id="age", operator="starts_with", value="1"),
            FieldCondition(field_id="notes", operator="greater_than", value=3),
        )

        outcome, warnings = ConditionEvaluator(template).evaluate_all(
            conditions, {"age": 1, "notes": "5"}, subject_field_id="smoker"
        )

        assert outcome is False
        assert len(warnings) == 2
        assert all(w.field_id == "smoker" for w in warnings)
