"""Form template domain entity.

A template is a versioned schema for a clinical form: an ordered list of
fields, each typed, optionally required (statically or conditionally),
optionally shown only under conditions, and flagged as regulated or not.
The regulated flag is the authoritative input to the partitioner.

Usage:
    template = FormTemplate(
        id="vitals",
        name="Vital Signs",
        version=3,
        fields=[
            FormField(id="patientName", name="patientName", type=FieldType.TEXT,
                      is_required=True, is_regulated_field=True),
            FormField(id="heartRate", name="heartRate", type=FieldType.NUMBER,
                      validation_rules=(ValidationRule(type="min", value=30),)),
        ],
    )
    template.classification()  # {"patientName": True, "heartRate": False}
"""

from dataclasses import dataclass, field
from typing import Any

from src.domain.enums import ConditionOperator, FieldType, TemplateStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldCondition:
    """One comparison in a visibility or required-when conjunction.

    Attributes:
        field_id: Field whose current value is compared.
        operator: Comparison operator (an unknown string evaluates false).
        value: Right-hand side of the comparison.
    """

    field_id: str
    operator: ConditionOperator | str
    value: Any = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationRule:
    """Declared validation rule on a field.

    Attributes:
        type: ``min``, ``max``, ``min_length``, ``max_length``, ``pattern`` or ``custom``.
        value: Rule parameter (bound, length or regex).
        message: Message used instead of the default one.
        custom_validator: Registry name for ``custom`` rules.
    """

    type: str
    value: Any = None
    message: str | None = None
    custom_validator: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FormField:
    """Field definition within a template.

    Attributes:
        id: Key under which the value is stored.
        name: Machine name, used by name-based clinical and cross-field checks.
        type: Input type.
        label: Display label used in messages (falls back to name).
        is_required: Statically required.
        is_regulated_field: Value is PHI and belongs in the protected partition.
        validation_rules: Rules evaluated in declaration order.
        visibility_conditions: Conjunction; field is skipped when it is false.
        show_when: Additional visibility conjunction.
        required_when: Conjunction making the field conditionally required.
        options: Allowed values for choice fields.
        allowed_file_types: Extension allow-list for file fields.
        unit: Display unit for clinical measurements.
        order: Position in the form.
    """

    id: str
    name: str
    type: FieldType = FieldType.TEXT
    label: str | None = None
    is_required: bool = False
    is_regulated_field: bool = False
    validation_rules: tuple[ValidationRule, ...] = ()
    visibility_conditions: tuple[FieldCondition, ...] = ()
    show_when: tuple[FieldCondition, ...] = ()
    required_when: tuple[FieldCondition, ...] = ()
    options: tuple[Any, ...] = ()
    allowed_file_types: tuple[str, ...] = ()
    unit: str | None = None
    order: int = 0

    @property
    def display_label(self) -> str:
        return self.label or self.name

    @property
    def all_visibility_conditions(self) -> tuple[FieldCondition, ...]:
        return self.visibility_conditions + self.show_when


@dataclass(kw_only=True)
class FormTemplate:
    """Versioned form schema.

    Attributes:
        id: Template identifier.
        name: Display name.
        version: Monotonic schema version; instances record the version they used.
        fields: Ordered field definitions.
        category: Free-form grouping (``vitals``, ``adverse_event``...).
        status: Publication state.
        description: Optional description.
    """

    id: str
    name: str
    version: int = 1
    fields: list[FormField] = field(default_factory=list)
    category: str = "general"
    status: TemplateStatus = TemplateStatus.DRAFT
    description: str | None = None

    def __post_init__(self) -> None:
        ids = [f.id for f in self.fields]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Template {self.id} has duplicate field ids")
        self.fields = sorted(self.fields, key=lambda f: f.order)

    def get_field(self, field_id: str) -> FormField | None:
        for template_field in self.fields:
            if template_field.id == field_id:
                return template_field
        return None

    def required_fields(self) -> list[FormField]:
        """Statically required fields (the completion percentage denominator)."""
        return [f for f in self.fields if f.is_required]

    def regulated_field_ids(self) -> frozenset[str]:
        return frozenset(f.id for f in self.fields if f.is_regulated_field)

    def classification(self) -> dict[str, bool]:
        """Map every field id to its regulated flag."""
        return {f.id: f.is_regulated_field for f in self.fields}

    def is_published(self) -> bool:
        return self.status == TemplateStatus.PUBLISHED
