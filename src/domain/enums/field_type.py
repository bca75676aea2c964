"""Form field types.

The field type selects the structural checks the validation engine runs and
the comparison operators a visibility condition may use against the field.
"""

from enum import Enum


class FieldType(str, Enum):
    """Input type of a form template field."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    MULTISELECT = "multiselect"
    BOOLEAN = "boolean"
    FILE = "file"
    SIGNATURE = "signature"

    def is_textual(self) -> bool:
        return self in (
            FieldType.TEXT,
            FieldType.TEXTAREA,
            FieldType.EMAIL,
            FieldType.PHONE,
        )

    def is_temporal(self) -> bool:
        return self in (FieldType.DATE, FieldType.DATETIME, FieldType.TIME)

    def is_choice(self) -> bool:
        return self in (
            FieldType.SELECT,
            FieldType.RADIO,
            FieldType.CHECKBOX,
            FieldType.MULTISELECT,
        )
