"""Structural validation of event payloads.

Runs in the VALIDATION stage, so it finishes before audit and
synchronization handlers are asked to act on the same event. This is
distinct from the form validation engine: it checks the event's shape and a
few content invariants, not a template's field rules.

DOCUMENT_SAVED:
    - documentId, documentType and data are present
    - documentType is one of Study, FormTemplate, Patient, Observation, Consent
    - type-specific checks (study name/protocol/dates, Patient resourceType,
      template field completeness)

FORM_SUBMITTED:
    - formId, studyId and patientId are present; data is a non-empty mapping
    - string values at most ``max_field_length`` characters
    - date-named fields parse and are not in the future unless "planned"
    - age/weight/height-named numbers are within plausible ranges

All violations are collected into one ValidationError.
"""

from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from src.core.enums import ErrorCode
from src.core.errors import DomainError, FieldMessage, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.enums import HandlerStage
from src.domain.events import Event, EventType
from src.domain.protocols import LoggerProtocol
from src.domain.services import matches_clinical_name
from src.domain.validators import is_empty_value, parse_date

DOCUMENT_TYPES = frozenset({"Study", "FormTemplate", "Patient", "Observation", "Consent"})

FORM_LINK_FIELDS = ("formId", "studyId", "patientId")

# kind -> (low, high), checked on numeric values whose key names the kind.
PAYLOAD_RANGES: dict[str, tuple[float, float]] = {
    "age": (0, 150),
    "weight": (0, 1000),
    "height": (0, 300),
}

_RULE_CODES: dict[str, ErrorCode] = {
    "document_type": ErrorCode.DOCUMENT_TYPE_UNSUPPORTED,
    "max_length": ErrorCode.FIELD_TOO_LONG,
    "date_range": ErrorCode.INVALID_DATE_RANGE,
}


def _missing(payload: Mapping[str, Any], key: str) -> bool:
    return is_empty_value(payload.get(key))


class ValidationEventHandler:
    """Validates DOCUMENT_SAVED and FORM_SUBMITTED payloads.

    Attributes:
        max_field_length: Longest accepted string value in submitted data.
    """

    name = "ValidationEventHandler"
    stage = HandlerStage.VALIDATION
    handled_event_types = frozenset(
        {EventType.DOCUMENT_SAVED.value, EventType.FORM_SUBMITTED.value}
    )

    def __init__(self, logger: LoggerProtocol, *, max_field_length: int = 5000) -> None:
        self._logger = logger
        self.max_field_length = max_field_length

    def can_handle(self, event: Event) -> bool:
        return event.event_type in self.handled_event_types

    async def handle(self, event: Event) -> Result[None, DomainError]:
        if event.matches(EventType.DOCUMENT_SAVED):
            messages = self.validate_document(event.payload)
        elif event.matches(EventType.FORM_SUBMITTED):
            messages = self.validate_form_submission(event.payload)
        else:
            return Success(value=None)

        if not messages:
            return Success(value=None)

        self._logger.warning(
            "event_payload_invalid",
            event_type=event.event_type,
            event_id=str(event.event_id),
            error_count=len(messages),
            field_ids=[m.field_id for m in messages],
        )
        return Failure(
            error=ValidationError(
                code=_RULE_CODES.get(messages[0].rule, ErrorCode.EVENT_PAYLOAD_INVALID),
                message="; ".join(m.message for m in messages),
                field=messages[0].field_id if len(messages) == 1 else None,
                errors=tuple(messages),
                details={"event_type": event.event_type},
            )
        )

    # =========================================================================
    # DOCUMENT_SAVED
    # =========================================================================

    def validate_document(self, payload: Mapping[str, Any]) -> list[FieldMessage]:
        messages: list[FieldMessage] = []
        for key, label in (
            ("documentId", "Document ID"),
            ("documentType", "Document type"),
            ("data", "Document data"),
        ):
            if _missing(payload, key):
                messages.append(
                    FieldMessage(field_id=key, rule="required", message=f"{label} is required")
                )
        if messages:
            return messages

        document_type = payload["documentType"]
        if document_type not in DOCUMENT_TYPES:
            return [
                FieldMessage(
                    field_id="documentType",
                    rule="document_type",
                    message=f"Invalid document type: {document_type}",
                )
            ]

        data = payload["data"]
        if not isinstance(data, Mapping):
            return [
                FieldMessage(field_id="data", rule="type", message="Document data must be an object")
            ]

        match document_type:
            case "Study":
                return self._validate_study(data)
            case "Patient":
                return self._validate_patient(data)
            case "FormTemplate":
                return self._validate_form_template(data)
            case _:
                return []

    def _validate_study(self, data: Mapping[str, Any]) -> list[FieldMessage]:
        messages: list[FieldMessage] = []
        name = data.get("name")
        if not isinstance(name, str) or len(name.strip()) < 3:
            messages.append(
                FieldMessage(
                    field_id="name",
                    rule="min_length",
                    message="Study name must be at least 3 characters",
                )
            )
        if _missing(data, "protocol"):
            messages.append(
                FieldMessage(field_id="protocol", rule="required", message="Study protocol is required")
            )
        if _missing(data, "startDate"):
            messages.append(
                FieldMessage(
                    field_id="startDate", rule="required", message="Study start date is required"
                )
            )
            return messages

        try:
            start = parse_date(data["startDate"])
        except ValueError:
            messages.append(
                FieldMessage(
                    field_id="startDate", rule="date", message="Study start date is not a valid date"
                )
            )
            return messages

        if not _missing(data, "endDate"):
            try:
                end = parse_date(data["endDate"])
            except ValueError:
                messages.append(
                    FieldMessage(
                        field_id="endDate", rule="date", message="Study end date is not a valid date"
                    )
                )
            else:
                if end < start:
                    messages.append(
                        FieldMessage(
                            field_id="endDate",
                            rule="date_range",
                            message="Study end date must be after start date",
                        )
                    )
        return messages

    def _validate_patient(self, data: Mapping[str, Any]) -> list[FieldMessage]:
        # Structure only; patient values are regulated and not inspected here.
        if data.get("resourceType") != "Patient":
            return [
                FieldMessage(
                    field_id="resourceType",
                    rule="resource_type",
                    message="Invalid patient resource type",
                )
            ]
        return []

    def _validate_form_template(self, data: Mapping[str, Any]) -> list[FieldMessage]:
        messages: list[FieldMessage] = []
        if _missing(data, "name"):
            messages.append(
                FieldMessage(field_id="name", rule="required", message="Form template name is required")
            )
        fields = data.get("fields")
        if not isinstance(fields, list) or not fields:
            messages.append(
                FieldMessage(
                    field_id="fields",
                    rule="required",
                    message="Form template must have at least one field",
                )
            )
            return messages

        for index, template_field in enumerate(fields):
            if not isinstance(template_field, Mapping):
                messages.append(
                    FieldMessage(
                        field_id=f"fields[{index}]",
                        rule="type",
                        message=f"Field {index} must be an object",
                    )
                )
                continue
            for key in ("id", "name", "type", "label"):
                if _missing(template_field, key):
                    messages.append(
                        FieldMessage(
                            field_id=f"fields[{index}].{key}",
                            rule="required",
                            message=f"Field {index} must have a {key}",
                        )
                    )
        return messages

    # =========================================================================
    # FORM_SUBMITTED
    # =========================================================================

    def validate_form_submission(self, payload: Mapping[str, Any]) -> list[FieldMessage]:
        messages = [
            FieldMessage(field_id=key, rule="required", message=f"{key} is required")
            for key in FORM_LINK_FIELDS
            if _missing(payload, key)
        ]
        data = payload.get("data")
        if not isinstance(data, Mapping) or not data:
            messages.append(
                FieldMessage(field_id="data", rule="required", message="Form data cannot be empty")
            )
            return messages

        today = datetime.now(UTC).date()
        for key, value in data.items():
            if value is None:
                continue
            messages.extend(self._validate_value(key, value, today))
        return messages

    def _validate_value(self, key: str, value: Any, today: date) -> list[FieldMessage]:
        messages: list[FieldMessage] = []
        lowered = key.lower()

        if isinstance(value, str) and len(value) > self.max_field_length:
            messages.append(
                FieldMessage(
                    field_id=key,
                    rule="max_length",
                    message=(
                        f"Field {key} exceeds maximum length of "
                        f"{self.max_field_length} characters"
                    ),
                )
            )

        if "date" in lowered and not is_empty_value(value):
            try:
                parsed = parse_date(value)
            except ValueError:
                messages.append(
                    FieldMessage(field_id=key, rule="date", message=f"Field {key} contains invalid date")
                )
            else:
                if parsed > today and "planned" not in lowered:
                    messages.append(
                        FieldMessage(
                            field_id=key,
                            rule="future_date",
                            message=f"Field {key} cannot be in the future",
                        )
                    )

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            for kind, (low, high) in PAYLOAD_RANGES.items():
                if matches_clinical_name(kind, key) and not low <= value <= high:
                    messages.append(
                        FieldMessage(
                            field_id=key,
                            rule="range",
                            message=f"Field {key} must be between {low:g} and {high:g}",
                        )
                    )
        return messages
