"""Mapping between flat regulated records and FHIR-shaped resources.

The protected store speaks FHIR-like resources. Observations carry one
component per regulated field; Patient and ResearchStudy resources carry one
extension per field. The field id is kept in a coding so the mapping can be
reversed when a form instance is hydrated.

Value encoding (per component/extension):
    bool  -> valueBoolean
    int   -> valueInteger
    float -> valueQuantity {"value": ...}
    other -> valueString (lists and dicts as JSON, flagged by an extension)

Identifiers live under ``urn:clinical-forms:<name>``. The ``eventId``
identifier ties a synchronized resource to the event that produced it and
is the key for idempotent replays.
"""

import json
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

IDENTIFIER_SYSTEM_PREFIX = "urn:clinical-forms:"
FIELD_SYSTEM = f"{IDENTIFIER_SYSTEM_PREFIX}field"
EVENT_ID_SYSTEM = f"{IDENTIFIER_SYSTEM_PREFIX}eventId"
JSON_VALUE_EXTENSION = "urn:clinical-forms:json-value"

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[_\-]+")


def humanize_field_name(field_id: str) -> str:
    """``patientName`` / ``patient_name`` -> ``Patient Name``."""
    words = [w for w in _WORD_BOUNDARY.split(field_id) if w]
    return " ".join(word[:1].upper() + word[1:] for word in words)


def _encode_value(value: Any) -> dict[str, Any]:
    if isinstance(value, bool):
        return {"valueBoolean": value}
    if isinstance(value, int):
        return {"valueInteger": value}
    if isinstance(value, float):
        return {"valueQuantity": {"value": value}}
    if isinstance(value, (list, tuple, dict)):
        return {
            "valueString": json.dumps(value, default=str),
            "extension": [{"url": JSON_VALUE_EXTENSION, "valueBoolean": True}],
        }
    if value is None:
        return {"valueString": ""}
    return {"valueString": str(value)}


def _decode_value(element: Mapping[str, Any]) -> Any:
    if "valueBoolean" in element:
        return element["valueBoolean"]
    if "valueInteger" in element:
        return element["valueInteger"]
    if "valueQuantity" in element:
        return element["valueQuantity"].get("value")
    text = element.get("valueString")
    is_json = any(
        ext.get("url") == JSON_VALUE_EXTENSION for ext in element.get("extension", [])
    )
    if is_json and text is not None:
        return json.loads(text)
    return text


def _field_code(field_id: str) -> dict[str, Any]:
    return {
        "coding": [{"system": FIELD_SYSTEM, "code": field_id}],
        "text": humanize_field_name(field_id),
    }


def _identifiers(identifiers: Mapping[str, str]) -> list[dict[str, str]]:
    return [
        {"system": f"{IDENTIFIER_SYSTEM_PREFIX}{name}", "value": value}
        for name, value in identifiers.items()
    ]


def identifier_value(resource: Mapping[str, Any], system: str) -> str | None:
    """Value of the resource identifier in ``system``, if any."""
    for identifier in resource.get("identifier", []):
        if identifier.get("system") == system:
            return identifier.get("value")
    return None


def record_to_observation(
    record: Mapping[str, Any],
    *,
    subject_reference: str,
    code_text: str = "Clinical form data",
    effective: datetime | None = None,
    identifiers: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build an Observation whose components hold the record's fields.

    Args:
        record: Regulated field values.
        subject_reference: Opaque subject id; referenced as ``Patient/<id>``.
        code_text: Observation code text (usually the form/template name).
        effective: Observation time (defaults to now, UTC).
        identifiers: Extra identifiers (formId, studyId, eventId...).
    """
    observation: dict[str, Any] = {
        "resourceType": "Observation",
        "status": "final",
        "code": {"text": code_text},
        "subject": {"reference": f"Patient/{subject_reference}"},
        "effectiveDateTime": (effective or datetime.now(UTC)).isoformat(),
        "component": [
            {"code": _field_code(field_id), **_encode_value(value)}
            for field_id, value in record.items()
        ],
    }
    if identifiers:
        observation["identifier"] = _identifiers(identifiers)
    return observation


def record_to_resource(
    resource_type: str,
    record: Mapping[str, Any],
    *,
    subject_reference: str,
    identifiers: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build a Patient/ResearchStudy-style resource with one extension per field."""
    return {
        "resourceType": resource_type,
        "identifier": _identifiers({"subject": subject_reference, **(identifiers or {})}),
        "extension": [
            {"url": f"{FIELD_SYSTEM}/{field_id}", **_encode_value(value)}
            for field_id, value in record.items()
        ],
    }


def resource_to_record(resource: Mapping[str, Any]) -> dict[str, Any]:
    """Reverse of ``record_to_observation`` / ``record_to_resource``.

    Elements that were not produced by this module are ignored.
    """
    record: dict[str, Any] = {}
    for component in resource.get("component", []):
        for coding in component.get("code", {}).get("coding", []):
            if coding.get("system") == FIELD_SYSTEM:
                record[coding["code"]] = _decode_value(component)
                break
    prefix = f"{FIELD_SYSTEM}/"
    for extension in resource.get("extension", []):
        url = extension.get("url", "")
        if url.startswith(prefix):
            record[url[len(prefix):]] = _decode_value(extension)
    return record


def observation_to_record(observation: Mapping[str, Any]) -> dict[str, Any]:
    """Read an Observation's components back into a flat record.

    Raises:
        ValueError: If the resource is not an Observation.
    """
    if observation.get("resourceType") != "Observation":
        raise ValueError(
            f"Expected an Observation, got {observation.get('resourceType')!r}"
        )
    return resource_to_record(observation)
