"""Unit tests for the FHIR-shaped resource mapper."""

from datetime import UTC, datetime

import pytest

from src.domain.services.fhir_mapper import (
    FIELD_SYSTEM,
    humanize_field_name,
    observation_to_record,
    record_to_observation,
    record_to_resource,
    resource_to_record,
)


@pytest.mark.unit
class TestRecordToObservation:
    """Test Observation construction."""

    def test_observation_shape(self):
        """Test subject reference, code text, identifiers and components."""
        effective = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)

        observation = record_to_observation(
            {"patientName": "Jane Doe"},
            subject_reference="SUBJ-001",
            code_text="Vital Signs",
            effective=effective,
            identifiers={"formId": "f-1"},
        )

        assert observation["resourceType"] == "Observation"
        assert observation["subject"] == {"reference": "Patient/SUBJ-001"}
        assert observation["code"] == {"text": "Vital Signs"}
        assert observation["effectiveDateTime"] == "2024-03-01T09:30:00+00:00"
        assert observation["identifier"] == [
            {"system": "urn:clinical-forms:formId", "value": "f-1"}
        ]
        (component,) = observation["component"]
        assert component["code"]["coding"] == [
            {"system": FIELD_SYSTEM, "code": "patientName"}
        ]
        assert component["code"]["text"] == "Patient Name"
        assert component["valueString"] == "Jane Doe"

    def test_value_encoding_by_type(self):
        """Test booleans, integers, floats and lists map to typed values."""
        observation = record_to_observation(
            {"smoker": True, "age": 42, "weight": 71.5, "allergies": ["nuts"]},
            subject_reference="s",
        )

        components = {
            c["code"]["coding"][0]["code"]: c for c in observation["component"]
        }
        assert components["smoker"]["valueBoolean"] is True
        assert components["age"]["valueInteger"] == 42
        assert components["weight"]["valueQuantity"] == {"value": 71.5}
        assert components["allergies"]["valueString"] == '["nuts"]'

    def test_reverse_mapping_preserves_types(self):
        """Test observation_to_record restores the original record."""
        record = {"smoker": False, "age": 42, "allergies": ["nuts", "latex"], "note": "x"}

        restored = observation_to_record(
            record_to_observation(record, subject_reference="s")
        )

        assert restored == record

    def test_observation_to_record_rejects_other_resources(self):
        """Test non-Observation resources raise ValueError."""
        with pytest.raises(ValueError, match="Expected an Observation"):
            observation_to_record({"resourceType": "Patient"})


@pytest.mark.unit
class TestRecordToResource:
    """Test extension-based resources (Patient, ResearchStudy)."""

    def test_patient_resource_uses_extensions(self):
        """Test each field becomes an extension keyed by field URL."""
        resource = record_to_resource(
            "Patient", {"dateOfBirth": "1980-01-01"}, subject_reference="SUBJ-9"
        )

        assert resource["resourceType"] == "Patient"
        assert resource["identifier"][0]["value"] == "SUBJ-9"
        assert resource["extension"] == [
            {"url": f"{FIELD_SYSTEM}/dateOfBirth", "valueString": "1980-01-01"}
        ]
        assert resource_to_record(resource) == {"dateOfBirth": "1980-01-01"}

    def test_foreign_elements_ignored(self):
        """Test extensions not produced by the mapper are skipped."""
        resource = {
            "resourceType": "Patient",
            "extension": [{"url": "http://example.org/other", "valueString": "x"}],
        }

        assert resource_to_record(resource) == {}


@pytest.mark.unit
class TestHumanizeFieldName:
    """Test humanize_field_name."""

    @pytest.mark.parametrize(
        ("field_id", "expected"),
        [
            ("patientName", "Patient Name"),
            ("date_of_birth", "Date Of Birth"),
            ("insurance-id", "Insurance Id"),
        ],
    )
    def test_humanize(self, field_id, expected):
        """Test camelCase, snake_case and kebab-case ids."""
        assert humanize_field_name(field_id) == expected
