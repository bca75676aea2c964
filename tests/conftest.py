"""Shared pytest configuration and fixtures.

This configuration provides:
1. Marker registration (unit, integration)
2. A mocked logger implementing LoggerProtocol
3. Template and actor builders used across layers
4. Container cache reset so singleton factories never leak between tests
"""

from unittest.mock import MagicMock

import pytest

from src.core.config import get_settings
from src.domain.entities import FormField, FormTemplate, ValidationRule
from src.domain.enums import FieldType, TemplateStatus
from src.domain.value_objects import Actor


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with a real (SQLite) database"
    )


@pytest.fixture
def mock_logger() -> MagicMock:
    """MagicMock standing in for LoggerProtocol (calls are inspectable)."""
    return MagicMock()


@pytest.fixture
def coordinator() -> Actor:
    """Actor allowed to sign and lock."""
    return Actor(id="user-coordinator", display_name="Dr. Coordinator", role_level=3)


@pytest.fixture
def data_entry_clerk() -> Actor:
    """Actor allowed to enter data but not to sign or lock."""
    return Actor(id="user-clerk", display_name="Data Clerk", role_level=1)


def create_vitals_template(template_id: str = "tpl-vitals") -> FormTemplate:
    """Helper to create a small vitals template for testing.

    Fields:
        patientName  - required, regulated
        visitCount   - required, general
        heartRate    - optional, general, min 30
        systolicBP / diastolicBP - optional, general
    """
    return FormTemplate(
        id=template_id,
        name="Vital Signs",
        version=2,
        status=TemplateStatus.PUBLISHED,
        fields=[
            FormField(
                id="patientName",
                name="patientName",
                label="Patient name",
                type=FieldType.TEXT,
                is_required=True,
                is_regulated_field=True,
                order=1,
            ),
            FormField(
                id="visitCount",
                name="visitCount",
                label="Visit count",
                type=FieldType.NUMBER,
                is_required=True,
                order=2,
            ),
            FormField(
                id="heartRate",
                name="heartRate",
                label="Heart rate",
                type=FieldType.NUMBER,
                validation_rules=(ValidationRule(type="min", value=30),),
                order=3,
            ),
            FormField(id="systolicBP", name="systolicBP", type=FieldType.NUMBER, order=4),
            FormField(id="diastolicBP", name="diastolicBP", type=FieldType.NUMBER, order=5),
        ],
    )


@pytest.fixture
def vitals_template() -> FormTemplate:
    return create_vitals_template()


@pytest.fixture
def reset_container():
    """Clear every container singleton and cached settings before and after a test."""
    from src.core import container

    def _clear() -> None:
        get_settings.cache_clear()
        for name in container.__all__:
            getattr(container, name).cache_clear()

    _clear()
    yield
    _clear()
