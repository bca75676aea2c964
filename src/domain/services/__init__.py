"""Pure domain services (no I/O).

Usage:
    from src.domain.services import partition, TemplateClassifier, FormValidationEngine
"""

from src.domain.services.condition_evaluator import ConditionEvaluator, operators_for
from src.domain.services.fhir_mapper import (
    EVENT_ID_SYSTEM,
    humanize_field_name,
    identifier_value,
    observation_to_record,
    record_to_observation,
    record_to_resource,
    resource_to_record,
)
from src.domain.services.form_validation_engine import (
    FormValidationEngine,
    matches_clinical_name,
    name_tokens,
)
from src.domain.services.partitioner import (
    REGULATED_KEY_PATTERNS,
    HeuristicClassifier,
    Partition,
    TemplateClassifier,
    partition,
)

__all__ = [
    "ConditionEvaluator",
    "operators_for",
    "EVENT_ID_SYSTEM",
    "humanize_field_name",
    "identifier_value",
    "observation_to_record",
    "record_to_observation",
    "record_to_resource",
    "resource_to_record",
    "FormValidationEngine",
    "matches_clinical_name",
    "name_tokens",
    "REGULATED_KEY_PATTERNS",
    "HeuristicClassifier",
    "Partition",
    "TemplateClassifier",
    "partition",
]
