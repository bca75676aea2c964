"""PHI / non-PHI partitioner.

Splits a record into a regulated partition (written to the protected store)
and a general partition (written to the general store). Every key of the
input lands in exactly one partition; nothing is dropped or duplicated.

Classification has two sources:

- ``TemplateClassifier``: the template's ``is_regulated_field`` flags. This
  is the authoritative, preferred source. Keys the template does not
  declare fall through to the heuristic.
- ``HeuristicClassifier``: case-insensitive key-name matching against a
  fixed list of regulated indicators. Used for ad-hoc payloads with no
  template. It over-classifies on purpose: calling a general field
  regulated costs a protected-store write, calling a regulated field
  general leaks PHI.

Usage:
    partition_result = partition(
        {"patientName": "Jane Doe", "visitCount": 3},
        HeuristicClassifier(),
    )
    partition_result.regulated  # {"patientName": "Jane Doe"}
    partition_result.general    # {"visitCount": 3}
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import FormTemplate
from src.domain.protocols import FieldClassifierProtocol

REGULATED_KEY_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"name",
        r"dob|birth",
        r"ssn|social",
        r"mrn|medical_?record",
        r"address",
        r"phone",
        r"email",
        r"insurance",
        r"diagnosis",
        r"medication",
        r"allerg",
    )
)


class HeuristicClassifier:
    """Key-name classifier biased towards "regulated"."""

    def __init__(
        self, patterns: tuple[re.Pattern[str], ...] = REGULATED_KEY_PATTERNS
    ) -> None:
        self._patterns = patterns

    def is_regulated(self, key: str) -> bool:
        normalized = key.replace("-", "_")
        return any(pattern.search(normalized) for pattern in self._patterns)


class TemplateClassifier:
    """Template-driven classifier with heuristic fallback for unknown keys.

    Args:
        classification: field id -> regulated flag.
        fallback: Classifier for keys absent from ``classification``.
    """

    def __init__(
        self,
        classification: Mapping[str, bool],
        fallback: FieldClassifierProtocol | None = None,
    ) -> None:
        self._classification = dict(classification)
        self._fallback = fallback or HeuristicClassifier()

    @classmethod
    def for_template(cls, template: FormTemplate) -> "TemplateClassifier":
        return cls(template.classification())

    def is_regulated(self, key: str) -> bool:
        if key in self._classification:
            return self._classification[key]
        return self._fallback.is_regulated(key)


@dataclass(frozen=True, slots=True)
class Partition:
    """Result of partitioning one record."""

    regulated: dict[str, Any] = field(default_factory=dict)
    general: dict[str, Any] = field(default_factory=dict)

    @property
    def has_regulated(self) -> bool:
        return bool(self.regulated)

    @property
    def has_general(self) -> bool:
        return bool(self.general)


def partition(
    record: Mapping[str, Any],
    classifier: FieldClassifierProtocol,
) -> Partition:
    """Split ``record`` into regulated and general partitions.

    Pure: the input is not modified; values are shared, not copied.
    """
    regulated: dict[str, Any] = {}
    general: dict[str, Any] = {}
    for key, value in record.items():
        if classifier.is_regulated(key):
            regulated[key] = value
        else:
            general[key] = value
    return Partition(regulated=regulated, general=general)
