"""Field classifier protocol (port).

Decides whether a record key holds regulated (PHI) data. The template-driven
classifier is the primary implementation; the name heuristic is the fallback
for ad-hoc payloads with no template.
"""

from typing import Protocol


class FieldClassifierProtocol(Protocol):
    """Protocol for per-key regulated/general classification."""

    def is_regulated(self, key: str) -> bool:
        """True when the value stored under ``key`` is regulated."""
        ...
