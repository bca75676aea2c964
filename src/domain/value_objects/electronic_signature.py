"""Electronic signature value object.

A signature hash-binds a snapshot of a form instance's general data together
with the template identity it was captured against. Any later change to the
data produces a different hash, so a stored signature can be re-verified.

Usage:
    document_hash = compute_document_hash(template_id, template_version, data)
    signature = ElectronicSignature(
        signer_id=actor.id,
        signer_display=actor.display_name,
        signed_at=datetime.now(UTC),
        meaning="Investigator approval",
        method="password",
        document_hash=document_hash,
    )
"""

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


def compute_document_hash(
    template_id: str,
    template_version: int,
    data: Mapping[str, Any],
) -> str:
    """SHA-256 over a canonical JSON rendering of template identity and data.

    Keys are sorted and separators fixed so equal content always hashes the same.

    Returns:
        Hex digest.
    """
    canonical = json.dumps(
        {
            "templateId": template_id,
            "templateVersion": template_version,
            "data": dict(data),
        },
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True, kw_only=True)
class ElectronicSignature:
    """Attestation record appended to a form instance.

    Attributes:
        signer_id: Actor id of the signer.
        signer_display: Display name of the signer.
        signed_at: UTC signing time.
        meaning: What the signature attests to (authorship, review, approval).
        method: How the signer authenticated.
        document_hash: Hash from ``compute_document_hash`` at signing time.
    """

    signer_id: str
    signer_display: str
    signed_at: datetime
    meaning: str
    method: str
    document_hash: str

    def verifies(
        self,
        template_id: str,
        template_version: int,
        data: Mapping[str, Any],
    ) -> bool:
        """True when ``data`` still matches the snapshot that was signed."""
        return self.document_hash == compute_document_hash(
            template_id, template_version, data
        )
