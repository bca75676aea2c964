"""Form instance domain entity.

One filled-in copy of a form template for a subject. General values live in
``data``; regulated (PHI) values live in ``regulated_data`` and are written
through to the protected store by the application layer. A field id never
appears in both maps.

Architecture:
    - Pure domain entity (no infrastructure dependencies)
    - State transitions return Result (railway-oriented programming)
    - NO event collection (the service publishes events)

State Machine:
    DRAFT -> COMPLETED -> SIGNED (optional, repeatable) -> LOCKED (terminal)
    update is legal from DRAFT and COMPLETED only

Usage:
    instance = FormInstance.create(template=template, created_by=actor.id)
    match instance.apply_changes(
        general={"visitCount": 3},
        regulated={"patientName": "Jane Doe"},
        template=template,
        actor_id=actor.id,
    ):
        case Success(value=changes):
            ...
        case Failure(error=error):
            ...
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.domain.entities.form_template import FormTemplate
from src.domain.enums import FormInstanceStatus
from src.domain.errors import IllegalStateError
from src.domain.validators import is_empty_value
from src.domain.value_objects import (
    REDACTED,
    ChangeHistoryEntry,
    ElectronicSignature,
    FieldChange,
)


def compute_completion_percentage(
    template: FormTemplate,
    values: Mapping[str, Any],
) -> int:
    """Percentage of statically required fields holding a non-empty value.

    Rounded half-up. A template without required fields is 100% complete.
    """
    required = template.required_fields()
    if not required:
        return 100
    answered = sum(1 for f in required if not is_empty_value(values.get(f.id)))
    return math.floor(100 * answered / len(required) + 0.5)


@dataclass
class FormInstance:
    """Filled-in form for one subject.

    Attributes:
        id: Instance identifier.
        template_id: Template the instance was created from.
        template_version: Template version at creation.
        subject_id: Opaque subject reference (never a name).
        study_id: Owning study.
        data: General-partition values keyed by field id.
        regulated_data: Regulated-partition values keyed by field id.
        status: Lifecycle state.
        completion_percentage: Derived from data; recomputed on every mutation.
        signatures: Electronic signatures, oldest first.
        change_history: Mutation history, oldest first.
        regulated_resource_ids: Protected-store resources holding regulated data.
        version: Incremented on every mutation (optimistic concurrency token).
    """

    template_id: str
    template_version: int
    id: str = field(default_factory=lambda: str(uuid7()))
    subject_id: str | None = None
    study_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    regulated_data: dict[str, Any] = field(default_factory=dict)
    status: FormInstanceStatus = FormInstanceStatus.DRAFT
    completion_percentage: int = 0
    signatures: list[ElectronicSignature] = field(default_factory=list)
    change_history: list[ChangeHistoryEntry] = field(default_factory=list)
    regulated_resource_ids: list[str] = field(default_factory=list)
    version: int = 1
    created_by: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_modified_by: str | None = None
    last_modified_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    submitted_by: str | None = None
    submitted_at: datetime | None = None
    locked_by: str | None = None
    locked_at: datetime | None = None

    @classmethod
    def create(
        cls,
        *,
        template: FormTemplate,
        created_by: str,
        subject_id: str | None = None,
        study_id: str | None = None,
    ) -> "FormInstance":
        """New draft with empty data and a seeded ``created`` history entry."""
        now = datetime.now(UTC)
        instance = cls(
            template_id=template.id,
            template_version=template.version,
            subject_id=subject_id,
            study_id=study_id,
            created_by=created_by,
            created_at=now,
            last_modified_by=created_by,
            last_modified_at=now,
        )
        instance.completion_percentage = compute_completion_percentage(
            template, instance.all_values()
        )
        instance.change_history.append(
            ChangeHistoryEntry(action="created", actor_id=created_by, timestamp=now)
        )
        return instance

    # -------------------------------------------------------------------------
    # Query Methods (Read-Only)
    # -------------------------------------------------------------------------

    def all_values(self) -> dict[str, Any]:
        """General and regulated values merged (used for validation only)."""
        return {**self.data, **self.regulated_data}

    def contains_regulated_data(self) -> bool:
        return any(not is_empty_value(v) for v in self.regulated_data.values())

    def is_locked(self) -> bool:
        return self.status == FormInstanceStatus.LOCKED

    # -------------------------------------------------------------------------
    # State Transition Methods (Return Result)
    # -------------------------------------------------------------------------

    def apply_changes(
        self,
        *,
        general: Mapping[str, Any],
        regulated: Mapping[str, Any],
        template: FormTemplate,
        actor_id: str,
        reason: str | None = None,
    ) -> Result[tuple[FieldChange, ...], IllegalStateError]:
        """Merge partitioned deltas and recompute completion.

        Args:
            general: General-partition delta.
            regulated: Regulated-partition delta.
            template: Template used to recompute completion.
            actor_id: Who made the change.
            reason: Correction reason (recorded in history).

        Returns:
            Success(changes): Field-level changes (regulated values redacted).
            Failure(IllegalStateError): Instance is signed or locked.
        """
        if not self.status.is_editable():
            return Failure(error=self.illegal_transition("update"))

        changes: list[FieldChange] = []
        for field_id, new_value in general.items():
            old_value = self.data.get(field_id, self.regulated_data.get(field_id))
            self.regulated_data.pop(field_id, None)
            self.data[field_id] = new_value
            if old_value != new_value:
                changes.append(
                    FieldChange(field_id=field_id, old_value=old_value, new_value=new_value)
                )
        for field_id, new_value in regulated.items():
            old_value = self.regulated_data.get(field_id, self.data.get(field_id))
            self.data.pop(field_id, None)
            self.regulated_data[field_id] = new_value
            if old_value != new_value:
                changes.append(
                    FieldChange(
                        field_id=field_id,
                        old_value=REDACTED,
                        new_value=REDACTED,
                        regulated=True,
                    )
                )

        self.completion_percentage = compute_completion_percentage(
            template, self.all_values()
        )
        self._touch(actor_id)
        self.change_history.append(
            ChangeHistoryEntry(
                action="updated",
                actor_id=actor_id,
                timestamp=self.last_modified_at,
                reason=reason,
                changes=tuple(changes),
            )
        )
        return Success(value=tuple(changes))

    def mark_submitted(self, actor_id: str) -> Result[None, IllegalStateError]:
        """DRAFT -> COMPLETED. Form-level validation is the caller's job."""
        if self.status != FormInstanceStatus.DRAFT:
            return Failure(error=self.illegal_transition("submit"))
        self.status = FormInstanceStatus.COMPLETED
        self._touch(actor_id)
        self.submitted_by = actor_id
        self.submitted_at = self.last_modified_at
        self._record("submitted", actor_id)
        return Success(value=None)

    def add_signature(
        self, signature: ElectronicSignature
    ) -> Result[None, IllegalStateError]:
        """COMPLETED/SIGNED -> SIGNED, appending the signature."""
        if not self.status.can_be_signed():
            return Failure(error=self.illegal_transition("sign"))
        self.signatures.append(signature)
        self.status = FormInstanceStatus.SIGNED
        self._touch(signature.signer_id)
        self._record("signed", signature.signer_id, reason=signature.meaning)
        return Success(value=None)

    def lock(
        self, actor_id: str, reason: str | None = None
    ) -> Result[None, IllegalStateError]:
        """COMPLETED/SIGNED -> LOCKED (terminal)."""
        if not self.status.can_be_locked():
            return Failure(error=self.illegal_transition("lock"))
        self.status = FormInstanceStatus.LOCKED
        self._touch(actor_id)
        self.locked_by = actor_id
        self.locked_at = self.last_modified_at
        self._record("locked", actor_id, reason=reason)
        return Success(value=None)

    def illegal_transition(self, action: str) -> IllegalStateError:
        """Error for an action the current status does not allow."""
        return IllegalStateError(
            code=ErrorCode.FORM_INSTANCE_ILLEGAL_TRANSITION,
            message=f"Cannot {action} a form instance in {self.status.value} state",
            current_status=self.status.value,
            attempted_action=action,
            details={"form_instance_id": self.id},
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _touch(self, actor_id: str) -> None:
        self.version += 1
        self.last_modified_by = actor_id
        self.last_modified_at = datetime.now(UTC)

    def _record(self, action: str, actor_id: str, reason: str | None = None) -> None:
        self.change_history.append(
            ChangeHistoryEntry(
                action=action,
                actor_id=actor_id,
                timestamp=self.last_modified_at,
                reason=reason,
            )
        )
