"""Form instance service - lifecycle state machine.

Owns every transition of a form instance and the side effects around it:

    create  -> DRAFT (empty data, completion computed, "created" history)
    update  -> DRAFT/COMPLETED only; partitions the delta, writes a snapshot
               of all regulated values to the protected store, keeps general
               values on the instance
    submit  -> DRAFT -> COMPLETED after the validation engine passes
    sign    -> COMPLETED/SIGNED -> SIGNED, hash-bound electronic signature
    lock    -> COMPLETED/SIGNED -> LOCKED (terminal)

Architecture:
    - Application layer service (orchestrates domain + ports)
    - Every operation returns Result; nothing is persisted or published
      when an operation fails
    - Events are fire-and-forget; their payloads carry ids, counts and
      flags, never regulated values

Concurrency:
    Last-write-wins by default. Passing ``expected_version`` to ``update``
    turns on an optimistic check against the stored version.

Usage:
    service = get_form_instance_service()
    result = await service.create("tpl-vitals", subject_id="subj-001")
    match result:
        case Success(value=instance):
            await service.update(instance.id, {"visitCount": 3}, reason="Initial entry")
        case Failure(error=error):
            ...
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from src.core.enums import ErrorCode
from src.core.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from src.core.result import Failure, Result, Success
from src.domain.entities import FormInstance, FormTemplate
from src.domain.enums import FormInstanceStatus
from src.domain.events import Event, EventType
from src.domain.protocols import (
    EventBusProtocol,
    FormInstanceRepository,
    FormTemplateRepository,
    IdentityProviderProtocol,
    LoggerProtocol,
    ProtectedStoreProtocol,
)
from src.domain.services import (
    FormValidationEngine,
    TemplateClassifier,
    partition,
    record_to_observation,
)
from src.domain.value_objects import Actor, ElectronicSignature, compute_document_hash


class FormInstanceService:
    """Lifecycle operations on form instances.

    Dependencies (injected via constructor):
        - FormTemplateRepository / FormInstanceRepository: persistence
        - ProtectedStoreProtocol: regulated write-through
        - EventBusProtocol: lifecycle events
        - IdentityProviderProtocol: current actor (stamps and role gating)
        - FormValidationEngine: submit-time validation
    """

    def __init__(
        self,
        *,
        template_repository: FormTemplateRepository,
        instance_repository: FormInstanceRepository,
        protected_store: ProtectedStoreProtocol,
        event_bus: EventBusProtocol,
        identity_provider: IdentityProviderProtocol,
        logger: LoggerProtocol,
        validation_engine: FormValidationEngine | None = None,
        signature_min_role_level: int = 2,
        lock_min_role_level: int = 3,
    ) -> None:
        self._templates = template_repository
        self._instances = instance_repository
        self._protected_store = protected_store
        self._event_bus = event_bus
        self._identity = identity_provider
        self._logger = logger
        self._engine = validation_engine or FormValidationEngine()
        self.signature_min_role_level = signature_min_role_level
        self.lock_min_role_level = lock_min_role_level

    # =========================================================================
    # Queries
    # =========================================================================

    async def get(self, instance_id: str) -> Result[FormInstance, DomainError]:
        """Load an instance with regulated data hydrated."""
        loaded = await self._load(instance_id)
        if isinstance(loaded, Failure):
            return loaded
        instance, _ = loaded.value
        return Success(value=instance)

    # =========================================================================
    # Transitions
    # =========================================================================

    async def create(
        self,
        template_id: str,
        *,
        subject_id: str | None = None,
        study_id: str | None = None,
    ) -> Result[FormInstance, DomainError]:
        """Create a DRAFT instance of a template.

        Returns:
            Success(instance) or Failure(NotFoundError | DomainError).
        """
        template = await self._templates.find_by_id(template_id)
        if template is None:
            return Failure(error=self._template_not_found(template_id))

        actor = self._identity.current_actor()
        instance = FormInstance.create(
            template=template,
            created_by=actor.id,
            subject_id=subject_id,
            study_id=study_id,
        )
        saved = await self._instances.save(instance)
        if isinstance(saved, Failure):
            return saved

        self._logger.info(
            "form_instance_created",
            form_instance_id=instance.id,
            template_id=template.id,
            actor_id=actor.id,
        )
        await self._publish(
            EventType.FORM_INSTANCE_CREATED,
            actor,
            instance,
            completionPercentage=instance.completion_percentage,
        )
        return Success(value=instance)

    async def update(
        self,
        instance_id: str,
        data_delta: Mapping[str, Any],
        *,
        reason: str | None = None,
        expected_version: int | None = None,
    ) -> Result[FormInstance, DomainError]:
        """Merge ``data_delta`` into the instance.

        Regulated keys (per the template) go to ``regulated_data`` and are
        written to the protected store; general keys stay in ``data``.

        Args:
            instance_id: Instance to change.
            data_delta: Field id -> new value.
            reason: Correction reason, recorded in change history.
            expected_version: When given, the stored version must match.

        Returns:
            Success(instance) or Failure(NotFoundError | ConflictError |
            IllegalStateError | DomainError).
        """
        loaded = await self._load(instance_id)
        if isinstance(loaded, Failure):
            return loaded
        instance, template = loaded.value

        if expected_version is not None and instance.version != expected_version:
            return Failure(
                error=ConflictError(
                    code=ErrorCode.FORM_INSTANCE_VERSION_CONFLICT,
                    message=(
                        f"Form instance {instance_id} is at version {instance.version}, "
                        f"expected {expected_version}"
                    ),
                    resource_type="FormInstance",
                    conflicting_field="version",
                    details={"current_version": instance.version},
                )
            )

        actor = self._identity.current_actor()
        parts = partition(data_delta, TemplateClassifier.for_template(template))
        applied = instance.apply_changes(
            general=parts.general,
            regulated=parts.regulated,
            template=template,
            actor_id=actor.id,
            reason=reason,
        )
        if isinstance(applied, Failure):
            return applied
        changes = applied.value

        if parts.has_regulated:
            # One live snapshot per instance; earlier snapshots stay in the
            # protected store as history but are no longer referenced.
            created = await self._protected_store.create(
                record_to_observation(
                    dict(instance.regulated_data),
                    subject_reference=instance.subject_id or instance.id,
                    code_text=template.name,
                    identifiers={
                        "formInstanceId": instance.id,
                        "templateId": template.id,
                        "formInstanceVersion": str(instance.version),
                    },
                )
            )
            if isinstance(created, Failure):
                return created
            instance.regulated_resource_ids = [created.value]

        saved = await self._instances.save(instance)
        if isinstance(saved, Failure):
            if parts.has_regulated:
                self._logger.warning(
                    "form_instance_regulated_snapshot_unreferenced",
                    form_instance_id=instance.id,
                    resource_id=instance.regulated_resource_ids[0],
                    error_code=saved.error.code.value,
                )
            return saved

        changed_ids = [change.field_id for change in changes]
        self._logger.info(
            "form_instance_updated",
            form_instance_id=instance.id,
            changed_field_count=len(changed_ids),
            version=instance.version,
        )
        await self._publish(
            EventType.FORM_INSTANCE_UPDATED,
            actor,
            instance,
            changedFieldIds=changed_ids,
            completionPercentage=instance.completion_percentage,
        )
        return Success(value=instance)

    async def submit(self, instance_id: str) -> Result[FormInstance, DomainError]:
        """Validate and move a DRAFT instance to COMPLETED.

        On validation errors nothing changes; a FORM_VALIDATION_FAILED event
        (field ids and counts only) is published and every error is returned.

        Returns:
            Success(instance) or Failure(ValidationError | IllegalStateError |
            NotFoundError | DomainError).
        """
        loaded = await self._load(instance_id)
        if isinstance(loaded, Failure):
            return loaded
        instance, template = loaded.value

        if instance.status != FormInstanceStatus.DRAFT:
            return Failure(error=instance.illegal_transition("submit"))

        actor = self._identity.current_actor()
        validation = self._engine.validate(instance, template)
        if not validation.is_valid:
            field_ids = sorted({error.field_id for error in validation.errors})
            self._logger.info(
                "form_instance_validation_failed",
                form_instance_id=instance.id,
                error_count=len(validation.errors),
            )
            await self._publish(
                EventType.FORM_VALIDATION_FAILED,
                actor,
                instance,
                errorCount=len(validation.errors),
                fieldIds=field_ids,
            )
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message=f"Form has {len(validation.errors)} validation error(s)",
                    errors=validation.errors,
                    details={"form_instance_id": instance.id},
                )
            )

        transitioned = instance.mark_submitted(actor.id)
        if isinstance(transitioned, Failure):
            return transitioned

        saved = await self._instances.save(instance)
        if isinstance(saved, Failure):
            return saved

        self._logger.info(
            "form_instance_submitted",
            form_instance_id=instance.id,
            warning_count=len(validation.warnings),
        )
        await self._publish(
            EventType.FORM_INSTANCE_SUBMITTED,
            actor,
            instance,
            completionPercentage=instance.completion_percentage,
        )
        return Success(value=instance)

    async def sign(
        self,
        instance_id: str,
        *,
        meaning: str,
        method: str,
    ) -> Result[FormInstance, DomainError]:
        """Append an electronic signature (COMPLETED or SIGNED -> SIGNED).

        The signature hash binds the current general data and the template
        identity.

        Returns:
            Success(instance) or Failure(AuthorizationError |
            IllegalStateError | NotFoundError | DomainError).
        """
        loaded = await self._load(instance_id)
        if isinstance(loaded, Failure):
            return loaded
        instance, _ = loaded.value

        # State before role: an illegal transition is illegal for everyone.
        if not instance.status.can_be_signed():
            return Failure(error=instance.illegal_transition("sign"))

        actor = self._identity.current_actor()
        denied = self._check_role(actor, self.signature_min_role_level, "sign")
        if denied is not None:
            return Failure(error=denied)

        signature = ElectronicSignature(
            signer_id=actor.id,
            signer_display=actor.display_name,
            signed_at=datetime.now(UTC),
            meaning=meaning,
            method=method,
            document_hash=compute_document_hash(
                instance.template_id, instance.template_version, instance.data
            ),
        )
        signed = instance.add_signature(signature)
        if isinstance(signed, Failure):
            return signed

        saved = await self._instances.save(instance)
        if isinstance(saved, Failure):
            return saved

        self._logger.info(
            "form_instance_signed",
            form_instance_id=instance.id,
            signer_id=actor.id,
            signature_count=len(instance.signatures),
        )
        await self._publish(
            EventType.FORM_INSTANCE_SIGNED,
            actor,
            instance,
            meaning=meaning,
            method=method,
            documentHash=signature.document_hash,
            signatureCount=len(instance.signatures),
        )
        return Success(value=instance)

    async def lock(
        self,
        instance_id: str,
        *,
        reason: str | None = None,
    ) -> Result[FormInstance, DomainError]:
        """Administrative transition to LOCKED (terminal).

        Returns:
            Success(instance) or Failure(AuthorizationError |
            IllegalStateError | NotFoundError | DomainError).
        """
        loaded = await self._load(instance_id)
        if isinstance(loaded, Failure):
            return loaded
        instance, _ = loaded.value

        if not instance.status.can_be_locked():
            return Failure(error=instance.illegal_transition("lock"))

        actor = self._identity.current_actor()
        denied = self._check_role(actor, self.lock_min_role_level, "lock")
        if denied is not None:
            return Failure(error=denied)

        locked = instance.lock(actor.id, reason=reason)
        if isinstance(locked, Failure):
            return locked

        saved = await self._instances.save(instance)
        if isinstance(saved, Failure):
            return saved

        self._logger.info("form_instance_locked", form_instance_id=instance.id, actor_id=actor.id)
        await self._publish(EventType.FORM_INSTANCE_LOCKED, actor, instance)
        return Success(value=instance)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _load(
        self, instance_id: str
    ) -> Result[tuple[FormInstance, FormTemplate], DomainError]:
        found = await self._instances.find_by_id(instance_id)
        if isinstance(found, Failure):
            return found
        instance = found.value
        if instance is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.FORM_INSTANCE_NOT_FOUND,
                    message=f"Form instance {instance_id} not found",
                    resource_type="FormInstance",
                    resource_id=instance_id,
                )
            )

        template = await self._templates.find_by_id(instance.template_id)
        if template is None:
            return Failure(error=self._template_not_found(instance.template_id))
        return Success(value=(instance, template))

    @staticmethod
    def _template_not_found(template_id: str) -> NotFoundError:
        return NotFoundError(
            code=ErrorCode.FORM_TEMPLATE_NOT_FOUND,
            message=f"Form template {template_id} not found",
            resource_type="FormTemplate",
            resource_id=template_id,
        )

    @staticmethod
    def _check_role(actor: Actor, minimum: int, operation: str) -> AuthorizationError | None:
        if actor.has_role_level(minimum):
            return None
        return AuthorizationError(
            code=ErrorCode.PERMISSION_DENIED,
            message=f"Role level {minimum} or higher is required to {operation}",
            required_permission=operation,
            details={"actor_id": actor.id, "role_level": actor.role_level},
        )

    async def _publish(
        self,
        event_type: EventType,
        actor: Actor,
        instance: FormInstance,
        **extra: Any,
    ) -> None:
        payload: dict[str, Any] = {
            "formInstanceId": instance.id,
            "templateId": instance.template_id,
            "templateVersion": instance.template_version,
            "patientId": instance.subject_id,
            "studyId": instance.study_id,
            "status": instance.status.value,
            "version": instance.version,
            "containsRegulatedData": instance.contains_regulated_data(),
            "actorDisplay": actor.display_name,
            **extra,
        }
        await self._event_bus.publish(
            Event(event_type=event_type, actor_id=actor.id, payload=payload)
        )
