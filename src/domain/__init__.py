"""Domain layer - pure form, event and audit logic.

No framework or infrastructure dependencies.

Structure:
- entities/: FormTemplate, FormInstance, AuditLogEntry, FailedSyncRecord
- value_objects/: Actor, ElectronicSignature, change history, ValidationResult
- events/: Event record, EventType catalogue, wiring registry
- protocols/: ports for stores, repositories, event bus and handlers
- services/: partitioner, validation engine, FHIR mapping
- validators/: value-level validators and the custom validator registry
"""
