"""Unit tests for SynchronizationEventHandler.

Wires the handler to a real DualStoreSynchronizer over in-memory stores so
that the partitioned writes can be inspected.
"""

from unittest.mock import MagicMock

import pytest

from src.application.services import DualStoreSynchronizer
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.entities import FormField, FormTemplate
from src.domain.events import Event, EventType
from src.domain.services import observation_to_record, resource_to_record
from src.infrastructure.events.handlers.synchronization_event_handler import (
    SynchronizationEventHandler,
)
from src.infrastructure.persistence.repositories.failed_sync_repository import (
    FAILED_SYNCS_COLLECTION,
    QuarantineFailedSyncRepository,
)
from src.infrastructure.persistence.repositories.form_template_repository import (
    InMemoryFormTemplateRepository,
)
from src.infrastructure.stores import (
    InMemoryGeneralStore,
    InMemoryProtectedStore,
    InMemoryQuarantineStore,
)


class FlakyProtectedStore(InMemoryProtectedStore):
    """Protected store that times out for the next ``failures_remaining`` writes."""

    def __init__(self):
        super().__init__()
        self.failures_remaining = 0

    async def create(self, resource):
        if self.failures_remaining:
            self.failures_remaining -= 1
            raise TimeoutError("protected store unavailable")
        return await super().create(resource)


@pytest.fixture
def protected_store() -> FlakyProtectedStore:
    return FlakyProtectedStore()


@pytest.fixture
def general_store() -> InMemoryGeneralStore:
    return InMemoryGeneralStore()


@pytest.fixture
def quarantine_store() -> InMemoryQuarantineStore:
    return InMemoryQuarantineStore()


@pytest.fixture
def failed_sync_repository(general_store, quarantine_store) -> QuarantineFailedSyncRepository:
    return QuarantineFailedSyncRepository(general_store, quarantine_store)


@pytest.fixture
def template_repository() -> InMemoryFormTemplateRepository:
    return InMemoryFormTemplateRepository(
        [
            FormTemplate(
                id="tpl-arm",
                name="Randomisation",
                fields=[
                    FormField(id="armName", name="armName", is_regulated_field=False),
                    FormField(id="initials", name="initials", is_regulated_field=True),
                ],
            )
        ]
    )


@pytest.fixture
def handler(
    protected_store, general_store, failed_sync_repository, template_repository, mock_logger
):
    synchronizer = DualStoreSynchronizer(
        protected_store=protected_store,
        general_store=general_store,
        failed_sync_repository=failed_sync_repository,
        audit_writer=MagicMock(),
        logger=mock_logger,
    )
    return SynchronizationEventHandler(
        synchronizer=synchronizer,
        template_repository=template_repository,
        logger=mock_logger,
    )


def _submitted(data, **extra) -> Event:
    payload = {"formId": "f-1", "studyId": "s-1", "patientId": "p-1", "data": data}
    payload.update(extra)
    return Event(event_type=EventType.FORM_SUBMITTED, actor_id="user-1", payload=payload).stamped()


@pytest.mark.unit
class TestFormSubmittedSync:
    """Test FORM_SUBMITTED partitioning and writes."""

    async def test_regulated_and_general_split(self, handler, protected_store, general_store):
        """Test patientName goes only to the protected store and visitCount only to the general store."""
        event = _submitted({"patientName": "Jane Doe", "visitCount": 3})

        result = await handler.handle(event)

        assert isinstance(result, Success)
        (observation,) = protected_store.resources_of_type("Observation")
        assert observation_to_record(observation) == {"patientName": "Jane Doe"}
        assert observation["subject"] == {"reference": "Patient/p-1"}

        (document,) = (await general_store.query("formSubmissions")).value
        assert document["data"] == {"visitCount": 3}
        assert document["subjectRef"] == "p-1"
        assert document["eventId"] == str(event.event_id)
        assert "Jane Doe" not in repr(document)

    async def test_observation_links_back_to_event(self, handler, protected_store):
        """Test the observation carries form, study and event identifiers."""
        event = _submitted({"patientName": "Jane Doe"})

        await handler.handle(event)

        (observation,) = protected_store.resources_of_type("Observation")
        identifiers = {i["system"]: i["value"] for i in observation["identifier"]}
        assert identifiers["urn:clinical-forms:formId"] == "f-1"
        assert identifiers["urn:clinical-forms:eventId"] == str(event.event_id)

    async def test_general_only_submission(self, handler, protected_store, general_store):
        """Test no protected write happens without regulated fields."""
        await handler.handle(_submitted({"visitCount": 3}))

        assert len(protected_store) == 0
        assert general_store.count("formSubmissions") == 1

    async def test_template_classification_preferred(
        self, handler, protected_store, general_store
    ):
        """Test template flags override the heuristic for declared fields."""
        await handler.handle(
            _submitted({"armName": "B", "initials": "JD"}, templateId="tpl-arm")
        )

        (observation,) = protected_store.resources_of_type("Observation")
        assert observation_to_record(observation) == {"initials": "JD"}
        (document,) = (await general_store.query("formSubmissions")).value
        assert document["data"] == {"armName": "B"}

    async def test_unknown_template_falls_back_to_heuristic(
        self, handler, protected_store, mock_logger
    ):
        """Test a missing template logs a warning and uses key-name matching."""
        await handler.handle(_submitted({"armName": "B"}, templateId="tpl-missing"))

        (observation,) = protected_store.resources_of_type("Observation")
        assert observation_to_record(observation) == {"armName": "B"}
        assert mock_logger.warning.call_args.args[0] == "sync_template_not_found"

    async def test_missing_subject_rejected(self, handler, protected_store):
        """Test payloads without a subject id are refused before any write."""
        result = await handler.handle(_submitted({"visitCount": 3}, patientId=None))

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.SYNC_PAYLOAD_INVALID
        assert result.error.field == "patientId"
        assert len(protected_store) == 0

    async def test_non_mapping_data_rejected(self, handler):
        """Test data must be an object."""
        result = await handler.handle(_submitted(["not", "a", "dict"]))

        assert result.error.field == "data"


@pytest.mark.unit
class TestSubjectAndStudySync:
    """Test PATIENT_UPDATED and STUDY_UPDATED targets."""

    async def test_patient_updated(self, handler, protected_store, general_store):
        """Test patient data becomes a Patient resource plus a patients document."""
        event = Event(
            event_type=EventType.PATIENT_UPDATED,
            payload={"patientId": "p-1", "data": {"dateOfBirth": "1980-01-01", "site": "A"}},
        ).stamped()

        await handler.handle(event)

        (patient,) = protected_store.resources_of_type("Patient")
        assert resource_to_record(patient) == {"dateOfBirth": "1980-01-01"}
        (document,) = (await general_store.query("patients")).value
        assert document["data"] == {"site": "A"}

    async def test_study_updated_uses_study_subject(self, handler, general_store):
        """Test studies are referenced by studyId."""
        event = Event(
            event_type=EventType.STUDY_UPDATED,
            payload={"studyId": "s-9", "data": {"phase": "II"}},
        ).stamped()

        await handler.handle(event)

        (document,) = (await general_store.query("studies")).value
        assert document["subjectRef"] == "s-9"

    def test_handled_event_types(self, handler):
        """Test only sync-requiring event types are handled."""
        assert handler.can_handle(Event(event_type=EventType.PATIENT_UPDATED))
        assert not handler.can_handle(Event(event_type=EventType.FORM_DRAFT_SAVED))


@pytest.mark.unit
class TestFailureAndRedrive:
    """Test the failure path and replaying a captured event."""

    async def test_failure_keeps_regulated_values_out_of_general_store(
        self, handler, protected_store, general_store, quarantine_store
    ):
        """Test no general-store collection holds a regulated value after a failure."""
        protected_store.failures_remaining = 1
        event = _submitted({"patientName": "Jane Doe", "visitCount": 3})

        result = await handler.handle(event)

        assert isinstance(result, Failure)
        assert general_store.collection_names() == [FAILED_SYNCS_COLLECTION, "formSubmissions"]
        for collection in general_store.collection_names():
            documents = (await general_store.query(collection)).value
            assert "Jane Doe" not in repr(documents)
            assert "patientName" not in repr(documents)
        assert len(quarantine_store) == 1

    async def test_redrive_writes_each_partition_once(
        self, handler, protected_store, general_store, failed_sync_repository
    ):
        """Test replaying the captured event completes the sync without duplicates."""
        protected_store.failures_remaining = 1
        await handler.handle(_submitted({"patientName": "Jane Doe", "visitCount": 3}))
        (record,) = (await failed_sync_repository.find_pending()).value

        result = await handler.handle(record.original_event)
        repeat = await handler.handle(record.original_event)

        assert isinstance(result, Success)
        assert isinstance(repeat, Success)
        assert general_store.count("formSubmissions") == 1
        (observation,) = protected_store.resources_of_type("Observation")
        assert observation_to_record(observation) == {"patientName": "Jane Doe"}
        (document,) = (await general_store.query("formSubmissions")).value
        assert document["id"] == str(record.original_event.event_id)

    async def test_unstamped_event_is_stamped_before_writing(self, handler, general_store):
        """Test direct callers without an event id still get a real document key."""
        event = Event(
            event_type=EventType.STUDY_UPDATED,
            payload={"studyId": "s-9", "data": {"phase": "II"}},
        )

        await handler.handle(event)

        (document,) = (await general_store.query("studies")).value
        assert document["id"] != "None"
        assert document["id"] == document["eventId"]
