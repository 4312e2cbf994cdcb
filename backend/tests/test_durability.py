"""
Tests for the durability sink and restart replay.
"""
import logging
import random

import pytest
from sqlmodel import SQLModel, Session

from bedflow.core.durability import NullDurabilitySink
from bedflow.core.exceptions import DurabilityError
from bedflow.core.notifier import ChangeNotifier, RecordingSubscriber
from bedflow.models.enums import BedStatusEnum, EntityKindEnum, EventKindEnum
from bedflow.repositories.bed_repo import BedRepository
from bedflow.repositories.patient_repo import PatientRepository
from bedflow.services.admission_service import AdmissionService
from bedflow.services.registry import Registry
from bedflow.utils.init_data import seed_facility

from conftest import FakeClock


class BrokenSink:
    """Sink whose every write fails."""

    def __init__(self):
        self.calls = 0

    def persist(self, entity_kind, entity_id, fields):
        self.calls += 1
        raise DurabilityError(entity_kind.value, entity_id, "disk full")

    def delete(self, entity_kind, entity_id):
        self.calls += 1
        raise DurabilityError(entity_kind.value, entity_id, "disk full")

    def load_all(self):
        return [], []


@pytest.fixture
def persistent_registry(sink):
    return Registry(sink=sink, clock=FakeClock(), rng=random.Random(1))


class TestSqlModelSink:
    """Rows written through the repositories."""

    def test_persist_and_overwrite_bed(self, engine, sink):
        fields = {
            "id": "BED-1", "ward": "ICU", "status": "Available",
            "distance_from_station": 4, "type": "Critical", "occupant": None,
        }
        sink.persist(EntityKindEnum.BED, "BED-1", fields)
        sink.persist(EntityKindEnum.BED, "BED-1", {**fields, "status": "Cleaning"})

        with Session(engine) as session:
            rows = BedRepository(session).get_all()
        assert len(rows) == 1
        assert rows[0].status == "Cleaning"

    def test_delete_missing_row_is_ignored(self, sink):
        sink.delete(EntityKindEnum.PATIENT, "P-404")

    def test_patient_rows_in_arrival_order(self, engine, persistent_registry):
        clock = persistent_registry.clock
        first = persistent_registry.add_patient({"name": "First", "triage_level": 5})
        clock.now = clock.now.replace(hour=13)
        second = persistent_registry.add_patient({"name": "Second", "triage_level": 1})

        with Session(engine) as session:
            rows = PatientRepository(session).get_in_arrival_order()
        assert [r.id for r in rows] == [first.id, second.id]

    def test_database_error_becomes_durability_error(self, engine, sink):
        SQLModel.metadata.drop_all(engine)

        with pytest.raises(DurabilityError):
            sink.persist(EntityKindEnum.PATIENT, "P-1", {
                "name": "Ana", "triage_level": 2, "condition": "Stable", "joined_at": None,
            })

        SQLModel.metadata.create_all(engine)

    def test_null_sink(self):
        sink = NullDurabilitySink()
        sink.persist(EntityKindEnum.BED, "BED-1", {})
        sink.delete(EntityKindEnum.BED, "BED-1")
        assert sink.load_all() == ([], [])


class TestReplay:
    """Restart rebuilds identical state."""

    def test_restart_reproduces_state(self, persistent_registry, sink):
        registry = persistent_registry
        seed_facility(registry)
        admission = AdmissionService(registry)

        a = registry.add_patient({"name": "Ana", "triage_level": 2, "condition": "Chest pain"})
        b = registry.add_patient({"name": "Ben", "triage_level": 4})
        c = registry.add_patient({"name": "Cai", "triage_level": 1})
        admission.assign("greedy", a.id, wanted_ward="ICU")
        admission.assign("manual", c.id, bed_id="BED-30")
        admission.assign("manual", b.id, bed_id="BED-31")
        admission.purge(b.id)
        registry.upsert_bed_status("BED-45", "Damaged")
        registry.remove_bed("BED-50")
        d = registry.add_patient({"name": "Dee", "triage_level": 3})
        registry.add_bed("Pediatrics")

        restarted = Registry(sink=sink)
        restarted.load(*sink.load_all())

        before = {bed.id: bed.to_dict() for bed in registry.list_beds()}
        after = {bed.id: bed.to_dict() for bed in restarted.list_beds()}
        assert after == before
        assert after["BED-31"]["status"] == "Cleaning"
        assert after["BED-30"]["occupant"]["id"] == c.id
        assert [p.to_dict() for p in restarted.list_patients()] == [d.to_dict()]

    def test_transfer_survives_restart(self, persistent_registry, sink):
        registry = persistent_registry
        seed_facility(registry)
        admission = AdmissionService(registry)
        patient = registry.add_patient({"name": "Ana", "triage_level": 2})
        admission.assign("manual", patient.id, bed_id="BED-1")
        admission.assignment.transfer("BED-1", "BED-2")

        restarted = Registry(sink=sink)
        restarted.load(*sink.load_all())

        assert restarted.get_bed("BED-1").status == BedStatusEnum.CLEANING
        assert restarted.get_bed("BED-2").occupant.id == patient.id
        assert restarted.list_patients() == []

    def test_seed_only_when_empty(self, persistent_registry, sink):
        assert seed_facility(persistent_registry) == 50

        restarted = Registry(sink=sink)
        restarted.load(*sink.load_all())
        assert seed_facility(restarted) == 0
        assert len(restarted.list_beds()) == 50

    def test_load_emits_nothing_and_writes_nothing(self, sink):
        sink.persist(EntityKindEnum.BED, "BED-1", {
            "ward": "General", "status": "Available", "distance_from_station": 2,
            "type": "Standard", "occupant": None,
        })
        broken = BrokenSink()
        recorder = RecordingSubscriber()
        notifier = ChangeNotifier()
        notifier.subscribe(recorder)

        registry = Registry(sink=broken, notifier=notifier)
        registry.load(*sink.load_all())

        assert broken.calls == 0
        assert recorder.events == []
        assert registry.get_bed("BED-1") is not None


class TestDurabilityFailures:
    """Write failures are logged and swallowed."""

    def test_failures_do_not_reach_callers(self, caplog):
        sink = BrokenSink()
        recorder = RecordingSubscriber()
        notifier = ChangeNotifier()
        notifier.subscribe(recorder)
        registry = Registry(sink=sink, notifier=notifier)

        with caplog.at_level(logging.ERROR, logger="bedflow.registry"):
            bed = registry.add_bed("ICU")
            patient = registry.add_patient({"name": "Ana", "triage_level": 1})
            admission = AdmissionService(registry)
            admission.assign("manual", patient.id, bed_id=bed.id)

        # In-memory state is kept, not rolled back
        assert registry.get_bed(bed.id).occupant.id == patient.id
        assert registry.list_patients() == []
        assert sink.calls == 4
        assert "Durability failure" in caplog.text

        # Events still go out
        assert recorder.kinds() == [
            EventKindEnum.BED_UPDATED,
            EventKindEnum.QUEUE_UPDATED,
            EventKindEnum.BED_UPDATED,
            EventKindEnum.QUEUE_UPDATED,
        ]

    def test_sqlalchemy_failure_through_registry(self, engine, sink):
        registry = Registry(sink=sink)
        SQLModel.metadata.drop_all(engine)

        bed = registry.add_bed("General")

        assert registry.get_bed(bed.id) is bed
        SQLModel.metadata.create_all(engine)
