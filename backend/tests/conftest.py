"""
pytest fixtures.
"""
import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, create_engine
from sqlmodel.pool import StaticPool

from bedflow.core.durability import SqlModelDurabilitySink
from bedflow.core.notifier import ChangeNotifier, RecordingSubscriber
from bedflow.main import create_app
from bedflow.models.bed import Bed
from bedflow.models.patient import Patient
from bedflow.models.enums import WardEnum, BedStatusEnum, bed_type_for_ward
from bedflow.services.registry import Registry
from bedflow.services.assignment_service import AssignmentService
from bedflow.services.admission_service import AdmissionService
from bedflow.services.directory_service import DirectoryService


FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

DOCTOR = {"X-Actor-Role": "Doctor"}
NURSE = {"X-Actor-Role": "Nurse"}


class FakeClock:
    """Settable clock for time-dependent ranking."""

    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now


# Engine for tests (in-memory SQLite)
@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory test engine shared across connections."""
    from bedflow.models import records  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="sink")
def sink_fixture(engine):
    return SqlModelDurabilitySink(engine)


@pytest.fixture(name="clock")
def clock_fixture():
    return FakeClock()


@pytest.fixture(name="recorder")
def recorder_fixture():
    return RecordingSubscriber()


@pytest.fixture(name="registry")
def registry_fixture(clock, recorder):
    """Registry without persistence, recording every event."""
    notifier = ChangeNotifier()
    notifier.subscribe(recorder)
    return Registry(notifier=notifier, clock=clock, rng=random.Random(42))


@pytest.fixture(name="assignment")
def assignment_fixture(registry):
    return AssignmentService(registry)


@pytest.fixture(name="admission")
def admission_fixture(registry, assignment):
    return AdmissionService(registry, assignment)


@pytest.fixture(name="directory")
def directory_fixture(registry):
    return DirectoryService(registry)


@pytest.fixture(name="client")
def client_fixture(registry):
    """Test client serving the in-memory registry."""
    app = create_app(registry)

    with TestClient(app) as client:
        yield client


# Test data fixtures

@pytest.fixture
def make_bed(registry):
    """Factory fixture to register beds directly."""

    def _make_bed(
        bed_id,
        ward=WardEnum.GENERAL,
        distance=5,
        status=BedStatusEnum.AVAILABLE,
        occupant=None,
    ):
        bed = Bed(
            id=bed_id,
            ward=ward,
            distance_from_station=distance,
            type=bed_type_for_ward(ward),
            status=status,
            occupant=occupant,
        )
        return registry.insert_bed(bed)

    return _make_bed


@pytest.fixture
def make_patient():
    """Factory fixture for detached patients (not queued)."""

    def _make_patient(patient_id="P-1", name="Jane Doe", triage_level=3, joined_at=FIXED_NOW):
        return Patient(
            id=patient_id,
            name=name,
            triage_level=triage_level,
            joined_at=joined_at,
        )

    return _make_patient


@pytest.fixture
def queued_patient(registry):
    """Factory fixture to add patients through the registry."""

    def _queued_patient(name="John Smith", triage_level=3, condition=None):
        data = {"name": name, "triage_level": triage_level}
        if condition is not None:
            data["condition"] = condition
        return registry.add_patient(data)

    return _queued_patient


@pytest.fixture
def ward_with_beds(make_bed):
    """Small facility: three ICU beds and two General beds."""
    return {
        "icu": [
            make_bed("BED-1", WardEnum.ICU, distance=7),
            make_bed("BED-2", WardEnum.ICU, distance=2),
            make_bed("BED-3", WardEnum.ICU, distance=9),
        ],
        "general": [
            make_bed("BED-4", WardEnum.GENERAL, distance=1),
            make_bed("BED-5", WardEnum.GENERAL, distance=4),
        ],
    }
