"""
Tests for ER queue ranking.
"""
from datetime import timedelta

from bedflow.services.queue_ranking import hours_waited, rank_queue, score

from conftest import FIXED_NOW


class TestScore:
    """Effective priority score."""

    def test_hours_waited(self, make_patient):
        patient = make_patient(joined_at=FIXED_NOW - timedelta(minutes=90))
        assert hours_waited(patient, FIXED_NOW) == 1.5

    def test_missing_timestamp_counts_as_zero(self, make_patient):
        patient = make_patient(triage_level=4, joined_at=None)
        assert hours_waited(patient, FIXED_NOW) == 0
        assert score(patient, FIXED_NOW) == 4

    def test_naive_timestamp_read_as_utc(self, make_patient):
        naive = (FIXED_NOW - timedelta(hours=2)).replace(tzinfo=None)
        patient = make_patient(triage_level=3, joined_at=naive)
        assert score(patient, FIXED_NOW) == 1


class TestRankQueue:
    """Ordering of the waiting queue."""

    def test_waiting_time_erodes_triage(self, make_patient):
        a = make_patient("P-A", triage_level=3, joined_at=FIXED_NOW - timedelta(hours=3))
        b = make_patient("P-B", triage_level=1, joined_at=FIXED_NOW)

        ranked = rank_queue([b, a], FIXED_NOW)
        assert [p.id for p in ranked] == ["P-A", "P-B"]

    def test_lower_triage_first_when_just_arrived(self, make_patient):
        patients = [
            make_patient("P-1", triage_level=5),
            make_patient("P-2", triage_level=1),
            make_patient("P-3", triage_level=3),
        ]
        assert [p.id for p in rank_queue(patients, FIXED_NOW)] == ["P-2", "P-3", "P-1"]

    def test_ties_keep_arrival_order(self, make_patient):
        patients = [make_patient(f"P-{i}", triage_level=2) for i in range(5)]
        assert [p.id for p in rank_queue(patients, FIXED_NOW)] == [f"P-{i}" for i in range(5)]

    def test_deterministic(self, make_patient):
        patients = [
            make_patient(f"P-{i}", triage_level=(i % 5) + 1, joined_at=FIXED_NOW - timedelta(minutes=17 * i))
            for i in range(20)
        ]
        first = [p.id for p in rank_queue(patients, FIXED_NOW)]
        second = [p.id for p in rank_queue(patients, FIXED_NOW)]
        assert first == second

    def test_empty_queue(self):
        assert rank_queue([], FIXED_NOW) == []

    def test_does_not_mutate_input(self, make_patient):
        patients = [make_patient("P-1", triage_level=5), make_patient("P-2", triage_level=1)]
        rank_queue(patients, FIXED_NOW)
        assert [p.id for p in patients] == ["P-1", "P-2"]

    def test_registry_queue_uses_waiting_time(self, registry, queued_patient, clock):
        early = queued_patient("Early", triage_level=4)
        clock.now = FIXED_NOW + timedelta(hours=2)
        late = queued_patient("Late", triage_level=3)

        # early: 4 - 2 = 2, late: 3 - 0 = 3
        assert [p.id for p in registry.sorted_queue()] == [early.id, late.id]

    def test_queue_event_carries_sorted_queue(self, registry, queued_patient, recorder):
        low = queued_patient("Low", triage_level=5)
        high = queued_patient("High", triage_level=1)

        payload = recorder.last().payload
        assert [p["id"] for p in payload] == [high.id, low.id]
