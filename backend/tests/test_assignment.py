"""
Tests for the bed assignment service.
"""
import random
import threading
import pytest

from bedflow.core.exceptions import (
    ValidationError,
    BedNotFoundError,
    BedNotAvailableError,
    InvalidStateError,
    ConflictError,
    PermissionDeniedError,
)
from bedflow.models.bed import Bed
from bedflow.models.enums import ActorRoleEnum, BedStatusEnum, EventKindEnum, WardEnum, bed_type_for_ward
from bedflow.services.assignment_service import AssignmentService
from bedflow.services.registry import Registry


class TestGreedyAssignment:
    """Closest Available bed selection."""

    def test_picks_closest_in_ward(self, assignment, ward_with_beds, make_patient):
        patient = make_patient()

        bed = assignment.assign_greedy("ICU", patient)

        assert bed.id == "BED-2"
        assert bed.distance_from_station == 2
        assert bed.status == BedStatusEnum.OCCUPIED
        assert bed.occupant is patient

    def test_ward_name_case_insensitive(self, assignment, ward_with_beds, make_patient):
        bed = assignment.assign_greedy("icu", make_patient())
        assert bed.ward == WardEnum.ICU

    def test_prefers_ward_over_closer_bed_elsewhere(self, assignment, ward_with_beds, make_patient):
        # BED-4 (General, distance 1) is closer than every ICU bed
        bed = assignment.assign_greedy("ICU", make_patient())
        assert bed.ward == WardEnum.ICU

    def test_falls_back_to_any_ward(self, registry, assignment, ward_with_beds, make_patient):
        for bed in ward_with_beds["icu"]:
            registry.upsert_bed_status(bed.id, "Maintenance")

        bed = assignment.assign_greedy("ICU", make_patient())

        assert bed.id == "BED-4"
        assert bed.ward == WardEnum.GENERAL

    def test_first_bed_wins_ties(self, assignment, make_bed, make_patient):
        make_bed("BED-1", distance=3)
        make_bed("BED-2", distance=3)

        assert assignment.assign_greedy("General", make_patient()).id == "BED-1"

    def test_no_bed_returns_none(self, registry, assignment, make_bed, make_patient, recorder):
        make_bed("BED-1", status=BedStatusEnum.CLEANING)
        make_bed("BED-2", status=BedStatusEnum.RESERVED)
        recorder.clear()

        assert assignment.assign_greedy("General", make_patient()) is None
        assert recorder.events == []

    def test_no_beds_at_all(self, assignment, make_patient):
        assert assignment.assign_greedy("Pediatrics", make_patient()) is None

    @pytest.mark.parametrize("ward", [None, "", "   "])
    def test_invalid_ward(self, assignment, ward_with_beds, make_patient, ward):
        with pytest.raises(ValidationError):
            assignment.assign_greedy(ward, make_patient())

    def test_unknown_ward_falls_back_to_any_bed(self, assignment, make_bed, make_patient):
        make_bed("BED-1", ward=WardEnum.GENERAL, distance=3)

        bed = assignment.assign_greedy("Oncology", make_patient())

        assert bed.id == "BED-1"
        assert bed.status == BedStatusEnum.OCCUPIED

    def test_unknown_ward_picks_closest_bed(self, assignment, ward_with_beds, make_patient):
        assert assignment.assign_greedy("Oncology", make_patient()).id == "BED-4"

    def test_unknown_ward_without_beds(self, assignment, make_bed, make_patient):
        make_bed("BED-1", status=BedStatusEnum.CLEANING)
        assert assignment.assign_greedy("Oncology", make_patient()) is None

    def test_choice_is_never_farther_than_any_candidate(self, registry, assignment, make_bed, make_patient):
        rng = random.Random(7)
        for i in range(1, 31):
            make_bed(f"BED-{i}", ward=rng.choice(list(WardEnum)), distance=rng.randint(1, 50))

        for i in range(10):
            ward = rng.choice(list(WardEnum))
            candidates = assignment.find_candidates(ward)
            bed = assignment.assign_greedy(ward, make_patient(f"P-{i}"))

            assert bed is not None
            assert all(bed.distance_from_station <= c.distance_from_station for c in candidates)

    def test_emits_one_event(self, assignment, ward_with_beds, make_patient, recorder):
        recorder.clear()
        assignment.assign_greedy("General", make_patient())
        assert recorder.kinds() == [EventKindEnum.BED_UPDATED]
        assert recorder.last().payload["occupant"]["id"] == "P-1"

    def test_does_not_touch_queue(self, registry, assignment, ward_with_beds, queued_patient):
        patient = queued_patient()
        assignment.assign_greedy("General", patient)
        assert registry.get_patient(patient.id) is patient


class TestManualAssignment:
    """Assignment to a chosen bed."""

    def test_assign_available_bed(self, assignment, ward_with_beds, make_patient):
        bed = assignment.assign_manual("BED-3", make_patient())
        assert bed.status == BedStatusEnum.OCCUPIED
        assert bed.occupant.id == "P-1"

    def test_unknown_bed(self, assignment, make_patient):
        with pytest.raises(BedNotFoundError):
            assignment.assign_manual("BED-99", make_patient())

    def test_bed_not_available(self, registry, assignment, make_bed, make_patient):
        make_bed("BED-1", status=BedStatusEnum.CLEANING)

        with pytest.raises(BedNotAvailableError):
            assignment.assign_manual("BED-1", make_patient())
        assert registry.get_bed("BED-1").occupant is None

    def test_occupied_bed_keeps_first_patient(self, assignment, make_bed, make_patient):
        make_bed("BED-1")
        assignment.assign_manual("BED-1", make_patient("P-1"))

        with pytest.raises(ConflictError):
            assignment.assign_manual("BED-1", make_patient("P-2"))

    def test_manual_then_greedy_cannot_share_bed(self, assignment, make_bed, make_patient):
        make_bed("BED-1")
        assignment.assign_manual("BED-1", make_patient("P-1"))

        assert assignment.assign_greedy("General", make_patient("P-2")) is None

    def test_bed_id_required(self, assignment, make_patient):
        with pytest.raises(ValidationError):
            assignment.assign_manual("", make_patient())

    def test_nurse_cannot_assign(self, registry, assignment, make_bed, make_patient):
        make_bed("BED-1")
        with pytest.raises(PermissionDeniedError):
            assignment.assign_manual("BED-1", make_patient(), ActorRoleEnum.NURSE)
        assert registry.get_bed("BED-1").is_available


class TestTransfer:
    """Moving a patient between beds."""

    def test_transfer(self, registry, assignment, ward_with_beds, make_patient, recorder):
        assignment.assign_manual("BED-1", make_patient())
        recorder.clear()

        result = assignment.transfer("BED-1", "BED-4")

        assert result.source_bed.status == BedStatusEnum.CLEANING
        assert result.source_bed.occupant is None
        assert result.target_bed.status == BedStatusEnum.OCCUPIED
        assert result.target_bed.occupant.id == "P-1"

        assert recorder.kinds() == [EventKindEnum.BED_UPDATED, EventKindEnum.BED_UPDATED]
        assert [e.payload["id"] for e in recorder.events] == ["BED-1", "BED-4"]

    def test_transfer_twice_conflicts(self, assignment, ward_with_beds, make_patient):
        assignment.assign_manual("BED-1", make_patient())
        assignment.transfer("BED-1", "BED-4")

        with pytest.raises(ConflictError):
            assignment.transfer("BED-1", "BED-4")

    def test_source_not_occupied(self, assignment, ward_with_beds):
        with pytest.raises(InvalidStateError):
            assignment.transfer("BED-1", "BED-2")

    def test_target_not_available(self, registry, assignment, ward_with_beds, make_patient):
        assignment.assign_manual("BED-1", make_patient())
        registry.upsert_bed_status("BED-2", "Damaged")

        with pytest.raises(BedNotAvailableError):
            assignment.transfer("BED-1", "BED-2")

        assert registry.get_bed("BED-1").occupant.id == "P-1"
        assert registry.get_bed("BED-2").status == BedStatusEnum.DAMAGED

    def test_unknown_beds(self, assignment, ward_with_beds, make_patient):
        assignment.assign_manual("BED-1", make_patient())
        with pytest.raises(BedNotFoundError):
            assignment.transfer("BED-1", "BED-99")
        with pytest.raises(BedNotFoundError):
            assignment.transfer("BED-99", "BED-2")

    @pytest.mark.parametrize("source,target", [("", "BED-2"), ("BED-1", None)])
    def test_invalid_ids(self, assignment, ward_with_beds, source, target):
        with pytest.raises(ValidationError):
            assignment.transfer(source, target)

    def test_same_bed_is_conflict(self, registry, assignment, ward_with_beds, make_patient, recorder):
        patient = make_patient()
        assignment.assign_manual("BED-1", patient)
        recorder.clear()

        with pytest.raises(ConflictError):
            assignment.transfer("BED-1", "BED-1")

        bed = registry.get_bed("BED-1")
        assert bed.status == BedStatusEnum.OCCUPIED
        assert bed.occupant.id == patient.id
        assert recorder.events == []

    def test_same_empty_bed_is_conflict(self, assignment, ward_with_beds):
        with pytest.raises(ConflictError):
            assignment.transfer("BED-2", "BED-2")


class TestDischarge:
    """Discharging a bed."""

    def test_discharge(self, registry, assignment, make_bed, queued_patient, recorder):
        make_bed("BED-1")
        patient = queued_patient()
        registry.remove_patient(patient.id)
        assignment.assign_manual("BED-1", patient)
        recorder.clear()

        bed = assignment.discharge("BED-1")

        assert bed.status == BedStatusEnum.CLEANING
        assert bed.occupant is None
        assert registry.get_patient(patient.id) is None
        assert registry.list_patients() == []
        assert recorder.kinds() == [EventKindEnum.BED_UPDATED]

    def test_discharge_unknown_bed(self, assignment, recorder):
        assert assignment.discharge("BED-99") is None
        assert recorder.events == []

    def test_discharge_empty_bed_goes_to_cleaning(self, assignment, make_bed):
        make_bed("BED-1", status=BedStatusEnum.RESERVED)
        assert assignment.discharge("BED-1").status == BedStatusEnum.CLEANING

    def test_nurse_cannot_discharge(self, assignment, make_bed, make_patient):
        make_bed("BED-1", status=BedStatusEnum.OCCUPIED, occupant=make_patient())
        with pytest.raises(PermissionDeniedError):
            assignment.discharge("BED-1", ActorRoleEnum.NURSE)


class TestConcurrentAssignment:
    """Manual and greedy assignment racing for the last bed."""

    ROUNDS = 100

    def _race_once(self, make_patient):
        registry = Registry(rng=random.Random(1))
        registry.insert_bed(Bed(
            id="BED-1",
            ward=WardEnum.GENERAL,
            distance_from_station=3,
            type=bed_type_for_ward(WardEnum.GENERAL),
            status=BedStatusEnum.AVAILABLE,
        ))
        assignment = AssignmentService(registry)
        barrier = threading.Barrier(2)
        winners = []
        losers = []

        def manual():
            barrier.wait()
            try:
                winners.append(assignment.assign_manual("BED-1", make_patient("P-1")).occupant.id)
            except ConflictError:
                losers.append("P-1")

        def greedy():
            barrier.wait()
            bed = assignment.assign_greedy("General", make_patient("P-2"))
            if bed is None:
                losers.append("P-2")
            else:
                winners.append(bed.occupant.id)

        threads = [threading.Thread(target=manual), threading.Thread(target=greedy)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        return registry, winners, losers

    def test_exactly_one_winner(self, make_patient):
        for _ in range(self.ROUNDS):
            registry, winners, losers = self._race_once(make_patient)

            assert len(winners) == 1
            assert len(losers) == 1
            bed = registry.get_bed("BED-1")
            assert bed.status == BedStatusEnum.OCCUPIED
            assert bed.occupant.id == winners[0]
