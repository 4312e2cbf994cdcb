"""
Bed and patient registry.

Single source of truth for beds and the waiting queue. Every mutation goes
through this class and follows the same order:

1. in-memory change (under the registry lock)
2. durability sink write (failures logged, never raised, never rolled back)
3. change event

Readers always see the latest in-memory state regardless of the sink.
"""
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from datetime import datetime
import logging
import random
import threading

from bedflow.config import settings
from bedflow.core.durability import DurabilitySink, NullDurabilitySink
from bedflow.core.exceptions import (
    ValidationError,
    ConflictError,
    BedNotFoundError,
    BedNotAvailableError,
    InvalidStateError,
)
from bedflow.core.notifier import ChangeNotifier
from bedflow.core.permissions import require_role
from bedflow.models.bed import Bed
from bedflow.models.patient import Patient, normalize_id, utcnow
from bedflow.models.enums import (
    ActorRoleEnum,
    BedStatusEnum,
    BedTypeEnum,
    EntityKindEnum,
    EventKindEnum,
    WardEnum,
    bed_type_for_ward,
    parse_bed_status,
    parse_ward,
)
from bedflow.services.queue_ranking import rank_queue

logger = logging.getLogger("bedflow.registry")

BED_ID_PREFIX = "BED-"
PATIENT_ID_PREFIX = "P-"
MIN_TRIAGE_LEVEL = 1
MAX_TRIAGE_LEVEL = 5


class Registry:
    """
    In-memory registry of beds and queued patients.

    Beds are kept in insertion order so scans (and greedy tie-breaks) are
    deterministic. Patients live in the waiting queue (arrival order) plus an
    id index; once admitted they exist only as a bed occupant.
    """

    def __init__(
        self,
        sink: Optional[DurabilitySink] = None,
        notifier: Optional[ChangeNotifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.sink = sink or NullDurabilitySink()
        self.notifier = notifier or ChangeNotifier()
        self.clock = clock or utcnow
        self.rng = rng or random.Random()
        self.lock = threading.RLock()

        self._beds: Dict[str, Bed] = {}
        self._queue: List[Patient] = []
        self._patients: Dict[str, Patient] = {}

    # ============================================
    # LOADING
    # ============================================

    def load(
        self,
        bed_rows: List[Mapping[str, Any]],
        patient_rows: List[Mapping[str, Any]],
    ) -> None:
        """
        Rebuilds state from rows replayed out of the durability sink.

        Nothing is persisted and no event is emitted. Malformed rows are
        skipped with a warning.
        """
        with self.lock:
            self._beds.clear()
            self._queue.clear()
            self._patients.clear()

            for row in bed_rows:
                bed = self._bed_from_row(row)
                if bed is not None:
                    self._beds[bed.id] = bed

            admitted_ids = {
                bed.occupant.id for bed in self._beds.values() if bed.occupant
            }
            for row in patient_rows:
                try:
                    patient = Patient.from_dict(dict(row))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(f"Skipping malformed patient row {row!r}: {e}")
                    continue
                if patient.id in admitted_ids:
                    # Admitted but the dequeue never reached the store
                    logger.warning(f"Patient {patient.id} is already in a bed, not re-queued")
                    continue
                self._queue.append(patient)
                self._patients[patient.id] = patient

        logger.info(f"Registry loaded: {len(self._beds)} beds, {len(self._queue)} queued patients")

    def _bed_from_row(self, row: Mapping[str, Any]) -> Optional[Bed]:
        ward = parse_ward(row.get("ward"))
        status = parse_bed_status(row.get("status"))
        if not row.get("id") or ward is None or status is None:
            logger.warning(f"Skipping malformed bed row {row!r}")
            return None

        try:
            bed_type = BedTypeEnum(row.get("type")) if row.get("type") else bed_type_for_ward(ward)
        except ValueError:
            bed_type = bed_type_for_ward(ward)

        occupant = None
        occupant_data = row.get("occupant")
        if occupant_data:
            try:
                occupant = Patient.from_dict(dict(occupant_data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Bed {row['id']} has an unreadable occupant: {e}")

        if occupant is not None and status != BedStatusEnum.OCCUPIED:
            logger.warning(f"Bed {row['id']} is {status.value} but stores an occupant, dropping it")
            occupant = None
        if occupant is None and status == BedStatusEnum.OCCUPIED:
            logger.warning(f"Bed {row['id']} is Occupied without an occupant")

        return Bed(
            id=row["id"],
            ward=ward,
            status=status,
            distance_from_station=int(row.get("distance_from_station") or 0),
            type=bed_type,
            occupant=occupant,
        )

    # ============================================
    # BED READS
    # ============================================

    def get_bed(self, bed_id: str) -> Optional[Bed]:
        """Exact-id lookup. None when absent."""
        return self._beds.get(bed_id)

    def list_beds(self, filter_status: Optional[str] = None) -> List[Bed]:
        """
        Returns every bed, optionally filtered by status.

        The filter is an exact, case-insensitive match; an unknown status
        simply matches nothing.
        """
        beds = list(self._beds.values())
        if not filter_status:
            return beds

        wanted = str(filter_status).strip().lower()
        return [bed for bed in beds if bed.status.value.lower() == wanted]

    def occupied_beds(self) -> List[Bed]:
        return [bed for bed in self._beds.values() if bed.is_occupied]

    def count_by_status(self) -> Dict[str, int]:
        """
        Counts beds per status.

        Returns:
            Dictionary with every status as key, plus "total"
        """
        counts = {status.value: 0 for status in BedStatusEnum}
        for bed in self._beds.values():
            counts[bed.status.value] += 1
        counts["total"] = len(self._beds)
        return counts

    def find_bed_by_occupant(self, patient_id: str) -> Optional[Bed]:
        """
        Finds the bed holding a patient, comparing normalised ids.
        """
        wanted = normalize_id(patient_id)
        for bed in self._beds.values():
            if bed.occupant is not None and normalize_id(bed.occupant.id) == wanted:
                return bed
        return None

    # ============================================
    # BED MUTATIONS
    # ============================================

    def upsert_bed_status(
        self,
        bed_id: str,
        status: Any,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> Bed:
        """
        Manually sets the status of a bed.

        Any of the six statuses is accepted, as long as the occupancy
        invariant holds: an Occupied bed only leaves that status through
        transfer or discharge, and an empty bed only becomes Occupied
        through assignment.

        Args:
            bed_id: Bed id (exact match)
            status: Status value, case-insensitive

        Returns:
            The updated bed

        Raises:
            ValidationError: missing or unknown status
            BedNotFoundError: unknown bed
            InvalidStateError: change would break the occupancy invariant
            PermissionDeniedError: role may not edit bed status
        """
        require_role("change bed status", actor_role)
        if status is None or str(status).strip() == "":
            raise ValidationError("Status is required")

        new_status = parse_bed_status(status)
        if new_status is None:
            valid = ", ".join(s.value for s in BedStatusEnum)
            raise ValidationError(f"Unknown bed status '{status}'. Valid statuses: {valid}")

        with self.lock:
            bed = self._beds.get(bed_id)
            if bed is None:
                raise BedNotFoundError(bed_id)

            if bed.is_occupied and new_status != BedStatusEnum.OCCUPIED:
                raise InvalidStateError(
                    f"set status to {new_status.value}",
                    bed.status.value,
                    ["use transfer or discharge for occupied beds"],
                )
            if not bed.is_occupied and new_status == BedStatusEnum.OCCUPIED:
                raise InvalidStateError(
                    "set status to Occupied",
                    bed.status.value,
                    ["use bed assignment to admit a patient"],
                )

            previous = bed.status
            bed.status = new_status
            self._persist_bed(bed)
            self._emit_bed(bed)

        logger.info(f"Bed {bed_id} status {previous.value} -> {new_status.value}")
        return bed

    def add_bed(self, ward: Any, actor_role: Optional[ActorRoleEnum] = None) -> Bed:
        """
        Creates an Available bed in a ward.

        The id is `BED-<n>`, probing upward from the current bed count until
        an unused number is found. The distance from the nursing station is
        a random value fixed for the life of the bed.

        Raises:
            ValidationError: missing or unknown ward
        """
        require_role("add a bed", actor_role)
        if ward is None or str(ward).strip() == "":
            raise ValidationError("Ward is required")

        parsed_ward = parse_ward(ward)
        if parsed_ward is None:
            valid = ", ".join(w.value for w in WardEnum)
            raise ValidationError(f"Unknown ward '{ward}'. Valid wards: {valid}")

        with self.lock:
            bed = Bed(
                id=self._next_bed_id(),
                ward=parsed_ward,
                status=BedStatusEnum.AVAILABLE,
                distance_from_station=self.rng.randint(
                    settings.BED_DISTANCE_MIN, settings.BED_DISTANCE_MAX
                ),
                type=bed_type_for_ward(parsed_ward),
            )
            self._beds[bed.id] = bed
            self._persist_bed(bed)
            self._emit_bed(bed)

        logger.info(f"Bed {bed.id} added to {parsed_ward.value}")
        return bed

    def insert_bed(self, bed: Bed) -> Bed:
        """
        Registers a fully built bed (facility seeding, fixtures).

        Raises:
            ConflictError: id already taken
            ValidationError: occupancy fields disagree
        """
        if (bed.occupant is not None) != bed.is_occupied:
            raise ValidationError(f"Bed {bed.id}: occupant must be set only when Occupied")

        with self.lock:
            if bed.id in self._beds:
                raise ConflictError(f"Bed {bed.id} already exists", "DUPLICATE_BED")
            self._beds[bed.id] = bed
            self._persist_bed(bed)
            self._emit_bed(bed)

        return bed

    def _next_bed_id(self) -> str:
        number = len(self._beds) + 1
        bed_id = f"{BED_ID_PREFIX}{number}"
        while bed_id in self._beds:
            number += 1
            bed_id = f"{BED_ID_PREFIX}{number}"
        return bed_id

    def remove_bed(self, bed_id: str, actor_role: Optional[ActorRoleEnum] = None) -> bool:
        """
        Deletes a bed.

        Raises:
            BedNotFoundError: unknown bed
            BedNotAvailableError: the bed holds a patient
        """
        require_role("remove a bed", actor_role)
        with self.lock:
            bed = self._beds.get(bed_id)
            if bed is None:
                raise BedNotFoundError(bed_id)
            if bed.is_occupied:
                raise BedNotAvailableError(bed_id, bed.status.value, "removal")

            del self._beds[bed_id]
            self._write(
                EntityKindEnum.BED, bed_id,
                lambda: self.sink.delete(EntityKindEnum.BED, bed_id),
            )
            self.notifier.notify(EventKindEnum.BED_REMOVED, {"id": bed_id})

        logger.info(f"Bed {bed_id} removed")
        return True

    # ============================================
    # OCCUPANCY (used by the assignment engine)
    # ============================================

    def occupy(self, bed_id: str, patient: Patient) -> Bed:
        """
        Atomic Available -> Occupied check-and-set.

        Raises:
            BedNotFoundError: unknown bed
            BedNotAvailableError: bed is not Available
        """
        with self.lock:
            bed = self._beds.get(bed_id)
            if bed is None:
                raise BedNotFoundError(bed_id)
            if not bed.is_available:
                raise BedNotAvailableError(bed_id, bed.status.value)

            bed.status = BedStatusEnum.OCCUPIED
            bed.occupant = patient
            self._persist_bed(bed)
            self._emit_bed(bed)

        return bed

    def release(self, bed_id: str) -> Optional[Bed]:
        """
        Clears the occupant and sends the bed to Cleaning.

        Returns:
            The bed, or None when it does not exist
        """
        with self.lock:
            bed = self._beds.get(bed_id)
            if bed is None:
                return None

            bed.status = BedStatusEnum.CLEANING
            bed.occupant = None
            self._persist_bed(bed)
            self._emit_bed(bed)

        return bed

    def move_occupant(self, source_id: str, target_id: str) -> Tuple[Bed, Bed]:
        """
        Moves the occupant of an Occupied bed into an Available one.

        The source goes to Cleaning. Both beds are persisted and two events
        are emitted, source first.

        Returns:
            (source_bed, target_bed)

        Raises:
            BedNotFoundError: unknown bed
            InvalidStateError: source not Occupied
            BedNotAvailableError: target not Available
        """
        with self.lock:
            source = self._beds.get(source_id)
            if source is None:
                raise BedNotFoundError(source_id)
            target = self._beds.get(target_id)
            if target is None:
                raise BedNotFoundError(target_id)

            if not source.is_occupied:
                raise InvalidStateError(
                    "transfer out", source.status.value, [BedStatusEnum.OCCUPIED.value]
                )
            if not target.is_available:
                raise BedNotAvailableError(target_id, target.status.value, "transfer")

            target.status = BedStatusEnum.OCCUPIED
            target.occupant = source.occupant
            source.status = BedStatusEnum.CLEANING
            source.occupant = None

            self._persist_bed(target)
            self._persist_bed(source)
            self._emit_bed(source)
            self._emit_bed(target)

        return source, target

    # ============================================
    # PATIENT READS
    # ============================================

    def get_patient(self, patient_id: str) -> Optional[Patient]:
        """Exact-id lookup in the patient index. None when absent."""
        return self._patients.get(patient_id)

    def list_patients(self) -> List[Patient]:
        """Waiting queue in arrival order."""
        return list(self._queue)

    def find_patients(self, query: Optional[str] = None) -> List[Patient]:
        """
        Linear search over queued patients.

        Empty query returns the whole queue; otherwise patients whose id or
        name contains the query (case-insensitive).
        """
        if not query:
            return self.list_patients()

        needle = query.lower()
        return [
            patient for patient in self._patients.values()
            if needle in patient.id.lower() or needle in patient.name.lower()
        ]

    def sorted_queue(self, now: Optional[datetime] = None) -> List[Patient]:
        """Waiting queue in priority order, recomputed on every call."""
        return rank_queue(self._queue, now or self.clock())

    # ============================================
    # PATIENT MUTATIONS
    # ============================================

    def add_patient(
        self,
        data: Mapping[str, Any],
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> Patient:
        """
        Adds a patient to the waiting queue.

        Args:
            data: name and triage_level are required; condition is optional

        Returns:
            The new patient

        Raises:
            ValidationError: missing name or triage level out of 1..5
            ConflictError: every patient id is taken
        """
        require_role("add a patient", actor_role)
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationError("Name is required")

        triage_level = self._parse_triage_level(data.get("triage_level"))
        condition = str(data.get("condition") or "").strip() or settings.DEFAULT_CONDITION

        with self.lock:
            patient = Patient(
                id=self._next_patient_id(),
                name=name,
                triage_level=triage_level,
                condition=condition,
                joined_at=self.clock(),
            )
            self._queue.append(patient)
            self._patients[patient.id] = patient
            self._write(
                EntityKindEnum.PATIENT, patient.id,
                lambda: self.sink.persist(EntityKindEnum.PATIENT, patient.id, patient.to_dict()),
            )
            self._emit_queue()

        logger.info(f"Patient {patient.id} queued with triage {triage_level}")
        return patient

    @staticmethod
    def _parse_triage_level(value: Any) -> int:
        if value is None or value == "":
            raise ValidationError("Triage level is required")
        if isinstance(value, bool):
            raise ValidationError("Triage level must be an integer")
        try:
            level = int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Triage level must be an integer, got '{value}'")
        if not MIN_TRIAGE_LEVEL <= level <= MAX_TRIAGE_LEVEL:
            raise ValidationError(
                f"Triage level must be between {MIN_TRIAGE_LEVEL} and {MAX_TRIAGE_LEVEL}"
            )
        return level

    def _next_patient_id(self) -> str:
        taken = set(self._patients)
        taken.update(bed.occupant.id for bed in self._beds.values() if bed.occupant)

        space = settings.PATIENT_ID_SPACE
        if len(taken) >= space:
            raise ConflictError("No free patient ids left", "PATIENT_ID_EXHAUSTED")

        while True:
            patient_id = f"{PATIENT_ID_PREFIX}{self.rng.randrange(space)}"
            if patient_id not in taken:
                return patient_id

    def remove_patient(self, patient_id: str, actor_role: Optional[ActorRoleEnum] = None) -> bool:
        """
        Removes a patient from the queue and the patient index.

        The id is trimmed and case-folded before matching. A missing patient
        is a normal outcome (callers probe queue and beds in turn).

        Returns:
            True if a patient was removed
        """
        require_role("remove a patient from the queue", actor_role)
        wanted = normalize_id(patient_id)

        with self.lock:
            patient = next(
                (p for p in self._patients.values() if normalize_id(p.id) == wanted),
                None,
            )
            if patient is None:
                logger.debug(f"Patient {patient_id!r} not in queue")
                return False

            del self._patients[patient.id]
            self._queue = [p for p in self._queue if p.id != patient.id]
            self._write(
                EntityKindEnum.PATIENT, patient.id,
                lambda: self.sink.delete(EntityKindEnum.PATIENT, patient.id),
            )
            self._emit_queue()

        logger.info(f"Patient {patient.id} removed from queue")
        return True

    # ============================================
    # SIDE EFFECTS
    # ============================================

    def _write(self, entity_kind: EntityKindEnum, entity_id: str, action: Callable[[], None]) -> None:
        """
        Runs a sink call. A failure is logged and swallowed: the in-memory
        state stays authoritative and a crash before the next successful
        write can lose this single mutation.
        """
        try:
            action()
        except Exception as e:
            logger.error(f"Durability failure for {entity_kind.value} {entity_id}: {e}")

    def _persist_bed(self, bed: Bed) -> None:
        self._write(
            EntityKindEnum.BED, bed.id,
            lambda: self.sink.persist(EntityKindEnum.BED, bed.id, bed.to_dict()),
        )

    def _emit_bed(self, bed: Bed) -> None:
        self.notifier.notify(EventKindEnum.BED_UPDATED, bed.to_dict())

    def _emit_queue(self) -> None:
        self.notifier.notify(
            EventKindEnum.QUEUE_UPDATED,
            [patient.to_dict() for patient in self.sorted_queue()],
        )
