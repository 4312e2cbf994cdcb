"""
Bed assignment service.

Bed lifecycle:

    Available --(assign)--------> Occupied
    Occupied  --(transfer out)--> Cleaning   (target: Available -> Occupied)
    Occupied  --(discharge)-----> Cleaning

Everything else happens through manual status edits on the registry.
This service never touches the waiting queue; dequeuing after an
assignment belongs to the admission flow.
"""
from typing import List, Optional
from dataclasses import dataclass
import logging

from bedflow.core.exceptions import ValidationError, ConflictError
from bedflow.core.permissions import require_role
from bedflow.models.bed import Bed
from bedflow.models.patient import Patient
from bedflow.models.enums import ActorRoleEnum, WardEnum, parse_ward
from bedflow.services.registry import Registry

logger = logging.getLogger("bedflow.assignment")


@dataclass
class TransferResult:
    """Result of a transfer between two beds."""
    source_bed: Bed
    target_bed: Bed


class AssignmentService:
    """
    Chooses beds and drives occupancy transitions.

    Usage:
        service = AssignmentService(registry)
        bed = service.assign_greedy("ICU", patient)
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    # ============================================
    # CANDIDATE SEARCH
    # ============================================

    def find_candidates(self, wanted_ward: Optional[WardEnum]) -> List[Bed]:
        """
        Available beds for a request, in registry order.

        Available beds in the wanted ward first; when there are none, any
        Available bed (any open bed beats no bed).
        """
        available = [bed for bed in self.registry.list_beds() if bed.is_available]

        in_ward = [bed for bed in available if bed.ward == wanted_ward]
        if in_ward:
            return in_ward

        if available:
            logger.debug(
                f"No Available bed in {wanted_ward.value if wanted_ward else 'N/A'}, "
                f"falling back to {len(available)} beds in other wards"
            )
        return available

    @staticmethod
    def pick_closest(candidates: List[Bed]) -> Optional[Bed]:
        """
        Greedy choice: minimum distance from the nursing station.
        The first candidate wins ties.
        """
        best: Optional[Bed] = None
        for bed in candidates:
            if best is None or bed.distance_from_station < best.distance_from_station:
                best = bed
        return best

    # ============================================
    # ASSIGNMENT
    # ============================================

    def assign_manual(
        self,
        bed_id: str,
        patient: Patient,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> Bed:
        """
        Admits a patient into a specific bed.

        Raises:
            BedNotFoundError: unknown bed
            BedNotAvailableError: bed is not Available
        """
        require_role("assign a bed", actor_role)
        if not bed_id:
            raise ValidationError("Bed id is required for manual assignment")

        bed = self.registry.occupy(bed_id, patient)
        logger.info(f"Patient {patient.id} manually assigned to {bed.id}")
        return bed

    def assign_greedy(
        self,
        wanted_ward,
        patient: Patient,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> Optional[Bed]:
        """
        Admits a patient into the closest Available bed.

        Args:
            wanted_ward: Ward the patient needs (enum or name)
            patient: Patient to admit

        Returns:
            The assigned bed, or None when no bed is Available anywhere

        Raises:
            ValidationError: missing ward
        """
        require_role("assign a bed", actor_role)
        if wanted_ward is None or str(wanted_ward).strip() == "":
            raise ValidationError("Wanted ward is required for greedy assignment")

        ward = parse_ward(wanted_ward)
        if ward is None:
            # No bed can match, so the search goes straight to other wards
            logger.debug(f"Unknown ward '{wanted_ward}', searching every ward")

        with self.registry.lock:
            best = self.pick_closest(self.find_candidates(ward))
            if best is None:
                logger.info(f"No Available bed for patient {patient.id} (wanted {wanted_ward})")
                return None

            bed = self.registry.occupy(best.id, patient)

        logger.info(
            f"Patient {patient.id} assigned to {bed.id} "
            f"(ward {bed.ward.value}, distance {bed.distance_from_station})"
        )
        return bed

    # ============================================
    # LIFECYCLE
    # ============================================

    def transfer(
        self,
        source_bed_id: str,
        target_bed_id: str,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> TransferResult:
        """
        Moves a patient to another bed. The source goes to Cleaning.

        Raises:
            ValidationError: missing ids
            BedNotFoundError: unknown bed
            InvalidStateError: source not Occupied
            BedNotAvailableError: target not Available
            ConflictError: source and target are the same bed
        """
        require_role("transfer a patient", actor_role)
        if not source_bed_id or not target_bed_id:
            raise ValidationError("Source and target bed ids are required")
        if source_bed_id == target_bed_id:
            raise ConflictError(f"Bed {source_bed_id} cannot be transferred onto itself", "SAME_BED")

        source, target = self.registry.move_occupant(source_bed_id, target_bed_id)
        logger.info(
            f"Patient {target.occupant.id if target.occupant else '?'} "
            f"transferred {source.id} -> {target.id}"
        )
        return TransferResult(source_bed=source, target_bed=target)

    def discharge(
        self,
        bed_id: str,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> Optional[Bed]:
        """
        Discharges the occupant of a bed. The bed goes to Cleaning and the
        patient leaves the system (no return to the queue).

        Returns:
            The bed, or None when the bed does not exist
        """
        require_role("discharge a patient", actor_role)

        bed = self.registry.release(bed_id)
        if bed is None:
            logger.debug(f"Discharge on unknown bed {bed_id!r} ignored")
            return None

        logger.info(f"Bed {bed_id} discharged, now {bed.status.value}")
        return bed
