"""
Admission flow.

Orchestration used by the HTTP boundary on top of the registry and the
assignment service:

- assign a bed to a queued patient, then take the patient off the queue
- purge a patient wherever they are (queue first, then beds)
"""
from typing import Optional
from dataclasses import dataclass
import logging

from bedflow.core.exceptions import ValidationError, PatientNotFoundError
from bedflow.core.permissions import require_role
from bedflow.models.bed import Bed
from bedflow.models.enums import ActorRoleEnum, AssignmentModeEnum
from bedflow.services.assignment_service import AssignmentService
from bedflow.services.registry import Registry

logger = logging.getLogger("bedflow.admission")


@dataclass
class PurgeResult:
    """Where a purged patient was found."""
    patient_id: str
    removed_from_queue: bool
    bed_id: Optional[str] = None

    @property
    def message(self) -> str:
        if self.removed_from_queue:
            return "Patient removed from ER queue"
        return "Patient discharged and record purged"


class AdmissionService:
    """
    Queue-to-bed hand-off and unified purge.

    Each step runs under the registry lock, so nobody observes a patient
    both queued and in a bed.
    """

    def __init__(self, registry: Registry, assignment: Optional[AssignmentService] = None):
        self.registry = registry
        self.assignment = assignment or AssignmentService(registry)

    def assign(
        self,
        mode,
        patient_id: str,
        bed_id: Optional[str] = None,
        wanted_ward: Optional[str] = None,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> Optional[Bed]:
        """
        Admits a queued patient and removes them from the queue.

        Args:
            mode: "manual" (needs bed_id) or "greedy" (needs wanted_ward)
            patient_id: Exact id of a queued patient
            bed_id: Target bed for manual mode
            wanted_ward: Ward for greedy mode

        Returns:
            The assigned bed, or None when greedy mode found no bed (the
            patient stays queued)

        Raises:
            ValidationError: unknown mode, missing fields, patient not queued
            BedNotFoundError / BedNotAvailableError: manual target problems
        """
        require_role("assign a bed", actor_role)

        if not isinstance(mode, AssignmentModeEnum):
            try:
                mode = AssignmentModeEnum(str(mode).strip().lower())
            except ValueError:
                raise ValidationError(f"Unknown assignment mode '{mode}'")

        if not patient_id:
            raise ValidationError("Patient id is required for assignment")

        with self.registry.lock:
            patient = self.registry.get_patient(patient_id)
            if patient is None:
                raise ValidationError(f"Valid patient id is required for assignment, got '{patient_id}'")

            if mode == AssignmentModeEnum.MANUAL:
                bed = self.assignment.assign_manual(bed_id, patient, actor_role)
            else:
                bed = self.assignment.assign_greedy(wanted_ward, patient, actor_role)

            if bed is None:
                return None

            self.registry.remove_patient(patient.id)

        logger.info(f"Patient {patient.id} admitted to {bed.id} ({mode.value})")
        return bed

    def purge(
        self,
        patient_id: str,
        actor_role: Optional[ActorRoleEnum] = None,
    ) -> PurgeResult:
        """
        Removes a patient from the system wherever they are.

        Tries the waiting queue first, then the occupants of every bed
        (discharging the bed). Ids are normalised at each step.

        Raises:
            PatientNotFoundError: not queued and not in any bed
        """
        require_role("purge a patient", actor_role)

        with self.registry.lock:
            if self.registry.remove_patient(patient_id):
                logger.info(f"Purge: {patient_id!r} removed from queue")
                return PurgeResult(patient_id=patient_id, removed_from_queue=True)

            bed = self.registry.find_bed_by_occupant(patient_id)
            if bed is not None:
                self.assignment.discharge(bed.id, actor_role)
                logger.info(f"Purge: {patient_id!r} found in {bed.id}, discharged")
                return PurgeResult(patient_id=patient_id, removed_from_queue=False, bed_id=bed.id)

        logger.warning(f"Purge: {patient_id!r} not found in queue or beds")
        raise PatientNotFoundError(patient_id)
