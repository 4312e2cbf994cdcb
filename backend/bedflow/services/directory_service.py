"""
Patient directory.

Read-only projections over the registry: the merged list of waiting and
admitted patients, and a point-in-time snapshot for troubleshooting.
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict
from datetime import datetime
import logging

from bedflow.models.enums import DirectoryStatusEnum, WAITING_ROOM
from bedflow.services.queue_ranking import score
from bedflow.services.registry import Registry

logger = logging.getLogger("bedflow.directory")


@dataclass
class DirectoryEntry:
    """One line of the patient directory."""
    id: str
    name: str
    triage_level: int
    condition: str
    joined_at: Optional[str]
    status: DirectoryStatusEnum
    location: str
    ward: Optional[str] = None
    bed_id: Optional[str] = None
    priority_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class DirectoryService:
    """Builds merged read views. Never mutates the registry."""

    def __init__(self, registry: Registry):
        self.registry = registry

    def build_directory(self, now: Optional[datetime] = None) -> List[DirectoryEntry]:
        """
        Waiting patients in priority order, followed by admitted patients
        in bed order.

        Occupied beds without an occupant are inconsistent data; they are
        logged and left out.
        """
        now = now or self.registry.clock()
        entries: List[DirectoryEntry] = []

        with self.registry.lock:
            for patient in self.registry.sorted_queue(now):
                entries.append(DirectoryEntry(
                    id=patient.id,
                    name=patient.name,
                    triage_level=patient.triage_level,
                    condition=patient.condition,
                    joined_at=patient.joined_at.isoformat() if patient.joined_at else None,
                    status=DirectoryStatusEnum.WAITING,
                    location=WAITING_ROOM,
                    priority_score=round(score(patient, now), 3),
                ))

            for bed in self.registry.occupied_beds():
                if bed.occupant is None:
                    logger.warning(f"Bed {bed.id} is Occupied without an occupant, skipped")
                    continue
                occupant = bed.occupant
                entries.append(DirectoryEntry(
                    id=occupant.id,
                    name=occupant.name,
                    triage_level=occupant.triage_level,
                    condition=occupant.condition,
                    joined_at=occupant.joined_at.isoformat() if occupant.joined_at else None,
                    status=DirectoryStatusEnum.ADMITTED,
                    location=bed.id,
                    ward=bed.ward.value,
                    bed_id=bed.id,
                ))

        return entries

    def system_snapshot(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Current queue and bed occupants, for troubleshooting.
        """
        now = now or self.registry.clock()

        with self.registry.lock:
            queue = [
                {"id": p.id, "name": p.name, "type": "Queue"}
                for p in self.registry.sorted_queue(now)
            ]
            beds = [
                {"id": b.occupant.id, "name": b.occupant.name, "bed": b.id, "type": "Bed"}
                for b in self.registry.list_beds()
                if b.occupant is not None
            ]

        return {
            "timestamp": now.isoformat(),
            "queue": queue,
            "beds": beds,
            "total_active": len(queue) + len(beds),
        }
