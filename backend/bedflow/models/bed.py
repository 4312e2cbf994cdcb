"""
Bed record.
"""
from dataclasses import dataclass
from typing import Optional, Dict, Any

from bedflow.models.enums import WardEnum, BedStatusEnum, BedTypeEnum
from bedflow.models.patient import Patient


@dataclass
class Bed:
    """
    A physical hospital bed.

    `occupant` is set only while the status is Occupied. The registry is
    the only component that mutates beds.
    """
    id: str
    ward: WardEnum
    distance_from_station: int
    type: BedTypeEnum
    status: BedStatusEnum = BedStatusEnum.AVAILABLE
    occupant: Optional[Patient] = None

    def __repr__(self) -> str:
        return f"Bed(id={self.id}, ward={self.ward.value}, status={self.status.value})"

    @property
    def is_available(self) -> bool:
        """Checks whether the bed can receive a patient."""
        return self.status == BedStatusEnum.AVAILABLE

    @property
    def is_occupied(self) -> bool:
        """Checks whether the bed holds a patient."""
        return self.status == BedStatusEnum.OCCUPIED

    def to_dict(self) -> Dict[str, Any]:
        """Full snapshot, used both for events and for persistence."""
        return {
            "id": self.id,
            "ward": self.ward.value,
            "status": self.status.value,
            "distance_from_station": self.distance_from_station,
            "type": self.type.value,
            "occupant": self.occupant.to_dict() if self.occupant else None,
        }
