"""
Persistence rows.

Tables written by the durability sink. They mirror the in-memory records
with the full field set so a restart can rebuild identical state.
"""
from sqlmodel import SQLModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
import json

from bedflow.models.patient import utcnow


class BedRecord(SQLModel, table=True):
    """Stored bed. The occupant is kept as JSON text."""
    __tablename__ = "bed"

    id: str = Field(primary_key=True)
    ward: str = Field(index=True)
    status: str = Field(default="Available", index=True)
    distance_from_station: int
    type: str
    occupant_data: Optional[str] = Field(default=None)
    updated_at: datetime = Field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"BedRecord(id={self.id}, ward={self.ward}, status={self.status})"

    def get_occupant(self) -> Optional[Dict[str, Any]]:
        """Decodes the occupant JSON."""
        if not self.occupant_data:
            return None
        try:
            return json.loads(self.occupant_data)
        except json.JSONDecodeError:
            return None


class PatientRecord(SQLModel, table=True):
    """Stored queue entry."""
    __tablename__ = "patient"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)
    triage_level: int
    condition: str = Field(default="Stable")
    joined_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"PatientRecord(id={self.id}, name={self.name})"
