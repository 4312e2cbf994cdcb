"""
Patient record (emergency queue entry).
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Dict, Any


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalises a datetime to aware UTC.

    SQLite drops tzinfo on the way back, so naive values coming from the
    store are read as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_id(value: Any) -> str:
    """Trim + case-fold used by the purge/removal paths only."""
    return str(value).strip().lower()


@dataclass
class Patient:
    """
    A patient awaiting placement.

    Lives either in the waiting queue or embedded as the occupant of an
    Occupied bed, never in both.
    """
    id: str
    name: str
    triage_level: int
    condition: str = "Stable"
    joined_at: Optional[datetime] = field(default_factory=utcnow)

    def __repr__(self) -> str:
        return f"Patient(id={self.id}, name={self.name}, triage_level={self.triage_level})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "triage_level": self.triage_level,
            "condition": self.condition,
            "joined_at": self.joined_at.isoformat() if self.joined_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Patient":
        """Rebuilds a patient from `to_dict` output or a stored row."""
        joined_at = data.get("joined_at")
        if isinstance(joined_at, str):
            joined_at = datetime.fromisoformat(joined_at)
        return cls(
            id=data["id"],
            name=data["name"],
            triage_level=int(data["triage_level"]),
            condition=data.get("condition") or "Stable",
            joined_at=as_utc(joined_at),
        )
