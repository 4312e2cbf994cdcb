"""
Durability sink.

The registry writes every mutation through here after the in-memory
change. Calls always carry the full post-mutation field set, never a delta,
so replaying all stored rows at startup rebuilds identical state.
"""
from typing import Any, Dict, List, Optional, Protocol, Tuple
from datetime import datetime
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
import json
import logging

from bedflow.core.database import engine as default_engine, get_session_direct
from bedflow.core.exceptions import DurabilityError
from bedflow.models.enums import EntityKindEnum
from bedflow.models.patient import utcnow
from bedflow.repositories.bed_repo import BedRepository
from bedflow.repositories.patient_repo import PatientRepository

logger = logging.getLogger("bedflow.durability")


class DurabilitySink(Protocol):
    """Write-through persistence used by the registry."""

    def persist(self, entity_kind: EntityKindEnum, entity_id: str, fields: Dict[str, Any]) -> None:
        ...

    def delete(self, entity_kind: EntityKindEnum, entity_id: str) -> None:
        ...

    def load_all(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        ...


class NullDurabilitySink:
    """Sink that keeps nothing. Ephemeral runs and unit tests."""

    def persist(self, entity_kind: EntityKindEnum, entity_id: str, fields: Dict[str, Any]) -> None:
        return None

    def delete(self, entity_kind: EntityKindEnum, entity_id: str) -> None:
        return None

    def load_all(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        return [], []


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


class SqlModelDurabilitySink:
    """
    Sink backed by the SQLModel `bed` and `patient` tables.

    A short-lived session is opened per call so a failed write never leaves
    a broken session behind.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or default_engine

    # ============================================
    # WRITES
    # ============================================

    def persist(self, entity_kind: EntityKindEnum, entity_id: str, fields: Dict[str, Any]) -> None:
        """
        Inserts or overwrites the stored row for an entity.

        Raises:
            DurabilityError: when the database write fails
        """
        session = get_session_direct(self.engine)
        try:
            if entity_kind == EntityKindEnum.BED:
                BedRepository(session).upsert_from_dict(entity_id, self._bed_row(fields))
            elif entity_kind == EntityKindEnum.PATIENT:
                PatientRepository(session).upsert_from_dict(entity_id, self._patient_row(fields))
            else:
                raise DurabilityError(str(entity_kind), entity_id, "unknown entity kind")
        except SQLAlchemyError as e:
            session.rollback()
            raise DurabilityError(entity_kind.value, entity_id, str(e)) from e
        finally:
            session.close()

        logger.debug(f"Persisted {entity_kind.value} {entity_id}")

    def delete(self, entity_kind: EntityKindEnum, entity_id: str) -> None:
        """
        Deletes the stored row for an entity. Missing rows are ignored.

        Raises:
            DurabilityError: when the database write fails
        """
        session = get_session_direct(self.engine)
        try:
            if entity_kind == EntityKindEnum.BED:
                BedRepository(session).delete_by_id(entity_id)
            elif entity_kind == EntityKindEnum.PATIENT:
                PatientRepository(session).delete_by_id(entity_id)
            else:
                raise DurabilityError(str(entity_kind), entity_id, "unknown entity kind")
        except SQLAlchemyError as e:
            session.rollback()
            raise DurabilityError(entity_kind.value, entity_id, str(e)) from e
        finally:
            session.close()

        logger.debug(f"Deleted {entity_kind.value} {entity_id}")

    # ============================================
    # REPLAY
    # ============================================

    def load_all(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Reads every stored row back as record dictionaries.

        Returns:
            (beds, patients) in the same shape as `Bed.to_dict()` and
            `Patient.to_dict()`
        """
        session = get_session_direct(self.engine)
        try:
            beds = [
                {
                    "id": row.id,
                    "ward": row.ward,
                    "status": row.status,
                    "distance_from_station": row.distance_from_station,
                    "type": row.type,
                    "occupant": row.get_occupant(),
                }
                for row in BedRepository(session).get_all()
            ]
            patients = [
                {
                    "id": row.id,
                    "name": row.name,
                    "triage_level": row.triage_level,
                    "condition": row.condition,
                    "joined_at": row.joined_at,
                }
                for row in PatientRepository(session).get_in_arrival_order()
            ]
        finally:
            session.close()

        logger.info(f"Loaded {len(beds)} beds and {len(patients)} patients from the store")
        return beds, patients

    # ============================================
    # ROW MAPPING
    # ============================================

    @staticmethod
    def _bed_row(fields: Dict[str, Any]) -> Dict[str, Any]:
        occupant = fields.get("occupant")
        return {
            "ward": fields["ward"],
            "status": fields["status"],
            "distance_from_station": fields["distance_from_station"],
            "type": fields["type"],
            "occupant_data": json.dumps(occupant) if occupant else None,
            "updated_at": utcnow(),
        }

    @staticmethod
    def _patient_row(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": fields["name"],
            "triage_level": fields["triage_level"],
            "condition": fields["condition"],
            "joined_at": _parse_datetime(fields.get("joined_at")),
        }
