"""
Patient repository.
"""
from typing import List
from sqlmodel import Session, select

from bedflow.repositories.base import BaseRepository
from bedflow.models.records import PatientRecord


class PatientRepository(BaseRepository[PatientRecord]):
    """Repository for stored queue entries."""

    def __init__(self, session: Session):
        super().__init__(session, PatientRecord)

    def get_in_arrival_order(self) -> List[PatientRecord]:
        """
        Returns stored patients ordered by queue entry time.

        Rows without a timestamp go last, keeping their stored order.
        """
        rows = self.get_all()
        with_time = [row for row in rows if row.joined_at is not None]
        without_time = [row for row in rows if row.joined_at is None]
        with_time.sort(key=lambda row: row.joined_at)
        return with_time + without_time
