"""
Bed repository.
"""
from sqlmodel import Session

from bedflow.repositories.base import BaseRepository
from bedflow.models.records import BedRecord


class BedRepository(BaseRepository[BedRecord]):
    """Repository for stored beds."""

    def __init__(self, session: Session):
        super().__init__(session, BedRecord)
