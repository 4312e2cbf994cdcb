"""
Repositories: data access over the persistence rows.
"""
from bedflow.repositories.base import BaseRepository
from bedflow.repositories.bed_repo import BedRepository
from bedflow.repositories.patient_repo import PatientRepository

__all__ = [
    "BaseRepository",
    "BedRepository",
    "PatientRepository",
]
