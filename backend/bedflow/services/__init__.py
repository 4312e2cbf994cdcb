"""
Business logic services.
"""
from bedflow.services.registry import Registry
from bedflow.services.assignment_service import AssignmentService
from bedflow.services.admission_service import AdmissionService
from bedflow.services.directory_service import DirectoryService

__all__ = [
    "Registry",
    "AssignmentService",
    "AdmissionService",
    "DirectoryService",
]
