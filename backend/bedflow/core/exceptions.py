"""
Custom system exceptions.
Semantic exceptions so the HTTP boundary can map them to status codes.
"""


class BaseAppException(Exception):
    """
    Base application exception.
    Every custom exception inherits from this one.
    """
    def __init__(self, message: str, code: str = "ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# ============================================
# VALIDATION ERRORS
# ============================================

class ValidationError(BaseAppException):
    """Missing or malformed input."""
    def __init__(self, message: str):
        super().__init__(message, "VALIDATION_ERROR")


# ============================================
# NOT FOUND ERRORS
# ============================================

class NotFoundError(BaseAppException):
    """Resource not found."""
    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} with identifier '{identifier}' not found",
            "NOT_FOUND"
        )
        self.resource = resource
        self.identifier = identifier


class BedNotFoundError(NotFoundError):
    """Bed not found."""
    def __init__(self, bed_id: str):
        super().__init__("Bed", bed_id)


class PatientNotFoundError(NotFoundError):
    """Patient not found in the queue nor in any bed."""
    def __init__(self, patient_id: str):
        super().__init__("Patient", patient_id)


# ============================================
# STATE CONFLICTS
# ============================================

class ConflictError(BaseAppException):
    """The operation violates a bed state-machine precondition."""
    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, code)


class BedNotAvailableError(ConflictError):
    """Bed is not Available for the requested operation."""
    def __init__(self, bed_id: str, current_status: str, operation: str = "assignment"):
        super().__init__(
            f"Bed {bed_id} is not available for {operation}. Current status: {current_status}",
            "BED_NOT_AVAILABLE"
        )
        self.bed_id = bed_id
        self.current_status = current_status


class InvalidStateError(ConflictError):
    """Bed status does not allow the operation."""
    def __init__(
        self,
        operation: str,
        current_status: str,
        valid_statuses: list = None
    ):
        statuses_msg = ""
        if valid_statuses:
            statuses_msg = f" Valid statuses: {', '.join(valid_statuses)}"

        super().__init__(
            f"Cannot perform '{operation}'. Current status: {current_status}.{statuses_msg}",
            "INVALID_STATE"
        )
        self.operation = operation
        self.current_status = current_status
        self.valid_statuses = valid_statuses or []


# ============================================
# AUTHORIZATION
# ============================================

class PermissionDeniedError(BaseAppException):
    """The acting role is not allowed to perform the operation."""
    def __init__(self, operation: str, role: str):
        super().__init__(
            f"Role '{role}' is not allowed to {operation}",
            "PERMISSION_DENIED"
        )
        self.operation = operation
        self.role = role


# ============================================
# DURABILITY
# ============================================

class DurabilityError(BaseAppException):
    """
    A write to the durability sink failed.

    Raised by sinks and caught by the registry: it is logged, never
    surfaced to callers, and the in-memory state is kept.
    """
    def __init__(self, entity_kind: str, entity_id: str, reason: str):
        super().__init__(
            f"Could not persist {entity_kind} '{entity_id}': {reason}",
            "DURABILITY_FAILURE"
        )
        self.entity_kind = entity_kind
        self.entity_id = entity_id
