"""
Actor-role checks.

The acting role is passed into each core operation as a capability rather
than read from request context. `None` stands for a trusted in-process
caller (startup seeding, maintenance scripts).
"""
from typing import Optional

from bedflow.core.exceptions import PermissionDeniedError
from bedflow.models.enums import ActorRoleEnum


# ============================================
# OPERATION POLICY
# ============================================

DOCTOR_ONLY = {ActorRoleEnum.DOCTOR}
ANY_STAFF = {ActorRoleEnum.DOCTOR, ActorRoleEnum.NURSE}

OPERATION_ROLES = {
    "assign a bed": DOCTOR_ONLY,
    "transfer a patient": DOCTOR_ONLY,
    "discharge a patient": DOCTOR_ONLY,
    "change bed status": DOCTOR_ONLY,
    "add a bed": DOCTOR_ONLY,
    "remove a bed": DOCTOR_ONLY,
    "purge a patient": DOCTOR_ONLY,
    "add a patient": ANY_STAFF,
    "remove a patient from the queue": ANY_STAFF,
}


def require_role(operation: str, actor_role: Optional[ActorRoleEnum]) -> None:
    """
    Raises if the acting role may not perform the operation.

    Args:
        operation: Key of OPERATION_ROLES
        actor_role: Role of the caller, None for trusted callers

    Raises:
        PermissionDeniedError: role not allowed
    """
    if actor_role is None:
        return

    allowed = OPERATION_ROLES.get(operation, ANY_STAFF)
    if actor_role not in allowed:
        raise PermissionDeniedError(operation, actor_role.value)
