"""
Actor checks shared by the administrative use cases.
"""

from typing import Optional

from teller_iam.domain.entities import User, UserRole, UserStatus
from teller_iam.domain.rbac import (
    Permission,
    can_manage_role,
    has_any_permission,
    permissions_for,
)
from teller_iam.libs.result import Error


def actor_error(
    actor: Optional[User], permission: Permission, target_role: Optional[UserRole] = None
) -> Optional[Error]:
    """
    Check that actor is active, holds permission and outranks target_role.

    Returns None when the actor may proceed.
    """
    if actor is None or actor.status != UserStatus.active:
        return Error("FORBIDDEN", "You do not have access to this action")

    if not has_any_permission(permissions_for(actor.role), (permission,)):
        return Error("FORBIDDEN", "You do not have access to this action")

    if target_role is not None and not can_manage_role(actor.role, target_role):
        return Error(
            "FORBIDDEN", f"Your role cannot manage users with role {target_role.value}"
        )

    return None
