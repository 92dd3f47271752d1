"""
Load Context Use Case

Loads the current user from session claims.
"""

from typing import Any, Dict
from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.domain.entities import UserStatus
from teller_iam.domain.rbac import landing_route, permissions_for
from teller_iam.libs.result import Error, Result, Return


class LoadContextUseCase:
    """
    Use case for loading the current user.

    Business Rules:
    - User must exist and not be LOCKED/SUSPENDED
    - Role and permissions are read from the store, not from the token
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[Dict[str, Any]]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.status in (UserStatus.locked, UserStatus.suspended):
                return Return.err(
                    Error("ACCOUNT_LOCKED", "Account is locked. Please contact support.")
                )

            return Return.ok(
                {
                    "user": {
                        "id": str(user.id),
                        "email": user.email,
                        "name": user.full_name,
                        "role": user.role.value,
                        "status": user.status.value,
                        "lastLogin": (
                            user.last_login_at.isoformat() + "Z"
                            if user.last_login_at
                            else None
                        ),
                    },
                    "permissions": sorted(p.value for p in permissions_for(user.role)),
                    "landingRoute": landing_route(user.role),
                }
            )
