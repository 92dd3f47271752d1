"""
Change User Role Use Case

Handles moving a user to a different portal role.
"""

from typing import Any, Dict
from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.guards import actor_error
from teller_iam.domain.entities import AuditEvent, UserRole
from teller_iam.domain.rbac import Permission
from teller_iam.libs.result import Error, Result, Return


class ChangeUserRoleUseCase:
    """
    Use case for changing a user's role.

    Business Rules:
    - Actor needs roles:update
    - Actor must outrank both the current and the new role
    - Actors cannot change their own role
    - Tokens already issued keep the old role until they expire; the
      next refresh picks up the new one
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, target_user_id: UUID, new_role: str
    ) -> Result[Dict[str, Any]]:
        """
        Execute change role use case.

        Args:
            actor_id: User ID of the administrator making the change
            target_user_id: User ID whose role is being changed
            new_role: New role to assign

        Returns:
            Result with updated user info, or Error
        """
        async with self.uow:
            try:
                role = UserRole(new_role)
            except ValueError:
                allowed = ", ".join(r.value for r in UserRole)
                return Return.err(
                    Error("INVALID_ROLE", f"Invalid role: {new_role}. Must be one of: {allowed}")
                )

            if actor_id == target_user_id:
                return Return.err(
                    Error("CANNOT_CHANGE_SELF", "You cannot change your own role")
                )

            target = await self.uow.users.get_by_id(target_user_id)
            if target is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            actor = await self.uow.users.get_by_id(actor_id)
            error = actor_error(actor, Permission.roles_update, target.role) or actor_error(
                actor, Permission.roles_update, role
            )
            if error:
                return Return.err(error)

            old_role = target.role
            target.role = role
            await self.uow.users.update(target)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=actor_id,
                    action="role_changed",
                    event_metadata={
                        "target_user_id": str(target.id),
                        "old_role": old_role.value,
                        "new_role": role.value,
                    },
                )
            )

            await self.uow.commit()

            return Return.ok(
                {
                    "status": "updated",
                    "user": {"id": str(target.id), "role": role.value},
                }
            )
