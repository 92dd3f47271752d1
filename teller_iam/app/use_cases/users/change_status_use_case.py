"""
Change User Status Use Case

Soft status transitions; users are never deleted.
"""

from typing import Any, Dict
from uuid import UUID

from teller_iam.app.services.unit_of_work import UnitOfWork
from teller_iam.app.use_cases.guards import actor_error
from teller_iam.domain.entities import AuditEvent, UserStatus
from teller_iam.domain.rbac import Permission
from teller_iam.libs.result import Error, Result, Return


class ChangeUserStatusUseCase:
    """
    Use case for activating, locking or suspending a user.

    Business Rules:
    - Actor needs users:update and must outrank the target's role
    - Actors cannot change their own status
    - Back to ACTIVE clears failed_attempts and any temporary lockout
    - Leaving ACTIVE revokes every open session of the target
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, actor_id: UUID, target_user_id: UUID, new_status: str
    ) -> Result[Dict[str, Any]]:
        async with self.uow:
            try:
                status = UserStatus(new_status.upper())
            except ValueError:
                allowed = ", ".join(s.value for s in UserStatus)
                return Return.err(
                    Error("INVALID_STATUS", f"Invalid status: {new_status}. Must be one of: {allowed}")
                )

            if actor_id == target_user_id:
                return Return.err(
                    Error("CANNOT_CHANGE_SELF", "You cannot change your own status")
                )

            target = await self.uow.users.get_by_id(target_user_id)
            if target is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            actor = await self.uow.users.get_by_id(actor_id)
            error = actor_error(actor, Permission.users_update, target.role)
            if error:
                return Return.err(error)

            old_status = target.status
            target.status = status
            if status == UserStatus.active:
                target.failed_attempts = 0
                target.locked_until = None
            await self.uow.users.update(target)

            revoked = 0
            if status != UserStatus.active:
                revoked = await self.uow.sessions.revoke_all_by_user_id(target.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=actor_id,
                    action="user_status_changed",
                    event_metadata={
                        "target_user_id": str(target.id),
                        "old_status": old_status.value,
                        "new_status": status.value,
                        "sessions_revoked": revoked,
                    },
                )
            )

            await self.uow.commit()

            return Return.ok(
                {
                    "status": "updated",
                    "user": {"id": str(target.id), "status": status.value},
                }
            )
